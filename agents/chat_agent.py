from __future__ import annotations

import time
from typing import List, Optional

from agents.base import BaseAgent
from agents.llm_client import LLMClient
from schemas.media import ChatMessage


class ChatAssistantAgent(BaseAgent):
    """
    Multi-turn creator assistant.

    Keeps its own transcript; errors propagate to the caller and the failed
    turn is not recorded.
    """

    name = "chat-assistant"

    def __init__(self, llm: LLMClient, history: Optional[List[ChatMessage]] = None) -> None:
        super().__init__(llm)
        self.history: List[ChatMessage] = list(history or [])

    async def run(self, input: str | dict) -> str:
        message = input if isinstance(input, str) else str(input.get("message") or "")
        return await self.send(message)

    async def send(self, message: str) -> str:
        message = (message or "").strip()
        if not message:
            raise ValueError("message must not be empty")

        reply = await self.llm.chat(history=self.history, message=message)

        now = time.time()
        self.history.append(ChatMessage(role="user", text=message, timestamp=now))
        self.history.append(ChatMessage(role="model", text=reply, timestamp=now))
        return reply

    def reset(self) -> None:
        self.history.clear()
