from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from agents.llm_client import LLMClient

PROMPTS_DIR = Path(__file__).resolve().parent / "prompts"


def load_prompt(name: str) -> str:
    return (PROMPTS_DIR / name).read_text(encoding="utf-8")


def render_prompt(template: str, **values: str) -> str:
    """Fill `{{key}}` placeholders. Unknown placeholders are left as-is."""
    out = template
    for key, value in values.items():
        out = out.replace("{{" + key + "}}", value)
    return out.strip()


class BaseAgent(ABC):
    """
    Base interface for the studio's generation agents.

    Agents are stateless apart from their injected LLMClient, so one
    instance can serve overlapping pipeline runs.
    """

    name: str

    def __init__(self, llm: LLMClient) -> None:
        self.llm = llm

    @abstractmethod
    async def run(self, input: Any) -> Any:
        """
        Execute the agent.

        Args:
            input: Structured input (model instance or dict) defined by the agent.

        Returns:
            The agent's typed output.
        """
        raise NotImplementedError
