from __future__ import annotations

import asyncio
from typing import Optional

from agents.base import BaseAgent, load_prompt, render_prompt
from agents.llm_client import LLMClient
from app_logging.run_logger import RunLogger
from pipeline.errors import PipelineError, ResearchDegraded

RESEARCH_FALLBACK = "No research data available."


class CompetitorResearchAgent(BaseAgent):
    """
    Best-effort competitive research for a keyword, grounded in web search.

    Never raises for backend trouble: every failure degrades to
    RESEARCH_FALLBACK. Single attempt, no retries.
    """

    name = "competitor-research"

    def __init__(
        self,
        llm: LLMClient,
        *,
        timeout_s: Optional[float] = None,
        run_logger: Optional[RunLogger] = None,
    ) -> None:
        super().__init__(llm)
        self.prompt_template = load_prompt("competitor_research.txt")
        self.timeout_s = timeout_s if timeout_s is not None else llm.config.research_timeout_s
        self.run_logger = run_logger

    async def run(self, input: str | dict) -> str:
        keyword = input if isinstance(input, str) else str(input.get("keyword") or "")
        return await self.research(keyword)

    async def research(self, keyword: str, *, run_logger: Optional[RunLogger] = None) -> str:
        """run_logger overrides the agent's logger for this call (e.g. one tagged with a generation)."""
        logger = run_logger if run_logger is not None else self.run_logger
        try:
            return await self._research(keyword)
        except ResearchDegraded as e:
            if logger is not None:
                logger.error(self.name, {"keyword": keyword}, e)
            return RESEARCH_FALLBACK

    async def _research(self, keyword: str) -> str:
        keyword = (keyword or "").strip()
        if not keyword:
            raise ResearchDegraded("empty keyword")

        prompt = render_prompt(self.prompt_template, keyword=keyword)
        try:
            text = await asyncio.wait_for(
                self.llm.generate_grounded_text(prompt=prompt, web_search=True),
                timeout=self.timeout_s,
            )
        except asyncio.TimeoutError as e:
            raise ResearchDegraded(f"research timed out after {self.timeout_s}s") from e
        except PipelineError as e:
            raise ResearchDegraded(str(e)) from e
        except Exception as e:
            # Unclassified SDK errors are absorbed the same way.
            raise ResearchDegraded(f"{e.__class__.__name__}: {e}") from e

        if not text.strip():
            raise ResearchDegraded("empty research response")
        return text.strip()
