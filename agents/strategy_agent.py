"""Strategy analysis agent.

First pipeline stage: turns a raw script, transcript or idea into a keyword
and intent model (schemas.strategy.Strategy) that the drafting stage writes
from.
"""

from __future__ import annotations

from typing import Optional

from agents.base import BaseAgent, load_prompt, render_prompt
from agents.llm_client import LLMClient
from pipeline.validation import parse_and_validate
from schemas.common import KNOWN_SEARCH_INTENTS, InputMode
from schemas.pipeline import PipelineRequest
from schemas.strategy import STRATEGY_RESPONSE_SCHEMA, Strategy

MAX_INPUT_CHARS = 20_000

STAGE = "strategy"


def build_strategy_prompt(
    *,
    text: str,
    mode: InputMode | str,
    context_hint: Optional[str] = None,
    template: Optional[str] = None,
) -> str:
    return render_prompt(
        template or load_prompt("strategy_analysis.txt"),
        mode=InputMode(mode).value.lower(),
        context=(context_hint or "").strip() or "None",
        intents=", ".join(KNOWN_SEARCH_INTENTS),
        input=(text or "")[:MAX_INPUT_CHARS],
    )


class StrategyAnalysisAgent(BaseAgent):
    """Derive primary/secondary keywords, intent, hooks and entities."""

    name = "strategy-analysis"

    def __init__(self, llm: LLMClient) -> None:
        super().__init__(llm)
        self.prompt_template = load_prompt("strategy_analysis.txt")

    async def run(self, input: PipelineRequest | dict) -> Strategy:
        req = input if isinstance(input, PipelineRequest) else PipelineRequest(**input)
        return await self.analyze(req.raw_input, req.mode, req.context_hint)

    async def analyze(self, text: str, mode: InputMode | str, context_hint: Optional[str] = None) -> Strategy:
        prompt = build_strategy_prompt(
            text=text,
            mode=mode,
            context_hint=context_hint,
            template=self.prompt_template,
        )

        raw = await self.llm.generate_json(
            prompt=prompt,
            schema=STRATEGY_RESPONSE_SCHEMA,
            schema_name="seo_strategy",
            model=self.llm.config.strategy_model,
            reasoning_effort=self.llm.config.strategy_reasoning_effort,
            temperature=self.llm.config.temperature,
        )
        return parse_and_validate(Strategy, raw, stage=STAGE)
