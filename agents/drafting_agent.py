from __future__ import annotations

import json
from typing import Optional

from pydantic import Field

from agents.base import BaseAgent, load_prompt, render_prompt
from agents.llm_client import LLMClient
from pipeline.validation import parse_and_validate
from schemas.base import SchemaBase
from schemas.content import CONTENT_RESPONSE_SCHEMA, ContentDraft
from schemas.strategy import Strategy

# The drafter writes from the strategy; the original text is only flavour.
MAX_EXCERPT_CHARS = 1_000

STAGE = "draft"


class DraftInput(SchemaBase):
    strategy: Strategy
    original_input: str = Field("", description="Text the strategy was derived from")


def build_drafting_prompt(*, strategy: Strategy, original_input: str, template: Optional[str] = None) -> str:
    return render_prompt(
        template or load_prompt("content_drafting.txt"),
        strategy=json.dumps(strategy.to_dict(), ensure_ascii=False),
        excerpt=(original_input or "")[:MAX_EXCERPT_CHARS],
    )


class ContentDraftingAgent(BaseAgent):
    """
    Expand a Strategy into titles, descriptions, tags, hashtags and a
    thumbnail prompt.

    The returned ContentDraft has no strategy attached; the orchestrator
    builds the ContentResult once both stages have succeeded.
    """

    name = "content-drafting"

    def __init__(self, llm: LLMClient) -> None:
        super().__init__(llm)
        self.prompt_template = load_prompt("content_drafting.txt")

    async def run(self, input: DraftInput | dict) -> ContentDraft:
        inp = input if isinstance(input, DraftInput) else DraftInput(**input)
        return await self.draft(inp.strategy, inp.original_input)

    async def draft(self, strategy: Strategy, original_input: str) -> ContentDraft:
        prompt = build_drafting_prompt(
            strategy=strategy,
            original_input=original_input,
            template=self.prompt_template,
        )

        raw = await self.llm.generate_json(
            prompt=prompt,
            schema=CONTENT_RESPONSE_SCHEMA,
            schema_name="seo_content",
            model=self.llm.config.drafting_model,
            reasoning_effort=self.llm.config.drafting_reasoning_effort,
            temperature=self.llm.config.temperature,
        )
        return parse_and_validate(ContentDraft, raw, stage=STAGE)
