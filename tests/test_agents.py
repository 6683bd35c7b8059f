from __future__ import annotations

import asyncio
import json
import unittest

from agents.chat_agent import ChatAssistantAgent
from agents.drafting_agent import MAX_EXCERPT_CHARS, ContentDraftingAgent
from agents.research_agent import RESEARCH_FALLBACK, CompetitorResearchAgent
from agents.strategy_agent import MAX_INPUT_CHARS, StrategyAnalysisAgent
from app_logging.run_logger import RunLogger
from lib.config import AppConfig
from pipeline.errors import GenerationFailure, NetworkFailure, SchemaMismatch
from schemas.common import InputMode
from schemas.content import ContentDraft, ContentResult
from schemas.strategy import Strategy

STRATEGY_JSON = json.dumps({
    "primaryKeyword": "growing tomatoes in winter",
    "secondaryKeywords": ["indoor tomatoes", "grow lights", "winter garden", "tomato varieties", "hydroponic tomatoes"],
    "searchIntent": "Informational",
    "hooks": ["No greenhouse needed", "Cheap LED setup", "Harvest in January"],
    "entities": ["Roma"],
})

CONTENT_JSON = json.dumps({
    "titles": ["Growing Tomatoes in Winter: 7 Indoor Tricks That Actually Work"],
    "descriptions": ["Growing tomatoes in winter is easier than you think."],
    "tags": ["tomatoes", "winter gardening"],
    "hashtags": ["#tomatoes", "#gardening", "#winter"],
    "thumbnailPrompt": "Close-up of ripe tomatoes under purple LED light, snowy window behind, 16:9",
})


class _FakeLLM:
    def __init__(self, *, json_text=None, grounded=None, grounded_exc=None, grounded_delay=0.0, chat_reply="ok"):
        self.config = AppConfig(strategy_model="strategy-model", drafting_model="drafting-model")
        self.json_text = json_text
        self.grounded = grounded
        self.grounded_exc = grounded_exc
        self.grounded_delay = grounded_delay
        self.chat_reply = chat_reply
        self.json_calls: list[dict] = []
        self.grounded_calls: list[dict] = []
        self.chat_calls: list[dict] = []

    async def generate_json(self, **kwargs):
        self.json_calls.append(kwargs)
        return self.json_text

    async def generate_grounded_text(self, **kwargs):
        self.grounded_calls.append(kwargs)
        if self.grounded_delay:
            await asyncio.sleep(self.grounded_delay)
        if self.grounded_exc is not None:
            raise self.grounded_exc
        return self.grounded

    async def chat(self, **kwargs):
        self.chat_calls.append(kwargs)
        return self.chat_reply


def _strategy() -> Strategy:
    return Strategy.model_validate(json.loads(STRATEGY_JSON))


class TestStrategyAnalysisAgent(unittest.IsolatedAsyncioTestCase):
    async def test_returns_validated_strategy(self) -> None:
        llm = _FakeLLM(json_text=STRATEGY_JSON)
        s = await StrategyAnalysisAgent(llm).analyze("I want to make a video about growing tomatoes in winter", InputMode.idea)

        self.assertEqual(s.primary_keyword, "growing tomatoes in winter")
        self.assertEqual(s.search_intent, "Informational")
        self.assertEqual(len(s.hooks), 3)

        call = llm.json_calls[0]
        self.assertEqual(call["model"], "strategy-model")
        self.assertEqual(call["reasoning_effort"], "high")
        self.assertEqual(
            call["schema"]["required"],
            ["primaryKeyword", "secondaryKeywords", "searchIntent", "hooks"],
        )

    async def test_prompt_carries_mode_context_and_language_rule(self) -> None:
        llm = _FakeLLM(json_text=STRATEGY_JSON)
        await StrategyAnalysisAgent(llm).analyze("some script", "TRANSCRIPT", "Focus on viral hooks.")
        prompt = llm.json_calls[0]["prompt"]

        self.assertIn("YouTube video transcript", prompt)
        self.assertIn("Context/Constraints: Focus on viral hooks.", prompt)
        self.assertIn("MUST be in that same language", prompt)
        self.assertIn("Informational, Transactional, Entertainment", prompt)

        await StrategyAnalysisAgent(llm).analyze("some script", InputMode.script)
        self.assertIn("Context/Constraints: None", llm.json_calls[1]["prompt"])

    async def test_input_is_truncated(self) -> None:
        llm = _FakeLLM(json_text=STRATEGY_JSON)
        await StrategyAnalysisAgent(llm).analyze("§" * (MAX_INPUT_CHARS + 5000), InputMode.script)
        self.assertEqual(llm.json_calls[0]["prompt"].count("§"), MAX_INPUT_CHARS)

    async def test_no_payload_is_generation_failure(self) -> None:
        llm = _FakeLLM(json_text=None)
        with self.assertRaises(GenerationFailure) as ctx:
            await StrategyAnalysisAgent(llm).analyze("text", InputMode.script)
        self.assertEqual(ctx.exception.stage, "strategy")

    async def test_malformed_payload_is_schema_mismatch(self) -> None:
        llm = _FakeLLM(json_text=json.dumps({"primaryKeyword": "x"}))
        with self.assertRaises(SchemaMismatch):
            await StrategyAnalysisAgent(llm).analyze("text", InputMode.script)

    async def test_run_accepts_request_dict(self) -> None:
        llm = _FakeLLM(json_text=STRATEGY_JSON)
        s = await StrategyAnalysisAgent(llm).run({"raw_input": "text", "mode": "IDEA"})
        self.assertEqual(s.primary_keyword, "growing tomatoes in winter")


class TestContentDraftingAgent(unittest.IsolatedAsyncioTestCase):
    async def test_returns_content_without_strategy(self) -> None:
        llm = _FakeLLM(json_text=CONTENT_JSON)
        c = await ContentDraftingAgent(llm).draft(_strategy(), "original script")
        self.assertEqual(len(c.titles), 1)
        self.assertEqual(c.hashtags, ["#tomatoes", "#gardening", "#winter"])
        self.assertIsInstance(c, ContentDraft)
        self.assertNotIsInstance(c, ContentResult)
        self.assertEqual(llm.json_calls[0]["model"], "drafting-model")

    async def test_reply_echoing_strategy_is_accepted(self) -> None:
        reply = {**json.loads(CONTENT_JSON), "strategy": json.loads(STRATEGY_JSON)}
        llm = _FakeLLM(json_text=json.dumps(reply))
        c = await ContentDraftingAgent(llm).draft(_strategy(), "x")
        self.assertEqual(c.hashtags, ["#tomatoes", "#gardening", "#winter"])

    async def test_prompt_embeds_strategy_and_excerpt(self) -> None:
        llm = _FakeLLM(json_text=CONTENT_JSON)
        await ContentDraftingAgent(llm).draft(_strategy(), "¤" * 5000)
        prompt = llm.json_calls[0]["prompt"]

        self.assertIn('"primaryKeyword": "growing tomatoes in winter"', prompt)
        self.assertEqual(prompt.count("¤"), MAX_EXCERPT_CHARS)
        self.assertIn("Keep this in English", prompt)
        self.assertIn("Generate Titles, Descriptions, Tags, and Hashtags in that SAME language", prompt)
        self.assertIn("Aspect Ratio 16:9", prompt)

    async def test_required_fields_in_declared_schema(self) -> None:
        llm = _FakeLLM(json_text=CONTENT_JSON)
        await ContentDraftingAgent(llm).draft(_strategy(), "x")
        schema = llm.json_calls[0]["schema"]
        self.assertEqual(schema["required"], ["titles", "descriptions", "tags", "thumbnailPrompt"])
        self.assertIn("hashtags", schema["properties"])

    async def test_no_payload_is_generation_failure(self) -> None:
        llm = _FakeLLM(json_text="")
        with self.assertRaises(GenerationFailure) as ctx:
            await ContentDraftingAgent(llm).draft(_strategy(), "x")
        self.assertEqual(ctx.exception.stage, "draft")
        self.assertEqual(str(ctx.exception), "Failed to draft SEO content")


class TestCompetitorResearchAgent(unittest.IsolatedAsyncioTestCase):
    async def test_returns_research_text(self) -> None:
        llm = _FakeLLM(grounded="  1. Competitor A\n2. Competitor B  ")
        text = await CompetitorResearchAgent(llm).research("growing tomatoes in winter")
        self.assertEqual(text, "1. Competitor A\n2. Competitor B")
        self.assertIn('"growing tomatoes in winter"', llm.grounded_calls[0]["prompt"])
        self.assertTrue(llm.grounded_calls[0]["web_search"])

    async def test_backend_failure_degrades_to_fallback(self) -> None:
        logger = RunLogger(run_id="t")
        llm = _FakeLLM(grounded_exc=NetworkFailure("boom"))
        text = await CompetitorResearchAgent(llm, run_logger=logger).research("kw")
        self.assertEqual(text, RESEARCH_FALLBACK)
        self.assertEqual(logger.events[-1]["event"], "error")

    async def test_per_call_logger_overrides_agent_logger(self) -> None:
        agent_logger = RunLogger(run_id="t")
        call_logger = agent_logger.for_generation(4)
        llm = _FakeLLM(grounded_exc=NetworkFailure("boom"))

        await CompetitorResearchAgent(llm, run_logger=agent_logger).research("kw", run_logger=call_logger)

        self.assertEqual([e["generation"] for e in agent_logger.events], [4])

    async def test_unexpected_exception_degrades_to_fallback(self) -> None:
        llm = _FakeLLM(grounded_exc=RuntimeError("sdk bug"))
        self.assertEqual(await CompetitorResearchAgent(llm).research("kw"), RESEARCH_FALLBACK)

    async def test_empty_text_degrades_to_fallback(self) -> None:
        llm = _FakeLLM(grounded="")
        self.assertEqual(await CompetitorResearchAgent(llm).research("kw"), RESEARCH_FALLBACK)

    async def test_timeout_degrades_to_fallback(self) -> None:
        llm = _FakeLLM(grounded="late", grounded_delay=1.0)
        text = await CompetitorResearchAgent(llm, timeout_s=0.01).research("kw")
        self.assertEqual(text, RESEARCH_FALLBACK)

    async def test_blank_keyword_skips_backend(self) -> None:
        llm = _FakeLLM(grounded="x")
        self.assertEqual(await CompetitorResearchAgent(llm).research("  "), RESEARCH_FALLBACK)
        self.assertEqual(llm.grounded_calls, [])


class TestChatAssistantAgent(unittest.IsolatedAsyncioTestCase):
    async def test_history_accumulates(self) -> None:
        llm = _FakeLLM(chat_reply="Try a question hook.")
        agent = ChatAssistantAgent(llm)

        reply = await agent.send("How do I open my video?")
        self.assertEqual(reply, "Try a question hook.")
        await agent.send("And the outro?")

        self.assertEqual([m.role for m in agent.history], ["user", "model", "user", "model"])
        self.assertEqual(len(llm.chat_calls[1]["history"]), 2)

    async def test_empty_message_rejected(self) -> None:
        agent = ChatAssistantAgent(_FakeLLM())
        with self.assertRaises(ValueError):
            await agent.send("   ")


if __name__ == "__main__":
    unittest.main()
