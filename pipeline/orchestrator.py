"""Two-stage SEO pipeline: strategy analysis -> content drafting.

    Idle -> Analyzing -> Drafting -> Succeeded
               |            |
               +-> Failed <-+

Competitive research is started as a detached task as soon as the strategy
is known and runs alongside drafting. It never affects the run's outcome.

Every run takes a new generation number from SessionState. All writes to
the session (status, result, error, research text) are dropped when their
generation is no longer current, so a slow superseded run cannot overwrite
a newer one.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from agents.drafting_agent import ContentDraftingAgent
from agents.llm_client import LLMClient
from agents.research_agent import RESEARCH_FALLBACK, CompetitorResearchAgent
from agents.strategy_agent import StrategyAnalysisAgent
from app_logging.run_logger import RunLogger
from lib.config import AppConfig
from pipeline.errors import DEFAULT_ERROR_MESSAGE, PipelineError, TimeoutFailure
from schemas.common import STATUS_TEXT, PipelineStatus
from schemas.content import ContentResult
from schemas.pipeline import PipelineRequest

StatusCallback = Callable[[PipelineStatus, str], None]
ResearchCallback = Callable[[str], None]


@dataclass
class SessionState:
    """
    Caller-side session slots (what a UI would render).

    Only the run holding the current generation may write; every mutator
    takes the writer's generation and returns False when the write was
    discarded as stale.
    """

    generation: int = 0
    status: PipelineStatus = PipelineStatus.idle
    status_text: str = ""
    loading: bool = False
    result: Optional[ContentResult] = None
    error: Optional[str] = None
    error_kind: Optional[str] = None
    research_text: Optional[str] = None
    researching: bool = False

    def begin(self) -> int:
        self.generation += 1
        self.status = PipelineStatus.idle
        self.status_text = ""
        self.loading = True
        self.result = None
        self.error = None
        self.error_kind = None
        self.research_text = None
        self.researching = False
        return self.generation

    def is_current(self, generation: int) -> bool:
        return generation == self.generation

    def set_status(self, generation: int, status: PipelineStatus) -> bool:
        if not self.is_current(generation):
            return False
        self.status = status
        self.status_text = STATUS_TEXT[status]
        return True

    def succeed(self, generation: int, result: ContentResult) -> bool:
        if not self.is_current(generation):
            return False
        self.result = result
        self.error = None
        self.error_kind = None
        self.loading = False
        self.set_status(generation, PipelineStatus.succeeded)
        return True

    def fail(self, generation: int, err: BaseException) -> bool:
        if not self.is_current(generation):
            return False
        self.result = None
        self.research_text = None
        self.researching = False
        self.error = str(err) or DEFAULT_ERROR_MESSAGE
        self.error_kind = getattr(err, "kind", "unclassified")
        self.loading = False
        self.set_status(generation, PipelineStatus.failed)
        return True

    def abandon(self, generation: int) -> bool:
        """Run was cancelled by its caller: back to idle, nothing shown."""
        if not self.is_current(generation):
            return False
        self.result = None
        self.research_text = None
        self.researching = False
        self.loading = False
        self.set_status(generation, PipelineStatus.idle)
        return True

    def start_research(self, generation: int) -> bool:
        if not self.is_current(generation):
            return False
        self.researching = True
        self.research_text = None
        return True

    def finish_research(self, generation: int, text: Optional[str]) -> bool:
        if not self.is_current(generation) or self.status == PipelineStatus.failed:
            return False
        self.researching = False
        if text is not None:
            self.research_text = text
        return True


class SeoPipeline:
    """
    Sequences the strategy, drafting and research agents for one session.

    run() reports success as soon as drafting completes; research lands in
    state.research_text (and on_research) whenever it resolves.
    """

    def __init__(
        self,
        *,
        strategy_agent: StrategyAnalysisAgent,
        drafting_agent: ContentDraftingAgent,
        research_agent: Optional[CompetitorResearchAgent] = None,
        state: Optional[SessionState] = None,
        timeout_s: Optional[float] = 120.0,
        on_status: Optional[StatusCallback] = None,
        on_research: Optional[ResearchCallback] = None,
        run_logger: Optional[RunLogger] = None,
    ) -> None:
        self.strategy_agent = strategy_agent
        self.drafting_agent = drafting_agent
        self.research_agent = research_agent
        self.state = state or SessionState()
        self.timeout_s = timeout_s
        self.on_status = on_status
        self.on_research = on_research
        self.run_logger = run_logger

        self._research_tasks: dict[int, asyncio.Task] = {}

    async def run(self, request: PipelineRequest | dict) -> ContentResult:
        req = request if isinstance(request, PipelineRequest) else PipelineRequest(**request)
        if not req.raw_input.strip():
            raise ValueError("raw_input must not be empty")

        gen = self.state.begin()
        log = self.run_logger.for_generation(gen) if self.run_logger is not None else None
        research_task: Optional[asyncio.Task] = None

        try:
            self._emit(gen, PipelineStatus.analyzing, log)
            strategy = await self._run_stage(
                "strategy",
                self.strategy_agent.analyze(req.raw_input, req.mode, req.context_hint),
                log=log,
                agent=self.strategy_agent.name,
                log_input={"mode": req.mode.value, "context_hint": req.context_hint, "chars": len(req.raw_input)},
            )

            research_task = self._start_research(gen, strategy.primary_keyword, log)

            self._emit(gen, PipelineStatus.drafting, log)
            content = await self._run_stage(
                "draft",
                self.drafting_agent.draft(strategy, req.raw_input),
                log=log,
                agent=self.drafting_agent.name,
                log_input={"primary_keyword": strategy.primary_keyword},
            )
        except asyncio.CancelledError:
            if research_task is not None:
                research_task.cancel()
            self.state.abandon(gen)
            raise
        except Exception as e:
            if research_task is not None:
                research_task.cancel()
            if self.state.fail(gen, e) and log is not None:
                log.status("pipeline", PipelineStatus.failed.value, self.state.error or "")
            raise

        result = ContentResult.from_draft(content, strategy)
        if self.state.succeed(gen, result):
            self._notify_status(PipelineStatus.succeeded)
            if log is not None:
                log.status("pipeline", PipelineStatus.succeeded.value)
        return result

    async def wait_for_research(self) -> Optional[str]:
        """Await the current generation's research, if any is in flight."""
        task = self._research_tasks.get(self.state.generation)
        if task is not None:
            await asyncio.wait({task})
        return self.state.research_text

    async def _run_stage(
        self,
        stage: str,
        call: Awaitable[Any],
        *,
        log: Optional[RunLogger],
        agent: str,
        log_input: Any,
    ) -> Any:
        if log is not None:
            log.start(agent, log_input)
        try:
            if self.timeout_s is None:
                out = await call
            else:
                out = await asyncio.wait_for(call, timeout=self.timeout_s)
        except asyncio.TimeoutError as e:
            err = TimeoutFailure(f"The {stage} stage timed out after {self.timeout_s:g}s", stage=stage)
            if log is not None:
                log.error(agent, log_input, err)
            raise err from e
        except PipelineError as e:
            if e.stage is None:
                e.stage = stage
            if log is not None:
                log.error(agent, log_input, e)
            raise
        except Exception as e:
            if log is not None:
                log.error(agent, log_input, e)
            raise

        if log is not None:
            log.end(agent, out.to_dict())
        return out

    def _emit(self, gen: int, status: PipelineStatus, log: Optional[RunLogger]) -> None:
        if not self.state.set_status(gen, status):
            return
        if log is not None:
            log.status("pipeline", status.value, STATUS_TEXT[status])
        self._notify_status(status)

    def _notify_status(self, status: PipelineStatus) -> None:
        if self.on_status is not None:
            self.on_status(status, STATUS_TEXT[status])

    def _start_research(self, gen: int, keyword: str, log: Optional[RunLogger]) -> Optional[asyncio.Task]:
        if self.research_agent is None or not self.state.start_research(gen):
            return None

        if log is not None:
            log.start(self.research_agent.name, {"keyword": keyword})

        task = asyncio.create_task(
            self.research_agent.research(keyword, run_logger=log),
            name=f"seo-research-{gen}",
        )
        self._research_tasks[gen] = task
        task.add_done_callback(lambda t: self._on_research_done(gen, t, log))
        return task

    def _on_research_done(self, gen: int, task: asyncio.Task, log: Optional[RunLogger]) -> None:
        self._research_tasks.pop(gen, None)
        if task.cancelled():
            return

        exc = task.exception()
        text = RESEARCH_FALLBACK if exc is not None else task.result()
        if log is not None:
            if exc is not None:
                log.error(self.research_agent.name, {}, exc)
            else:
                log.end(self.research_agent.name, {"chars": len(text)})

        if self.state.finish_research(gen, text) and self.on_research is not None:
            self.on_research(text)


def build_pipeline(
    config: AppConfig,
    *,
    llm: Optional[LLMClient] = None,
    state: Optional[SessionState] = None,
    run_logger: Optional[RunLogger] = None,
    on_status: Optional[StatusCallback] = None,
    on_research: Optional[ResearchCallback] = None,
    with_research: bool = True,
) -> SeoPipeline:
    """Wire the three agents around one LLMClient built from `config`."""
    llm = llm or LLMClient(config=config)
    return SeoPipeline(
        strategy_agent=StrategyAnalysisAgent(llm),
        drafting_agent=ContentDraftingAgent(llm),
        research_agent=(
            CompetitorResearchAgent(llm, timeout_s=config.research_timeout_s)
            if with_research
            else None
        ),
        state=state,
        timeout_s=config.request_timeout_s,
        on_status=on_status,
        on_research=on_research,
        run_logger=run_logger,
    )
