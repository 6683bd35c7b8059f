from __future__ import annotations

from typing import Optional


DEFAULT_ERROR_MESSAGE = "An error occurred during generation."


class PipelineError(Exception):
    """
    Base class for classified pipeline failures.

    stage is "strategy" or "draft" once known. Errors raised below the
    orchestrator may leave it unset; the orchestrator fills it in.
    """

    kind = "pipeline"

    def __init__(self, message: str = "", *, stage: Optional[str] = None) -> None:
        super().__init__(message)
        self.stage = stage

    @property
    def user_message(self) -> str:
        return str(self) or DEFAULT_ERROR_MESSAGE

    def to_dict(self) -> dict:
        return {"kind": self.kind, "stage": self.stage, "message": self.user_message}


class GenerationFailure(PipelineError):
    """The backend returned no usable structured payload."""

    kind = "generation_failure"

    def __init__(self, stage: str, message: str = "") -> None:
        super().__init__(message or _default_generation_message(stage), stage=stage)


class SchemaMismatch(PipelineError):
    """The payload parsed but does not match the declared field contract."""

    kind = "schema_mismatch"

    def __init__(self, stage: str, problems: list[str]) -> None:
        self.problems = list(problems)
        detail = "; ".join(self.problems) or "payload does not match schema"
        super().__init__(f"Invalid {stage} payload: {detail}", stage=stage)


class NetworkFailure(PipelineError):
    kind = "network_failure"


class BackendError(PipelineError):
    """The backend answered, but with an error status."""

    kind = "backend_error"

    def __init__(self, message: str = "", *, status_code: Optional[int] = None, stage: Optional[str] = None) -> None:
        super().__init__(message, stage=stage)
        self.status_code = status_code


class TimeoutFailure(PipelineError):
    kind = "timeout"


class ResearchDegraded(PipelineError):
    """Internal only. Always converted to the research fallback text."""

    kind = "research_degraded"


def _default_generation_message(stage: str) -> str:
    if stage == "strategy":
        return "Failed to generate SEO strategy"
    if stage == "draft":
        return "Failed to draft SEO content"
    return f"Generation failed ({stage})"
