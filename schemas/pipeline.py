from pathlib import Path
from typing import Optional

import yaml
from pydantic import Field

from schemas.base import SchemaBase
from schemas.common import InputMode


class PipelineRequest(SchemaBase):
    """
    One "generate" action. Ephemeral; never persisted.

    context_hint is free-form guidance forwarded to the strategy stage
    (e.g. "Focus on trending potential and viral hooks.").
    """
    raw_input: str = Field(..., description="Script, transcript or idea text")
    mode: InputMode = Field(InputMode.script, description="What kind of text raw_input is")
    context_hint: Optional[str] = Field(None, description="Extra constraints for the analysis")


def load_pipeline_request(path: Path) -> PipelineRequest:
    """Load a PipelineRequest from a YAML file.

    Accepts either snake_case keys or the short forms `input` / `context`.
    """
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Request file must contain a mapping: {path}")

    if "input" in data and "raw_input" not in data:
        data["raw_input"] = data.pop("input")
    if "context" in data and "context_hint" not in data:
        data["context_hint"] = data.pop("context")
    if isinstance(data.get("mode"), str):
        data["mode"] = data["mode"].strip().upper()

    return PipelineRequest(**data)
