"""Payload parsing and schema validation for generation backend output.

Kept separate from the backend call so malformed payloads can be exercised
without a model:

    text -> parse_json_payload -> dict -> validate_payload -> model

parse_json_payload raises GenerationFailure (nothing usable came back);
validate_payload raises SchemaMismatch (something came back, but wrong).
"""

from __future__ import annotations

import json
from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from pipeline.errors import GenerationFailure, SchemaMismatch

M = TypeVar("M", bound=BaseModel)


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences a model sometimes wraps JSON in."""
    raw = (text or "").strip()
    if raw.startswith("```"):
        lines = raw.splitlines()
        raw = "\n".join(line for line in lines if not line.strip().startswith("```"))
    return raw.strip()


def parse_json_payload(text: Optional[str], *, stage: str) -> dict[str, Any]:
    raw = strip_code_fences(text or "")
    if not raw:
        raise GenerationFailure(stage)

    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as e:
        raise GenerationFailure(stage, f"Invalid JSON from {stage} stage: {e.msg}") from e

    if not isinstance(parsed, dict):
        raise GenerationFailure(stage, f"Expected a JSON object from {stage} stage, got {type(parsed).__name__}")
    return parsed


def format_validation_errors(err: ValidationError) -> list[str]:
    problems: list[str] = []
    for e in err.errors():
        loc = ".".join(str(p) for p in e.get("loc", ())) or "(root)"
        problems.append(f"{loc}: {e.get('msg', 'invalid')}")
    return problems


def validate_payload(model: Type[M], payload: dict[str, Any], *, stage: str) -> M:
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise SchemaMismatch(stage, format_validation_errors(e)) from e


def parse_and_validate(model: Type[M], text: Optional[str], *, stage: str) -> M:
    return validate_payload(model, parse_json_payload(text, stage=stage), stage=stage)
