from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Optional

import yaml


DEFAULT_STRATEGY_MODEL = "gpt-5.2"
DEFAULT_DRAFTING_MODEL = "gpt-5-mini"
DEFAULT_RESEARCH_MODEL = "gpt-5-mini"
DEFAULT_IMAGE_MODEL = "gpt-image-1"
DEFAULT_CHAT_MODEL = "gpt-5.2"


def _env_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    return float(raw) if raw else default


def _env_str(name: str, default: Optional[str] = None) -> Optional[str]:
    raw = (os.getenv(name) or "").strip()
    return raw or default


@dataclass(frozen=True)
class AppConfig:
    """
    Process configuration for the studio.

    Built once by the caller and passed into clients/agents; nothing reads
    the environment behind the caller's back after construction.
    """

    openai_api_key: Optional[str] = None

    strategy_model: str = DEFAULT_STRATEGY_MODEL
    drafting_model: str = DEFAULT_DRAFTING_MODEL
    research_model: str = DEFAULT_RESEARCH_MODEL
    image_model: str = DEFAULT_IMAGE_MODEL
    chat_model: str = DEFAULT_CHAT_MODEL

    # None means "let the model decide" (some reasoning models reject it).
    temperature: Optional[float] = None
    strategy_reasoning_effort: str = "high"
    drafting_reasoning_effort: str = "low"

    request_timeout_s: float = 120.0
    research_timeout_s: float = 60.0

    youtube_api_key: Optional[str] = None
    youtube_access_token: Optional[str] = None

    run_log_path: Optional[Path] = None

    @classmethod
    def from_env(cls) -> "AppConfig":
        temperature_raw = _env_str("SEO_TEMPERATURE")
        run_log = _env_str("SEO_RUN_LOG")
        return cls(
            openai_api_key=_env_str("OPENAI_API_KEY"),
            strategy_model=_env_str("SEO_STRATEGY_MODEL", DEFAULT_STRATEGY_MODEL),
            drafting_model=_env_str("SEO_DRAFTING_MODEL", DEFAULT_DRAFTING_MODEL),
            research_model=_env_str("SEO_RESEARCH_MODEL", DEFAULT_RESEARCH_MODEL),
            image_model=_env_str("SEO_IMAGE_MODEL", DEFAULT_IMAGE_MODEL),
            chat_model=_env_str("SEO_CHAT_MODEL", DEFAULT_CHAT_MODEL),
            temperature=float(temperature_raw) if temperature_raw else None,
            request_timeout_s=_env_float("SEO_REQUEST_TIMEOUT", 120.0),
            research_timeout_s=_env_float("SEO_RESEARCH_TIMEOUT", 60.0),
            youtube_api_key=_env_str("YOUTUBE_API_KEY"),
            youtube_access_token=_env_str("YOUTUBE_ACCESS_TOKEN"),
            run_log_path=Path(run_log) if run_log else None,
        )

    def with_overrides(self, overrides: dict[str, Any]) -> "AppConfig":
        known = {f.name for f in fields(self)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(unknown)}")

        values = dict(overrides)
        if values.get("run_log_path") is not None:
            values["run_log_path"] = Path(values["run_log_path"])
        return replace(self, **values)

    def with_yaml(self, path: Path) -> "AppConfig":
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file must contain a mapping: {path}")
        return self.with_overrides(data)


def load_config(config_path: Path | None = None) -> AppConfig:
    cfg = AppConfig.from_env()
    if config_path is not None:
        cfg = cfg.with_yaml(config_path)
    return cfg
