from __future__ import annotations

import argparse
import asyncio
import json
import uuid
from pathlib import Path
from typing import Optional

from app_logging.run_logger import RunLogger
from lib.config import AppConfig, load_config
from lib.env import load_env
from lib.youtube_client import YouTubeApiError, YouTubeClient
from pipeline.content_audit import audit_content
from pipeline.errors import PipelineError
from pipeline.orchestrator import SessionState, build_pipeline
from schemas.common import InputMode, PipelineStatus
from schemas.pipeline import PipelineRequest, load_pipeline_request

# Used by the idea generator flow when the caller gives no hint of their own.
IDEA_CONTEXT_HINT = "Focus on trending potential and viral hooks."


def _print_status(status: PipelineStatus, text: str) -> None:
    if text:
        print(f">>> {text}")


async def _resolve_request(args: argparse.Namespace, config: AppConfig) -> PipelineRequest:
    if args.request:
        req = load_pipeline_request(Path(args.request))
    else:
        text = args.input or ""
        if args.input_file:
            text = Path(args.input_file).read_text(encoding="utf-8")
        req = PipelineRequest(raw_input=text, mode=InputMode(args.mode), context_hint=args.context)

    if req.mode == InputMode.idea and not req.context_hint and args.idea_hint:
        req = req.model_copy(update={"context_hint": IDEA_CONTEXT_HINT})

    if args.url:
        async with YouTubeClient(api_key=config.youtube_api_key) as yt:
            try:
                raw = await yt.input_from_url(args.url, req.raw_input)
                req = req.model_copy(update={"raw_input": raw})
            except YouTubeApiError as e:
                print(f"⚠️ Could not fetch YouTube metadata: {e}")

    return req


async def run(args: argparse.Namespace) -> int:
    config = load_config(Path(args.config) if args.config else None)
    if args.log:
        config = config.with_overrides({"run_log_path": args.log})

    req = await _resolve_request(args, config)
    if not req.raw_input.strip():
        print("❌ Nothing to analyze: pass --input, --input-file, --request or --url")
        return 2

    run_logger = RunLogger(run_id=uuid.uuid4().hex[:12], log_path=config.run_log_path)
    state = SessionState()
    pipeline = build_pipeline(
        config,
        state=state,
        run_logger=run_logger,
        on_status=_print_status,
        with_research=not args.no_research,
    )

    try:
        result = await pipeline.run(req)
    except PipelineError as e:
        print(f"❌ {e.user_message} [{e.kind}, stage={e.stage}]")
        return 1

    print(f"✅ {len(result.titles)} titles, {len(result.descriptions)} descriptions, {len(result.tags)} tags")

    research: Optional[str] = None
    if pipeline.research_agent is not None:
        if args.wait_research:
            research = await pipeline.wait_for_research()
        else:
            research = state.research_text

    payload: dict = {"result": result.to_dict(), "research": research}

    audit = audit_content(result)
    payload["audit"] = audit.to_dict()
    if audit.issues:
        print(f"⚠️ {len(audit.issues)} audit issue(s)")
        for issue in audit.issues:
            print(f"- [{issue.severity}] {issue.field_path}: {issue.message}")

    out_text = json.dumps(payload, indent=2, ensure_ascii=False)
    if args.out:
        out_path = Path(args.out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(out_text + "\n", encoding="utf-8")
        print(f"✅ Saved to {out_path}")
    else:
        print(out_text)

    return 0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Generate YouTube SEO metadata (titles, descriptions, tags, thumbnail prompt)")
    src = ap.add_mutually_exclusive_group()
    src.add_argument("--input", help="Script, transcript or idea text")
    src.add_argument("--input-file", help="Read the input text from a file")
    src.add_argument("--request", help="YAML request file (raw_input/mode/context_hint)")
    ap.add_argument("--mode", default=InputMode.script.value, choices=[m.value for m in InputMode])
    ap.add_argument("--context", default=None, help="Extra constraints for the strategy analysis")
    ap.add_argument(
        "--idea-hint",
        action="store_true",
        help="In IDEA mode with no --context, ask for trending potential and viral hooks",
    )
    ap.add_argument("--url", default=None, help="YouTube URL whose title/description is prepended to the input")
    ap.add_argument("--config", default=None, help="YAML file overriding environment configuration")
    ap.add_argument("--log", default=None, help="Append JSONL run events to this file")
    ap.add_argument("--out", default=None, help="Write the JSON output here instead of stdout")
    ap.add_argument("--no-research", action="store_true", help="Skip competitive research")
    ap.add_argument("--wait-research", action="store_true", help="Wait for competitive research before exiting")
    return ap


def main(argv: list[str] | None = None) -> int:
    load_env()
    args = build_parser().parse_args(argv)
    return asyncio.run(run(args))


if __name__ == "__main__":
    raise SystemExit(main())
