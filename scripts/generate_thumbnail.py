from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path

from PIL import Image

from agents.llm_client import LLMClient
from lib.config import load_config
from lib.env import load_env
from pipeline.errors import PipelineError
from pipeline.thumbnail_step import generate_thumbnails
from schemas.common import ImageResolution


def _readable_size(n: float) -> str:
    for unit in ["B", "KB", "MB", "GB"]:
        if n < 1024 or unit == "GB":
            return f"{n:.0f}{unit}" if unit == "B" else f"{n:.1f}{unit}"
        n /= 1024
    return f"{n:.1f}GB"


def _prompt_from_result(path: Path) -> tuple[str, str]:
    """Read (thumbnailPrompt, first title) from a generate_metadata.py output file."""
    data = json.loads(path.read_text(encoding="utf-8"))
    result = data.get("result", data)
    titles = result.get("titles") or [""]
    return str(result.get("thumbnailPrompt") or ""), str(titles[0])


async def run(args: argparse.Namespace) -> int:
    config = load_config(Path(args.config) if args.config else None)
    if not config.openai_api_key:
        raise SystemExit("Missing OPENAI_API_KEY. Set it in your environment (or .env) before running this script.")

    prompt = args.prompt or ""
    overlay = args.text
    if args.from_result:
        prompt, first_title = _prompt_from_result(Path(args.from_result))
        if args.title_overlay and not overlay:
            overlay = first_title

    if not prompt.strip():
        raise SystemExit("Nothing to draw: pass --prompt or --from-result")

    llm = LLMClient(config=config)
    try:
        files = await generate_thumbnails(
            llm=llm,
            prompt=prompt,
            out_dir=Path(args.out_dir),
            stem=args.stem,
            resolution=args.resolution,
            overlay_text=overlay,
        )
    except PipelineError as e:
        print(f"❌ Failed to generate images: {e.user_message}")
        return 1

    if not files:
        print("⚠️ The image backend returned no images")
        return 1

    for f in files:
        with Image.open(f.thumbnail_path) as im:
            w, h = im.size
        print("✅ Thumbnail generated")
        print(f"- file: {f.thumbnail_path}")
        print(f"- size: {_readable_size(f.thumbnail_path.stat().st_size)}")
        print(f"- dimensions: {w}x{h}")
        print(f"- source: {f.source_path}")
    return 0


def main(argv: list[str] | None = None) -> int:
    load_env()
    p = argparse.ArgumentParser(description="Generate 16:9 YouTube thumbnails from an art-direction prompt")
    src = p.add_mutually_exclusive_group()
    src.add_argument("--prompt", help="Art-direction prompt")
    src.add_argument("--from-result", help="generate_metadata.py JSON output to take thumbnailPrompt from")
    p.add_argument("--text", default=None, help="Headline text to render on the thumbnail")
    p.add_argument("--title-overlay", action="store_true", help="With --from-result, overlay the first title")
    p.add_argument("--resolution", default=ImageResolution.r2k.value, choices=[r.value for r in ImageResolution])
    p.add_argument("--out-dir", default="output/thumbnails")
    p.add_argument("--stem", default="thumbnail")
    p.add_argument("--config", default=None, help="YAML file overriding environment configuration")
    args = p.parse_args(argv)
    return asyncio.run(run(args))


if __name__ == "__main__":
    raise SystemExit(main())
