from __future__ import annotations

import argparse
import asyncio
from pathlib import Path

from lib.config import load_config
from lib.env import load_env
from lib.transcripts import parse_captions, transcript_text
from lib.youtube_client import YouTubeApiError, YouTubeClient, extract_video_id


async def run(args: argparse.Namespace) -> int:
    video_id = extract_video_id(args.url)
    if not video_id:
        print("❌ Invalid YouTube URL")
        return 2

    config = load_config(Path(args.config) if args.config else None)
    token = args.token or config.youtube_access_token
    if not token:
        print("❌ Please provide a valid OAuth2 Access Token (with caption scopes) to fetch caption data.")
        return 2

    async with YouTubeClient(access_token=token) as yt:
        try:
            tracks = await yt.list_captions(video_id)
            if not tracks:
                print("❌ No captions found or permission denied.")
                return 1

            print(f"Available caption tracks for {video_id}:")
            for t in tracks:
                print(f"- {t.id} [{t.language}] {t.name or '(unnamed)'} kind={t.track_kind} status={t.status}")

            if args.list:
                return 0

            chosen = next((t for t in tracks if args.language and t.language == args.language), tracks[0])
            body = await yt.download_caption_track(chosen.id, fmt=args.format)
        except YouTubeApiError as e:
            print(f"❌ {e}")
            return 1

    out_path = Path(args.out or f"output/captions/{video_id}.{args.format}")
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(body, encoding="utf-8")
    print(f"✅ Caption track {chosen.id} saved to {out_path}")

    if args.transcript:
        text_path = out_path.with_suffix(".txt")
        text_path.write_text(transcript_text(parse_captions(body)) + "\n", encoding="utf-8")
        print(f"✅ Plain transcript saved to {text_path} (use with generate_metadata.py --mode TRANSCRIPT)")
    return 0


def main(argv: list[str] | None = None) -> int:
    load_env()
    ap = argparse.ArgumentParser(description="List and download YouTube caption tracks (OAuth token required)")
    ap.add_argument("--url", required=True, help="YouTube video URL")
    ap.add_argument("--token", default=None, help="OAuth2 access token (default: YOUTUBE_ACCESS_TOKEN)")
    ap.add_argument("--language", default=None, help="Preferred track language code, e.g. en")
    ap.add_argument("--format", default="vtt", choices=["vtt", "srt"])
    ap.add_argument("--list", action="store_true", help="Only list tracks")
    ap.add_argument("--transcript", action="store_true", help="Also write a plain-text transcript")
    ap.add_argument("--out", default=None, help="Where to save the caption file")
    ap.add_argument("--config", default=None, help="YAML file overriding environment configuration")
    args = ap.parse_args(argv)
    return asyncio.run(run(args))


if __name__ == "__main__":
    raise SystemExit(main())
