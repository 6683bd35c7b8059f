from __future__ import annotations

import re

from schemas.youtube import TranscriptItem

RE_CUE_TIMING = re.compile(
    r"(?P<start>(?:\d+:)?\d{1,2}:\d{2}[.,]\d{1,3})\s*-->\s*(?P<end>(?:\d+:)?\d{1,2}:\d{2}[.,]\d{1,3})"
)
RE_TAG = re.compile(r"<[^>]+>")


def parse_timestamp(ts: str) -> float:
    """Parse `HH:MM:SS.mmm`, `MM:SS.mmm` or the SRT comma variant into seconds."""
    parts = ts.strip().replace(",", ".").split(":")
    seconds = 0.0
    for part in parts:
        seconds = seconds * 60 + float(part)
    return seconds


def parse_captions(text: str) -> list[TranscriptItem]:
    """
    Parse a WebVTT or SRT caption track into transcript items.

    Cue settings, styling tags and NOTE/STYLE blocks are dropped. Consecutive
    duplicate lines (rolling auto-captions) are collapsed.
    """
    items: list[TranscriptItem] = []
    blocks = re.split(r"\n\s*\n", (text or "").replace("\r\n", "\n").strip())

    for block in blocks:
        lines = [line.strip() for line in block.split("\n") if line.strip()]
        timing_idx = next((i for i, line in enumerate(lines) if "-->" in line), None)
        if timing_idx is None:
            continue

        m = RE_CUE_TIMING.search(lines[timing_idx])
        if not m:
            continue

        start = parse_timestamp(m.group("start"))
        end = parse_timestamp(m.group("end"))
        cue_text = " ".join(RE_TAG.sub("", line) for line in lines[timing_idx + 1:]).strip()
        if not cue_text:
            continue
        if items and items[-1].text == cue_text:
            continue

        items.append(TranscriptItem(text=cue_text, start=start, duration=max(0.0, end - start)))

    return items


def transcript_text(items: list[TranscriptItem]) -> str:
    return " ".join(i.text for i in items).strip()
