from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class VideoDetails(BaseModel):
    """Subset of a YouTube `videos` resource used by the studio."""

    model_config = ConfigDict(extra="ignore")

    id: str
    title: str = ""
    description: str = ""
    channel_title: str = ""
    tags: list[str] = Field(default_factory=list)
    duration: Optional[str] = None
    view_count: Optional[int] = None

    @classmethod
    def from_api(cls, item: dict[str, Any]) -> "VideoDetails":
        snippet = item.get("snippet") or {}
        details = item.get("contentDetails") or {}
        stats = item.get("statistics") or {}
        views = stats.get("viewCount")
        return cls(
            id=str(item.get("id") or ""),
            title=snippet.get("title") or "",
            description=snippet.get("description") or "",
            channel_title=snippet.get("channelTitle") or "",
            tags=list(snippet.get("tags") or []),
            duration=details.get("duration"),
            view_count=int(views) if views is not None else None,
        )


class CaptionTrack(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    language: str = ""
    name: str = ""
    track_kind: str = ""
    status: str = ""

    @classmethod
    def from_api(cls, item: dict[str, Any]) -> "CaptionTrack":
        snippet = item.get("snippet") or {}
        return cls(
            id=str(item.get("id") or ""),
            language=snippet.get("language") or "",
            name=snippet.get("name") or "",
            track_kind=snippet.get("trackKind") or "",
            status=snippet.get("status") or "",
        )


class TranscriptItem(BaseModel):
    text: str
    start: float = Field(..., ge=0, description="Seconds from the start of the video")
    duration: float = Field(..., ge=0, description="Seconds on screen")
