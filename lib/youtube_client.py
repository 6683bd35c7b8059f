from __future__ import annotations

import re
from typing import Any, Literal, Optional

import httpx

from schemas.youtube import CaptionTrack, VideoDetails

YOUTUBE_API_BASE = "https://www.googleapis.com/youtube/v3"

RE_VIDEO_ID = re.compile(r"^.*(youtu\.be/|v/|u/\w/|embed/|watch\?v=|&v=)([^#&?]*).*")

CaptionFormat = Literal["vtt", "srt"]


class YouTubeApiError(RuntimeError):
    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def extract_video_id(url: str) -> Optional[str]:
    """
    Pull the 11-character video id out of a YouTube URL.

    Handles watch?v=, &v=, youtu.be/, embed/, v/ and u/<x>/ forms.
    Returns None when no marker is found or the id is not 11 characters.
    """
    m = RE_VIDEO_ID.match((url or "").strip())
    if not m:
        return None
    vid = m.group(2)
    return vid if len(vid) == 11 else None


def build_input_from_video(details: VideoDetails, existing_input: str = "") -> str:
    """Prefix pipeline input with a video's title and description."""
    header = f"Video Title: {details.title}\nDescription: {details.description}"
    existing = (existing_input or "").strip()
    return f"{header}\n\n{existing}" if existing else header


def _error_message(resp: httpx.Response, fallback: str) -> str:
    try:
        data = resp.json()
    except ValueError:
        data = None
    if isinstance(data, dict):
        err = data.get("error")
        if isinstance(err, dict) and err.get("message"):
            return str(err["message"])
    return f"{fallback}: {resp.status_code} {resp.reason_phrase}".strip()


class YouTubeClient:
    """
    Minimal YouTube Data API v3 client.

    Video lookups use an API key; caption calls need an OAuth bearer token
    with caption scopes. The httpx client is injectable so tests can use
    httpx.MockTransport.
    """

    def __init__(
        self,
        *,
        api_key: Optional[str] = None,
        access_token: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        base_url: str = YOUTUBE_API_BASE,
        timeout_s: float = 30.0,
    ) -> None:
        self.api_key = (api_key or "").strip() or None
        self.access_token = (access_token or "").strip() or None
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout_s, follow_redirects=True)
        self._owns_client = client is None

    async def __aenter__(self) -> "YouTubeClient":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _auth_headers(self) -> dict[str, str]:
        if not self.access_token:
            raise YouTubeApiError("OAuth Access Token required for captions")
        return {"Authorization": f"Bearer {self.access_token}"}

    async def _get(self, path: str, *, params: dict[str, Any], headers: Optional[dict[str, str]] = None) -> httpx.Response:
        try:
            return await self._client.get(f"{self.base_url}/{path}", params=params, headers=headers)
        except httpx.TransportError as e:
            raise YouTubeApiError(f"YouTube API unreachable: {e}") from e

    async def get_video_details(self, video_id: str) -> Optional[VideoDetails]:
        """Look up a video by id. Returns None when the id matches nothing."""
        if not self.api_key:
            raise YouTubeApiError("YouTube API Key required")

        resp = await self._get(
            "videos",
            params={"part": "snippet,contentDetails,statistics", "id": video_id, "key": self.api_key},
        )
        if resp.status_code >= 400:
            raise YouTubeApiError(_error_message(resp, "YouTube API Error"), status_code=resp.status_code)

        items = (resp.json() or {}).get("items") or []
        return VideoDetails.from_api(items[0]) if items else None

    async def list_captions(self, video_id: str) -> list[CaptionTrack]:
        headers = self._auth_headers()
        resp = await self._get("captions", params={"part": "snippet", "videoId": video_id}, headers=headers)
        if resp.status_code >= 400:
            raise YouTubeApiError(_error_message(resp, "Failed to fetch captions list"), status_code=resp.status_code)

        items = (resp.json() or {}).get("items") or []
        return [CaptionTrack.from_api(item) for item in items]

    async def download_caption_track(self, caption_id: str, fmt: CaptionFormat = "vtt") -> str:
        if fmt not in ("vtt", "srt"):
            raise ValueError(f"Unsupported caption format: {fmt}")

        headers = self._auth_headers()
        resp = await self._get(f"captions/{caption_id}", params={"tfmt": fmt}, headers=headers)
        if resp.status_code >= 400:
            raise YouTubeApiError(_error_message(resp, "Failed to download caption track"), status_code=resp.status_code)
        return resp.text

    async def input_from_url(self, url: str, existing_input: str = "") -> str:
        """
        Prepend the title/description of the video at `url` to existing_input.

        Best-effort: an unrecognized URL or a video that does not exist leaves
        existing_input unchanged. API errors propagate.
        """
        video_id = extract_video_id(url)
        if not video_id:
            return existing_input

        details = await self.get_video_details(video_id)
        if details is None:
            return existing_input
        return build_input_from_video(details, existing_input)
