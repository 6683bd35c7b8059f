from __future__ import annotations

import unittest

import httpx

from lib.youtube_client import (
    YouTubeApiError,
    YouTubeClient,
    build_input_from_video,
    extract_video_id,
)
from schemas.youtube import VideoDetails

VIDEO_ITEM = {
    "id": "dQw4w9WgXcQ",
    "snippet": {
        "title": "Winter Tomatoes",
        "description": "How I grow tomatoes indoors.",
        "channelTitle": "Garden Lab",
        "tags": ["tomatoes"],
    },
    "contentDetails": {"duration": "PT12M3S"},
    "statistics": {"viewCount": "1234"},
}


def _client(handler, **kwargs) -> YouTubeClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return YouTubeClient(client=http, **kwargs)


class TestExtractVideoId(unittest.TestCase):
    def test_url_forms(self) -> None:
        for url in [
            "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
            "https://www.youtube.com/watch?feature=share&v=dQw4w9WgXcQ",
            "https://youtu.be/dQw4w9WgXcQ",
            "https://www.youtube.com/embed/dQw4w9WgXcQ?start=10",
            "https://www.youtube.com/v/dQw4w9WgXcQ",
        ]:
            self.assertEqual(extract_video_id(url), "dQw4w9WgXcQ", url)

    def test_rejects_unknown_or_wrong_length(self) -> None:
        self.assertIsNone(extract_video_id("https://example.com/video"))
        self.assertIsNone(extract_video_id("https://youtu.be/short"))
        self.assertIsNone(extract_video_id(""))


class TestBuildInput(unittest.TestCase):
    def test_prefixes_existing_input(self) -> None:
        details = VideoDetails.from_api(VIDEO_ITEM)
        self.assertEqual(
            build_input_from_video(details, "my notes"),
            "Video Title: Winter Tomatoes\nDescription: How I grow tomatoes indoors.\n\nmy notes",
        )
        self.assertEqual(details.view_count, 1234)
        self.assertEqual(details.duration, "PT12M3S")


class TestYouTubeClient(unittest.IsolatedAsyncioTestCase):
    async def test_get_video_details(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"items": [VIDEO_ITEM]})

        async with _client(handler, api_key="k") as yt:
            details = await yt.get_video_details("dQw4w9WgXcQ")

        self.assertEqual(details.title, "Winter Tomatoes")
        self.assertEqual(seen[0].url.path, "/youtube/v3/videos")
        self.assertEqual(seen[0].url.params["id"], "dQw4w9WgXcQ")
        self.assertEqual(seen[0].url.params["key"], "k")

    async def test_unknown_video_is_none(self) -> None:
        async with _client(lambda r: httpx.Response(200, json={"items": []}), api_key="k") as yt:
            self.assertIsNone(await yt.get_video_details("dQw4w9WgXcQ"))

    async def test_missing_api_key(self) -> None:
        async with _client(lambda r: httpx.Response(200, json={}), api_key="  ") as yt:
            with self.assertRaisesRegex(YouTubeApiError, "YouTube API Key required"):
                await yt.get_video_details("dQw4w9WgXcQ")

    async def test_api_error_message_is_surfaced(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(403, json={"error": {"message": "quotaExceeded"}})

        async with _client(handler, api_key="k") as yt:
            with self.assertRaises(YouTubeApiError) as ctx:
                await yt.get_video_details("dQw4w9WgXcQ")

        self.assertEqual(str(ctx.exception), "quotaExceeded")
        self.assertEqual(ctx.exception.status_code, 403)

    async def test_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        async with _client(handler, api_key="k") as yt:
            with self.assertRaisesRegex(YouTubeApiError, "unreachable"):
                await yt.get_video_details("dQw4w9WgXcQ")

    async def test_captions_need_token(self) -> None:
        async with _client(lambda r: httpx.Response(200, json={})) as yt:
            with self.assertRaisesRegex(YouTubeApiError, "OAuth Access Token required"):
                await yt.list_captions("dQw4w9WgXcQ")

    async def test_list_and_download_captions(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            self.assertEqual(request.headers["Authorization"], "Bearer tok")
            if request.url.path.endswith("/captions"):
                return httpx.Response(
                    200,
                    json={"items": [{"id": "cap1", "snippet": {"language": "en", "trackKind": "standard"}}]},
                )
            self.assertEqual(request.url.params["tfmt"], "srt")
            return httpx.Response(200, text="1\n00:00:01,000 --> 00:00:02,000\nHello\n")

        async with _client(handler, access_token="tok") as yt:
            tracks = await yt.list_captions("dQw4w9WgXcQ")
            body = await yt.download_caption_track(tracks[0].id, "srt")

        self.assertEqual(tracks[0].language, "en")
        self.assertIn("Hello", body)

    async def test_download_rejects_unknown_format(self) -> None:
        async with _client(lambda r: httpx.Response(200), access_token="tok") as yt:
            with self.assertRaises(ValueError):
                await yt.download_caption_track("cap1", "txt")

    async def test_input_from_url(self) -> None:
        async with _client(lambda r: httpx.Response(200, json={"items": [VIDEO_ITEM]}), api_key="k") as yt:
            out = await yt.input_from_url("https://youtu.be/dQw4w9WgXcQ", "")
            unchanged = await yt.input_from_url("https://example.com", "notes")

        self.assertTrue(out.startswith("Video Title: Winter Tomatoes"))
        self.assertEqual(unchanged, "notes")


if __name__ == "__main__":
    unittest.main()
