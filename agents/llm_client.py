from __future__ import annotations

from typing import Any, Dict, List, Optional

import openai
from openai import AsyncOpenAI

from lib.config import AppConfig
from pipeline.errors import BackendError, NetworkFailure, TimeoutFailure
from schemas.common import ImageResolution
from schemas.media import ChatMessage, GeneratedImage


# gpt-image sizes closest to each requested aspect ratio. Exact ratios are
# produced later by cropping (see pipeline.thumbnail_step).
ASPECT_RATIO_SIZES = {
    "16:9": "1536x1024",
    "3:2": "1536x1024",
    "1:1": "1024x1024",
    "2:3": "1024x1536",
    "9:16": "1024x1536",
}

RESOLUTION_QUALITY = {
    ImageResolution.r1k: "low",
    ImageResolution.r2k: "medium",
    ImageResolution.r4k: "high",
}


class LLMClient:
    """
    Thin async wrapper around the OpenAI Responses and Images APIs.

    Covers the four backend calls the studio needs:
      - structured JSON generation against a declared schema
      - web-search grounded free text
      - image generation
      - multi-turn chat

    Transport errors surface as NetworkFailure, error statuses as
    BackendError. Some models reject temperature=; we retry once without it.
    """

    def __init__(self, *, config: AppConfig, client: Optional[AsyncOpenAI] = None) -> None:
        self.config = config
        self.client = client or AsyncOpenAI(api_key=config.openai_api_key)

    async def generate_json(
        self,
        *,
        prompt: str,
        schema: Dict[str, Any],
        schema_name: str,
        model: Optional[str] = None,
        reasoning_effort: Optional[str] = None,
        temperature: Optional[float] = None,
    ) -> Optional[str]:
        """Return the raw JSON text, or None when the model produced no text."""
        kwargs: dict = {
            "model": model or self.config.drafting_model,
            "input": [{"role": "user", "content": prompt}],
            "text": {
                "format": {
                    "type": "json_schema",
                    "name": schema_name,
                    "schema": schema,
                    "strict": False,
                }
            },
        }
        if reasoning_effort:
            kwargs["reasoning"] = {"effort": reasoning_effort}

        resp = await self._create_response(kwargs, temperature=temperature)
        text = (resp.output_text or "").strip()
        return text or None

    async def generate_grounded_text(
        self,
        *,
        prompt: str,
        model: Optional[str] = None,
        web_search: bool = True,
    ) -> str:
        kwargs: dict = {
            "model": model or self.config.research_model,
            "input": [{"role": "user", "content": prompt}],
        }
        if web_search:
            kwargs["tools"] = [{"type": "web_search"}]

        resp = await self._create_response(kwargs, temperature=None)
        return (resp.output_text or "").strip()

    async def generate_images(
        self,
        *,
        prompt: str,
        aspect_ratio: str = "16:9",
        resolution: ImageResolution | str = ImageResolution.r1k,
        model: Optional[str] = None,
    ) -> List[GeneratedImage]:
        size = ASPECT_RATIO_SIZES.get(aspect_ratio)
        if size is None:
            raise ValueError(f"Unsupported aspect ratio: {aspect_ratio}")
        quality = RESOLUTION_QUALITY[ImageResolution(resolution)]

        try:
            resp = await self.client.images.generate(
                model=model or self.config.image_model,
                prompt=prompt,
                size=size,
                quality=quality,
                n=1,
            )
        except openai.APITimeoutError as e:
            raise TimeoutFailure(f"Image backend timed out: {e}") from e
        except openai.APIConnectionError as e:
            raise NetworkFailure(f"Image backend unreachable: {e}") from e
        except openai.APIStatusError as e:
            raise BackendError(_status_message(e), status_code=e.status_code) from e

        fmt = (getattr(resp, "output_format", None) or "png").lower()
        images: List[GeneratedImage] = []
        for item in resp.data or []:
            b64 = getattr(item, "b64_json", None)
            if b64:
                images.append(GeneratedImage(mime_type=f"image/{fmt}", data_b64=b64))
        return images

    async def chat(self, *, history: List[ChatMessage], message: str, model: Optional[str] = None) -> str:
        messages = [
            {"role": "assistant" if m.role == "model" else "user", "content": m.text}
            for m in history
        ]
        messages.append({"role": "user", "content": message})

        resp = await self._create_response(
            {"model": model or self.config.chat_model, "input": messages},
            temperature=self.config.temperature,
        )
        return (resp.output_text or "").strip()

    async def _create_response(self, kwargs: dict, *, temperature: Optional[float]) -> Any:
        attempt_kwargs = dict(kwargs)
        if temperature is not None:
            attempt_kwargs["temperature"] = float(temperature)

        try:
            try:
                return await self.client.responses.create(**attempt_kwargs)
            except openai.BadRequestError as e:
                # If the model rejects temperature, retry without temperature
                msg = str(e).lower()
                if "temperature" in attempt_kwargs and "unsupported parameter" in msg and "temperature" in msg:
                    attempt_kwargs.pop("temperature", None)
                    return await self.client.responses.create(**attempt_kwargs)
                raise
        except openai.APITimeoutError as e:
            raise TimeoutFailure(f"Generation backend timed out: {e}") from e
        except openai.APIConnectionError as e:
            raise NetworkFailure(f"Generation backend unreachable: {e}") from e
        except openai.APIStatusError as e:
            raise BackendError(_status_message(e), status_code=e.status_code) from e


def _status_message(e: "openai.APIStatusError") -> str:
    detail = None
    if isinstance(e.body, dict):
        err = e.body.get("error")
        detail = e.body.get("message") or (err.get("message") if isinstance(err, dict) else None)
    return f"Generation backend error ({e.status_code}): {detail or e.message}"
