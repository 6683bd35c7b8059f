import base64
from typing import Literal

from pydantic import Field

from schemas.base import SchemaBase


class GeneratedImage(SchemaBase):
    mime_type: str = Field("image/png", description="MIME type reported by the image backend")
    data_b64: str = Field(..., description="Base64-encoded image bytes")

    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data_b64}"

    def to_bytes(self) -> bytes:
        return base64.b64decode(self.data_b64)


class ChatMessage(SchemaBase):
    role: Literal["user", "model"]
    text: str
    timestamp: float = 0.0
