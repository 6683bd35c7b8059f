from typing import Optional

from pydantic import Field, field_validator

from schemas.base import PayloadBase
from schemas.strategy import Strategy


class ContentDraft(PayloadBase):
    """
    Metadata bundle as returned by the drafting backend.

    Counts and lengths (3 titles of 55-70 chars, 3 descriptions of ~150-200
    words, ~20 tags, 3-5 hashtags) are targets given to the generator, not
    enforced here. Use pipeline.content_audit to report violations.
    """
    titles: list[str] = Field(..., min_length=1)
    descriptions: list[str] = Field(..., min_length=1)
    tags: list[str] = Field(..., min_length=1)
    hashtags: list[str] = Field(default_factory=list, description="Best-effort; may be empty")
    thumbnail_prompt: str = Field(..., alias="thumbnailPrompt", min_length=1, description="English art direction")

    @field_validator("titles", "descriptions", "tags")
    @classmethod
    def _drop_blank_items(cls, v: list[str]) -> list[str]:
        cleaned = [s.strip() for s in v if s and s.strip()]
        if not cleaned:
            raise ValueError("must contain at least one non-blank item")
        return cleaned

    @field_validator("hashtags")
    @classmethod
    def _clean_hashtags(cls, v: list[str]) -> list[str]:
        return [s.strip() for s in v if s and s.strip()]

    @field_validator("thumbnail_prompt")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class ContentResult(ContentDraft):
    """A draft with the strategy it was written from attached."""
    strategy: Optional[Strategy] = None

    @classmethod
    def from_draft(cls, draft: ContentDraft, strategy: Optional[Strategy]) -> "ContentResult":
        fields = draft.model_dump(include=set(ContentDraft.model_fields))
        return cls(**fields, strategy=strategy)


CONTENT_RESPONSE_SCHEMA: dict = {
    "type": "object",
    "properties": {
        "titles": {"type": "array", "items": {"type": "string"}},
        "descriptions": {"type": "array", "items": {"type": "string"}},
        "tags": {"type": "array", "items": {"type": "string"}},
        "hashtags": {"type": "array", "items": {"type": "string"}},
        "thumbnailPrompt": {"type": "string"},
    },
    "required": ["titles", "descriptions", "tags", "thumbnailPrompt"],
}
