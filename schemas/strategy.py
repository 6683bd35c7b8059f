from pydantic import Field, field_validator

from schemas.base import PayloadBase


class Strategy(PayloadBase):
    """
    Keyword / intent model produced by the strategy analysis stage.

    Notes:
    - search_intent is an open label (see schemas.common.KNOWN_SEARCH_INTENTS).
    - hooks is designed for exactly 3 angles; more are tolerated.
    """
    primary_keyword: str = Field(..., alias="primaryKeyword", min_length=1, description="Single dominant keyword")
    secondary_keywords: list[str] = Field(
        ..., alias="secondaryKeywords", min_length=1, description="5-10 long/short tail keywords"
    )
    search_intent: str = Field(..., alias="searchIntent", min_length=1, description="Search intent label")
    hooks: list[str] = Field(..., min_length=1, description="Title hook angles")
    entities: list[str] = Field(default_factory=list, description="Named entities found in the input")

    @field_validator("primary_keyword", "search_intent")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("secondary_keywords", "hooks")
    @classmethod
    def _drop_blank_items(cls, v: list[str]) -> list[str]:
        cleaned = [s.strip() for s in v if s and s.strip()]
        if not cleaned:
            raise ValueError("must contain at least one non-blank item")
        return cleaned

    @field_validator("entities")
    @classmethod
    def _clean_entities(cls, v: list[str]) -> list[str]:
        return [s.strip() for s in v if s and s.strip()]


# Declared output contract handed to the generation backend.
STRATEGY_RESPONSE_SCHEMA: dict = {
    "type": "object",
    "properties": {
        "primaryKeyword": {"type": "string"},
        "secondaryKeywords": {"type": "array", "items": {"type": "string"}},
        "searchIntent": {"type": "string"},
        "hooks": {"type": "array", "items": {"type": "string"}},
        "entities": {"type": "array", "items": {"type": "string"}},
    },
    "required": ["primaryKeyword", "secondaryKeywords", "searchIntent", "hooks"],
}
