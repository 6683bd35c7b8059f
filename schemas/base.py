from pydantic import BaseModel, ConfigDict
from typing import Any, Dict

class SchemaBase(BaseModel):
    """
    Base class for all schemas in the SEO studio.
    Enforces strict fields and provides safe serialization.
    """

    model_config = ConfigDict(extra="forbid")

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class PayloadBase(SchemaBase):
    """
    Base class for models parsed from generation backend payloads.

    Backend JSON uses camelCase keys; fields are snake_case with aliases.
    Unknown keys are ignored so a chatty model does not fail validation.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True, by_alias=True)
