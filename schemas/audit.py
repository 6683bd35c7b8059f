from typing import Literal

from pydantic import Field

from schemas.base import SchemaBase


class AuditIssue(SchemaBase):
    severity: Literal["error", "warning"]
    field_path: str = Field(..., description="e.g. titles[1]")
    message: str


class ContentAudit(SchemaBase):
    issues: list[AuditIssue] = Field(default_factory=list)
    title_scores: list[float] = Field(default_factory=list, description="0-100 per title")

    @property
    def ok(self) -> bool:
        return not any(i.severity == "error" for i in self.issues)
