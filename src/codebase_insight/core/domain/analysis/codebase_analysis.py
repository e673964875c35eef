"""Structured verdict produced by an agentic CLI for one repository.

Field names follow the camelCase wire format the CLI is asked to emit; Python
code uses the snake_case attributes.
"""

import json
from datetime import UTC, datetime
from typing import Annotated, Any

from pydantic import (
    AliasChoices,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from codebase_insight.core.domain.analysis.value_objects.tech_debt_severity import (
    TechDebtSeverity,
)


def _utc_now_iso() -> str:
    return datetime.now(UTC).isoformat()


def _as_text(value: Any) -> Any:
    """Render numbers and nested JSON the model put where prose was expected."""
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, dict | list):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def _as_text_list(value: Any) -> Any:
    if value is None:
        return []
    if not isinstance(value, list):
        value = [value]
    return [_as_text(item) for item in value if item is not None]


Text = Annotated[str, BeforeValidator(_as_text)]
TextList = Annotated[list[str], BeforeValidator(_as_text_list)]


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        # an explicit null means "not provided": the field default applies
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


class ArchitectureSection(_WireModel):
    summary: Text = ""
    modules: TextList = Field(default_factory=list)
    concerns: TextList = Field(default_factory=list)


class QualitySection(_WireModel):
    summary: Text = ""
    strengths: TextList = Field(default_factory=list)
    weaknesses: TextList = Field(default_factory=list)


class TechDebtItem(_WireModel):
    description: Text = ""
    location: Text = ""
    severity: TechDebtSeverity
    evidence: Text = ""

    @field_validator("severity", mode="before")
    @classmethod
    def normalise_severity(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value


class TechnicalDebtSection(_WireModel):
    summary: Text = ""
    items: list[TechDebtItem] = Field(default_factory=list)


class RisksSection(_WireModel):
    summary: Text = ""
    items: TextList = Field(default_factory=list)


class CrossReferenceSection(_WireModel):
    summary: Text = ""
    correlations: TextList = Field(default_factory=list)


class CodebaseAnalysis(_WireModel):
    repo: Text
    analyzed_at: Text = Field(default_factory=_utc_now_iso, alias="analyzedAt")
    architecture: ArchitectureSection
    quality: QualitySection
    technical_debt: TechnicalDebtSection = Field(
        default_factory=TechnicalDebtSection, alias="technicalDebt"
    )
    risks: RisksSection = Field(default_factory=RisksSection)
    cross_reference: CrossReferenceSection | None = Field(
        default=None,
        alias="crossReference",
        validation_alias=AliasChoices("crossReference", "jiraCrossReference", "cross_reference"),
    )
    partial: bool = False

    def as_salvaged(self) -> "CodebaseAnalysis":
        """Return a copy flagged as recovered after a deadline expiry."""
        return self.model_copy(update={"partial": True})

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
