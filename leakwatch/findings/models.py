# Pydantic data models for leak findings: Severity, SourceSpan, Finding, FileReport.

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, field_serializer, model_validator

# Column used by line-precision findings to mean "highlight to end of line".
LINE_END_COLUMN = 999


class Severity(str, Enum):
    """Diagnostic severity. Built-in rules only emit WARNING."""

    ERROR = "error"
    WARNING = "warning"
    INFORMATION = "information"
    HINT = "hint"


class SourceSpan(BaseModel):
    """0-based source range; the end position is exclusive."""

    start_line: int = Field(..., ge=0)
    start_column: int = Field(..., ge=0)
    end_line: int = Field(..., ge=0)
    end_column: int = Field(..., ge=0)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _start_not_after_end(self) -> "SourceSpan":
        if (self.start_line, self.start_column) > (self.end_line, self.end_column):
            raise ValueError(
                f"span start {self.start_line}:{self.start_column} is after "
                f"end {self.end_line}:{self.end_column}"
            )
        return self

    @property
    def is_line_precision(self) -> bool:
        """True when the span carries no exact column data (pattern rules)."""
        return self.start_column == 0 and self.end_column == LINE_END_COLUMN


class Finding(BaseModel):
    """A single suspected leak reported by a rule."""

    rule_id: str
    rule_name: str
    message: str
    span: SourceSpan
    severity: Severity = Severity.WARNING

    model_config = {"frozen": True}

    def to_diagnostic(self) -> dict[str, Any]:
        """
        Translate this finding into an editor diagnostic payload.

        The shape follows the Language Server Protocol: 0-based line and
        character positions, end exclusive.
        """
        return {
            "severity": self.severity.value,
            "message": self.message,
            "source": "leakwatch",
            "code": self.rule_id,
            "range": {
                "start": {"line": self.span.start_line, "character": self.span.start_column},
                "end": {"line": self.span.end_line, "character": self.span.end_column},
            },
        }


class FileReport(BaseModel):
    """Findings for one analyzed file, as collected by the CLI."""

    path: Path
    findings: list[Finding] = Field(default_factory=list, serialization_alias="diagnostics")
    parse_error: Optional[str] = Field(None, serialization_alias="parseError")

    @field_serializer("findings")
    def serialize_findings(self, findings: list[Finding]) -> list[dict[str, Any]]:
        return [f.to_diagnostic() for f in findings]
