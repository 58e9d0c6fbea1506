"""Finding models: the atomic output of every analyzer."""

from pydantic import BaseModel, ConfigDict, Field

from .enums import Severity


class Position(BaseModel):
    """Zero-based line/character position."""

    model_config = ConfigDict(frozen=True)

    line: int = Field(..., ge=0)
    character: int = Field(..., ge=0)


class Range(BaseModel):
    """Half-open source range."""

    model_config = ConfigDict(frozen=True)

    start: Position
    end: Position

    @classmethod
    def on_line(cls, line: int, start: int, end: int) -> "Range":
        return cls(
            start=Position(line=line, character=start),
            end=Position(line=line, character=end),
        )


# Document-level findings anchor on the first character of the document.
DOCUMENT_START = Range.on_line(0, 0, 1)


class Finding(BaseModel):
    """One reported issue."""

    model_config = ConfigDict(frozen=True)

    code: str = Field(..., description="Stable kind identifier, e.g. 'empty-variable'")
    message: str = Field(..., description="Human-readable explanation")
    severity: Severity = Field(..., description="error, warning, info or hint")
    range: Range = Field(default=DOCUMENT_START, description="Source range")
    analyzer: str = Field(..., description="Name of the producing check")
    suggestion: str | None = Field(
        default=None, description="Optional replacement text for the range"
    )
