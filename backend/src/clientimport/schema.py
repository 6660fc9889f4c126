"""Pydantic schema models for the client import gate."""

from typing import Any, Dict, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

RawLine = Tuple[str, ...]
ColumnMap = Dict[str, int]

REQUIRED_COLUMNS = ("firstname", "lastname", "email")
OPTIONAL_COLUMNS = ("phonenumber", "gymid", "startdate", "enddate", "price")
ALLOWED_COLUMNS = frozenset(REQUIRED_COLUMNS + OPTIONAL_COLUMNS)

# Column order used when the first line is not a header
POSITIONAL_COLUMN_MAP: ColumnMap = {
    "firstname": 0,
    "lastname": 1,
    "email": 2,
    "phonenumber": 3,
    "gymid": 4,
    "startdate": 5,
    "enddate": 6,
    "price": 7,
}

EXPECTED_COLUMNS_HINT = "firstName,lastName,email,phoneNumber?,gymId?,startDate?,endDate?,price?"

IssueScope = Literal["file", "header", "row"]


class ValidationIssue(BaseModel):
    """A single problem found while validating an import file."""

    model_config = ConfigDict(frozen=True)

    scope: IssueScope
    row_number: Optional[int] = None
    message: str

    def render(self) -> str:
        """Display line for summaries."""
        if self.scope == "row" and self.row_number is not None:
            return f"Row {self.row_number}: {self.message}"
        return self.message


class HeaderResolution(BaseModel):
    """Outcome of header detection for one import run."""

    model_config = ConfigDict(frozen=True)

    has_header: bool
    tokens: Tuple[str, ...] = ()
    column_map: ColumnMap = Field(default_factory=lambda: dict(POSITIONAL_COLUMN_MAP))
    consumed_lines: int = 0


class ImportOutcome(BaseModel):
    """Caller-facing result of validating an import file."""

    model_config = ConfigDict(frozen=True)

    ok: bool
    file_name: str
    phase: Optional[IssueScope] = None
    issues: Tuple[ValidationIssue, ...] = ()
    warnings: Tuple[ValidationIssue, ...] = ()
    truncated: bool = False
    total_issue_count: int = 0
    summary: Optional[str] = None

    @classmethod
    def success(
        cls, file_name: str, warnings: Tuple[ValidationIssue, ...] = ()
    ) -> "ImportOutcome":
        """Create a passing outcome."""
        return cls(ok=True, file_name=file_name, warnings=tuple(warnings))


class UploadPayload(BaseModel):
    """The original file, packaged for the upload collaborator."""

    model_config = ConfigDict(frozen=True)

    file_name: str
    content: bytes
    content_type: str = "text/csv"

    def as_files(self) -> Dict[str, Tuple[str, bytes, str]]:
        """Multipart mapping with the single 'file' field."""
        return {"file": (self.file_name, self.content, self.content_type)}


class UploadResult(BaseModel):
    """Response from the upload collaborator."""

    status_code: int
    body: Optional[Any] = None
