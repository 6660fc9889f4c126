"""Client roster CSV importer: header detection and pre-flight validation."""

import re
from typing import Callable, List, Optional, Sequence, Tuple

from .base import FileSource, coerce_float, field_at, read_source
from ..config import PREVIEW_LIMIT_DEFAULT, SAMPLE_SIZE_DEFAULT, PriceHintMode
from ..errors import EmptyInputError
from ..schema import (
    ALLOWED_COLUMNS,
    EXPECTED_COLUMNS_HINT,
    POSITIONAL_COLUMN_MAP,
    REQUIRED_COLUMNS,
    HeaderResolution,
    ImportOutcome,
    IssueScope,
    RawLine,
    ValidationIssue,
)
from ..utils_date import is_valid_email, parse_calendar_date

DEFAULT_FILE_NAME = "selected file"

HeaderPredicate = Callable[[str], bool]

_LINE_SPLIT = re.compile(r"\r?\n")


def looks_like_header(line: str) -> bool:
    """
    Loose header detection on the raw first line.

    True when the lower-cased line contains both 'firstname' and 'email' as
    substrings; separators and token boundaries are not considered.
    """
    lowered = line.lower()
    return "firstname" in lowered and "email" in lowered


class ClientCSVImporter:
    """Validates bulk client CSV files before they are sent for import."""

    PRICE_HINT = (
        "Optional column 'price' is missing – did you rename it? "
        "If you used a different name (e.g., 'hahha'), rename back to 'price'."
    )

    @classmethod
    def tokenize(cls, text: str) -> List[RawLine]:
        """
        Split text into non-blank lines of comma-separated raw fields.

        Quoted commas are not supported; every ',' separates fields.

        Raises:
            EmptyInputError: If no non-blank line remains
        """
        lines = [
            tuple(line.split(","))
            for line in _LINE_SPLIT.split(text)
            if line.strip()
        ]
        if not lines:
            raise EmptyInputError("CSV is empty")
        return lines

    @classmethod
    def resolve_header(
        cls,
        lines: Sequence[RawLine],
        predicate: HeaderPredicate = looks_like_header,
    ) -> HeaderResolution:
        """Decide whether the first line is a header and build the column map."""
        first = ",".join(lines[0])
        if not predicate(first):
            return HeaderResolution(
                has_header=False,
                column_map=dict(POSITIONAL_COLUMN_MAP),
                consumed_lines=0,
            )

        tokens = tuple(token.strip() for token in lines[0])
        column_map = {}
        for idx, token in enumerate(tokens):
            # a repeated name keeps its last position
            column_map[token.lower()] = idx
        return HeaderResolution(
            has_header=True,
            tokens=tokens,
            column_map=column_map,
            consumed_lines=1,
        )

    @classmethod
    def validate_header(
        cls,
        resolution: HeaderResolution,
        price_hint: PriceHintMode = "warn",
    ) -> Tuple[List[ValidationIssue], List[ValidationIssue]]:
        """
        Check a detected header against the column vocabulary.

        Returns:
            tuple: (hard issues, lint warnings)
        """
        issues: List[ValidationIssue] = []
        warnings: List[ValidationIssue] = []
        if not resolution.has_header:
            return issues, warnings

        for name in REQUIRED_COLUMNS:
            if name not in resolution.column_map:
                issues.append(ValidationIssue(
                    scope="header",
                    message=f"Missing required column '{name}' in header",
                ))

        for token in resolution.tokens:
            if token and token.lower() not in ALLOWED_COLUMNS:
                issues.append(ValidationIssue(
                    scope="header",
                    message=f"Unknown/unsupported column '{token}' in header",
                ))

        if "price" not in resolution.column_map and price_hint != "off":
            hint = ValidationIssue(scope="header", message=cls.PRICE_HINT)
            if price_hint == "error":
                issues.append(hint)
            else:
                warnings.append(hint)

        return issues, warnings

    @classmethod
    def validate_rows(
        cls,
        lines: Sequence[RawLine],
        resolution: HeaderResolution,
        sample_size: int = SAMPLE_SIZE_DEFAULT,
    ) -> List[ValidationIssue]:
        """Check the first `sample_size` data rows; later rows are not read."""
        data_lines = lines[resolution.consumed_lines:]
        sample = data_lines[:min(sample_size, len(data_lines))]
        return [
            issue
            for idx, line in enumerate(sample)
            for issue in cls._check_row(line, idx + 1 + resolution.consumed_lines, resolution)
        ]

    @classmethod
    def _check_row(
        cls, line: RawLine, row_number: int, resolution: HeaderResolution
    ) -> List[ValidationIssue]:
        columns = resolution.column_map

        def issue(message: str) -> ValidationIssue:
            return ValidationIssue(scope="row", row_number=row_number, message=message)

        if any(columns.get(name) is None for name in REQUIRED_COLUMNS):
            return [issue("missing required data for firstName/lastName/email")]

        issues = []

        email = field_at(line, columns.get("email"))
        if not is_valid_email(email):
            issues.append(issue(f"invalid 'email' value -> {email or 'empty'}"))

        start = field_at(line, columns.get("startdate"))
        end = field_at(line, columns.get("enddate"))
        if start:
            start_dt = parse_calendar_date(start)
            if start_dt is None:
                issues.append(issue(f"invalid 'startDate' value -> {start}"))
            elif end:
                end_dt = parse_calendar_date(end)
                if end_dt is None:
                    issues.append(issue(f"invalid 'endDate' value -> {end}"))
                elif end_dt <= start_dt:
                    issues.append(issue(f"'endDate' ({end}) must be after 'startDate' ({start})"))

        price = field_at(line, columns.get("price"))
        if price:
            amount = coerce_float(price)
            if amount is None:
                issues.append(issue(f"'price' must be numeric -> {price}"))
            elif amount < 0:
                issues.append(issue(f"'price' cannot be negative -> {price}"))

        return issues

    @classmethod
    def aggregate(
        cls,
        issues: Sequence[ValidationIssue],
        phase: IssueScope,
        file_name: Optional[str] = None,
        preview_limit: int = PREVIEW_LIMIT_DEFAULT,
        warnings: Sequence[ValidationIssue] = (),
    ) -> ImportOutcome:
        """Fold issues into an outcome with a capped, human-readable summary."""
        name = file_name or DEFAULT_FILE_NAME
        if not issues:
            return ImportOutcome.success(name, tuple(warnings))

        total = len(issues)
        preview = tuple(issues[:preview_limit])
        remaining = max(0, total - preview_limit)
        plural = "s" if total > 1 else ""

        if phase == "file":
            lines = [f"{issues[0].message} in {name}"]
        else:
            if phase == "header":
                title = f"CSV header issues in {name} ({total} issue{plural}):"
            else:
                title = f"CSV validation failed in {name} ({total} issue{plural})"
            lines = [title]
            lines.extend(f"- {item.render()}" for item in preview)
            if remaining > 0:
                lines.append(f"...and {remaining} more")
            lines.append(f"Expected columns: {EXPECTED_COLUMNS_HINT}")

        return ImportOutcome(
            ok=False,
            file_name=name,
            phase=phase,
            issues=preview,
            warnings=tuple(warnings),
            truncated=remaining > 0,
            total_issue_count=total,
            summary="\n".join(lines),
        )

    @classmethod
    def validate_text(
        cls,
        text: str,
        file_name: Optional[str] = None,
        header_predicate: HeaderPredicate = looks_like_header,
        sample_size: int = SAMPLE_SIZE_DEFAULT,
        preview_limit: int = PREVIEW_LIMIT_DEFAULT,
        price_hint: PriceHintMode = "warn",
    ) -> ImportOutcome:
        """
        Run the full validation pass over decoded file text.

        Header problems stop the run before any row is checked. The result is
        a pure function of the arguments.

        Args:
            text: Decoded CSV content
            file_name: Name used in the summary
            header_predicate: Decides whether the first line is a header
            sample_size: Number of leading data rows to check
            preview_limit: Number of issues kept in the outcome
            price_hint: 'warn', 'error' or 'off' for a header without 'price'

        Returns:
            ImportOutcome describing the first failing phase, or success
        """
        try:
            lines = cls.tokenize(text)
        except EmptyInputError as e:
            return cls.aggregate(
                [ValidationIssue(scope="file", message=str(e))], "file", file_name, preview_limit
            )

        resolution = cls.resolve_header(lines, header_predicate)
        header_issues, warnings = cls.validate_header(resolution, price_hint)
        if header_issues:
            return cls.aggregate(header_issues, "header", file_name, preview_limit, warnings)

        if len(lines) <= resolution.consumed_lines:
            return cls.aggregate(
                [ValidationIssue(scope="file", message="No data rows found")],
                "file", file_name, preview_limit, warnings,
            )

        row_issues = cls.validate_rows(lines, resolution, sample_size)
        return cls.aggregate(row_issues, "row", file_name, preview_limit, warnings)

    @classmethod
    def import_file(
        cls, file: FileSource, file_name: Optional[str] = None, **options
    ) -> Tuple[ImportOutcome, bytes]:
        """
        Read and validate a file.

        Returns:
            tuple: (outcome, original bytes)
        """
        content, text = read_source(file)
        if file_name is None:
            file_name = getattr(file, "name", None)
            if file_name is not None:
                file_name = str(file_name).replace("\\", "/").rsplit("/", 1)[-1]
        return cls.validate_text(text, file_name, **options), content
