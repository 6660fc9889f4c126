"""Error types raised by the client import gate."""

from typing import Optional

from .schema import ImportOutcome

DEFAULT_UPLOAD_ERROR = "Failed to import clients"


class ClientImportError(ValueError):
    """Base class for client import failures."""


class OutcomeError(ClientImportError):
    """A validation failure that carries the outcome describing it."""

    def __init__(self, message: str, outcome: Optional[ImportOutcome] = None):
        super().__init__(message)
        self.outcome = outcome


class EmptyInputError(OutcomeError):
    """The file holds no usable lines (or no data rows after the header)."""


class HeaderSchemaError(OutcomeError):
    """The header row is missing required columns or names unknown ones."""


class RowValidationError(OutcomeError):
    """One or more sampled data rows failed semantic checks."""


class UploadError(ClientImportError):
    """Opaque failure reported by the upload collaborator."""

    def __init__(self, message: str = DEFAULT_UPLOAD_ERROR, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    @property
    def unauthorized(self) -> bool:
        return self.status_code == 401


_PHASE_ERRORS = {
    "file": EmptyInputError,
    "header": HeaderSchemaError,
    "row": RowValidationError,
}


def raise_for_outcome(outcome: ImportOutcome) -> None:
    """Raise the error matching a failed outcome; no-op when it passed."""
    if outcome.ok:
        return
    error_cls = _PHASE_ERRORS.get(outcome.phase or "row", RowValidationError)
    raise error_cls(outcome.summary or "CSV validation failed", outcome)
