"""Validate-then-upload pipeline for bulk client imports."""

import logging
from typing import Optional

from .config import Settings, get_settings
from .dispatch import UploadDispatcher
from .errors import raise_for_outcome
from .importers.base import FileSource
from .importers.client_csv import ClientCSVImporter, HeaderPredicate, looks_like_header
from .schema import ImportOutcome, UploadPayload, UploadResult

_logger = logging.getLogger("clientimport.pipeline")


class ClientImportPipeline:
    """
    Pre-flight gate in front of the upstream client import.

    Each call is independent: nothing is cached between imports. Only the
    first `sample_size` data rows are checked, so the upstream import stays
    the authoritative validation for the rest of the file.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        dispatcher: Optional[UploadDispatcher] = None,
        header_predicate: HeaderPredicate = looks_like_header,
    ):
        self.settings = settings or get_settings()
        self._dispatcher = dispatcher
        self.header_predicate = header_predicate

    @property
    def dispatcher(self) -> UploadDispatcher:
        if self._dispatcher is None:
            self._dispatcher = UploadDispatcher.from_settings(self.settings)
        return self._dispatcher

    def _options(self) -> dict:
        return {
            "header_predicate": self.header_predicate,
            "sample_size": self.settings.sample_size,
            "preview_limit": self.settings.preview_limit,
            "price_hint": self.settings.price_hint,
        }

    def validate(self, text: str, file_name: Optional[str] = None) -> ImportOutcome:
        """Validate decoded CSV text without any I/O."""
        outcome = ClientCSVImporter.validate_text(text, file_name, **self._options())
        self._log_outcome(outcome)
        return outcome

    def validate_file(self, file: FileSource, file_name: Optional[str] = None) -> ImportOutcome:
        """Read a file (path, bytes, text or file object) and validate it."""
        outcome, _ = self._read_and_validate(file, file_name)
        return outcome

    def _read_and_validate(self, file: FileSource, file_name: Optional[str]):
        outcome, content = ClientCSVImporter.import_file(file, file_name, **self._options())
        self._log_outcome(outcome)
        return outcome, content

    def run(self, file: FileSource, file_name: Optional[str] = None) -> UploadResult:
        """
        Validate a file and, when clean, upload the original bytes once.

        Raises:
            EmptyInputError, HeaderSchemaError, RowValidationError: Validation
                failed; no upload was attempted
            UploadError: The upload collaborator rejected the file
        """
        outcome, content = self._read_and_validate(file, file_name)
        raise_for_outcome(outcome)
        payload = UploadPayload(file_name=outcome.file_name, content=content)
        return self.dispatcher.upload(payload)

    @staticmethod
    def _log_outcome(outcome: ImportOutcome) -> None:
        if outcome.ok:
            _logger.info("Validated %s", outcome.file_name)
            for warning in outcome.warnings:
                _logger.info("%s: %s", outcome.file_name, warning.render())
        else:
            _logger.info(
                "Rejected %s at %s phase (%d issues)",
                outcome.file_name, outcome.phase, outcome.total_issue_count,
            )
