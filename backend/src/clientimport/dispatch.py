"""Upload dispatcher: hands a validated file to the upstream import endpoint."""

import logging
from typing import Any, Optional
from urllib.parse import urljoin

import requests

from .config import Settings, get_settings
from .errors import DEFAULT_UPLOAD_ERROR, UploadError
from .schema import UploadPayload, UploadResult

_logger = logging.getLogger("clientimport.dispatch")


def extract_error_message(body: Any) -> Optional[str]:
    """
    Pull a display message out of an upstream error body.

    Understands {"error": "..."}, {"error": {"message": "..."}},
    {"message": "..."} and {"detail": "..."}.
    """
    if not isinstance(body, dict):
        return None
    error = body.get("error")
    if isinstance(error, str) and error:
        return error
    if isinstance(error, dict):
        message = error.get("message")
        if isinstance(message, str) and message:
            return message
    for key in ("message", "detail"):
        value = body.get(key)
        if isinstance(value, str) and value:
            return value
    return None


def _json_or_none(response: requests.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


class UploadDispatcher:
    """Posts one multipart upload per call; never retries."""

    def __init__(
        self,
        base_url: str,
        import_path: str = "/admins/clients/import",
        token: Optional[str] = None,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        self.url = urljoin(base_url.rstrip("/") + "/", import_path.lstrip("/"))
        self.token = token or None
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "UploadDispatcher":
        """Build a dispatcher from application settings."""
        settings = settings or get_settings()
        return cls(
            base_url=settings.api_base_url,
            import_path=settings.import_path,
            token=settings.api_token,
            timeout=settings.upload_timeout_s,
        )

    def close(self) -> None:
        """Release the underlying HTTP session."""
        self.session.close()

    def upload(self, payload: UploadPayload) -> UploadResult:
        """
        Send the payload to the import endpoint.

        Raises:
            UploadError: On transport failure or a non-2xx response
        """
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        _logger.info("Uploading %s (%d bytes) to %s", payload.file_name, len(payload.content), self.url)
        try:
            response = self.session.post(
                self.url,
                files=payload.as_files(),
                headers=headers,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            _logger.warning("Upload of %s failed: %s", payload.file_name, e)
            raise UploadError(DEFAULT_UPLOAD_ERROR) from e

        body = _json_or_none(response)
        if not response.ok:
            message = extract_error_message(body) or DEFAULT_UPLOAD_ERROR
            _logger.warning(
                "Upload of %s rejected with %s: %s", payload.file_name, response.status_code, message
            )
            raise UploadError(message, status_code=response.status_code)

        _logger.info("Upload of %s accepted with %s", payload.file_name, response.status_code)
        return UploadResult(status_code=response.status_code, body=body)
