"""FastAPI application for the client import gate."""

import logging
from typing import Any, Dict, Iterator

from fastapi import Depends, FastAPI, File, HTTPException, Request, UploadFile
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.middleware.cors import CORSMiddleware

from .config import CLIENTIMPORT_CORS_ORIGINS, get_settings
from .dispatch import UploadDispatcher
from .errors import OutcomeError, UploadError
from .pipeline import ClientImportPipeline
from .schema import EXPECTED_COLUMNS_HINT, ImportOutcome

_logger = logging.getLogger("clientimport.api")

_PHASE_CODES = {
    "file": "empty_csv",
    "header": "bad_header",
    "row": "bad_rows",
}

# Create FastAPI app
app = FastAPI(
    title="Client Import API",
    description="Pre-flight validation and upload of bulk client CSV files",
    version="0.1.0"
)

# CORS: opt-in via env
origins = [o.strip() for o in (CLIENTIMPORT_CORS_ORIGINS or "").split(",") if o.strip()]
if origins or CLIENTIMPORT_CORS_ORIGINS.strip() == "*":
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if CLIENTIMPORT_CORS_ORIGINS.strip() == "*" else origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def get_dispatcher() -> Iterator[UploadDispatcher]:
    """Per-request dispatcher for the configured upstream; closed after the request."""
    dispatcher = UploadDispatcher.from_settings(get_settings())
    try:
        yield dispatcher
    finally:
        dispatcher.close()


def _outcome_exception(outcome: ImportOutcome) -> HTTPException:
    return HTTPException(
        status_code=400,
        detail={
            "code": _PHASE_CODES.get(outcome.phase or "row", "bad_rows"),
            "message": outcome.summary,
            "details": outcome.model_dump(mode="json"),
        }
    )


async def _read_upload(file: UploadFile) -> bytes:
    content = await file.read()
    max_bytes = get_settings().max_upload_bytes
    if len(content) > max_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"File too large (> {max_bytes // (1024*1024)}MB)"
        )
    return content


@app.get("/health")
async def health_check() -> Dict[str, bool]:
    """Health check endpoint."""
    return {"ok": True}


@app.get("/config")
async def get_config() -> Dict[str, Any]:
    """Get the validation settings clients should know about."""
    settings = get_settings()
    return {
        "sample_size": settings.sample_size,
        "preview_limit": settings.preview_limit,
        "price_hint": settings.price_hint,
        "expected_columns": EXPECTED_COLUMNS_HINT,
    }


@app.post("/clients/validate")
async def validate_clients(
    file: UploadFile = File(..., description="Client roster CSV file")
) -> Dict[str, Any]:
    """
    Validate a client CSV without uploading it.

    Args:
        file: Client roster CSV file

    Returns:
        The passing outcome; failures are reported as 400 with the outcome in details
    """
    try:
        content = await _read_upload(file)
        outcome = ClientImportPipeline(get_settings()).validate_file(content, file.filename)
        if not outcome.ok:
            raise _outcome_exception(outcome)
        return {"status": "success", "outcome": outcome.model_dump(mode="json")}

    except HTTPException:
        # Re-raise HTTP exceptions to be handled by the HTTP exception handler
        raise
    except ValueError as e:
        raise HTTPException(
            status_code=400,
            detail={
                "code": "bad_input",
                "message": str(e)
            }
        )


@app.post("/clients/import")
async def import_clients(
    file: UploadFile = File(..., description="Client roster CSV file"),
    dispatcher: UploadDispatcher = Depends(get_dispatcher),
) -> Dict[str, Any]:
    """
    Validate a client CSV and forward it to the upstream import endpoint.

    Args:
        file: Client roster CSV file
        dispatcher: Upload collaborator for the upstream API

    Returns:
        Upstream status and response body
    """
    try:
        content = await _read_upload(file)
        pipeline = ClientImportPipeline(get_settings(), dispatcher=dispatcher)
        result = await run_in_threadpool(pipeline.run, content, file.filename)
        return {
            "status": "success",
            "upstream_status": result.status_code,
            "upstream": result.body,
        }

    except HTTPException:
        raise
    except OutcomeError as e:
        if e.outcome is None:
            raise HTTPException(status_code=400, detail={"code": "bad_input", "message": str(e)})
        raise _outcome_exception(e.outcome)
    except UploadError as e:
        raise HTTPException(
            status_code=502,
            detail={
                "code": "upload_failed",
                "message": e.message,
                "upstream_status": e.status_code,
            }
        )
    except ValueError as e:
        raise HTTPException(
            status_code=400,
            detail={
                "code": "bad_input",
                "message": str(e)
            }
        )


@app.exception_handler(HTTPException)
async def _http_exception_handler(request: Request, exc: HTTPException):
    """Preserve HTTPException status codes and return a unified JSON shape."""
    status = exc.status_code
    detail = exc.detail
    details = None

    if isinstance(detail, dict):
        message = detail.get("message") or detail.get("detail") or str(detail)
        # keep the rest as details, but preserve the "code" field if it exists
        details = {k: v for k, v in detail.items() if k not in ("message", "detail")}
        # If the dict already has a nested details structure, merge it in
        if "details" in detail and isinstance(detail["details"], dict):
            merged_details = {k: v for k, v in details.items() if k != "details"}
            merged_details.update(detail["details"])
            details = merged_details
    else:
        message = str(detail)

    return JSONResponse(
        status_code=status,
        content={
            "error": {
                "code": status,
                "type": "http_error",
                "message": message,
                "details": details,
            }
        },
    )


@app.exception_handler(Exception)
async def _unhandled_exception_handler(request: Request, exc: Exception):
    _logger.exception("Unhandled server error")
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": 500,
                "type": "internal_error",
                "message": str(exc),
                "details": None,
            }
        },
    )
