"""FastAPI router for the waitlist signup endpoint.

Provides:
- POST    /api/waitlist: public, validates the JSON body and appends a CSV row
- OPTIONS /api/waitlist: CORS preflight, never touches storage
- anything else        : 405 with a JSON body

Every response carries the configured CORS headers.
"""

import json
from datetime import datetime
from typing import Any, Optional

from fastapi import APIRouter, Depends, Request, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from config.settings import Settings, get_settings
from waitlist.api.dependencies import get_waitlist_store
from waitlist.domain import TIMESTAMP_FORMAT
from waitlist.errors import (
    EmptyBody,
    InvalidJson,
    MethodNotAllowed,
    StorageError,
    WaitlistError,
)
from waitlist.storage import WaitlistStore
from waitlist.utils.logging import get_submission_logger
from waitlist.validation import validate_submission

events = get_submission_logger(__name__)

router = APIRouter(tags=["waitlist"])

SUCCESS_MESSAGE = "Thank you! You have been added to our waitlist."
STORAGE_ERROR_DETAILS = "Check server error logs for more information"
ALLOWED_METHODS = "POST, OPTIONS"


def error_body(exc: WaitlistError) -> dict[str, Any]:
    """Build the JSON body for a waitlist error."""
    if isinstance(exc, StorageError):
        return {
            "success": False,
            "message": f"Error saving data: {exc.message}",
            "error_details": STORAGE_ERROR_DETAILS,
        }
    return {"success": False, "message": exc.message}


def error_response(exc: WaitlistError, settings: Settings) -> JSONResponse:
    headers = settings.cors.headers()
    if isinstance(exc, MethodNotAllowed):
        headers["Allow"] = ALLOWED_METHODS
    return JSONResponse(error_body(exc), status_code=exc.status_code, headers=headers)


def _reject_constant(name: str):
    raise ValueError(f"Unexpected token {name}")


def parse_body(raw: bytes) -> dict[str, Any]:
    """Decode the request body into a JSON object.

    NaN, Infinity and -Infinity are rejected; they are not JSON.

    Raises:
        EmptyBody: The body is empty
        InvalidJson: The body is not valid JSON or not an object
    """
    if not raw:
        raise EmptyBody()
    try:
        data = json.loads(raw, parse_constant=_reject_constant)
    except ValueError as exc:
        # JSONDecodeError and UnicodeDecodeError both land here
        raise InvalidJson(str(exc)) from exc
    except RecursionError as exc:
        raise InvalidJson("Maximum stack depth exceeded") from exc
    if not isinstance(data, dict):
        raise InvalidJson("Expected a JSON object")
    return data


def client_address(request: Request, trust_forwarded_for: bool = False) -> Optional[str]:
    """Address of the connecting client, if known."""
    if trust_forwarded_for:
        forwarded = request.headers.get("x-forwarded-for", "")
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return request.client.host if request.client else None


@router.options("")
async def waitlist_preflight(settings: Settings = Depends(get_settings)):
    """Answer the CORS preflight with an empty 200."""
    events.request_received("OPTIONS")
    return Response(status_code=200, headers=settings.cors.headers())


@router.api_route("", methods=["GET", "HEAD", "PUT", "PATCH", "DELETE"], include_in_schema=False)
async def waitlist_method_not_allowed(request: Request, settings: Settings = Depends(get_settings)):
    exc = MethodNotAllowed(request.method)
    events.submission_rejected(exc.message, exc.status_code, method=request.method)
    return error_response(exc, settings)


@router.post("")
async def join_waitlist(
    request: Request,
    settings: Settings = Depends(get_settings),
    store: WaitlistStore = Depends(get_waitlist_store),
):
    """Submit a waitlist signup.

    Public endpoint, no authentication. Each accepted submission appends
    exactly one row to the CSV file; re-submissions are not deduplicated.
    """
    raw = await request.body()
    events.request_received(
        "POST",
        body=raw.decode("utf-8", errors="replace"),
        headers=dict(request.headers),
    )

    try:
        data = parse_body(raw)
        record = validate_submission(
            data,
            client_ip=client_address(request, settings.server.trust_forwarded_for),
        )
        await run_in_threadpool(store.save, record)
    except StorageError as exc:
        events.storage_failed(exc.message, path=str(store.path))
        return error_response(exc, settings)
    except WaitlistError as exc:
        events.submission_rejected(exc.message, exc.status_code)
        return error_response(exc, settings)

    events.entry_saved(record.email, str(store.path))
    return JSONResponse(
        {
            "success": True,
            "message": SUCCESS_MESSAGE,
            "file": store.path.as_posix(),
            "timestamp": datetime.now().strftime(TIMESTAMP_FORMAT),
        },
        headers=settings.cors.headers(),
    )
