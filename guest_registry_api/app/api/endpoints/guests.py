"""
Guest endpoints.

``POST /api/guests`` registers a guest and is open to everyone.
``GET /api/guests`` lists all guests and requires the admin token.
Both rely on ``GuestService`` for the actual work; validation and
persistence failures are raised as domain exceptions and rendered by
the handlers registered in ``main.py``.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Request, status

from guest_registry_api.app.core.context import AppContext, get_context
from guest_registry_api.app.core.errors import RegistrationValidationError, StoreError
from guest_registry_api.app.core.security import require_admin
from guest_registry_api.app.schemas.guest import GuestListResponse, RegistrationResponse

logger = logging.getLogger(__name__)

router = APIRouter()

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


async def read_payload(request: Request, max_bytes: int) -> Dict[str, Any]:
    """Read a JSON or form-encoded body into a plain dictionary."""
    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > max_bytes:
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail="Request body too large")

    # Chunked bodies carry no Content-Length, so measure what was received.
    body = await request.body()
    if len(body) > max_bytes:
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail="Request body too large")

    content_type = request.headers.get("content-type", "").lower()
    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        return {key: value for key, value in form.items() if isinstance(value, str)}

    if not body.strip():
        return {}
    try:
        data = json.loads(body)
    except ValueError:
        raise RegistrationValidationError(
            "Validation failed",
            [{"field": "body", "message": "Malformed JSON body", "value": None}],
        )
    if not isinstance(data, dict):
        raise RegistrationValidationError(
            "Validation failed",
            [{"field": "body", "message": "Request body must be a JSON object", "value": None}],
        )
    return data


@router.post(
    "",
    response_model=RegistrationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a guest",
)
async def register_guest(
    request: Request,
    context: AppContext = Depends(get_context),
) -> RegistrationResponse:
    """Register a new guest.

    Accepts ``fullName``, ``dateOfBirth``, ``idNumber`` and ``admNo`` as
    JSON or form fields; anything else is ignored.  Returns the generated
    guest id.  Invalid submissions get HTTP 400 with one entry per
    failing field.
    """
    payload = await read_payload(request, context.settings.max_body_bytes)
    origin = request.client.host if request.client else None
    data = await context.guests.register(payload, origin)
    return RegistrationResponse(data=data)


@router.get(
    "",
    response_model=GuestListResponse,
    dependencies=[Depends(require_admin)],
    summary="List registered guests (admin)",
)
async def list_guests(context: AppContext = Depends(get_context)) -> GuestListResponse:
    """Return every guest with public fields only.

    No pagination: the whole collection is returned.
    """
    try:
        guests = await context.guests.list_public()
    except StoreError as exc:
        logger.error("Error fetching guests: %s", exc)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch guest data")
    return GuestListResponse(data=guests, count=len(guests), timestamp=datetime.now(timezone.utc))
