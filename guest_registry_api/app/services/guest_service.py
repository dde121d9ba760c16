"""
Business logic for guest registration and the admin listing.

``GuestService.register`` runs the full pipeline for one submission:

1. field sanitation (``sanitizer.sanitize_guest_payload``),
2. schema validation (``validate_guest_schema``),
3. business rules (``BusinessRuleValidator``),
4. persistence through ``GuestStore``.

Each stage stops the pipeline on failure by raising
``RegistrationValidationError``; persistence failures raise
``RegistrationFailedError``.  The service holds no per-request state, so
one instance is shared by all requests.
"""

import logging
import secrets
import string
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from guest_registry_api.app.core.db import GuestStore
from guest_registry_api.app.core.errors import (
    RegistrationFailedError,
    RegistrationValidationError,
    StoreError,
)
from guest_registry_api.app.core.logging_config import redact
from guest_registry_api.app.schemas.guest import (
    GUEST_STATUS_ACTIVE,
    RECORD_VERSION,
    GuestCreate,
    GuestPublic,
    GuestRecord,
    RegistrationData,
)
from guest_registry_api.app.services.sanitizer import sanitize_guest_payload
from guest_registry_api.app.services.validation_service import (
    BusinessRuleValidator,
    DuplicateChecker,
    validate_guest_schema,
)

logger = logging.getLogger(__name__)

BASE36_ALPHABET = string.digits + string.ascii_uppercase


def to_base36(number: int) -> str:
    """Encode a non-negative integer in upper-case base 36."""
    if number < 0:
        raise ValueError("number must be non-negative")
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(BASE36_ALPHABET[remainder])
    return "".join(reversed(digits))


def generate_guest_id() -> str:
    """Return a new identifier such as ``PC-MGX3K2A1-4F9QZ``.

    The first part is the current time in milliseconds, the second five
    random base 36 characters.
    """
    timestamp = to_base36(int(time.time() * 1000))
    suffix = "".join(secrets.choice(BASE36_ALPHABET) for _ in range(5))
    return f"PC-{timestamp}-{suffix}"


def _redacted_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
    shown = dict(payload)
    shown["idNumber"] = redact(payload.get("idNumber"))
    return shown


def _redacted_errors(errors: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    shown = []
    for error in errors:
        if error.get("field") == "idNumber" and "value" in error:
            error = dict(error, value=redact(error["value"]))
        shown.append(error)
    return shown


class GuestService:
    """Service for registering and listing guests."""

    def __init__(self, store: GuestStore, validator: Optional[BusinessRuleValidator] = None):
        self.store = store
        self.validator = validator or BusinessRuleValidator(DuplicateChecker(store))

    async def register(self, payload: Dict[str, Any], origin: Optional[str]) -> RegistrationData:
        """Validate and persist a submitted guest.

        Parameters
        ----------
        payload : dict
            Raw request body (JSON object or form fields).
        origin : Optional[str]
            Client address, stored as ``registeredFrom``.

        Returns
        -------
        RegistrationData
            The new guest id, registration time and processing time.
        """
        started = time.perf_counter()
        logger.info("Guest registration attempt from %s: %s", origin, _redacted_payload(payload))

        cleaned, errors = sanitize_guest_payload(payload)
        if errors:
            logger.warning("Field validation failed: %s", _redacted_errors(errors))
            raise RegistrationValidationError("Validation failed", errors)

        guest, errors = validate_guest_schema(cleaned)
        if errors:
            logger.warning("Schema validation failed: %s", _redacted_errors(errors))
            raise RegistrationValidationError("Validation failed", errors)

        business_errors = await self.validator.validate(guest)
        if business_errors:
            logger.warning("Business validation failed: %s", business_errors)
            raise RegistrationValidationError("Business validation failed", business_errors)

        record = await self._save(guest, origin)
        processing_ms = int((time.perf_counter() - started) * 1000)
        logger.info(
            "Guest registered successfully: id=%s name=%s processingTime=%sms",
            record.id,
            record.full_name,
            processing_ms,
        )
        return RegistrationData(
            guest_id=record.id,
            registered_at=record.registered_at,
            processing_time=f"{processing_ms}ms",
        )

    async def _save(self, guest: GuestCreate, origin: Optional[str]) -> GuestRecord:
        record = GuestRecord(
            id=generate_guest_id(),
            full_name=guest.full_name,
            date_of_birth=guest.date_of_birth,
            id_number=guest.id_number,
            adm_no=guest.adm_no,
            registered_at=datetime.now(timezone.utc),
            registered_from=origin,
            status=GUEST_STATUS_ACTIVE,
            version=RECORD_VERSION,
        )
        try:
            await self.store.insert(record)
        except StoreError as exc:
            logger.error("Error registering guest %s: %s", redact(guest.id_number), exc)
            raise RegistrationFailedError(cause=exc) from exc
        logger.debug("Guest %s saved", record.id)
        return record

    async def list_public(self) -> List[GuestPublic]:
        """Return every guest projected to its public fields."""
        records = await self.store.list_all()
        return [GuestPublic.from_record(record) for record in records]
