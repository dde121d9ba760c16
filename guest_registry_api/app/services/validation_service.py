"""
Schema and business-rule validation for guest registrations.

``validate_guest_schema`` is the second validation stage: it runs the
pydantic ``GuestCreate`` model and turns every violation into a
client-facing ``{field, message, value}`` entry.  ``BusinessRuleValidator``
is the third stage and checks rules that need more than the payload
itself: the guest's age and whether the ``idNumber`` is already taken.
"""

import logging
import math
from datetime import date, datetime, timedelta
from typing import Any, Callable, Dict, List, Optional, Tuple

from pydantic import ValidationError

from guest_registry_api.app.core.db import GuestStore
from guest_registry_api.app.schemas.guest import FIELD_MESSAGES, GuestCreate

logger = logging.getLogger(__name__)

MIN_AGE = 16
MAX_AGE = 120
DAYS_PER_YEAR = 365.25


def validate_guest_schema(payload: Dict[str, Any]) -> Tuple[Optional[GuestCreate], List[Dict[str, Any]]]:
    """Validate a sanitized payload against ``GuestCreate``.

    All violations are collected, not only the first one.  Returns the
    model (or ``None``) and the list of errors.
    """
    try:
        return GuestCreate.model_validate(payload), []
    except ValidationError as exc:
        errors = []
        for detail in exc.errors():
            field = ".".join(str(part) for part in detail["loc"])
            message = FIELD_MESSAGES.get(field, {}).get(detail["type"], detail["msg"])
            errors.append({"field": field, "message": message, "value": detail.get("input")})
        return None, errors


def compute_age(date_of_birth: date, now: datetime) -> int:
    """Age in whole years using a fixed 365.25-day year.

    This can be off by one within a day or so of a birthday.
    """
    born = datetime.combine(date_of_birth, datetime.min.time())
    return math.floor((now - born) / timedelta(days=DAYS_PER_YEAR))


class DuplicateChecker:
    """Looks up whether a natural identifier is already registered."""

    def __init__(self, store: GuestStore):
        self.store = store

    async def exists(self, id_number: str) -> Optional[bool]:
        """Return ``True``/``False``, or ``None`` if the store failed.

        Never raises: store failures are logged and reported as ``None``.
        """
        try:
            return await self.store.find_by_id_number(id_number) is not None
        except Exception as exc:
            logger.error("Error checking for duplicate guest: %s", exc)
            return None


class BusinessRuleValidator:
    """Age and duplicate rules applied after syntactic validation."""

    def __init__(self, checker: DuplicateChecker, clock: Callable[[], datetime] = datetime.now):
        self.checker = checker
        self.clock = clock

    async def validate(self, guest: GuestCreate) -> List[Dict[str, str]]:
        """Return an ordered list of ``{field, message, code}`` violations.

        Every rule is evaluated even if an earlier one failed.  When the
        duplicate lookup cannot reach the store the guest is treated as
        not a duplicate and a ``VALIDATION_ERROR`` entry is added instead.
        """
        errors: List[Dict[str, str]] = []
        try:
            age = compute_age(guest.date_of_birth, self.clock())
            if age < MIN_AGE:
                errors.append({
                    "field": "dateOfBirth",
                    "message": f"Guest must be at least {MIN_AGE} years old to register",
                    "code": "MIN_AGE_VIOLATION",
                })
            if age > MAX_AGE:
                errors.append({
                    "field": "dateOfBirth",
                    "message": "Please enter a valid date of birth",
                    "code": "INVALID_AGE",
                })

            is_duplicate = await self.checker.exists(guest.id_number)
            if is_duplicate is None:
                errors.append(_service_unavailable())
            elif is_duplicate:
                errors.append({
                    "field": "idNumber",
                    "message": "A guest with this ID number is already registered",
                    "code": "DUPLICATE_ID",
                })
        except Exception:
            logger.exception("Business validation error")
            errors.append(_service_unavailable())
        return errors


def _service_unavailable() -> Dict[str, str]:
    return {
        "field": "general",
        "message": "Validation service temporarily unavailable",
        "code": "VALIDATION_ERROR",
    }
