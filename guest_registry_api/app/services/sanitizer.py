"""
First validation stage: field sanitation and shape checks.

Incoming values are trimmed, markup characters are escaped and
``dateOfBirth`` is converted to a ``date``.  Only coarse checks happen
here (presence, ISO 8601 date, length window); the precise rules live
in ``GuestCreate``.
"""

import html
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

INVALID_VALUE = "Invalid value"


def _clean_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        return None
    # Quotes are left alone: apostrophes are legal in names.
    return html.escape(str(value).strip(), quote=False)


def _utc_date(value: datetime) -> date:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.date()


def parse_iso_date(value: Any) -> Optional[date]:
    """Parse an ISO 8601 date or datetime string into a ``date``.

    Datetimes carrying an offset are converted to UTC first.
    """
    if isinstance(value, datetime):
        return _utc_date(value)
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return _utc_date(datetime.fromisoformat(text.replace("Z", "+00:00")))
    except ValueError:
        return None


def _length_between(value: Optional[str], low: int, high: int) -> bool:
    return value is not None and low <= len(value) <= high


def sanitize_guest_payload(payload: Dict[str, Any]) -> Tuple[Dict[str, Any], List[Dict[str, Any]]]:
    """Sanitize a raw registration payload.

    Returns the payload with the four guest fields replaced by their
    cleaned values (other keys are passed through untouched for the
    schema stage to drop) and a list of ``{field, message, value}``
    errors.  An empty error list means the payload may proceed.
    """
    cleaned = dict(payload)
    errors: List[Dict[str, Any]] = []

    full_name = _clean_text(payload.get("fullName"))
    cleaned["fullName"] = full_name
    if not full_name:
        errors.append({"field": "fullName", "message": INVALID_VALUE, "value": full_name or ""})

    raw_dob = payload.get("dateOfBirth")
    dob = parse_iso_date(raw_dob)
    cleaned["dateOfBirth"] = dob
    if dob is None:
        errors.append({"field": "dateOfBirth", "message": INVALID_VALUE, "value": raw_dob})

    id_number = _clean_text(payload.get("idNumber"))
    cleaned["idNumber"] = id_number
    if not _length_between(id_number, 10, 16):
        errors.append({"field": "idNumber", "message": INVALID_VALUE, "value": id_number or ""})

    adm_no = _clean_text(payload.get("admNo"))
    cleaned["admNo"] = adm_no
    if not _length_between(adm_no, 3, 20):
        errors.append({"field": "admNo", "message": INVALID_VALUE, "value": adm_no or ""})

    return cleaned, errors
