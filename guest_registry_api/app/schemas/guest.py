"""
Pydantic models for guest registration.

``GuestCreate`` describes the payload accepted by ``POST /api/guests``
after sanitation and carries all field constraints.  ``GuestRecord`` is
the stored entity including server-set fields; ``GuestPublic`` is the
projection exposed to administrators and deliberately omits identity
data (``idNumber``, ``admNo``, ``dateOfBirth``, ``registeredFrom``).
"""

from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_core import PydanticCustomError

GUEST_STATUS_ACTIVE = "active"
RECORD_VERSION = "1.0.0"
EARLIEST_BIRTH_DATE = date(1900, 1, 1)

# Latin letters, whitespace, hyphen, apostrophe and the Devanagari block.
FULL_NAME_PATTERN = "^[a-zA-Z\\s\\-'ऀ-ॿ]+$"
ID_NUMBER_PATTERN = r"^[0-9]+$"
ADM_NO_PATTERN = r"^[A-Za-z0-9\-/]+$"

# Client-facing messages keyed by field alias and pydantic error type.
FIELD_MESSAGES: Dict[str, Dict[str, str]] = {
    "fullName": {
        "string_pattern_mismatch": "Name can only contain letters, spaces, hyphens, apostrophes, and Hindi characters",
        "string_too_short": "Name must be at least 2 characters long",
        "string_too_long": "Name cannot exceed 100 characters",
        "missing": "Full name is required",
    },
    "dateOfBirth": {
        "date_max": "Date of birth cannot be in the future",
        "date_min": "Please enter a valid date of birth",
        "missing": "Date of birth is required",
    },
    "idNumber": {
        "string_pattern_mismatch": "ID number can only contain digits",
        "string_too_short": "ID number must be at least 10 digits long",
        "string_too_long": "ID number cannot exceed 16 digits",
        "missing": "ID number is required",
    },
    "admNo": {
        "string_pattern_mismatch": "Admission number can only contain letters, numbers, hyphens, and slashes",
        "string_too_short": "Admission number must be at least 3 characters long",
        "string_too_long": "Admission number cannot exceed 20 characters",
        "missing": "Admission number is required",
    },
}


class GuestCreate(BaseModel):
    """Schema for registering a guest.

    Unknown fields are silently dropped.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    full_name: str = Field(..., alias="fullName", min_length=2, max_length=100, pattern=FULL_NAME_PATTERN, examples=["Asha Rao"])
    date_of_birth: date = Field(..., alias="dateOfBirth", examples=["2000-05-01"])
    id_number: str = Field(..., alias="idNumber", min_length=10, max_length=16, pattern=ID_NUMBER_PATTERN, examples=["1234567890"])
    adm_no: str = Field(..., alias="admNo", min_length=3, max_length=20, pattern=ADM_NO_PATTERN, examples=["ADM-001"])

    @field_validator("date_of_birth")
    @classmethod
    def _birth_date_in_range(cls, value: date) -> date:
        if value > date.today():
            raise PydanticCustomError("date_max", "Date of birth cannot be in the future")
        if value < EARLIEST_BIRTH_DATE:
            raise PydanticCustomError("date_min", "Please enter a valid date of birth")
        return value


class GuestRecord(BaseModel):
    """A stored guest including server-assigned fields."""

    id: str
    full_name: str
    date_of_birth: date
    id_number: str
    adm_no: str
    registered_at: datetime
    registered_from: Optional[str] = None
    status: str = GUEST_STATUS_ACTIVE
    version: str = RECORD_VERSION


class GuestPublic(BaseModel):
    """Projection of a guest returned by the admin listing."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    full_name: str = Field(..., alias="fullName")
    registered_at: datetime = Field(..., alias="registeredAt")
    status: str

    @classmethod
    def from_record(cls, record: GuestRecord) -> "GuestPublic":
        return cls(
            id=record.id,
            full_name=record.full_name,
            registered_at=record.registered_at,
            status=record.status,
        )


class RegistrationData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    guest_id: str = Field(..., alias="guestId")
    registered_at: datetime = Field(..., alias="registeredAt")
    processing_time: str = Field(..., alias="processingTime", examples=["12ms"])


class RegistrationResponse(BaseModel):
    success: bool = True
    message: str = "Guest registered successfully"
    data: RegistrationData


class GuestListResponse(BaseModel):
    success: bool = True
    data: List[GuestPublic]
    count: int
    timestamp: datetime


class ErrorResponse(BaseModel):
    """Envelope used for every 4xx/5xx answer."""

    success: bool = False
    message: str
    errors: Optional[List[Dict[str, Any]]] = None
    error: Optional[str] = None
