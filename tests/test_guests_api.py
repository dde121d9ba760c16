# tests/test_guests_api.py
import re
from unittest.mock import AsyncMock
from urllib.parse import urlencode

from fastapi.testclient import TestClient

from guest_registry_api.app.core.db import GuestStore
from guest_registry_api.app.core.errors import DuplicateRecordError, StoreUnavailableError
from guest_registry_api.app.main import create_app
from tests.conftest import ADMIN_TOKEN, years_ago

GUEST_ID_PATTERN = re.compile(r"^PC-[0-9A-Z]+-[0-9A-Z]+$")


def _admin_headers(token=ADMIN_TOKEN):
    return {"X-Admin-Token": token}


def test_register_guest_returns_generated_id(client, valid_payload):
    resp = client.post("/api/guests", json=valid_payload)

    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    assert body["message"] == "Guest registered successfully"
    assert GUEST_ID_PATTERN.match(body["data"]["guestId"])
    assert body["data"]["registeredAt"]
    assert re.match(r"^\d+ms$", body["data"]["processingTime"])


def test_register_twice_with_same_id_number(client, valid_payload):
    first = client.post("/api/guests", json=valid_payload)
    second = client.post("/api/guests", json=dict(valid_payload, fullName="Other Person"))

    assert first.status_code == 201
    assert second.status_code == 400
    body = second.json()
    assert body["message"] == "Business validation failed"
    assert [e["code"] for e in body["errors"]] == ["DUPLICATE_ID"]


def test_register_accepts_form_encoding(client, valid_payload):
    resp = client.post("/api/guests", data=valid_payload)
    assert resp.status_code == 201


def test_extra_fields_are_discarded(client, valid_payload):
    resp = client.post("/api/guests", json=dict(valid_payload, id="PC-FAKE-1", status="vip"))
    assert resp.status_code == 201
    assert resp.json()["data"]["guestId"] != "PC-FAKE-1"

    listing = client.get("/api/guests", headers=_admin_headers()).json()
    assert listing["data"][0]["status"] == "active"


def test_field_stage_errors_include_rejected_value(client, valid_payload):
    resp = client.post("/api/guests", json=dict(valid_payload, idNumber="123456789"))

    assert resp.status_code == 400
    body = resp.json()
    assert body["message"] == "Validation failed"
    assert body["errors"] == [{"field": "idNumber", "message": "Invalid value", "value": "123456789"}]


def test_id_number_length_seventeen_is_rejected(client, valid_payload):
    resp = client.post("/api/guests", json=dict(valid_payload, idNumber="1" * 17))
    assert resp.status_code == 400
    assert resp.json()["errors"][0]["field"] == "idNumber"


def test_schema_stage_reports_every_field(client):
    resp = client.post(
        "/api/guests",
        json={"fullName": "R2-D2", "dateOfBirth": "2000-05-01", "idNumber": "12345abcde", "admNo": "A B"},
    )

    assert resp.status_code == 400
    errors = {e["field"]: e for e in resp.json()["errors"]}
    assert set(errors) == {"fullName", "idNumber", "admNo"}
    assert errors["fullName"]["message"].startswith("Name can only contain")
    assert errors["idNumber"]["value"] == "12345abcde"


def test_name_length_boundaries(client, valid_payload):
    assert client.post("/api/guests", json=dict(valid_payload, fullName="A")).status_code == 400
    assert client.post("/api/guests", json=dict(valid_payload, fullName="a" * 101)).status_code == 400
    assert client.post("/api/guests", json=dict(valid_payload, fullName="Ab", idNumber="1000000001")).status_code == 201
    assert client.post("/api/guests", json=dict(valid_payload, fullName="a" * 100, idNumber="1000000002")).status_code == 201


def test_age_rules(client, valid_payload):
    too_young = client.post("/api/guests", json=dict(valid_payload, dateOfBirth=years_ago(10)))
    too_old = client.post("/api/guests", json=dict(valid_payload, dateOfBirth="1901-01-01"))
    sixteen = client.post("/api/guests", json=dict(valid_payload, dateOfBirth=years_ago(16)))

    assert too_young.status_code == 400
    assert [e["code"] for e in too_young.json()["errors"]] == ["MIN_AGE_VIOLATION"]
    assert too_old.status_code == 400
    assert [e["code"] for e in too_old.json()["errors"]] == ["INVALID_AGE"]
    assert sixteen.status_code == 201


def test_malformed_json_is_a_validation_error(client):
    resp = client.post("/api/guests", content="{not json", headers={"Content-Type": "application/json"})

    assert resp.status_code == 400
    assert resp.json()["errors"][0]["field"] == "body"


def test_body_over_limit_is_rejected(settings, valid_payload):
    settings.max_body_bytes = 64
    with TestClient(create_app(settings)) as client:
        resp = client.post("/api/guests", json=dict(valid_payload, notes="x" * 200))

    assert resp.status_code == 413
    assert resp.json() == {"success": False, "message": "Request body too large"}


def test_chunked_form_body_over_limit_is_rejected(settings, valid_payload):
    settings.max_body_bytes = 64
    body = urlencode(dict(valid_payload, notes="x" * 500)).encode("utf-8")

    def chunks():
        for start in range(0, len(body), 32):
            yield body[start:start + 32]

    with TestClient(create_app(settings)) as client:
        resp = client.post(
            "/api/guests",
            content=chunks(),
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )

    assert resp.status_code == 413
    assert resp.json() == {"success": False, "message": "Request body too large"}


def test_admin_listing_requires_token(client, valid_payload):
    client.post("/api/guests", json=valid_payload)

    for headers in ({}, _admin_headers("wrong-token")):
        resp = client.get("/api/guests", headers=headers)
        assert resp.status_code == 403
        body = resp.json()
        assert body == {"success": False, "message": "Forbidden: Invalid or missing admin token"}


def test_admin_listing_projects_public_fields(client, valid_payload):
    client.post("/api/guests", json=valid_payload)
    client.post("/api/guests", json=dict(valid_payload, fullName="Ravi Kumar", idNumber="9876543210"))

    resp = client.get("/api/guests", headers=_admin_headers())

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["count"] == 2
    assert body["timestamp"]
    for guest in body["data"]:
        assert set(guest) == {"id", "fullName", "registeredAt", "status"}
        assert "idNumber" not in guest
    assert [g["fullName"] for g in body["data"]] == ["Asha Rao", "Ravi Kumar"]


def test_admin_listing_disabled_without_configured_token(settings):
    settings.admin_token = ""
    with TestClient(create_app(settings)) as client:
        assert client.get("/api/guests", headers=_admin_headers("")).status_code == 403
        assert client.get("/api/guests").status_code == 403


def test_store_outage_during_duplicate_check(settings, valid_payload):
    store = GuestStore(":memory:")
    store.find_by_id_number = AsyncMock(side_effect=StoreUnavailableError("database is locked"))
    with TestClient(create_app(settings, store=store)) as client:
        resp = client.post("/api/guests", json=valid_payload)

    assert resp.status_code == 400
    assert [e["code"] for e in resp.json()["errors"]] == ["VALIDATION_ERROR"]


def test_losing_a_uniqueness_race_is_a_registration_failure(settings, valid_payload):
    store = GuestStore(":memory:")
    store.find_by_id_number = AsyncMock(return_value=None)
    store.insert = AsyncMock(side_effect=DuplicateRecordError("UNIQUE constraint failed: guests.id_number"))
    with TestClient(create_app(settings, store=store)) as client:
        resp = client.post("/api/guests", json=valid_payload)

    assert resp.status_code == 500
    assert resp.json() == {"success": False, "message": "Registration failed", "error": "Internal server error"}


def test_registration_failure_detail_in_development(settings, valid_payload):
    settings.environment = "development"
    store = GuestStore(":memory:")
    store.insert = AsyncMock(side_effect=StoreUnavailableError("disk I/O error"))
    with TestClient(create_app(settings, store=store)) as client:
        resp = client.post("/api/guests", json=valid_payload)

    assert resp.status_code == 500
    assert resp.json()["error"] == "Failed to save guest registration"


def test_listing_store_failure(settings):
    store = GuestStore(":memory:")
    store.list_all = AsyncMock(side_effect=StoreUnavailableError("database is locked"))
    with TestClient(create_app(settings, store=store)) as client:
        resp = client.get("/api/guests", headers=_admin_headers())

    assert resp.status_code == 500
    assert resp.json() == {"success": False, "message": "Failed to fetch guest data"}


def test_custom_authenticator_is_used(settings):
    class AllowAll:
        def authenticate(self, token):
            return True

    with TestClient(create_app(settings, authenticator=AllowAll())) as client:
        resp = client.get("/api/guests")

    assert resp.status_code == 200
    assert resp.json()["count"] == 0
