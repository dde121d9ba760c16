# tests/test_store.py
import asyncio
from datetime import date, datetime, timezone

import pytest

from guest_registry_api.app.core.db import GuestStore, get_database_path
from guest_registry_api.app.core.errors import DuplicateRecordError, StoreUnavailableError
from guest_registry_api.app.schemas.guest import GuestRecord


def _record(guest_id="PC-1-A", id_number="1234567890", name="Asha Rao"):
    return GuestRecord(
        id=guest_id,
        full_name=name,
        date_of_birth=date(2000, 5, 1),
        id_number=id_number,
        adm_no="ADM-001",
        registered_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
        registered_from="127.0.0.1",
    )


def test_insert_and_find():
    async def scenario():
        store = GuestStore(":memory:")
        await store.connect()
        await store.insert(_record())
        found = await store.find_by_id_number("1234567890")
        missing = await store.find_by_id_number("0000000000")
        await store.close()
        return found, missing

    found, missing = asyncio.run(scenario())

    assert found == _record()
    assert found.status == "active"
    assert found.version == "1.0.0"
    assert missing is None


def test_unique_id_number_is_enforced():
    async def scenario():
        store = GuestStore(":memory:")
        await store.connect()
        await store.insert(_record())
        try:
            await store.insert(_record(guest_id="PC-2-B"))
        finally:
            await store.close()

    with pytest.raises(DuplicateRecordError):
        asyncio.run(scenario())


def test_list_all_in_registration_order():
    async def scenario():
        store = GuestStore(":memory:")
        await store.connect()
        await store.insert(_record("PC-1-A", "1111111111", "First"))
        await store.insert(_record("PC-2-B", "2222222222", "Second"))
        records = await store.list_all()
        await store.close()
        return records

    assert [r.full_name for r in asyncio.run(scenario())] == ["First", "Second"]


def test_operations_after_close_fail():
    async def scenario():
        store = GuestStore(":memory:")
        await store.connect()
        await store.close()
        await store.close()
        await store.find_by_id_number("1234567890")

    with pytest.raises(StoreUnavailableError):
        asyncio.run(scenario())


def test_file_database_survives_reconnect(tmp_path):
    path = tmp_path / "nested" / "guests.db"

    async def scenario():
        store = GuestStore(str(path))
        await store.connect()
        await store.insert(_record())
        await store.close()

        reopened = GuestStore(str(path))
        await reopened.connect()
        records = await reopened.list_all()
        await reopened.close()
        return records

    records = asyncio.run(scenario())
    assert path.exists()
    assert [r.id for r in records] == ["PC-1-A"]


def test_relative_paths_resolve_to_project_root():
    assert get_database_path(":memory:") == ":memory:"
    assert get_database_path("/tmp/guests.db") == "/tmp/guests.db"
    assert get_database_path("data/guests.db").endswith("data/guests.db")
