# tests/conftest.py
import os

# Settings read the environment at import time: keep the test run off the
# filesystem before anything from the package is imported.
os.environ.setdefault("LOG_DIR", "")
os.environ.setdefault("DATABASE_URL", ":memory:")
os.environ.setdefault("APP_ENV", "test")

from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient

from guest_registry_api.app.core.config import Settings
from guest_registry_api.app.main import create_app

ADMIN_TOKEN = "test-admin-token"


def years_ago(years: int) -> str:
    """ISO birth date for someone about ``years`` and a half years old."""
    today = date.today()
    born = date(today.year - years, today.month, 1) - timedelta(days=182)
    return born.isoformat()


@pytest.fixture
def public_dir(tmp_path):
    public = tmp_path / "public"
    public.mkdir()
    (public / "index.html").write_text("<html><body>guest registry</body></html>", encoding="utf-8")
    (public / "app.js").write_text("console.log('spa');", encoding="utf-8")
    return public


@pytest.fixture
def settings(public_dir):
    return Settings(
        environment="test",
        log_dir="",
        database_url=":memory:",
        admin_token=ADMIN_TOKEN,
        public_dir=str(public_dir),
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def valid_payload():
    return {
        "fullName": "Asha Rao",
        "dateOfBirth": "2000-05-01",
        "idNumber": "1234567890",
        "admNo": "ADM-001",
    }
