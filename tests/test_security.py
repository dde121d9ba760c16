# tests/test_security.py
import pytest

from guest_registry_api.app.core.security import AdminAuthenticator, StaticTokenAuthenticator


@pytest.mark.parametrize(
    "secret, token, expected",
    [
        ("s3cret", "s3cret", True),
        ("s3cret", "S3CRET", False),
        ("s3cret", "s3cret ", False),
        ("s3cret", None, False),
        ("s3cret", "", False),
        ("", "", False),
        ("", None, False),
    ],
)
def test_static_token_authenticator(secret, token, expected):
    assert StaticTokenAuthenticator(secret).authenticate(token) is expected


def test_authenticator_interface_cannot_be_instantiated():
    with pytest.raises(TypeError):
        AdminAuthenticator()
