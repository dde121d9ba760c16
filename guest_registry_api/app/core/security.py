"""
Admin authentication helpers.

Admin endpoints are protected by an ``AdminAuthenticator``.  The only
implementation today, ``StaticTokenAuthenticator``, compares the
``X-Admin-Token`` header with a shared secret from the settings using a
constant‑time comparison.  Other schemes (JWT, API key store) can be
added by implementing ``authenticate`` and passing the instance to
``create_app``.
"""

import hmac
import logging
from abc import ABC, abstractmethod
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import APIKeyHeader

from .context import AppContext, get_context

logger = logging.getLogger(__name__)

ADMIN_TOKEN_HEADER = "X-Admin-Token"

admin_token_header = APIKeyHeader(name=ADMIN_TOKEN_HEADER, auto_error=False)


class AdminAuthenticator(ABC):
    """Decides whether a request carries valid admin credentials."""

    @abstractmethod
    def authenticate(self, token: Optional[str]) -> bool:
        """Return ``True`` if ``token`` grants admin access."""


class StaticTokenAuthenticator(AdminAuthenticator):
    """Accepts exactly one shared secret.

    An empty configured secret disables admin access entirely.
    """

    def __init__(self, secret: str):
        self._secret = secret or ""

    def authenticate(self, token: Optional[str]) -> bool:
        if not self._secret or not token:
            return False
        return hmac.compare_digest(token.encode("utf-8"), self._secret.encode("utf-8"))


def require_admin(
    request: Request,
    token: Optional[str] = Depends(admin_token_header),
    context: AppContext = Depends(get_context),
) -> None:
    """Dependency that rejects requests without a valid admin token.

    Raises an HTTP 403 error on mismatch.
    """
    if not context.authenticator.authenticate(token):
        client = request.client.host if request.client else None
        logger.warning("Rejected admin request from %s to %s", client, request.url.path)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden: Invalid or missing admin token",
        )
