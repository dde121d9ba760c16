"""
Application context shared by all requests.

``create_app`` builds one ``AppContext`` and stores it on
``app.state.context``.  Endpoints receive it through the ``get_context``
dependency instead of importing module-level singletons, which lets
tests substitute the store or the authenticator.
"""

import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import psutil
from fastapi import Request

from .config import Settings
from .db import GuestStore

if TYPE_CHECKING:
    from .security import AdminAuthenticator
    from ..services.guest_service import GuestService


@dataclass
class AppContext:
    settings: Settings
    store: GuestStore
    authenticator: "AdminAuthenticator"
    guests: "GuestService"
    # Epoch seconds at which the current process started.
    started_at: float = field(default_factory=lambda: psutil.Process().create_time())

    @property
    def uptime(self) -> int:
        """Seconds since the process started."""
        return max(0, int(time.time() - self.started_at))


def get_context(request: Request) -> AppContext:
    return request.app.state.context
