"""Guest Registry API client.

This module defines a small client wrapper around the Guest Registry
REST API.  It uses the ``requests`` library and exposes one method per
operation:

* :meth:`GuestRegistryAPI.health` – fetch the health snapshot.
* :meth:`GuestRegistryAPI.register_guest` – submit a guest registration.
* :meth:`GuestRegistryAPI.list_guests` – list guests (needs the admin token).

Every method returns a tuple ``(data, error)``: on success ``error`` is
``None``; on failure ``data`` is empty and ``error`` is a dictionary
with ``status_code``, ``message`` and, for validation failures, the
server's ``errors`` list.

The module can also be run as a script::

    python guest_registry_client.py --base-url http://localhost:3000 health
    python guest_registry_client.py register "Asha Rao" 2000-05-01 1234567890 ADM-001
    ADMIN_TOKEN=... python guest_registry_client.py list
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import Any, Dict, List, Optional, Tuple

import requests


logger = logging.getLogger(__name__)

ADMIN_TOKEN_HEADER = "X-Admin-Token"


class GuestRegistryAPI:
    """Client for interacting with the guest registry API."""

    def __init__(
        self,
        *,
        base_url: str,
        admin_token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 15,
    ) -> None:
        """Initialise the API client.

        Args:
            base_url: Base URL of the server, e.g. ``http://localhost:3000``.
            admin_token: Shared secret sent as ``X-Admin-Token`` on admin calls.
            session: Optional requests session.  If not supplied a
                session will be created automatically.
            timeout: Per-request timeout in seconds.
        """
        self.base_url = base_url.rstrip("/")
        self.admin_token = admin_token
        self.session = session or requests.Session()
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Low level HTTP helpers
    # ------------------------------------------------------------------
    def _request(
        self,
        method: str,
        path: str,
        *,
        json_body: Any | None = None,
        admin: bool = False,
    ) -> Tuple[Optional[Any], Optional[Dict[str, Any]]]:
        """Perform an HTTP request to the API.

        Returns:
            A tuple ``(data, error)``. ``data`` contains the parsed JSON
            response on success and ``error`` is ``None``. On failure,
            ``data`` is ``None`` and ``error`` describes the issue.
        """
        url = f"{self.base_url}{path}"
        headers: Dict[str, str] = {}
        if admin and self.admin_token:
            headers[ADMIN_TOKEN_HEADER] = self.admin_token
        try:
            logger.debug("Sending %s request to %s", method, url)
            response = self.session.request(
                method=method,
                url=url,
                json=json_body,
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            if response.content:
                return response.json(), None
            return None, None
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            error: Dict[str, Any] = {"status_code": status, "message": ""}
            if exc.response is not None:
                try:
                    err_json = exc.response.json()
                    error["message"] = err_json.get("message") or err_json.get("detail") or str(err_json)
                    if err_json.get("errors"):
                        error["errors"] = err_json["errors"]
                except ValueError:
                    error["message"] = exc.response.text
            if not error["message"]:
                error["message"] = str(exc)
            logger.error("API request failed (%s): %s", status, error["message"])
            return None, error
        except requests.RequestException as exc:
            logger.error("API request failed: %s", exc)
            return None, {"status_code": None, "message": str(exc)}

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------
    def health(self) -> Tuple[Optional[Dict[str, Any]], Optional[Dict[str, Any]]]:
        """Return the server health snapshot."""
        return self._request("GET", "/api/health")

    def register_guest(
        self,
        full_name: str,
        date_of_birth: str,
        id_number: str,
        adm_no: str,
    ) -> Tuple[Optional[Dict[str, Any]], Optional[Dict[str, Any]]]:
        """Register a guest.

        Returns:
            A tuple ``(registration, error)`` where ``registration``
            holds ``guestId``, ``registeredAt`` and ``processingTime``.
        """
        payload = {
            "fullName": full_name,
            "dateOfBirth": date_of_birth,
            "idNumber": id_number,
            "admNo": adm_no,
        }
        data, error = self._request("POST", "/api/guests", json_body=payload)
        if error:
            return None, error
        return (data or {}).get("data"), None

    def list_guests(self) -> Tuple[List[Dict[str, Any]], Optional[Dict[str, Any]]]:
        """List registered guests (public fields only)."""
        data, error = self._request("GET", "/api/guests", admin=True)
        if error:
            return [], error
        if isinstance(data, dict) and isinstance(data.get("data"), list):
            return data["data"], None
        return [], None


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Guest Registry API client")
    parser.add_argument("--base-url", default=os.getenv("GUEST_REGISTRY_URL", "http://localhost:3000"))
    parser.add_argument("--admin-token", default=os.getenv("ADMIN_TOKEN"))
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("health", help="Show the server health snapshot")
    sub.add_parser("list", help="List registered guests (admin)")
    register = sub.add_parser("register", help="Register a guest")
    register.add_argument("full_name")
    register.add_argument("date_of_birth", help="YYYY-MM-DD")
    register.add_argument("id_number")
    register.add_argument("adm_no")
    args = parser.parse_args(argv)

    client = GuestRegistryAPI(base_url=args.base_url, admin_token=args.admin_token)
    if args.command == "health":
        result, error = client.health()
    elif args.command == "list":
        result, error = client.list_guests()
    else:
        result, error = client.register_guest(args.full_name, args.date_of_birth, args.id_number, args.adm_no)

    if error:
        print(json.dumps(error, indent=2, ensure_ascii=False), file=sys.stderr)
        return 1
    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
