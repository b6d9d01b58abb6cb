"""Billing analytics API client.

A small wrapper around the backend's REST endpoints built on the
``requests`` library.  It is meant for scripts, dashboards and other
services that need bill data without dealing with HTTP details.

The client exposes one method per endpoint:

* :meth:`list_bills` – every bill plus summary statistics.
* :meth:`add_bill` – store a new bill.
* :meth:`compare` – compare a bill against bills from the same
  provider and city.
* :meth:`health` – check whether the backend and its store are up.

Every method returns a tuple ``(data, error)``.  On success ``error``
is ``None``; on failure ``data`` is ``None`` and ``error`` is a
dictionary with ``status_code`` and ``message`` keys.  Network
problems never raise.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

import requests


logger = logging.getLogger(__name__)

Result = Tuple[Optional[Any], Optional[Dict[str, Any]]]


class BillingAPI:
    """Client for the billing analytics backend."""

    def __init__(
        self,
        *,
        base_url: str,
        api_prefix: str = "/api",
        session: Optional[requests.Session] = None,
        timeout: float = 15,
    ) -> None:
        """Initialise the API client.

        Args:
            base_url: Base URL of the backend, e.g. ``http://localhost:8080``.
            api_prefix: Path prefix the API is mounted under.
            session: Optional requests session.  If not supplied a
                session will be created automatically.
            timeout: Per-request timeout in seconds.
        """
        self.base_url = base_url.rstrip("/")
        self.api_prefix = "/" + api_prefix.strip("/") if api_prefix.strip("/") else ""
        self.session = session or requests.Session()
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Low level HTTP helpers
    # ------------------------------------------------------------------
    def _request(
        self, method: str, path: str, *, params: Dict[str, Any] | None = None,
        json_body: Any | None = None
    ) -> Result:
        """Perform an HTTP request to the API.

        Args:
            method: HTTP method (``GET`` or ``POST``).
            path: Path relative to :attr:`base_url` (e.g. ``/api/bills``).
            params: Query parameters to include in the request.
            json_body: JSON body to send with the request.
        Returns:
            A tuple ``(data, error)``.
        """
        url = f"{self.base_url}{path}"
        try:
            logger.debug("Sending %s request to %s", method, url)
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                json=json_body,
                timeout=self.timeout,
            )
            response.raise_for_status()
            if response.content:
                return response.json(), None
            return None, None
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            message = ""
            if exc.response is not None:
                try:
                    err_json = exc.response.json()
                    message = err_json.get("message") or err_json.get("detail") or str(err_json)
                except ValueError:
                    message = exc.response.text
            if not message:
                message = str(exc)
            logger.error("API request failed (%s): %s", status, message)
            return None, {"status_code": status, "message": message}
        except requests.RequestException as exc:
            logger.error("API request failed: %s", exc)
            return None, {"status_code": None, "message": str(exc)}

    # ------------------------------------------------------------------
    # Bill operations
    # ------------------------------------------------------------------
    def list_bills(self) -> Result:
        """Retrieve all bills together with ``summary`` and ``providerCounts``."""
        return self._request("GET", f"{self.api_prefix}/bills")

    def add_bill(self, payload: Dict[str, Any]) -> Result:
        """Store a new bill.

        Args:
            payload: Bill fields; ``provider``, ``totalAmount`` and
                ``unitsConsumed`` are required by the backend.
        Returns:
            A tuple ``(result, error)`` where ``result`` holds
            ``message`` and ``insertedId``.
        """
        return self._request("POST", f"{self.api_prefix}/bills", json_body=payload)

    def compare(self, provider: str, city: str, units: Any, amount: Any) -> Result:
        """Compare a bill with stored bills from the same provider and city."""
        params = {"provider": provider, "city": city, "units": units, "amount": amount}
        return self._request("GET", f"{self.api_prefix}/compare", params=params)

    def health(self) -> Result:
        return self._request("GET", "/health")
