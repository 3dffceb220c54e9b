"""HTTP adapter for the Data Access Gateway.

Speaks the backend's REST dialect::

    GET    /api/health
    GET    /api/collections/<collection>?<field>_eq=<value>&relations=a,b&perPage=n
    POST   /api/collections/<collection>
    PATCH  /api/collections/<collection>/<id>
    POST   /api/auth/user/login
    POST   /api/auth/<collection>/signup
    GET    /api/auth/user/me

Transport failures are translated into the client's error taxonomy here so
nothing above this module needs to know about httpx.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence

import httpx

from moondash.errors import (
    AuthenticationError,
    ConnectivityError,
    NoActiveSessionError,
    QueryFailure,
    ValidationError,
)

from .auth import TokenStore
from .base import Record

logger = logging.getLogger(__name__)

AUTH_ENTITY = "user"


def _error_detail(response: httpx.Response) -> str:
    """Extract a human-readable message from an error response."""
    try:
        data = response.json()
    except ValueError:
        return f"HTTP {response.status_code}"

    if isinstance(data, dict):
        message = data.get("message") or data.get("detail") or data.get("error")
        if isinstance(message, list):
            return "; ".join(str(item) for item in message)
        if message:
            return str(message)
    return f"HTTP {response.status_code}"


def _encode_filter(filter: Mapping[str, Any]) -> list[tuple[str, str]]:
    params = []
    for field_name, value in filter.items():
        if isinstance(value, bool):
            value = "true" if value else "false"
        params.append((f"{field_name}_eq", str(value)))
    return params


class HttpGateway:
    """Async gateway client backed by ``httpx.AsyncClient``."""

    def __init__(
        self,
        base_url: str,
        token_store: Optional[TokenStore] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.token_store = token_store or TokenStore()
        self._client = client
        self._timeout = timeout

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def aclose(self):
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
        return False

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _auth_headers(self) -> dict[str, str]:
        token = self.token_store.get_token(self.base_url)
        if not token:
            return {}
        return {"Authorization": f"Bearer {token}"}

    async def _send(
        self,
        method: str,
        path: str,
        *,
        params: Any = None,
        json: Any = None,
    ) -> httpx.Response:
        client = self._get_client()
        try:
            return await client.request(
                method,
                self._url(path),
                params=params,
                json=json,
                headers=self._auth_headers(),
            )
        except httpx.RequestError as exc:
            raise QueryFailure(f"Cannot reach server: {exc}") from exc

    @staticmethod
    def _json_or_fail(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise QueryFailure("Invalid server response", response.status_code) from exc

    @staticmethod
    def _raise_for_mutation(response: httpx.Response, action: str) -> None:
        if response.status_code in (400, 422):
            raise ValidationError(_error_detail(response))
        if response.status_code >= 300:
            raise QueryFailure(
                f"{action} failed: {_error_detail(response)}", response.status_code
            )

    async def probe(self) -> bool:
        """Quick connectivity check, performed once at startup."""
        try:
            response = await self._get_client().get(self._url("/api/health"))
        except httpx.HTTPError as exc:
            logger.debug(f"Connectivity probe failed: {exc}")
            return False
        return 200 <= response.status_code < 300

    async def find(
        self,
        collection: str,
        filter: Mapping[str, Any] | None = None,
        relations: Sequence[str] | None = None,
        limit: int | None = None,
    ) -> list[Record]:
        params = _encode_filter(filter or {})
        if relations:
            params.append(("relations", ",".join(relations)))
        if limit is not None:
            params.append(("perPage", str(limit)))

        response = await self._send("GET", f"/api/collections/{collection}", params=params)
        if response.status_code != 200:
            raise QueryFailure(
                f"Query on '{collection}' failed: {_error_detail(response)}",
                response.status_code,
            )

        payload = self._json_or_fail(response)
        rows = payload.get("data", []) if isinstance(payload, dict) else payload
        if not isinstance(rows, list):
            raise QueryFailure("Invalid server response", response.status_code)
        return rows

    async def create(self, collection: str, fields: Mapping[str, Any]) -> Record:
        response = await self._send("POST", f"/api/collections/{collection}", json=dict(fields))
        self._raise_for_mutation(response, f"Create in '{collection}'")
        return self._json_or_fail(response)

    async def update(self, collection: str, record_id: Any, fields: Mapping[str, Any]) -> Record:
        response = await self._send(
            "PATCH", f"/api/collections/{collection}/{record_id}", json=dict(fields)
        )
        self._raise_for_mutation(response, f"Update of '{collection}/{record_id}'")
        return self._json_or_fail(response)

    async def login(self, email: str, password: str) -> None:
        """
        Authenticate with email/password and store the session token.

        Raises:
            AuthenticationError: If credentials are rejected or the server
                cannot be reached
        """
        client = self._get_client()
        try:
            response = await client.post(
                self._url(f"/api/auth/{AUTH_ENTITY}/login"),
                json={"email": email, "password": password},
            )
        except httpx.RequestError as exc:
            raise AuthenticationError(f"Cannot reach server: {exc}") from exc

        if response.status_code in (400, 401, 403):
            raise AuthenticationError("Invalid email or password")
        if response.status_code >= 300:
            raise AuthenticationError(f"Server error: {response.status_code}")

        try:
            token = response.json()["token"]
        except (ValueError, KeyError, TypeError) as exc:
            raise AuthenticationError("Invalid server response") from exc

        self.token_store.save(token=token, email=email, server_url=self.base_url)
        logger.debug("Session token stored")

    async def logout(self) -> None:
        """Discard the stored session token."""
        self.token_store.clear()

    async def signup(self, collection: str, fields: Mapping[str, Any]) -> None:
        client = self._get_client()
        try:
            response = await client.post(
                self._url(f"/api/auth/{collection}/signup"), json=dict(fields)
            )
        except httpx.RequestError as exc:
            raise AuthenticationError(f"Cannot reach server: {exc}") from exc

        if response.status_code in (400, 409, 422):
            raise ValidationError(_error_detail(response))
        if response.status_code in (401, 403):
            raise AuthenticationError(_error_detail(response))
        if response.status_code >= 300:
            raise AuthenticationError(f"Server error: {response.status_code}")

    async def current_identity(self) -> Record:
        if not self.token_store.get_token(self.base_url):
            raise NoActiveSessionError("No stored session")

        client = self._get_client()
        try:
            response = await client.get(
                self._url(f"/api/auth/{AUTH_ENTITY}/me"), headers=self._auth_headers()
            )
        except httpx.RequestError as exc:
            raise ConnectivityError(f"Cannot reach server: {exc}") from exc

        if response.status_code in (401, 403):
            raise NoActiveSessionError("Session expired")
        if response.status_code != 200:
            raise QueryFailure(
                f"Identity lookup failed: {_error_detail(response)}", response.status_code
            )
        return self._json_or_fail(response)
