"""Data Access Gateway capability.

The session, dispatcher and rover layers only ever talk to this protocol.
``HttpGateway`` is the production adapter; tests substitute mocks.
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol, Sequence, runtime_checkable

Record = dict[str, Any]


@runtime_checkable
class DataGateway(Protocol):
    """CRUD/query access to entity collections plus the auth sub-API."""

    async def probe(self) -> bool:
        """Return True when the backend is reachable."""
        ...

    async def find(
        self,
        collection: str,
        filter: Mapping[str, Any] | None = None,
        relations: Sequence[str] | None = None,
        limit: int | None = None,
    ) -> list[Record]:
        """Exact-match query; ``relations`` names sibling entities to attach."""
        ...

    async def create(self, collection: str, fields: Mapping[str, Any]) -> Record:
        ...

    async def update(self, collection: str, record_id: Any, fields: Mapping[str, Any]) -> Record:
        """Partial update. Returns the record as stored by the backend."""
        ...

    async def login(self, email: str, password: str) -> None:
        ...

    async def logout(self) -> None:
        ...

    async def signup(self, collection: str, fields: Mapping[str, Any]) -> None:
        ...

    async def current_identity(self) -> Record:
        """Return the authenticated user record.

        Raises:
            NoActiveSessionError: If there is no session to resolve.
        """
        ...
