"""Per-user list sessions."""

import asyncio
import logging
from dataclasses import dataclass, field

from ingredient_lists.adapters.backend_gateway import BackendGateway
from ingredient_lists.domain.errors import OperationResult
from ingredient_lists.domain.models import UserCredential
from ingredient_lists.services.cache import InMemoryCache
from ingredient_lists.services.lists import ListService

_logger = logging.getLogger(__name__)

_Loaded = tuple[ListService | None, OperationResult]


@dataclass
class ListSessionRegistry:
    """Keeps one loaded :class:`ListService` per access token.

    Sessions expire ``ttl_seconds`` after they were loaded; the next request
    for that token loads a fresh mirror from the backend. Expired sessions
    are purged whenever a new one is stored, so rotated tokens do not pile up.
    """

    gateway: BackendGateway
    compensation_attempts: int = 3
    ttl_seconds: int = 900
    sessions: InMemoryCache = field(default_factory=InMemoryCache, repr=False)
    _pending: dict[str, "asyncio.Future[_Loaded]"] = field(
        default_factory=dict, repr=False
    )

    async def get(self, credential: UserCredential) -> _Loaded:
        """Return the user's session, loading it on first use.

        Loads for one token never wait on another token. Concurrent first
        requests for the same token share a single load, and a failed load
        is not kept, so the next call retries the fetch.
        """
        token = credential.access_token
        existing = self._cached(token)
        if existing is not None:
            return existing, OperationResult.success()
        pending = self._pending.get(token)
        if pending is None:
            pending = asyncio.ensure_future(self._load(credential))
            self._pending[token] = pending
            pending.add_done_callback(lambda _: self._pending.pop(token, None))
        return await asyncio.shield(pending)

    def drop(self, credential: UserCredential) -> bool:
        """Forget the user's session."""
        present = self._cached(credential.access_token) is not None
        self.sessions.delete(credential.access_token)
        return present

    def __len__(self) -> int:
        return len(self.sessions)

    async def _load(self, credential: UserCredential) -> _Loaded:
        service = ListService(
            gateway=self.gateway,
            credential=credential,
            compensation_attempts=self.compensation_attempts,
        )
        loaded = await service.load()
        if not loaded:
            return None, loaded
        purged = self.sessions.purge_expired()
        if purged:
            _logger.info("Expired %s list sessions", purged)
        self.sessions.set(credential.access_token, service, self.ttl_seconds)
        return service, loaded

    def _cached(self, token: str) -> ListService | None:
        cached = self.sessions.get(token)
        return cached if isinstance(cached, ListService) else None
