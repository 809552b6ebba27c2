"""
State container base

A container mirrors one server-side collection for the current credential.
Every successful mutation is followed by a full refetch; nothing is patched
locally. Containers refetch when the identity channel fires and when another
tab changes the stored bearer token.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from pydantic import ValidationError

from ..core.errors import OperationResult, StorefrontError, error_message
from ..core.events import IdentityChannel, Subscription
from ..core.storage import StorageEvent, StorageSubscription
from .api_client import StorefrontAPIClient

logger = logging.getLogger(__name__)


class StateContainer:
    """Shared lifecycle and mutation protocol for cart and wishlist"""

    name = "state"

    def __init__(self, api: StorefrontAPIClient, channel: IdentityChannel):
        self.api = api
        self.session = api.session
        self.channel = channel
        # fetches in flight; overlapping fetches each hold one count
        self._inflight = 0
        # bumped on every identity change; older fetches are discarded
        self._generation = 0
        # keys with a call in flight; the UI disables their controls
        self.pending: set[str] = set()
        self._identity_subscription: Optional[Subscription] = None
        self._storage_subscription: Optional[StorageSubscription] = None
        self._closed = False
        self._tasks: set[asyncio.Task] = set()

    # ==================== Lifecycle ====================

    @property
    def started(self) -> bool:
        return self._identity_subscription is not None

    async def start(self) -> OperationResult:
        """Subscribe to identity changes and load the initial state"""
        self._closed = False
        if self._identity_subscription is None:
            self._identity_subscription = self.channel.subscribe(self._on_identity_change)
        if self._storage_subscription is None:
            self._storage_subscription = self.session.durable.subscribe(
                self._on_storage_change,
                tab_id=self.session.tab_id,
            )
        return await self.fetch()

    def close(self) -> None:
        """Unsubscribe; results of calls still in flight are discarded"""
        self._closed = True
        if self._identity_subscription is not None:
            self._identity_subscription.unsubscribe()
            self._identity_subscription = None
        if self._storage_subscription is not None:
            self._storage_subscription.unsubscribe()
            self._storage_subscription = None

    @property
    def loading(self) -> bool:
        return self._inflight > 0

    async def _on_identity_change(self) -> OperationResult:
        self._generation += 1
        return await self.fetch()

    def _on_storage_change(self, event: StorageEvent) -> None:
        if event.key != self.session.config.token_key:
            return
        self._generation += 1
        logger.info(f"Credential changed in another tab; refreshing {self.name}")
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(f"No running event loop; {self.name} refresh skipped")
            return
        task = loop.create_task(self.fetch())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def wait_for_refresh(self) -> None:
        """Wait for refreshes triggered by other tabs"""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # ==================== Fetch ====================

    async def _load(self) -> Any:
        """Request and parse the collection"""
        raise NotImplementedError

    def _apply(self, data: Any) -> None:
        raise NotImplementedError

    def _apply_empty(self) -> None:
        raise NotImplementedError

    def _is_current(self, generation: int) -> bool:
        return not self._closed and generation == self._generation

    async def fetch(self) -> OperationResult:
        """
        Replace local state with the server's.

        Any failure leaves an empty collection rather than stale data. A
        response that arrives after an identity change (login, logout, a
        token change in another tab) or after close() is dropped: it was
        requested under a credential the tab no longer holds.
        """
        generation = self._generation
        self._inflight += 1
        try:
            data = await self._load()
        except (StorefrontError, ValidationError) as e:
            logger.error(f"Fetch {self.name} error: {e}")
            if self._is_current(generation):
                self._apply_empty()
            return OperationResult.fail(f"Failed to load {self.name}")
        finally:
            self._inflight -= 1

        if not self._is_current(generation):
            logger.debug(f"Discarding {self.name} response from a previous identity")
            return OperationResult.fail(f"Discarded stale {self.name}")
        self._apply(data)
        return OperationResult.ok()

    # ==================== Mutations ====================

    async def _mutate(
        self,
        key: str,
        call: Callable[[], Awaitable[Any]],
        fallback_error: str,
    ) -> OperationResult:
        """Run one API mutation, then refetch on success"""
        self.pending.add(key)
        try:
            try:
                await call()
            except StorefrontError as e:
                logger.warning(f"{fallback_error}: {e}")
                return OperationResult.fail(error_message(e, fallback_error))

            if not self._closed:
                await self.fetch()
            return OperationResult.ok()
        finally:
            self.pending.discard(key)

    def is_pending(self, key: str) -> bool:
        return key in self.pending

    def reset(self) -> None:
        """Drop all local state (logout); fetches still in flight are ignored"""
        self._generation += 1
        for task in list(self._tasks):
            task.cancel()
        self.pending.clear()
        self._apply_empty()
