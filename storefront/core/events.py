"""Identity transition channel

Login and registration publish here; cart and wishlist containers subscribe
and refetch. The event carries no payload.
"""

import asyncio
import logging
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)

IdentityListener = Callable[[], Awaitable[object]]


class Subscription:
    """Handle for one channel subscriber"""

    def __init__(self, channel: "IdentityChannel", listener: IdentityListener):
        self._channel = channel
        self.listener = listener
        self.active = True

    def unsubscribe(self) -> None:
        """Stop receiving events; safe to call more than once"""
        if self.active:
            self.active = False
            self._channel._remove(self)


class IdentityChannel:
    """Observer list for identity transitions"""

    def __init__(self):
        self._subscriptions: list[Subscription] = []

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def subscribe(self, listener: IdentityListener) -> Subscription:
        subscription = Subscription(self, listener)
        self._subscriptions.append(subscription)
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    async def publish(self) -> None:
        """Notify every subscriber and wait for all of them"""
        subscriptions = list(self._subscriptions)
        logger.debug(f"Publishing identity transition to {len(subscriptions)} subscriber(s)")

        results = await asyncio.gather(
            *(s.listener() for s in subscriptions),
            return_exceptions=True,
        )
        for subscription, result in zip(subscriptions, results):
            if isinstance(result, Exception):
                logger.error(f"Identity subscriber {subscription.listener!r} failed: {result!r}")
