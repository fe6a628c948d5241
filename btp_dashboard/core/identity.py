"""Authenticated identity context and its change notifications."""
from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class UserContext:
    """Runtime context binding operations to the authenticated user."""

    user_id: str
    email: str


IdentityListener = Callable[[UserContext | None], Awaitable[None]]


class IdentityState:
    """Current identity of a client, notifying listeners when it changes.

    Controllers receive the identity explicitly through their
    ``on_identity_change`` coroutine instead of reading it from a global.
    """

    def __init__(self, identity: UserContext | None = None) -> None:
        self._identity = identity
        self._listeners: list[IdentityListener] = []

    @property
    def current(self) -> UserContext | None:
        return self._identity

    def subscribe(self, listener: IdentityListener) -> Callable[[], None]:
        """Register ``listener`` and return a callable removing it again."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def set(self, identity: UserContext | None) -> None:
        if identity == self._identity:
            return
        self._identity = identity
        logger.debug("Identity changed to %s", identity.user_id if identity else None)
        for listener in list(self._listeners):
            await listener(identity)
