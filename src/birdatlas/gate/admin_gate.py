"""Admin permission gate.

The gate decides whether admin-only actions are offered. It is a finite state
machine with a single transition function so it can be exercised without a
UI:

    checking --no identity-----------------> unauthenticated
    checking --admin confirmed-------------> authenticated_admin
    checking --admin denied / check failed-> authenticated_non_admin
    any      --identity changed------------> checking

A failed admin check never grants admin. Results of a check issued for an
identity that has since changed are discarded.
"""

import logging
from collections.abc import Callable

from birdatlas.actor.interface import Actor
from birdatlas.gate.models import GateEvent, GateState, Identity

logger = logging.getLogger(__name__)


def transition(state: GateState, event: GateEvent) -> GateState:
    """Return the state that follows ``state`` on ``event``."""
    if event is GateEvent.IDENTITY_CHANGED:
        return GateState.CHECKING
    if event is GateEvent.NO_IDENTITY:
        return GateState.UNAUTHENTICATED
    if state is not GateState.CHECKING:
        # Check outcomes only apply to a pending check
        return state
    if event is GateEvent.ADMIN_CONFIRMED:
        return GateState.AUTHENTICATED_ADMIN
    return GateState.AUTHENTICATED_NON_ADMIN


class AdminGate:
    """Async-resolved admin status for the current identity."""

    def __init__(self) -> None:
        self.state = GateState.CHECKING
        self._generation = 0
        self._listeners: list[Callable[[GateState], None]] = []

    @property
    def is_admin(self) -> bool:
        return self.state is GateState.AUTHENTICATED_ADMIN

    @property
    def is_resolved(self) -> bool:
        return self.state.is_terminal

    def subscribe(self, listener: Callable[[GateState], None]) -> Callable[[], None]:
        """Register a listener for state changes.

        Returns:
            A function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def evaluate(self, identity: Identity | None, actor: Actor | None) -> GateState:
        """Re-evaluate admin status after an identity or actor change.

        Without an identity the gate resolves to ``unauthenticated`` at once.
        With an identity but no actor the gate stays ``checking`` until it is
        evaluated again with one.
        """
        self._generation += 1
        generation = self._generation
        self._apply(GateEvent.IDENTITY_CHANGED)

        if identity is None:
            self._apply(GateEvent.NO_IDENTITY)
            return self.state
        if actor is None:
            return self.state

        try:
            result = await actor.is_caller_admin()
        except Exception as e:
            logger.warning(
                "Admin check failed; treating caller as non-admin",
                extra={"principal": identity.principal, "error": str(e)},
            )
            event = GateEvent.CHECK_FAILED
        else:
            event = GateEvent.ADMIN_CONFIRMED if result is True else GateEvent.ADMIN_DENIED

        if generation != self._generation:
            logger.debug("Discarded admin check for a superseded identity")
            return self.state

        self._apply(event)
        return self.state

    def _apply(self, event: GateEvent) -> None:
        new_state = transition(self.state, event)
        if new_state is self.state:
            return
        logger.debug("Admin gate %s -> %s on %s", self.state, new_state, event)
        self.state = new_state
        for listener in list(self._listeners):
            listener(new_state)
