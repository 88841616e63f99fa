"""Session lifecycle: identity, actor handle, query cache and admin gate.

A session owns one query cache. The cache is populated on the first read of
each key and cleared whenever the identity changes or the session ends, so no
cached data or admin status carries over from one principal to the next.
"""

import logging
from collections.abc import Callable

from birdatlas.actor.interface import Actor
from birdatlas.cache.query_cache import QueryCache
from birdatlas.errors import ActorNotReadyError
from birdatlas.gate.admin_gate import AdminGate
from birdatlas.gate.models import GateState, Identity

logger = logging.getLogger(__name__)

ActorFactory = Callable[[Identity | None], Actor]


class Session:
    """Binds an identity to an actor, a query cache and an admin gate."""

    def __init__(
        self,
        actor_factory: ActorFactory,
        cache: QueryCache | None = None,
        gate: AdminGate | None = None,
    ) -> None:
        """Initialize the session.

        Args:
            actor_factory: Builds an actor acting on behalf of an identity
                (or anonymously for None)
            cache: Query cache owned by this session
            gate: Admin gate owned by this session
        """
        self.actor_factory = actor_factory
        self.cache = cache or QueryCache()
        self.gate = gate or AdminGate()
        self.identity: Identity | None = None
        self.actor: Actor | None = None

    @property
    def actor_ready(self) -> bool:
        return self.actor is not None

    @property
    def identity_ready(self) -> bool:
        return self.actor is not None and self.identity is not None

    @property
    def principal(self) -> str | None:
        return self.identity.principal if self.identity else None

    def require_actor(self, operation: str = "") -> Actor:
        """Return the actor or raise if the session has not started."""
        if self.actor is None:
            raise ActorNotReadyError(operation)
        return self.actor

    async def start(self, identity: Identity | None = None) -> GateState:
        """Open the session, anonymously unless an identity is given."""
        return await self._switch(identity)

    async def login(self, identity: Identity) -> GateState:
        """Switch the session to a signed-in identity."""
        if self.actor is not None and identity == self.identity:
            return self.gate.state
        logger.info("Session login", extra={"principal": identity.principal})
        return await self._switch(identity)

    async def logout(self) -> GateState:
        """Drop the identity and continue anonymously."""
        logger.info("Session logout", extra={"principal": self.principal})
        return await self._switch(None)

    async def close(self) -> None:
        """End the session and release the actor."""
        self.cache.clear()
        await self._stop_actor()
        self.identity = None
        await self.gate.evaluate(None, None)

    async def _switch(self, identity: Identity | None) -> GateState:
        self.cache.clear()
        await self._stop_actor()
        self.identity = identity
        self.actor = self.actor_factory(identity)
        await self.actor.start()
        return await self.gate.evaluate(identity, self.actor)

    async def _stop_actor(self) -> None:
        if self.actor is not None:
            actor, self.actor = self.actor, None
            await actor.stop()
