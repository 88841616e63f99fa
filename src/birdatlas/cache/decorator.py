"""Decorators registering service methods on the query cache.

``@cached_query`` turns a fetcher method into a keyed read and
``@invalidates`` turns a write method into a mutation with a declared
invalidation set. The decorated object must expose ``cache`` (a
:class:`~birdatlas.cache.query_cache.QueryCache`), ``actor_ready``,
``identity_ready``, ``principal`` and ``require_actor(operation)``.
"""

from collections.abc import Callable
from functools import wraps
from typing import Any

from birdatlas.cache.query_cache import QueryResult


def cached_query(
    namespace: str, require_args: bool = True, requires_identity: bool = False
) -> Callable:
    """Cache a read method under ``(namespace, *args)``.

    The decorated method becomes a coroutine returning a
    :class:`QueryResult`. The read is disabled (loading, no call) while the
    actor is not ready and, when ``require_args`` is set, while any argument
    is empty.

    Args:
        namespace: Key namespace, also used for invalidation
        require_args: Disable the query while an argument is falsy
        requires_identity: Disable the query until an identity is signed in,
            and key it by principal as ``(namespace, principal, *args)``

    Example:
        @cached_query(keys.BIRD_DETAILS)
        async def get_bird_details(self, bird_name):
            return await self.actor.get_bird_details(bird_name)
    """

    def key_for(obj: Any, args: tuple[Any, ...]) -> tuple[Any, ...]:  # noqa: ANN401
        if requires_identity:
            return (namespace, obj.principal, *args)
        return (namespace, *args)

    def enabled_for(obj: Any, args: tuple[Any, ...]) -> bool:  # noqa: ANN401
        if not obj.actor_ready:
            return False
        if require_args and not all(args):
            return False
        if requires_identity and not obj.identity_ready:
            return False
        return True

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(self: Any, *args: Any) -> QueryResult:  # noqa: ANN401
            async def fetch() -> Any:  # noqa: ANN401
                return await func(self, *args)

            return await self.cache.query(
                key_for(self, args), fetch, enabled=enabled_for(self, args)
            )

        wrapper.namespace = namespace  # type: ignore[attr-defined]
        wrapper.fetcher = func  # type: ignore[attr-defined]
        wrapper.key_for = key_for  # type: ignore[attr-defined]
        wrapper.enabled_for = enabled_for  # type: ignore[attr-defined]
        return wrapper

    return decorator


def invalidates(*namespaces: str, validate: Callable[..., None] | None = None) -> Callable:
    """Run a write method as a mutation invalidating ``namespaces`` on success.

    ``validate`` receives the same arguments as the method and raises
    :class:`~birdatlas.errors.ValidationFailure` before anything reaches the
    cache or the network. A missing actor raises
    :class:`~birdatlas.errors.ActorNotReadyError` at the same point.
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:  # noqa: ANN401
            if validate is not None:
                validate(*args, **kwargs)
            self.require_actor(func.__name__)

            async def run() -> Any:  # noqa: ANN401
                return await func(self, *args, **kwargs)

            return await self.cache.mutate(run, invalidates=namespaces)

        wrapper.invalidates = namespaces  # type: ignore[attr-defined]
        return wrapper

    return decorator
