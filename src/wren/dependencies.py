"""Hierarchical dependency scopes.

A ``Dependencies`` node maps a type to either an instance or a factory and
optionally points at a parent node. Resolution checks the local bindings
first, then walks up the parents, so a binding in a child shadows the
parent's for as long as the child lives.

The process keeps one root scope; the router creates a child per request
and drops it when the request finishes::

    root = Dependencies()
    root.register(MemoryCache())
    root.register_factory(Clock, lambda _: SystemClock()).as_singleton()

    request_scope = root.child()
    request_scope.register(user, as_type=User)
    request_scope.resolve(MemoryCache)   # found in the root
    request_scope.resolve(User)          # only visible in this request

Thread safety:
    Registration is expected to finish before traffic starts. After that,
    ``resolve`` only reads dicts, so concurrent requests need no locking.
    The one write at resolve time, caching a singleton factory's instance,
    uses a Lock with a double check so exactly one instance is built.
"""

from __future__ import annotations

import inspect
import logging
import threading
from collections.abc import Callable
from typing import Any, Protocol, cast

from wren.errors import MissingDependency

_logger = logging.getLogger("wren.dependencies")

_UNSET: Any = object()


class Resolver(Protocol):
    """Read-only view of a scope, handed to factories."""

    def resolve[T](self, cls: type[T]) -> T | None: ...

    def resolve_required[T](self, cls: type[T]) -> T: ...


class DependencyProvider(Protocol):
    """Anything that can hand out the root scope (application bootstrap)."""

    @property
    def dependencies(self) -> Dependencies: ...


class DependencyEntry[T]:
    """Handle for a factory binding returned by ``register_factory``.

    By default the factory runs on every resolve. ``as_singleton()`` makes
    it run once; the instance is cached in the scope that declared it.
    """

    __slots__ = ("_instance", "_lock", "factory", "owner", "singleton")

    def __init__(self, owner: Dependencies, factory: Callable[[Resolver], T]) -> None:
        self.owner = owner
        self.factory = factory
        self.singleton = False
        self._instance: Any = _UNSET
        self._lock = threading.Lock()

    def as_singleton(self) -> DependencyEntry[T]:
        """Build the instance once and reuse it for every later resolve."""
        self.singleton = True
        return self

    def get(self, requester: Dependencies) -> T:
        if not self.singleton:
            return self.factory(requester)
        if self._instance is not _UNSET:
            return cast(T, self._instance)
        with self._lock:
            if self._instance is _UNSET:
                self._instance = self.factory(self.owner)
        return cast(T, self._instance)


class _Instance:
    __slots__ = ("value",)

    def __init__(self, value: Any) -> None:
        self.value = value

    def get(self, requester: Dependencies) -> Any:  # noqa: ARG002
        return self.value


class Dependencies:
    """A dependency scope: local type bindings plus an optional parent.

    Implements ``Resolver`` and ``DependencyProvider``.
    """

    __slots__ = ("_bindings", "_logger", "parent")

    def __init__(
        self,
        parent: Dependencies | None = None,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self.parent = parent
        self._bindings: dict[object, _Instance | DependencyEntry[Any]] = {}
        if logger is None:
            logger = parent._logger if parent is not None else _logger
        self._logger = logger

    def __repr__(self) -> str:
        names = ", ".join(getattr(k, "__qualname__", repr(k)) for k in self._bindings)
        return f"<Dependencies [{names}] parent={'yes' if self.parent else 'no'}>"

    def __contains__(self, cls: object) -> bool:
        scope: Dependencies | None = self
        while scope is not None:
            if cls in scope._bindings:
                return True
            scope = scope.parent
        return False

    @property
    def dependencies(self) -> Dependencies:
        """This scope, so a bare ``Dependencies`` works as a provider."""
        return self

    # -- Registration --

    def register(self, instance: object, *, as_type: type | None = None) -> None:
        """Bind *instance* for the lifetime of this scope.

        The key is *as_type* when given (use it to bind under a protocol or
        base class), otherwise ``type(instance)``.
        """
        key = as_type if as_type is not None else type(instance)
        self._logger.debug("Registering instance for %s", getattr(key, "__qualname__", key))
        self._bindings[key] = _Instance(instance)

    def register_factory[T](
        self,
        as_type: type[T],
        factory: Callable[[Resolver], T] | Callable[[], T],
    ) -> DependencyEntry[T]:
        """Bind a factory for *as_type*; it runs on every resolve.

        *factory* may take no arguments, or one: the ``Resolver`` to pull
        its own collaborators from. Call ``.as_singleton()`` on the returned
        entry to build the instance only once.
        """
        entry = DependencyEntry(self, _accepting_resolver(factory))
        self._bindings[as_type] = entry
        return entry

    # -- Resolution --

    def resolve[T](self, cls: type[T]) -> T | None:
        """The instance bound for *cls* here or in a parent, else ``None``."""
        scope: Dependencies | None = self
        while scope is not None:
            binding = scope._bindings.get(cls)
            if binding is not None:
                return cast(T, binding.get(self))
            scope = scope.parent
        return None

    def resolve_required[T](self, cls: type[T]) -> T:
        """Like ``resolve`` but raises ``MissingDependency`` when unbound.

        Meant for internal wiring that cannot work without the binding.
        """
        result = self.resolve(cls)
        if result is None:
            self._logger.critical("Could not resolve required instance %r", cls)
            raise MissingDependency(cls)
        return result

    # -- Scoping --

    def child(self) -> Dependencies:
        """A new, empty scope whose parent is this one. O(1), no copying."""
        return Dependencies(self, logger=self._logger)


def _accepting_resolver[T](
    factory: Callable[[Resolver], T] | Callable[[], T],
) -> Callable[[Resolver], T]:
    """Normalize zero-argument factories to the one-argument form."""

    try:
        params = inspect.signature(factory).parameters
    except (TypeError, ValueError):
        return cast(Callable[[Resolver], T], factory)

    required = [
        p
        for p in params.values()
        if p.default is inspect.Parameter.empty
        and p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
    ]
    if required or any(p.kind is inspect.Parameter.VAR_POSITIONAL for p in params.values()):
        return cast(Callable[[Resolver], T], factory)

    zero_arg = cast(Callable[[], T], factory)
    return lambda _resolver: zero_arg()
