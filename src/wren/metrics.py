"""Counter metrics keyed by application-defined metric values.

An application lists what it counts as ``Metric`` values (an ``Enum`` is
the usual shape, since members already carry a ``name``) and increments
them through one ``Metrics`` facade registered in the root scope::

    class ApiMetric(Enum):
        USER_CREATED = auto()
        LOGIN_FAILED = auto()

    metrics = Metrics.from_factory(InMemoryMetricsFactory(), dimensions=[("service", "users")])
    app.dependencies.register(metrics)

    # in a middleware
    scope.resolve_required(Metrics).increment(ApiMetric.USER_CREATED)

The facade knows nothing about the metrics backend. It only maps a metric
to a ``Counter`` through ``counter_factory``; adapters for real backends
implement ``MetricsFactory``.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable, Sequence
from typing import Protocol, runtime_checkable

Dimensions = tuple[tuple[str, str], ...]


@runtime_checkable
class Counter(Protocol):
    """A monotonically increasing counter."""

    def increment(self, by: int = 1) -> None: ...


@runtime_checkable
class Metric(Protocol):
    """Something worth counting.

    ``extra_dimensions`` is optional on implementations; a metric without
    it has no dimensions of its own.
    """

    @property
    def name(self) -> str: ...


@runtime_checkable
class MetricsFactory(Protocol):
    """Hands out counters for a name plus (name, value) dimensions."""

    def counter(self, name: str, extra_dimensions: Sequence[tuple[str, str]] = ()) -> Counter: ...


def dimensions_of(metric: Metric) -> Dimensions:
    """The metric's own dimensions, empty when it declares none."""
    return tuple(getattr(metric, "extra_dimensions", ()))


class Metrics[T: Metric]:
    """Increments counters for metrics of one application-defined kind.

    Args:
        counter_factory: Returns the counter to bump for a metric. Called
            on every increment; caching counters is the factory's job.
    """

    __slots__ = ("_counter_factory",)

    def __init__(self, counter_factory: Callable[[T], Counter]) -> None:
        self._counter_factory = counter_factory

    @classmethod
    def from_factory(
        cls,
        factory: MetricsFactory,
        *,
        dimensions: Iterable[tuple[str, str]] = (),
    ) -> Metrics[T]:
        """Build a facade over *factory*.

        *dimensions* (environment, service name, ...) are appended to every
        metric's own dimensions.
        """
        shared = tuple(dimensions)
        return cls(lambda metric: factory.counter(metric.name, dimensions_of(metric) + shared))

    def increment(self, metric: T, by: int = 1) -> None:
        self._counter_factory(metric).increment(by)


class InMemoryCounter:
    """Thread-safe in-process counter."""

    __slots__ = ("_lock", "_value", "dimensions", "name")

    def __init__(self, name: str, dimensions: Dimensions = ()) -> None:
        self.name = name
        self.dimensions = dimensions
        self._value = 0
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"<InMemoryCounter {self.name!r} {self.dimensions!r} = {self._value}>"

    @property
    def value(self) -> int:
        return self._value

    def increment(self, by: int = 1) -> None:
        with self._lock:
            self._value += by


class InMemoryMetricsFactory:
    """``MetricsFactory`` that keeps counters in process.

    One counter exists per (name, dimensions) pair. Useful for development
    and for asserting on counts in tests.
    """

    __slots__ = ("_counters", "_lock")

    def __init__(self) -> None:
        self._counters: dict[tuple[str, Dimensions], InMemoryCounter] = {}
        self._lock = threading.Lock()

    def counter(
        self, name: str, extra_dimensions: Sequence[tuple[str, str]] = ()
    ) -> InMemoryCounter:
        key = (name, tuple(extra_dimensions))
        with self._lock:
            counter = self._counters.get(key)
            if counter is None:
                counter = InMemoryCounter(name, key[1])
                self._counters[key] = counter
            return counter

    def value(self, name: str, extra_dimensions: Sequence[tuple[str, str]] = ()) -> int:
        """Current count for a name and dimensions; 0 if never incremented."""
        counter = self._counters.get((name, tuple(extra_dimensions)))
        return 0 if counter is None else counter.value

    def counters(self) -> list[InMemoryCounter]:
        with self._lock:
            return list(self._counters.values())
