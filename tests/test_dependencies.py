"""Tests for wren.dependencies — hierarchical scopes and factories."""

import threading

import pytest

from wren.dependencies import Dependencies, Resolver
from wren.errors import MissingDependency


class _Clock:
    pass


class _Service:
    def __init__(self, clock: _Clock | None) -> None:
        self.clock = clock


class TestRegisterAndResolve:
    def test_register_by_type(self) -> None:
        deps = Dependencies()
        clock = _Clock()
        deps.register(clock)
        assert deps.resolve(_Clock) is clock

    def test_register_as_type(self) -> None:
        deps = Dependencies()
        deps.register("value", as_type=object)
        assert deps.resolve(object) == "value"
        assert deps.resolve(str) is None

    def test_missing_is_none(self) -> None:
        assert Dependencies().resolve(_Clock) is None

    def test_resolve_required(self) -> None:
        deps = Dependencies()
        deps.register(_Clock())
        assert isinstance(deps.resolve_required(_Clock), _Clock)

    def test_resolve_required_missing(self) -> None:
        with pytest.raises(MissingDependency) as exc_info:
            Dependencies().resolve_required(_Clock)
        assert exc_info.value.annotation is _Clock
        assert isinstance(exc_info.value, LookupError)

    def test_contains(self) -> None:
        root = Dependencies()
        root.register(_Clock())
        assert _Clock in root
        assert _Clock in root.child()
        assert _Service not in root

    def test_is_its_own_provider(self) -> None:
        deps = Dependencies()
        assert deps.dependencies is deps


class TestScopes:
    def test_child_sees_parent(self) -> None:
        root = Dependencies()
        clock = _Clock()
        root.register(clock)
        assert root.child().resolve(_Clock) is clock

    def test_child_shadows_parent(self) -> None:
        root = Dependencies()
        root.register(_Clock())
        child = root.child()
        local = _Clock()
        child.register(local)

        assert child.resolve(_Clock) is local
        assert root.resolve(_Clock) is not local

    def test_parent_does_not_see_child(self) -> None:
        root = Dependencies()
        root.child().register(_Clock())
        assert root.resolve(_Clock) is None

    def test_child_does_not_copy(self) -> None:
        root = Dependencies()
        child = root.child()
        clock = _Clock()
        root.register(clock)
        assert child.resolve(_Clock) is clock
        assert child.parent is root


class TestFactories:
    def test_factory_runs_per_resolve(self) -> None:
        deps = Dependencies()
        deps.register_factory(_Clock, lambda _: _Clock())
        assert deps.resolve(_Clock) is not deps.resolve(_Clock)

    def test_zero_argument_factory(self) -> None:
        deps = Dependencies()
        deps.register_factory(_Clock, _Clock)
        assert isinstance(deps.resolve(_Clock), _Clock)

    def test_factory_receives_resolver(self) -> None:
        deps = Dependencies()
        clock = _Clock()
        deps.register(clock)

        def build(resolver: Resolver) -> _Service:
            return _Service(resolver.resolve(_Clock))

        deps.register_factory(_Service, build)
        assert deps.resolve_required(_Service).clock is clock

    def test_per_resolve_factory_sees_requesting_scope(self) -> None:
        root = Dependencies()
        root.register_factory(_Service, lambda r: _Service(r.resolve(_Clock)))
        child = root.child()
        clock = _Clock()
        child.register(clock)

        assert child.resolve_required(_Service).clock is clock
        assert root.resolve_required(_Service).clock is None

    def test_singleton(self) -> None:
        deps = Dependencies()
        calls: list[int] = []

        def build() -> _Clock:
            calls.append(1)
            return _Clock()

        entry = deps.register_factory(_Clock, build).as_singleton()
        assert entry.singleton
        first = deps.resolve(_Clock)
        assert deps.resolve(_Clock) is first
        assert deps.child().resolve(_Clock) is first
        assert calls == [1]

    def test_singleton_built_against_declaring_scope(self) -> None:
        root = Dependencies()
        root.register_factory(_Service, lambda r: _Service(r.resolve(_Clock))).as_singleton()
        child = root.child()
        child.register(_Clock())

        assert child.resolve_required(_Service).clock is None

    def test_singleton_built_once_across_threads(self) -> None:
        deps = Dependencies()
        calls: list[int] = []
        barrier = threading.Barrier(8)

        def build() -> _Clock:
            calls.append(1)
            return _Clock()

        deps.register_factory(_Clock, build).as_singleton()
        results: list[object] = []

        def worker() -> None:
            barrier.wait()
            results.append(deps.resolve(_Clock))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(calls) == 1
        assert len({id(r) for r in results}) == 1
