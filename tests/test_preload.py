"""Tests for eager batch resolution and topologically ordered initialization."""

from __future__ import annotations

import asyncio

import pytest

from inwire import (
    Container,
    InwireAggregateError,
    InwireCircularDependencyError,
    InwireFactoryError,
    Preloader,
    Resolver,
    transient,
)


class Recorder:
    """Value whose ``on_init`` appends start/end events, optionally sleeping in between."""

    def __init__(self, name: str, events: list[str], *, delay: float = 0.0) -> None:
        self.name = name
        self.events = events
        self.delay = delay

    async def on_init(self) -> None:
        self.events.append(f"{self.name}:start")
        if self.delay:
            await asyncio.sleep(self.delay)
        self.events.append(f"{self.name}:end")


class Counter:
    def __init__(self) -> None:
        self.init_calls = 0

    def on_init(self) -> None:
        self.init_calls += 1


@pytest.mark.asyncio
async def test_dependency_initializes_before_dependent() -> None:
    order: list[str] = []

    class Config:
        async def on_init(self) -> None:
            await asyncio.sleep(0.01)
            order.append("config")

    class Db:
        def __init__(self, config: Config) -> None:
            self.config = config

        def on_init(self) -> None:
            order.append("db")

    container = Container(
        {
            "config": lambda _: Config(),
            "db": lambda d: Db(d.config),
        },
    )

    await container.preload()

    assert order == ["config", "db"]


@pytest.mark.asyncio
async def test_independent_branches_overlap() -> None:
    events: list[str] = []
    container = Container(
        {
            "db": lambda _: Recorder("db", events, delay=0.01),
            "cache": lambda _: Recorder("cache", events, delay=0.01),
        },
    )

    await container.preload()

    last_start = max(events.index("db:start"), events.index("cache:start"))
    first_end = min(events.index("db:end"), events.index("cache:end"))
    assert last_start < first_end


@pytest.mark.asyncio
async def test_levels_run_in_sequence() -> None:
    events: list[str] = []
    container = Container(
        {
            "config": lambda _: Recorder("config", events, delay=0.005),
            "db": lambda d: (d.config, Recorder("db", events, delay=0.005))[1],
            "cache": lambda d: (d.config, Recorder("cache", events, delay=0.005))[1],
            "api": lambda d: (d.db, d.cache, Recorder("api", events))[2],
        },
    )

    await container.preload()

    assert events.index("config:end") < events.index("db:start")
    assert events.index("config:end") < events.index("cache:start")
    assert events.index("db:end") < events.index("api:start")
    assert events.index("cache:end") < events.index("api:start")


@pytest.mark.asyncio
async def test_transitive_dependencies_are_initialized() -> None:
    resolver = Resolver(
        {
            "config": lambda _: Counter(),
            "db": lambda d: (d.config, Counter())[1],
        },
    )

    await Preloader(resolver).preload(["db"])

    assert resolver.resolve("config").init_calls == 1
    assert resolver.resolve("db").init_calls == 1


@pytest.mark.asyncio
async def test_no_double_init_in_either_order() -> None:
    resolver = Resolver({"first": lambda _: Counter(), "second": lambda _: Counter()})

    await Preloader(resolver).preload(["first"])
    first = resolver.resolve("first")

    second = resolver.resolve("second")
    await Preloader(resolver).preload(["second"])

    await Preloader(resolver).preload()

    assert first.init_calls == 1
    assert second.init_calls == 1


@pytest.mark.asyncio
async def test_reset_makes_preload_initialize_again() -> None:
    resolver = Resolver({"service": lambda _: Counter()})
    preloader = Preloader(resolver)

    await preloader.preload()
    resolver.reset("service")
    await preloader.preload()

    assert resolver.resolve("service").init_calls == 1
    assert resolver.get_resolved_keys() == ["service"]


@pytest.mark.asyncio
async def test_preload_defaults_to_local_keys_and_parent_deps_still_initialize() -> None:
    inited: list[str] = []

    class Named:
        def __init__(self, name: str) -> None:
            self.name = name

        def on_init(self) -> None:
            inited.append(self.name)

    parent = Container({"config": lambda _: Named("config"), "unused": lambda _: Named("unused")})
    child = parent.scope({"service": lambda d: (d.config, Named("service"))[1]})

    await child.preload()

    assert sorted(inited) == ["config", "service"]


@pytest.mark.asyncio
async def test_empty_container_preload_is_a_no_op() -> None:
    await Container().preload()


@pytest.mark.asyncio
async def test_transient_keys_are_resolved_but_not_cached() -> None:
    resolver = Resolver({"config": lambda _: Counter(), "ticket": transient(lambda _: Counter())})

    await Preloader(resolver).preload()

    assert resolver.get_resolved_keys() == ["config"]
    assert resolver.resolve("ticket").init_calls == 1


class TestFailures:
    @pytest.mark.asyncio
    async def test_factory_failure_rolls_back_and_restores_mode(self) -> None:
        def bad(_: object) -> object:
            msg = "factory boom"
            raise RuntimeError(msg)

        resolver = Resolver({"good": lambda _: Counter(), "bad": bad, "existing": lambda _: "kept"})
        resolver.resolve("existing")

        with pytest.raises(InwireFactoryError, match="factory boom"):
            await Preloader(resolver).preload()

        assert resolver.get_resolved_keys() == ["existing"]
        assert resolver.defer_on_init is False
        assert resolver.resolve("good").init_calls == 1

    @pytest.mark.asyncio
    async def test_rollback_drops_warnings_of_evicted_keys(self) -> None:
        attempts: list[int] = []

        def flaky(_: object) -> str:
            attempts.append(1)
            if len(attempts) == 1:
                msg = "first attempt fails"
                raise RuntimeError(msg)
            return "ok"

        resolver = Resolver({"tick": transient(lambda _: object()), "svc": lambda d: ("svc", d.tick), "flaky": flaky})

        with pytest.raises(InwireFactoryError, match="first attempt fails"):
            await Preloader(resolver).preload(["svc", "flaky"])

        assert resolver.get_warnings() == []

        await Preloader(resolver).preload(["svc", "flaky"])

        assert [warning.keys for warning in resolver.get_warnings()] == [("svc", "tick")]

    @pytest.mark.asyncio
    async def test_single_init_failure_is_raised_directly(self) -> None:
        class Failing:
            async def on_init(self) -> None:
                msg = "connection failed"
                raise ConnectionError(msg)

        container = Container({"db": lambda _: Failing()})

        with pytest.raises(ConnectionError, match="connection failed"):
            await container.preload("db")

    @pytest.mark.asyncio
    async def test_multiple_init_failures_are_aggregated(self) -> None:
        class Failing:
            def __init__(self, name: str) -> None:
                self.name = name

            async def on_init(self) -> None:
                msg = f"{self.name} failed"
                raise RuntimeError(msg)

        container = Container({"a": lambda _: Failing("a"), "b": lambda _: Failing("b")})

        with pytest.raises(InwireAggregateError) as exc_info:
            await container.preload()

        assert sorted(str(error) for error in exc_info.value.errors) == ["a failed", "b failed"]

    @pytest.mark.asyncio
    async def test_healthy_siblings_initialize_when_one_fails(self) -> None:
        class Failing:
            async def on_init(self) -> None:
                msg = "boom"
                raise RuntimeError(msg)

        resolver = Resolver({"bad": lambda _: Failing(), "good": lambda _: Counter()})

        with pytest.raises(RuntimeError, match="boom"):
            await Preloader(resolver).preload()

        assert resolver.resolve("good").init_calls == 1
        assert resolver.is_resolved("bad")

    @pytest.mark.asyncio
    async def test_failed_init_is_retried_by_next_preload(self) -> None:
        attempts: list[int] = []

        class Flaky:
            async def on_init(self) -> None:
                attempts.append(1)
                if len(attempts) == 1:
                    msg = "connection refused"
                    raise ConnectionError(msg)

        resolver = Resolver({"db": lambda _: Flaky()})

        with pytest.raises(ConnectionError):
            await Preloader(resolver).preload()
        await Preloader(resolver).preload()

        assert len(attempts) == 2

    @pytest.mark.asyncio
    async def test_cycle_across_resolve_calls_names_stuck_keys(self) -> None:
        a_reads_b = True
        b_reads_a = False

        def make_a(d: object) -> str:
            if a_reads_b:
                d.b  # noqa: B018
            return "a"

        def make_b(d: object) -> str:
            if b_reads_a:
                d.a  # noqa: B018
            return "b"

        resolver = Resolver({"a": make_a, "b": make_b})
        resolver.resolve("a")
        resolver.evict("b")
        b_reads_a = True
        resolver.resolve("b")

        with pytest.raises(InwireCircularDependencyError) as exc_info:
            await Preloader(resolver).preload(["a"])

        assert set(exc_info.value.chain) == {"a", "b"}
