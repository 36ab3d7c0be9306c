import asyncio

import pytest

from nestprof.profiler import Profiler
from nestprof.sections import profile, profiled


@pytest.fixture
def prof(clock) -> Profiler:
    return Profiler(clock=clock)


def test_profiled_starts_and_releases_session(prof, clock):
    with profiled("job", prof) as entry:
        clock.advance(8)

    assert entry is prof.get_entry()
    assert entry.is_released()
    assert prof.get_duration() == 8


def test_profiled_nests_under_open_session(prof, clock):
    with profiled("outer", prof):
        clock.advance(1)
        with profiled("inner", prof) as inner:
            clock.advance(3)
        clock.advance(1)

    root = prof.get_entry()
    assert root.children == (inner,)
    assert inner.duration() == 3
    assert prof.dump() == "0 [5ms (2ms)] - outer\n`---1 [3ms, 60%, 60%] - inner"


def test_profiled_after_finished_session_starts_new_one(prof):
    with profiled("first", prof):
        pass
    with profiled("second", prof):
        pass

    assert prof.get_entry().label == "second"
    assert prof.get_entry().children == ()


def test_profiled_releases_on_exception(prof, clock):
    with pytest.raises(RuntimeError, match="boom"):
        with profiled("outer", prof):
            with profiled("failing", prof):
                clock.advance(2)
                raise RuntimeError("boom")

    root = prof.get_entry()
    assert root.is_released()
    assert root.children[0].is_released()
    assert root.children[0].duration() == 2


def test_profiled_leaves_inner_open_entries_alone(prof):
    with profiled("outer", prof):
        with profiled("section", prof) as section:
            prof.enter("forgotten")

    assert section.is_released()
    assert not section.children[0].is_released()
    assert "[UNRELEASED] - forgotten" in prof.dump()


def test_profile_decorator_without_arguments(prof, clock):
    @profile(profiler=prof)
    def load():
        clock.advance(4)
        return "data"

    assert load() == "data"
    assert load.__name__ == "load"
    assert prof.get_entry().label == load.__qualname__
    assert prof.get_duration() == 4


def test_profile_decorator_with_label(prof):
    @profile("custom_name", profiler=prof)
    def work():
        return 1

    with profiled("root", prof):
        work()
        work()

    assert [child.label for child in prof.get_entry().children] == ["custom_name", "custom_name"]


def test_bare_profile_decorator_uses_default_profiler():
    import nestprof

    @profile
    def step():
        return 42

    assert step() == 42
    assert nestprof.get_entry().label == step.__qualname__
    assert nestprof.get_entry().is_released()


def test_profile_decorator_times_awaited_coroutine(prof, clock):
    @profile("fetch", profiler=prof)
    async def fetch() -> str:
        await asyncio.sleep(0)
        clock.advance(6)
        return "payload"

    async def main():
        result = await fetch()
        return result, prof.get_entry()

    result, root = asyncio.run(main())

    assert result == "payload"
    assert root.label == "fetch"
    assert root.duration() == 6
    assert fetch.__name__ == "fetch"
