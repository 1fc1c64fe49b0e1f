"""Integration tests for concurrent starts and stops on one tracker."""

import pytest

from worktime_tracker.core.enums import ErrorKind
from worktime_tracker.core.result import Err, Ok

from tests.helpers.concurrency import run_concurrently, yield_after


async def _tracker(lifecycle):
    result = await lifecycle.create_tracker("user-1", "Focus", 6)
    return result.value


@pytest.mark.integration
@pytest.mark.asyncio
class TestConcurrentLifecycle:
    """Races between callers that all read the same state first."""

    async def test_concurrent_starts_create_one_active_session(self, lifecycle, repository, publisher):
        tracker = await _tracker(lifecycle)
        yield_after(repository, "find_tracker", "find_active_session")

        results = await run_concurrently([lambda: lifecycle.start(tracker.id)] * 10)

        assert all(isinstance(r, Ok) for r in results)
        fresh = [r for r in results if not r.value.already_running]
        assert len(fresh) == 1
        assert {r.value.active_session.id for r in results} == {fresh[0].value.active_session.id}
        assert len(await repository.list_active_sessions("user-1")) == 1
        assert publisher.names.count("session:started") == 1

    async def test_concurrent_stops_record_one_session(self, lifecycle, repository, clock):
        tracker = await _tracker(lifecycle)
        await lifecycle.start(tracker.id)
        clock.advance(minutes=40)
        yield_after(repository, "find_tracker", "find_active_session")

        results = await run_concurrently([lambda: lifecycle.stop(tracker.id)] * 2)

        assert len([r for r in results if isinstance(r, Ok)]) == 1
        errors = [r for r in results if isinstance(r, Err)]
        assert [e.kind for e in errors] == [ErrorKind.NO_ACTIVE_SESSION]
        sessions = await repository.list_sessions(tracker.id)
        assert [s.duration_minutes for s in sessions] == [40]
        assert await repository.find_active_session(tracker.id) is None

    async def test_start_stop_cycles_across_trackers(self, lifecycle, repository, clock):
        trackers = [
            (await lifecycle.create_tracker("user-1", f"Tracker {i}", 2)).value
            for i in range(5)
        ]

        await run_concurrently([lambda t=t: lifecycle.start(t.id) for t in trackers])
        clock.advance(minutes=15)
        results = await run_concurrently([lambda t=t: lifecycle.stop(t.id) for t in trackers])

        assert all(isinstance(r, Ok) for r in results)
        assert await repository.list_active_sessions("user-1") == []
        for tracker in trackers:
            sessions = await repository.list_sessions(tracker.id)
            assert [s.duration_minutes for s in sessions] == [15]

    async def test_archive_racing_delete_reports_not_found(self, lifecycle, publisher):
        tracker = await _tracker(lifecycle)
        yield_after(lifecycle.repository, "find_tracker")

        deleted, archived = await run_concurrently(
            [lambda: lifecycle.delete_tracker(tracker.id), lambda: lifecycle.archive(tracker.id)]
        )

        assert isinstance(deleted, Ok)
        assert isinstance(archived, Err)
        assert archived.kind == ErrorKind.NOT_FOUND
        assert "tracker:archived" not in publisher.names
