import pytest
from datetime import timedelta
from sqlalchemy.exc import OperationalError

from fittrack.core.builtin_plans import BUILTIN_PLANS
from fittrack.core.constants import SESSIONS_KEY
from fittrack.core.enums import SessionState
from fittrack.core.exceptions import SessionNotFoundError, SessionPersistError
from fittrack.services.one_rep_max import SetLogBook
from fittrack.services.session_lifecycle import SessionHistory

UPPER = BUILTIN_PLANS[0]
DAY = "2025-03-10"


@pytest.mark.asyncio
async def test_open_is_idempotent(manager, now):
    assert manager.state("upper1", DAY) == SessionState.IDLE
    assert manager.open("upper1", DAY, now) == now
    assert manager.open("upper1", DAY, now + timedelta(minutes=5)) == now
    assert manager.state("upper1", DAY) == SessionState.ACTIVE


@pytest.mark.asyncio
async def test_upper_session_end_to_end(store, manager, now):
    """Open UPPER, log two chest-press sets, rest once, finish after 30 minutes."""
    manager.open("upper1", DAY, now)
    tracking = manager.tracking(store)
    book = SetLogBook(store)

    await book.log_set("upper1", "u1-1", DAY, 40, 10)
    await book.log_set("upper1", "u1-1", DAY, 44, 8)
    await tracking.set_count("upper1", "u1-1", DAY, 4, 4)
    await tracking.start_rest_timer("upper1", "u1-1", DAY, 60, now + timedelta(minutes=2))
    await tracking.toggle_completion("upper1", "u1-7", DAY)

    session = await manager.finish(store, UPPER, DAY, now + timedelta(minutes=30))

    ended_ms = int((now + timedelta(minutes=30)).timestamp() * 1000)
    assert session.id == f"{DAY}_upper1_{ended_ms}"
    assert session.duration_sec == 1800
    assert session.plan_name == "UPPER"
    assert len(session.exercises) == 7
    assert session.total_sets == 4
    # 2 of 7 exercises done
    assert session.completion_percent == 29
    assert session.rest_count == 1
    assert session.rest_avg_sec == 60
    assert len(session.set_logs) == 2
    assert [(pb.exercise_id, pb.value) for pb in session.new_pbs] == [("u1-1", 55.7)]

    assert manager.state("upper1", DAY) == SessionState.IDLE
    assert manager.journal.for_session("upper1", DAY) == []
    # progress survives the finish
    assert await tracking.get_count("upper1", "u1-1", DAY) == 4

    history = SessionHistory(store)
    stored = await history.get_session(session.id)
    assert stored.model_dump() == session.model_dump()


@pytest.mark.asyncio
async def test_repeat_lift_is_not_a_new_pb(store, manager, now):
    book = SetLogBook(store)
    await book.log_set("upper1", "u1-1", DAY, 44, 8)
    await manager.finish(store, UPPER, DAY, now)

    next_day = "2025-03-11"
    await book.log_set("upper1", "u1-1", next_day, 44, 8)
    await book.log_set("upper1", "u1-3", next_day, 10, 12)
    session = await manager.finish(store, UPPER, next_day, now + timedelta(days=1))
    assert [pb.exercise_id for pb in session.new_pbs] == ["u1-3"]


@pytest.mark.asyncio
async def test_finish_without_open_has_minimum_duration(store, manager, now):
    session = await manager.finish(store, UPPER, DAY, now)
    assert session.started_at == now
    assert session.duration_sec == 1
    assert session.completion_percent == 0
    assert session.new_pbs == ()


@pytest.mark.asyncio
async def test_history_order_and_clear(store, manager, now):
    first = await manager.finish(store, UPPER, DAY, now)
    second = await manager.finish(store, BUILTIN_PLANS[1], DAY, now + timedelta(hours=1))
    history = SessionHistory(store)
    assert [s.id for s in await history.all_sessions()] == [first.id, second.id]
    assert [s.id for s in await history.list_sessions()] == [second.id, first.id]

    await history.clear()
    assert await history.list_sessions() == []
    with pytest.raises(SessionNotFoundError):
        await history.get_session(first.id)


@pytest.mark.asyncio
async def test_corrupt_history_entries_are_dropped(store, manager, now):
    session = await manager.finish(store, UPPER, DAY, now)
    raw = await store.get(SESSIONS_KEY)
    await store.set(SESSIONS_KEY, raw[:-1] + ', {"id": "broken"}]')
    assert [s.id for s in await SessionHistory(store).list_sessions()] == [session.id]


@pytest.mark.asyncio
async def test_persist_failure_resets_state(store, manager, now, monkeypatch):
    manager.open("upper1", DAY, now)
    await manager.tracking(store).start_rest_timer("upper1", "u1-1", DAY, 60, now)

    async def failing_append(self, session):
        raise OperationalError("INSERT", {}, Exception("disk full"))

    monkeypatch.setattr(SessionHistory, "append", failing_append)
    with pytest.raises(SessionPersistError):
        await manager.finish(store, UPPER, DAY, now + timedelta(minutes=10))

    assert manager.state("upper1", DAY) == SessionState.IDLE
    assert manager.journal.for_session("upper1", DAY) == []


@pytest.mark.asyncio
async def test_four_chest_press_sets_record_best_estimate(store, manager, now):
    manager.open("upper1", DAY, now)
    book = SetLogBook(store)
    for weight, reps in zip([40, 42, 44, 46], [10, 10, 8, 8]):
        await book.log_set("upper1", "u1-1", DAY, weight, reps)
    await manager.tracking(store).set_count("upper1", "u1-1", DAY, 4, 4)

    session = await manager.finish(store, UPPER, DAY, now + timedelta(minutes=40))

    assert session.total_sets == 4
    assert [log.set_index for log in session.set_logs] == [1, 2, 3, 4]
    # 1 of 7 exercises done
    assert session.completion_percent == 14
    # 46 * (1 + 8/30) = 58.27
    assert [(pb.exercise_id, pb.value, pb.metric) for pb in session.new_pbs] == [("u1-1", 58.3, "1RM")]


@pytest.mark.asyncio
async def test_history_read_failure_keeps_earlier_sessions(memory_store, manager, now):
    book = SetLogBook(memory_store)
    await book.log_set("upper1", "u1-1", DAY, 44, 8)
    first = await manager.finish(memory_store, UPPER, DAY, now)
    second = await manager.finish(memory_store, BUILTIN_PLANS[1], DAY, now + timedelta(hours=1))

    manager.open("upper1", "2025-03-11", now + timedelta(days=1))
    await book.log_set("upper1", "u1-1", "2025-03-11", 44, 8)
    memory_store.failing_reads.add(SESSIONS_KEY)
    with pytest.raises(SessionPersistError):
        await manager.finish(memory_store, UPPER, "2025-03-11", now + timedelta(days=1, minutes=30))
    assert manager.state("upper1", "2025-03-11") == SessionState.IDLE

    memory_store.failing_reads.clear()
    history = SessionHistory(memory_store)
    assert [s.id for s in await history.all_sessions()] == [first.id, second.id]

    # once storage recovers the repeat lift is still measured against the real history
    retry = await manager.finish(memory_store, UPPER, "2025-03-11", now + timedelta(days=1, hours=1))
    assert retry.new_pbs == ()
    assert len(await history.all_sessions()) == 3
