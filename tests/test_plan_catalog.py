import pytest
from datetime import datetime, timezone
from pydantic import ValidationError

from fittrack.core.exceptions import PlanNotDeletableError, PlanNotFoundError
from fittrack.schemas.plan import WorkoutPlanCreate
from fittrack.services.plan_catalog import PlanCatalog
from fittrack.services.tracking_store import RestEventJournal, TrackingStore


def _custom_payload(**overrides):
    data = {
        "name": "Full Body",
        "subtitle": "Everything",
        "exercises": [
            {"name": "Squat", "sets": "3", "kind": "reps", "reps": "10"},
            {"name": "Plank", "sets": "2", "kind": "duration", "duration": "30 seconds"},
        ],
    }
    data.update(overrides)
    return WorkoutPlanCreate.model_validate(data)


@pytest.mark.asyncio
async def test_builtin_plans_listed_first(store):
    plans = await PlanCatalog(store).list_plans()
    assert [p.id for p in plans] == ["upper1", "lower", "upper2"]
    upper = plans[0]
    assert upper.exercise("u1-1").target_sets == 4
    assert upper.exercise("u1-4").default_reps == 12


@pytest.mark.asyncio
async def test_get_unknown_plan_raises(store):
    with pytest.raises(PlanNotFoundError):
        await PlanCatalog(store).get_plan("nope")


@pytest.mark.asyncio
async def test_create_custom_plan(store):
    catalog = PlanCatalog(store)
    now = datetime(2025, 3, 10, tzinfo=timezone.utc)
    plan = await catalog.create_custom_plan(_custom_payload(), now=now)
    stamp = int(now.timestamp() * 1000)
    assert plan.id == f"custom-{stamp}"
    assert plan.is_custom
    assert [ex.id for ex in plan.exercises] == [f"ex-{stamp}-1", f"ex-{stamp}-2"]
    assert plan.exercises[1].reps is None
    assert plan.exercises[1].duration == "30 seconds"

    second = await catalog.create_custom_plan(_custom_payload(name="Again"), now=now)
    assert second.id == f"custom-{stamp}-1"
    assert [p.id for p in await catalog.custom_plans()] == [plan.id, second.id]


def test_create_payload_validation_messages():
    with pytest.raises(ValidationError, match="Please enter a workout name."):
        _custom_payload(name="  ")
    with pytest.raises(ValidationError, match="at least one exercise"):
        _custom_payload(exercises=[])
    with pytest.raises(ValidationError, match="Please enter reps"):
        _custom_payload(exercises=[{"name": "Squat", "sets": "3", "kind": "reps"}])


@pytest.mark.asyncio
async def test_assign_last_write_wins(store):
    catalog = PlanCatalog(store)
    await catalog.assign("2025-03-10", "upper1")
    await catalog.assign("2025-03-10", "lower")
    assert (await catalog.plan_for_date("2025-03-10")).id == "lower"
    assert len(await catalog.assignments()) == 1

    await catalog.assign("2025-03-10", None)
    assert await catalog.plan_for_date("2025-03-10") is None

    with pytest.raises(PlanNotFoundError):
        await catalog.assign("2025-03-11", "missing")


@pytest.mark.asyncio
async def test_delete_custom_plan_cascades(store, now):
    catalog = PlanCatalog(store)
    plan = await catalog.create_custom_plan(_custom_payload(), now=now)
    ex = plan.exercises[0]
    tracking = TrackingStore(store, RestEventJournal())
    await catalog.assign("2025-03-10", plan.id)
    await tracking.set_count(plan.id, ex.id, "2025-03-10", 3, ex.target_sets)
    await tracking.start_rest_timer(plan.id, ex.id, "2025-03-10", 60, now)
    await tracking.set_count("upper1", "u1-1", "2025-03-10", 4, 4)

    await catalog.delete_custom_plan(plan.id)

    assert await catalog.find_plan(plan.id) is None
    assert await catalog.assigned_plan_id("2025-03-10") is None
    assert await tracking.get_count(plan.id, ex.id, "2025-03-10") == 0
    assert not await tracking.is_completed(plan.id, ex.id, "2025-03-10")
    assert await tracking.get_rest_timer(plan.id, ex.id, "2025-03-10") is None
    # other plans untouched
    assert await tracking.is_completed("upper1", "u1-1", "2025-03-10")


@pytest.mark.asyncio
async def test_delete_builtin_or_missing(store):
    catalog = PlanCatalog(store)
    with pytest.raises(PlanNotDeletableError):
        await catalog.delete_custom_plan("upper1")
    with pytest.raises(PlanNotFoundError):
        await catalog.delete_custom_plan("custom-1")
