import asyncio

import pytest

from app.exceptions import InvalidTransitionError, TaskNotFoundError
from app.models import Reservation, ReservationStatus, TaskStatus
from app.storage.repo import TaskRepo
from app.storage.reservations import ReservationRepo, UpsertOutcome


def reservation(status=ReservationStatus.PENDING, **overrides):
    fields = dict(
        reservation_id="R-1",
        guest_name="Ala",
        status=status,
        check_in_date="2025-01-10",
        check_out_date="2025-01-12",
    )
    fields.update(overrides)
    return Reservation(**fields)


@pytest.mark.asyncio
async def test_task_create_and_get(redis_client):
    repo = TaskRepo(redis_client)

    created = await repo.create("t-1", "/uploads/t-1.xlsx")
    fetched = await repo.get("t-1")

    assert fetched.status is TaskStatus.PENDING
    assert fetched.file_path == "/uploads/t-1.xlsx"
    assert fetched.report_path is None
    assert fetched.fail_reason is None
    assert fetched.created_at == created.created_at
    assert await repo.get("missing") is None


@pytest.mark.asyncio
async def test_task_moves_forward_and_records_failure(redis_client):
    repo = TaskRepo(redis_client)
    created = await repo.create("t-1", "/uploads/t-1.xlsx")

    await repo.set_status("t-1", TaskStatus.IN_PROGRESS)
    await repo.set_status("t-1", TaskStatus.FAILED, report_path="r.txt", fail_reason="Validation failed")
    fetched = await repo.get("t-1")

    assert fetched.status is TaskStatus.FAILED
    assert fetched.report_path == "r.txt"
    assert fetched.fail_reason == "Validation failed"
    assert fetched.updated_at >= created.updated_at


@pytest.mark.asyncio
@pytest.mark.parametrize("terminal", [TaskStatus.COMPLETED, TaskStatus.FAILED])
async def test_terminal_task_cannot_move(redis_client, terminal):
    repo = TaskRepo(redis_client)
    await repo.create("t-1", "/uploads/t-1.xlsx")
    await repo.set_status("t-1", TaskStatus.IN_PROGRESS)
    await repo.set_status("t-1", terminal, fail_reason="x" if terminal is TaskStatus.FAILED else None)

    for status in TaskStatus:
        with pytest.raises(InvalidTransitionError):
            await repo.set_status("t-1", status)


@pytest.mark.asyncio
async def test_unknown_task_status_update(redis_client):
    with pytest.raises(TaskNotFoundError):
        await TaskRepo(redis_client).set_status("nope", TaskStatus.IN_PROGRESS)


@pytest.mark.asyncio
async def test_upsert_creates_active_reservation(redis_client):
    repo = ReservationRepo(redis_client)

    assert await repo.upsert(reservation()) is UpsertOutcome.CREATED
    assert await repo.get("R-1") == reservation()


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [ReservationStatus.CANCELED, ReservationStatus.COMPLETED])
async def test_terminal_first_sighting_is_not_created(redis_client, status):
    repo = ReservationRepo(redis_client)

    assert await repo.upsert(reservation(status)) is UpsertOutcome.SKIPPED
    assert await repo.get("R-1") is None


@pytest.mark.asyncio
async def test_active_update_overwrites_fields(redis_client):
    repo = ReservationRepo(redis_client)
    await repo.upsert(reservation())

    changed = reservation(guest_name="Ola", check_out_date="2025-01-15")
    assert await repo.upsert(changed) is UpsertOutcome.UPDATED
    assert await repo.get("R-1") == changed


@pytest.mark.asyncio
async def test_terminal_update_only_changes_status(redis_client):
    repo = ReservationRepo(redis_client)
    await repo.upsert(reservation())

    outcome = await repo.upsert(
        reservation(ReservationStatus.CANCELED, guest_name="Ola", check_in_date="2030-01-01",
                    check_out_date="2030-01-02")
    )

    assert outcome is UpsertOutcome.STATUS_UPDATED
    assert await repo.get("R-1") == reservation(ReservationStatus.CANCELED)


@pytest.mark.asyncio
async def test_upsert_is_idempotent(redis_client):
    repo = ReservationRepo(redis_client)
    rows = [reservation(), reservation(ReservationStatus.COMPLETED), reservation(reservation_id="R-2")]

    for row in rows:
        await repo.upsert(row)
    first = [await repo.get("R-1"), await repo.get("R-2")]
    for row in rows:
        await repo.upsert(row)

    assert [await repo.get("R-1"), await repo.get("R-2")] == first


@pytest.mark.asyncio
async def test_concurrent_upserts_on_distinct_keys(redis_client):
    repo = ReservationRepo(redis_client)

    outcomes = await asyncio.gather(
        *(repo.upsert(reservation(reservation_id=f"R-{i}")) for i in range(10))
    )

    assert set(outcomes) == {UpsertOutcome.CREATED}
    assert len(await redis_client.keys("reservation:*")) == 10
