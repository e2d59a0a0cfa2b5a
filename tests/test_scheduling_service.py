"""Tests for the scheduling service invariants."""

import asyncio
import random
from datetime import UTC, datetime, timedelta, timezone
from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_scheduler.core.exceptions import (
    ConflictException,
    InvalidStateException,
    NotFoundException,
    ValidationException,
)
from clinic_scheduler.repositories.appointment_repository import AppointmentRepository
from clinic_scheduler.repositories.doctor_repository import DoctorRepository
from clinic_scheduler.schemas.appointments import AppointmentFilters, AppointmentStatus
from clinic_scheduler.services.scheduling_service import (
    SchedulingService,
    as_utc,
    can_transition,
)


def at(hour: int, minute: int = 0, day: int = 7) -> datetime:
    """A fixed instant on a future date."""
    return datetime(2030, 1, day, hour, minute, tzinfo=UTC)


@pytest.fixture
def service(db_session: AsyncSession) -> SchedulingService:
    return SchedulingService(db_session)


def test_as_utc_treats_naive_values_as_utc():
    naive = datetime(2030, 1, 7, 10, 0)
    assert as_utc(naive) == datetime(2030, 1, 7, 10, 0, tzinfo=UTC)

    plus_two = datetime(2030, 1, 7, 12, 0, tzinfo=timezone(timedelta(hours=2)))
    assert as_utc(plus_two) == at(10)
    assert as_utc(plus_two).utcoffset() == timedelta(0)


def test_state_machine_transitions():
    assert can_transition(AppointmentStatus.SCHEDULED, AppointmentStatus.COMPLETED)
    assert can_transition(AppointmentStatus.SCHEDULED, AppointmentStatus.CANCELLED)
    assert not can_transition(AppointmentStatus.SCHEDULED, AppointmentStatus.SCHEDULED)
    for terminal in (AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED):
        for target in AppointmentStatus:
            assert not can_transition(terminal, target)


@pytest.mark.asyncio
async def test_create_appointment_is_scheduled(service, patient, doctor):
    appointment = await service.create_appointment(
        patient["id"], doctor["id"], at(10), at(10, 30), notes="Initial consultation"
    )

    assert appointment["status"] == AppointmentStatus.SCHEDULED.value
    assert appointment["patient_id"] == patient["id"]
    assert appointment["doctor_id"] == doctor["id"]
    assert appointment["start_time"] == at(10)
    assert appointment["end_time"] == at(10, 30)
    assert appointment["notes"] == "Initial consultation"
    assert appointment["cancelled_at"] is None


@pytest.mark.asyncio
async def test_double_booking_example(service, patient, other_patient, doctor):
    """10:00-10:30 books, 10:15-10:45 conflicts, 10:30-11:00 is back-to-back."""
    await service.create_appointment(patient["id"], doctor["id"], at(10), at(10, 30))

    with pytest.raises(ConflictException):
        await service.create_appointment(
            other_patient["id"], doctor["id"], at(10, 15), at(10, 45)
        )

    back_to_back = await service.create_appointment(
        other_patient["id"], doctor["id"], at(10, 30), at(11)
    )
    assert back_to_back["status"] == AppointmentStatus.SCHEDULED.value


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("start", "end"),
    [
        (at(9, 45), at(10, 15)),  # overlaps the beginning
        (at(10, 15), at(10, 45)),  # overlaps the end
        (at(10, 5), at(10, 25)),  # contained
        (at(9), at(11)),  # contains
        (at(10), at(10, 30)),  # identical
    ],
)
async def test_overlapping_windows_conflict(service, patient, doctor, start, end):
    await service.create_appointment(patient["id"], doctor["id"], at(10), at(10, 30))

    with pytest.raises(ConflictException):
        await service.create_appointment(patient["id"], doctor["id"], start, end)


@pytest.mark.asyncio
async def test_overlap_check_compares_instants_across_offsets(service, patient, doctor):
    await service.create_appointment(patient["id"], doctor["id"], at(10), at(10, 30))

    plus_one = timezone(timedelta(hours=1))
    with pytest.raises(ConflictException):
        await service.create_appointment(
            patient["id"],
            doctor["id"],
            datetime(2030, 1, 7, 11, 15, tzinfo=plus_one),
            datetime(2030, 1, 7, 11, 45, tzinfo=plus_one),
        )


@pytest.mark.asyncio
async def test_other_doctors_are_not_blocked(service, db_session, patient, doctor):
    second = await DoctorRepository(db_session).create(
        {
            "first_name": "Doc",
            "last_name": "Two",
            "email": "doc.two@example.com",
            "specialization": "Dermatology",
        }
    )
    await db_session.commit()

    await service.create_appointment(patient["id"], doctor["id"], at(10), at(10, 30))
    appointment = await service.create_appointment(
        patient["id"], second["id"], at(10), at(10, 30)
    )
    assert appointment["doctor_id"] == second["id"]


@pytest.mark.asyncio
@pytest.mark.parametrize("end", [at(10), at(9)])
async def test_end_must_be_after_start(service, patient, doctor, end):
    with pytest.raises(ValidationException):
        await service.create_appointment(patient["id"], doctor["id"], at(10), end)


@pytest.mark.asyncio
async def test_unknown_patient_or_doctor(service, patient, doctor):
    with pytest.raises(NotFoundException, match="Patient"):
        await service.create_appointment(uuid4(), doctor["id"], at(10), at(11))

    with pytest.raises(NotFoundException, match="Doctor"):
        await service.create_appointment(patient["id"], uuid4(), at(10), at(11))


@pytest.mark.asyncio
async def test_soft_deleted_doctor_cannot_be_booked(service, db_session, patient, doctor):
    await DoctorRepository(db_session).soft_delete(doctor["id"])
    await db_session.commit()

    with pytest.raises(NotFoundException):
        await service.create_appointment(patient["id"], doctor["id"], at(10), at(11))


@pytest.mark.asyncio
async def test_cancel_frees_the_slot(service, patient, other_patient, doctor):
    first = await service.create_appointment(patient["id"], doctor["id"], at(10), at(10, 30))

    cancelled = await service.cancel_appointment(first["id"])
    assert cancelled["status"] == AppointmentStatus.CANCELLED.value
    assert cancelled["cancelled_at"] is not None

    rebooked = await service.create_appointment(
        other_patient["id"], doctor["id"], at(10), at(10, 30)
    )
    assert rebooked["status"] == AppointmentStatus.SCHEDULED.value


@pytest.mark.asyncio
async def test_deleted_appointment_frees_the_slot(service, patient, doctor):
    first = await service.create_appointment(patient["id"], doctor["id"], at(10), at(10, 30))
    await service.delete_appointment(first["id"])

    with pytest.raises(NotFoundException):
        await service.get_appointment(first["id"])

    again = await service.create_appointment(patient["id"], doctor["id"], at(10), at(10, 30))
    assert again["id"] != first["id"]


@pytest.mark.asyncio
async def test_hard_delete_removes_row(service, patient, doctor):
    appointment = await service.create_appointment(
        patient["id"], doctor["id"], at(10), at(10, 30)
    )
    await service.delete_appointment(appointment["id"], hard_delete=True)

    assert await service.appointments.get(appointment["id"], include_deleted=True) is None


@pytest.mark.asyncio
async def test_complete_appointment(service, patient, doctor):
    appointment = await service.create_appointment(
        patient["id"], doctor["id"], at(10), at(10, 30)
    )

    completed = await service.complete_appointment(appointment["id"])

    assert completed["status"] == AppointmentStatus.COMPLETED.value
    assert completed["completed_at"] is not None


@pytest.mark.asyncio
async def test_completed_appointment_still_blocks_slot(service, patient, doctor):
    appointment = await service.create_appointment(
        patient["id"], doctor["id"], at(10), at(10, 30)
    )
    await service.complete_appointment(appointment["id"])

    with pytest.raises(ConflictException):
        await service.create_appointment(patient["id"], doctor["id"], at(10), at(10, 30))


@pytest.mark.asyncio
async def test_complete_cancelled_appointment_fails(service, patient, doctor):
    appointment = await service.create_appointment(
        patient["id"], doctor["id"], at(10), at(10, 30)
    )
    await service.cancel_appointment(appointment["id"])

    with pytest.raises(InvalidStateException):
        await service.complete_appointment(appointment["id"])

    current = await service.get_appointment(appointment["id"])
    assert current["status"] == AppointmentStatus.CANCELLED.value


@pytest.mark.asyncio
async def test_terminal_states_reject_transitions(service, patient, doctor):
    appointment = await service.create_appointment(
        patient["id"], doctor["id"], at(10), at(10, 30)
    )
    await service.complete_appointment(appointment["id"])

    with pytest.raises(InvalidStateException):
        await service.cancel_appointment(appointment["id"])
    with pytest.raises(InvalidStateException):
        await service.complete_appointment(appointment["id"])
    with pytest.raises(InvalidStateException):
        await service.change_status(appointment["id"], AppointmentStatus.SCHEDULED)


@pytest.mark.asyncio
async def test_change_status_to_scheduled_is_rejected(service, patient, doctor):
    appointment = await service.create_appointment(
        patient["id"], doctor["id"], at(10), at(10, 30)
    )

    with pytest.raises(InvalidStateException):
        await service.change_status(appointment["id"], AppointmentStatus.SCHEDULED)


@pytest.mark.asyncio
async def test_transition_on_unknown_appointment(service):
    with pytest.raises(NotFoundException):
        await service.cancel_appointment(uuid4())


@pytest.mark.asyncio
async def test_update_excludes_own_slot(service, patient, doctor):
    appointment = await service.create_appointment(
        patient["id"], doctor["id"], at(10), at(10, 30)
    )

    # Extending into its own current window is not a conflict
    updated = await service.update_appointment(
        appointment["id"], patient["id"], doctor["id"], at(10, 15), at(10, 45), notes="moved"
    )

    assert updated["start_time"] == at(10, 15)
    assert updated["end_time"] == at(10, 45)
    assert updated["notes"] == "moved"
    assert updated["status"] == AppointmentStatus.SCHEDULED.value


@pytest.mark.asyncio
async def test_update_into_other_booking_conflicts(service, patient, doctor):
    await service.create_appointment(patient["id"], doctor["id"], at(10), at(10, 30))
    second = await service.create_appointment(patient["id"], doctor["id"], at(11), at(11, 30))

    with pytest.raises(ConflictException):
        await service.update_appointment(
            second["id"], patient["id"], doctor["id"], at(10, 20), at(10, 50)
        )

    unchanged = await service.get_appointment(second["id"])
    assert unchanged["start_time"] == at(11)


@pytest.mark.asyncio
async def test_update_validates_range_and_state(service, patient, doctor):
    appointment = await service.create_appointment(
        patient["id"], doctor["id"], at(10), at(10, 30)
    )

    with pytest.raises(ValidationException):
        await service.update_appointment(
            appointment["id"], patient["id"], doctor["id"], at(11), at(10)
        )

    await service.cancel_appointment(appointment["id"])
    with pytest.raises(InvalidStateException):
        await service.update_appointment(
            appointment["id"], patient["id"], doctor["id"], at(12), at(12, 30)
        )


@pytest.mark.asyncio
async def test_list_appointments_filters(service, patient, other_patient, doctor):
    await service.create_appointment(patient["id"], doctor["id"], at(9), at(9, 30))
    await service.create_appointment(other_patient["id"], doctor["id"], at(10), at(10, 30))
    late = await service.create_appointment(patient["id"], doctor["id"], at(14), at(14, 30))
    await service.cancel_appointment(late["id"])

    items, total = await service.list_appointments(AppointmentFilters(patient_id=patient["id"]))
    assert total == 2
    assert [a["start_time"] for a in items] == [at(9), at(14)]

    items, total = await service.list_appointments(
        AppointmentFilters(doctor_id=doctor["id"], from_time=at(9, 30), to_time=at(14))
    )
    assert total == 1
    assert items[0]["patient_id"] == other_patient["id"]

    items, total = await service.list_appointments(
        AppointmentFilters(status=AppointmentStatus.CANCELLED)
    )
    assert total == 1
    assert items[0]["id"] == late["id"]

    items, total = await service.list_appointments(AppointmentFilters(page=2, size=2))
    assert total == 3
    assert len(items) == 1


@pytest.mark.asyncio
async def test_no_overlap_survives_random_create_cancel_sequences(service, patient, doctor):
    rng = random.Random(7)
    active: list[tuple[datetime, datetime, object]] = []

    for _ in range(40):
        if active and rng.random() < 0.3:
            start, end, appointment_id = active.pop(rng.randrange(len(active)))
            await service.cancel_appointment(appointment_id)
            continue

        start = at(8) + timedelta(minutes=15 * rng.randrange(0, 32))
        end = start + timedelta(minutes=15 * rng.randrange(1, 5))
        expected_conflict = any(s < end and e > start for s, e, _ in active)

        if expected_conflict:
            with pytest.raises(ConflictException):
                await service.create_appointment(patient["id"], doctor["id"], start, end)
        else:
            created = await service.create_appointment(patient["id"], doctor["id"], start, end)
            active.append((start, end, created["id"]))

    items, _ = await service.list_appointments(
        AppointmentFilters(doctor_id=doctor["id"], status=AppointmentStatus.SCHEDULED, size=100)
    )
    assert len(items) == len(active)
    ordered = sorted(items, key=lambda a: a["start_time"])
    for earlier, later in zip(ordered, ordered[1:]):
        assert earlier["end_time"] <= later["start_time"]


@pytest.mark.asyncio
async def test_concurrent_bookings_for_same_slot(session_factory, patient, other_patient, doctor):
    """Two sessions racing for one doctor's slot: exactly one wins."""

    async def book(patient_id):
        async with session_factory() as session:
            return await SchedulingService(session).create_appointment(
                patient_id, doctor["id"], at(10), at(10, 30)
            )

    results = await asyncio.gather(
        book(patient["id"]),
        book(other_patient["id"]),
        return_exceptions=True,
    )

    booked = [r for r in results if isinstance(r, dict)]
    conflicts = [r for r in results if isinstance(r, ConflictException)]
    assert len(booked) == 1
    assert len(conflicts) == 1

    async with session_factory() as session:
        active = await AppointmentRepository(session).find_overlapping(
            doctor["id"], at(0), at(23)
        )
    assert [a["id"] for a in active] == [booked[0]["id"]]
