# barbershop/services/booking.py

from datetime import datetime, timedelta, date, time
from typing import List, Optional

from sqlmodel import Session, select

from barbershop.config import shop_settings
from barbershop.core import overlaps, on_slot_grid, interval
from barbershop.errors import BookingError, NotFoundError
from barbershop.models import (
    Appointment,
    BlockedTime,
    Professional,
    ProfessionalService,
    Schedule,
    Service,
)
from barbershop.schemas import AppointmentStatus

# statuses that hold a slot in the agenda
ACTIVE_STATUSES = (
    AppointmentStatus.pending.value,
    AppointmentStatus.confirmed.value,
    AppointmentStatus.completed.value,
)


def get_professional(session: Session, professional_id: int) -> Professional:
    professional = session.get(Professional, professional_id)
    if professional is None or not professional.is_active:
        raise NotFoundError("Professional not found")
    return professional


def load_services(session: Session, service_ids: List[int]) -> List[Service]:
    if len(service_ids) != len(set(service_ids)):
        raise BookingError("service_ids cannot contain duplicates")

    services = []
    for service_id in service_ids:
        service = session.get(Service, service_id)
        if service is None or not service.is_active:
            raise BookingError(f"Service {service_id} not available")
        services.append(service)
    return services


def check_professional_offers(session: Session, professional_id: int, services: List[Service]):
    offered = session.exec(
        select(ProfessionalService.service_id)
        .where(ProfessionalService.professional_id == professional_id)
    ).all()
    # no explicit list means the professional does every service
    if not offered:
        return
    for service in services:
        if service.id not in offered:
            raise BookingError(f"Professional does not offer {service.name}")


def required_minutes(services: List[Service]) -> int:
    return sum(s.duration_minutes for s in services)


def working_window(session: Session, professional_id: int, day: date):
    schedule = session.exec(
        select(Schedule)
        .where(Schedule.professional_id == professional_id)
        .where(Schedule.day_of_week == day.weekday())
    ).first()
    if schedule is None or not schedule.is_available:
        return None
    return interval(day, schedule.start_time, schedule.end_time)


def blocks_for_day(session: Session, professional_id: int, day: date) -> List[BlockedTime]:
    return session.exec(
        select(BlockedTime)
        .where(BlockedTime.professional_id == professional_id)
        .where(BlockedTime.date == day)
    ).all()


def appointments_for_day(
    session: Session,
    professional_id: int,
    day: date,
    exclude_id: Optional[int] = None,
) -> List[Appointment]:
    stmt = (
        select(Appointment)
        .where(Appointment.professional_id == professional_id)
        .where(Appointment.date == day)
        .where(Appointment.status.in_(ACTIVE_STATUSES))
    )
    if exclude_id is not None:
        stmt = stmt.where(Appointment.id != exclude_id)
    return session.exec(stmt).all()


def validate_slot(
    session: Session,
    professional_id: int,
    day: date,
    start_time: time,
    minutes: int,
    now: Optional[datetime] = None,
):
    """Check that ``minutes`` starting at ``start_time`` can be booked.

    Returns the ``(start, end)`` datetimes of the appointment. Validation
    problems raise ``BookingError`` (422), conflicts with blocked times or
    other appointments raise it with a 409.
    """
    now = now or datetime.now()
    slot_minutes = shop_settings["slot_minutes"]

    # 1) Validate slot alignment
    if not on_slot_grid(start_time, slot_minutes):
        raise BookingError(f"Start time must be in {slot_minutes}-minute increments")

    # 2) Build appointment interval
    appt_start = datetime.combine(day, start_time)
    appt_end = appt_start + timedelta(minutes=minutes)

    # 3) Prevent booking in the past (naive local time)
    if appt_start < now:
        raise BookingError("Cannot book an appointment in the past")

    # 4) Validate working day and hours
    window = working_window(session, professional_id, day)
    if window is None:
        raise BookingError("Professional is not scheduled to work that day")
    work_start, work_end = window
    if appt_start < work_start or appt_end > work_end:
        raise BookingError("Appointment must be within working hours")

    # 5) Reject overlaps with blocked times
    for b in blocks_for_day(session, professional_id, day):
        if overlaps(appt_start, appt_end, b.start, b.end):
            raise BookingError("Appointment overlaps a blocked time", status_code=409)

    # 6) Reject overlaps with existing appointments (double-booking)
    for a in appointments_for_day(session, professional_id, day):
        existing_start, existing_end = interval(day, a.start_time, a.end_time)
        if overlaps(appt_start, appt_end, existing_start, existing_end):
            raise BookingError("Appointment overlaps an existing appointment", status_code=409)

    return appt_start, appt_end


def available_starts(
    session: Session,
    professional_id: int,
    day: date,
    minutes: int,
    now: Optional[datetime] = None,
) -> List[str]:
    now = now or datetime.now()

    window = working_window(session, professional_id, day)
    if window is None:
        return []
    work_start, work_end = window

    slot_delta = timedelta(minutes=shop_settings["slot_minutes"])
    needed = timedelta(minutes=max(minutes, shop_settings["slot_minutes"]))

    busy = [(b.start, b.end) for b in blocks_for_day(session, professional_id, day)]
    for a in appointments_for_day(session, professional_id, day):
        busy.append(interval(day, a.start_time, a.end_time))

    available = []
    current = work_start
    while current + needed <= work_end:
        slot_start = current
        slot_end = current + needed
        current += slot_delta

        if slot_start < now:
            continue
        if any(overlaps(slot_start, slot_end, start, end) for start, end in busy):
            continue

        available.append(slot_start.time().strftime("%H:%M"))

    return available
