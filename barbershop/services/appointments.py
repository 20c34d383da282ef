# barbershop/services/appointments.py

import logging
from datetime import datetime

from sqlmodel import Session

from barbershop.errors import BarbershopError
from barbershop.models import Appointment
from barbershop.schemas import AppointmentStatus
from barbershop.services import cash_flow, loyalty

logger = logging.getLogger(__name__)

PENDING = AppointmentStatus.pending.value
CONFIRMED = AppointmentStatus.confirmed.value
COMPLETED = AppointmentStatus.completed.value
CANCELLED = AppointmentStatus.cancelled.value

ALLOWED_TRANSITIONS = {
    PENDING: {CONFIRMED, COMPLETED, CANCELLED},
    CONFIRMED: {COMPLETED, CANCELLED},
    COMPLETED: {CONFIRMED},  # reopen
    CANCELLED: set(),
}


def change_status(session: Session, appointment: Appointment, new_status) -> Appointment:
    """Move an appointment to ``new_status`` and apply its side effects.

    Completing books the income and awards loyalty points; reopening a
    completed appointment removes both. Everything is committed together.
    """
    new_status = AppointmentStatus(new_status).value
    old_status = appointment.status

    if new_status == old_status:
        raise BarbershopError(f"Appointment already {old_status}", status_code=409)
    if new_status not in ALLOWED_TRANSITIONS.get(old_status, set()):
        raise BarbershopError(f"Cannot change status from {old_status} to {new_status}", status_code=409)

    appointment.status = new_status

    if new_status == COMPLETED:
        appointment.completed_at = datetime.now()
        cash_flow.record_appointment_income(session, appointment)
        loyalty.award_appointment_points(session, appointment)
    elif old_status == COMPLETED:
        appointment.completed_at = None
        cash_flow.remove_appointment_income(session, appointment.id)
        loyalty.revoke_appointment_points(session, appointment)

    session.add(appointment)
    try:
        session.commit()
    except Exception:
        session.rollback()
        raise
    session.refresh(appointment)

    logger.info("Appointment #%s: %s -> %s", appointment.id, old_status, new_status)
    return appointment
