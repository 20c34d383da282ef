# barbershop/routers/appointments_routes.py

import logging
from datetime import date
from typing import Optional, List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from barbershop.db import get_session
from barbershop.models import Appointment, AppointmentService, User
from barbershop.schemas import (
    AppointmentCreate,
    AppointmentPublic,
    AppointmentServicePublic,
    AppointmentStatus,
    StatusUpdate,
    UserRole,
)
from barbershop.auth import get_current_user
from barbershop.deps import is_staff
from barbershop.services import booking
from barbershop.services.appointments import change_status

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/appointments",
    tags=["appointments"],
)


def _is_assigned_professional(user: User, appt: Appointment) -> bool:
    return user.role == UserRole.professional.value and user.professional_id == appt.professional_id


def _get_visible(session: Session, appt_id: int, user: User) -> Appointment:
    appt = session.get(Appointment, appt_id)
    if appt is None:
        raise HTTPException(status_code=404, detail="Appointment not found")

    # owner, assigned professional or admin
    if user.role == UserRole.admin.value:
        return appt
    if appt.user_id == user.id or _is_assigned_professional(user, appt):
        return appt
    raise HTTPException(status_code=403, detail="Forbidden")


@router.post("", response_model=AppointmentPublic, status_code=201)
def create_appointment(
    appt: AppointmentCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    # 1) Who is the client?
    client_id = current_user.id
    if appt.user_id is not None and appt.user_id != current_user.id:
        if not is_staff(current_user):
            raise HTTPException(status_code=403, detail="Forbidden")
        if session.get(User, appt.user_id) is None:
            raise HTTPException(status_code=404, detail="User not found")
        client_id = appt.user_id

    # 2) Validate services, then professional
    services = booking.load_services(session, appt.service_ids)
    booking.get_professional(session, appt.professional_id)
    booking.check_professional_offers(session, appt.professional_id, services)

    # 3) Validate the slot (grid, past, hours, blocks, double-booking)
    minutes = booking.required_minutes(services)
    appt_start, appt_end = booking.validate_slot(
        session, appt.professional_id, appt.date, appt.start_time, minutes
    )

    # 4) Create and save appointment with price snapshots
    db_appt = Appointment(
        user_id=client_id,
        professional_id=appt.professional_id,
        date=appt.date,
        start_time=appt_start.time(),
        end_time=appt_end.time(),
        status=AppointmentStatus.pending.value,
        notes=appt.notes,
        total_value=sum(s.price or 0 for s in services),
    )
    session.add(db_appt)
    try:
        session.flush()
        for service in services:
            session.add(AppointmentService(
                appointment_id=db_appt.id,
                service_id=service.id,
                price=service.price or 0,
            ))
        session.commit()
    except IntegrityError:
        session.rollback()
        raise HTTPException(status_code=409, detail="Appointment already exists for that start time")

    session.refresh(db_appt)
    logger.info(
        "Booked appointment #%s for user #%s with professional #%s on %s %s",
        db_appt.id, client_id, db_appt.professional_id, db_appt.date, db_appt.start_time,
    )
    return db_appt


@router.get("", response_model=List[AppointmentPublic])
def list_appointments(
    status: Optional[AppointmentStatus] = None,
    on_date: Optional[date] = Query(default=None, alias="date"),
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    professional_id: Optional[int] = None,
    user_id: Optional[int] = None,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    stmt = select(Appointment)

    # clients see their own, professionals their own agenda, admins everything
    if current_user.role == UserRole.client.value:
        stmt = stmt.where(Appointment.user_id == current_user.id)
    elif current_user.role == UserRole.professional.value:
        if current_user.professional_id is None:
            return []
        stmt = stmt.where(Appointment.professional_id == current_user.professional_id)
    else:
        if professional_id is not None:
            stmt = stmt.where(Appointment.professional_id == professional_id)
        if user_id is not None:
            stmt = stmt.where(Appointment.user_id == user_id)

    if status is not None:
        stmt = stmt.where(Appointment.status == status.value)
    if on_date is not None:
        stmt = stmt.where(Appointment.date == on_date)
    if start_date is not None:
        stmt = stmt.where(Appointment.date >= start_date)
    if end_date is not None:
        stmt = stmt.where(Appointment.date <= end_date)

    stmt = stmt.order_by(Appointment.date, Appointment.start_time)
    return session.exec(stmt).all()


@router.get("/{appt_id}", response_model=AppointmentPublic)
def get_appointment(
    appt_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return _get_visible(session, appt_id, current_user)


@router.get("/{appt_id}/services", response_model=List[AppointmentServicePublic])
def get_appointment_services(
    appt_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    _get_visible(session, appt_id, current_user)
    return session.exec(
        select(AppointmentService)
        .where(AppointmentService.appointment_id == appt_id)
        .order_by(AppointmentService.id)
    ).all()


@router.patch("/{appt_id}/status", response_model=AppointmentPublic)
def update_appointment_status(
    appt_id: int,
    data: StatusUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    # 1) Only staff move appointments through the workflow
    if not is_staff(current_user):
        raise HTTPException(status_code=403, detail="Forbidden")
    target = _get_visible(session, appt_id, current_user)

    # 2) Apply transition with ledger and loyalty side effects
    return change_status(session, target, data.status)


@router.patch("/{appt_id}/cancel", response_model=AppointmentPublic)
def cancel_appointment(
    appt_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    # 1) Find the appointment (client who booked, professional or admin)
    target = _get_visible(session, appt_id, current_user)

    # 2) Already cancelled or done?
    if target.status == AppointmentStatus.cancelled.value:
        raise HTTPException(status_code=409, detail="Appointment already cancelled")
    if target.status == AppointmentStatus.completed.value:
        raise HTTPException(status_code=409, detail="Completed appointments cannot be cancelled")

    # 3) Cancel and persist
    return change_status(session, target, AppointmentStatus.cancelled)
