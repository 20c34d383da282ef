# barbershop/routers/professionals_routes.py

from datetime import date, datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlmodel import Session, select

from barbershop.db import get_session
from barbershop.models import (
    Appointment,
    BlockedTime,
    Professional,
    ProfessionalService,
    Schedule,
    Service,
    User,
)
from barbershop.schemas import (
    AvailabilityResponse,
    BlockedTimeCreate,
    BlockedTimePublic,
    ProfessionalCreate,
    ProfessionalPublic,
    ProfessionalServiceAssign,
    ProfessionalUpdate,
    ScheduleEntry,
    SchedulePublic,
    ServicePublic,
)
from barbershop.auth import get_current_user
from barbershop.config import shop_settings
from barbershop.core import overlaps, on_slot_grid, interval
from barbershop.deps import require_admin, require_own_professional_or_admin
from barbershop.services import booking

router = APIRouter(
    tags=["professionals"],
)


def _get_or_404(session: Session, professional_id: int) -> Professional:
    professional = session.get(Professional, professional_id)
    if professional is None:
        raise HTTPException(status_code=404, detail="Professional not found")
    return professional


@router.get("/professionals", response_model=List[ProfessionalPublic])
def list_professionals(session: Session = Depends(get_session)):
    return session.exec(
        select(Professional).where(Professional.is_active == True).order_by(Professional.id)  # noqa: E712
    ).all()


@router.get("/professionals/{professional_id}", response_model=ProfessionalPublic)
def get_professional(professional_id: int, session: Session = Depends(get_session)):
    return _get_or_404(session, professional_id)


@router.post("/professionals", response_model=ProfessionalPublic, status_code=201)
def create_professional(
    data: ProfessionalCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    require_admin(current_user)
    professional = Professional(**data.model_dump())
    session.add(professional)
    session.commit()
    session.refresh(professional)
    return professional


@router.put("/professionals/{professional_id}", response_model=ProfessionalPublic)
def update_professional(
    professional_id: int,
    data: ProfessionalUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    require_admin(current_user)
    professional = _get_or_404(session, professional_id)
    for key, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(professional, key, value)
    session.add(professional)
    session.commit()
    session.refresh(professional)
    return professional


@router.delete("/professionals/{professional_id}", status_code=204)
def delete_professional(
    professional_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    require_admin(current_user)
    professional = _get_or_404(session, professional_id)

    has_appointments = session.exec(
        select(Appointment).where(Appointment.professional_id == professional_id)
    ).first()
    if has_appointments is not None:
        professional.is_active = False
        session.add(professional)
    else:
        for model in (ProfessionalService, Schedule, BlockedTime):
            for row in session.exec(select(model).where(model.professional_id == professional_id)).all():
                session.delete(row)
        for staff in session.exec(select(User).where(User.professional_id == professional_id)).all():
            staff.professional_id = None
            session.add(staff)
        session.delete(professional)

    session.commit()
    return Response(status_code=204)


# --- services offered --------------------------------------------------------

@router.get("/professionals/{professional_id}/services", response_model=List[ServicePublic])
def list_professional_services(professional_id: int, session: Session = Depends(get_session)):
    _get_or_404(session, professional_id)
    return session.exec(
        select(Service)
        .join(ProfessionalService, ProfessionalService.service_id == Service.id)
        .where(ProfessionalService.professional_id == professional_id)
        .order_by(Service.id)
    ).all()


@router.post("/professionals/{professional_id}/services", response_model=List[ServicePublic], status_code=201)
def add_professional_service(
    professional_id: int,
    data: ProfessionalServiceAssign,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    require_own_professional_or_admin(current_user, professional_id)
    _get_or_404(session, professional_id)
    if session.get(Service, data.service_id) is None:
        raise HTTPException(status_code=404, detail="Service not found")

    if session.get(ProfessionalService, (professional_id, data.service_id)) is not None:
        raise HTTPException(status_code=409, detail="Service already assigned")

    session.add(ProfessionalService(professional_id=professional_id, service_id=data.service_id))
    session.commit()
    return list_professional_services(professional_id, session)


@router.delete("/professionals/{professional_id}/services/{service_id}", status_code=204)
def remove_professional_service(
    professional_id: int,
    service_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    require_own_professional_or_admin(current_user, professional_id)
    link = session.get(ProfessionalService, (professional_id, service_id))
    if link is None:
        raise HTTPException(status_code=404, detail="Service not assigned")
    session.delete(link)
    session.commit()
    return Response(status_code=204)


# --- weekly schedule ---------------------------------------------------------

@router.get("/professionals/{professional_id}/schedules", response_model=List[SchedulePublic])
def list_schedules(professional_id: int, session: Session = Depends(get_session)):
    _get_or_404(session, professional_id)
    return session.exec(
        select(Schedule)
        .where(Schedule.professional_id == professional_id)
        .order_by(Schedule.day_of_week)
    ).all()


# Replaces the whole weekly schedule
@router.put("/professionals/{professional_id}/schedules", response_model=List[SchedulePublic])
def set_schedules(
    professional_id: int,
    entries: List[ScheduleEntry],
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    require_own_professional_or_admin(current_user, professional_id)
    _get_or_404(session, professional_id)

    if not entries:
        raise HTTPException(status_code=422, detail="Schedule must contain at least one day")
    days = [e.day_of_week for e in entries]
    for day in days:
        if not (0 <= day <= 6):
            raise HTTPException(status_code=422, detail="day_of_week must be an integer between 0 and 6")
    if len(days) != len(set(days)):
        raise HTTPException(status_code=422, detail="day_of_week cannot contain duplicates")
    slot_minutes = shop_settings["slot_minutes"]
    for e in entries:
        if e.start_time >= e.end_time:
            raise HTTPException(status_code=422, detail="start_time must be before end_time")
        if not on_slot_grid(e.start_time, slot_minutes) or not on_slot_grid(e.end_time, slot_minutes):
            raise HTTPException(status_code=422, detail=f"Time must be in increments of {slot_minutes}")

    for old in session.exec(select(Schedule).where(Schedule.professional_id == professional_id)).all():
        session.delete(old)
    session.flush()

    for e in entries:
        session.add(Schedule(professional_id=professional_id, **e.model_dump()))
    session.commit()

    return list_schedules(professional_id, session)


# --- blocked times -----------------------------------------------------------

@router.post("/professionals/{professional_id}/blocked-times", response_model=BlockedTimePublic, status_code=201)
def create_blocked_time(
    professional_id: int,
    block: BlockedTimeCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    require_own_professional_or_admin(current_user, professional_id)
    _get_or_404(session, professional_id)

    # 1) Must be a working day
    window = booking.working_window(session, professional_id, block.date)
    if window is None:
        raise HTTPException(status_code=422, detail="Not scheduled to work that day")

    # 2) Slot grid and ordering
    slot_minutes = shop_settings["slot_minutes"]
    if not on_slot_grid(block.start_time, slot_minutes) or not on_slot_grid(block.end_time, slot_minutes):
        raise HTTPException(status_code=422, detail=f"Time must be in increments of {slot_minutes}")
    if block.start_time >= block.end_time:
        raise HTTPException(status_code=422, detail="start_time must be before end_time")

    # 3) Inside working hours
    work_start, work_end = window
    block_start, block_end = interval(block.date, block.start_time, block.end_time)
    if block_start < work_start or block_end > work_end:
        raise HTTPException(status_code=422, detail="Block must be within working hours")

    # 4) No overlap with other blocks
    for existing in booking.blocks_for_day(session, professional_id, block.date):
        if overlaps(block_start, block_end, existing.start, existing.end):
            raise HTTPException(status_code=409, detail="Block overlaps existing block")

    db_block = BlockedTime(
        professional_id=professional_id,
        date=block.date,
        start=block_start,
        end=block_end,
        reason=block.reason or "Blocked by professional",
    )
    session.add(db_block)
    session.commit()
    session.refresh(db_block)
    return db_block


@router.get("/professionals/{professional_id}/blocked-times", response_model=List[BlockedTimePublic])
def list_blocked_times(
    professional_id: int,
    on_date: Optional[date] = None,
    session: Session = Depends(get_session),
):
    _get_or_404(session, professional_id)
    stmt = select(BlockedTime).where(BlockedTime.professional_id == professional_id)
    if on_date is not None:
        stmt = stmt.where(BlockedTime.date == on_date)
    return session.exec(stmt.order_by(BlockedTime.start)).all()


@router.delete("/blocked-times/{block_id}", status_code=204)
def delete_blocked_time(
    block_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    block = session.get(BlockedTime, block_id)
    if block is None:
        raise HTTPException(status_code=404, detail="Blocked time not found")
    require_own_professional_or_admin(current_user, block.professional_id)

    session.delete(block)
    session.commit()
    return Response(status_code=204)


# --- availability ------------------------------------------------------------

@router.get("/professionals/{professional_id}/availability", response_model=AvailabilityResponse)
def professional_availability(
    professional_id: int,
    date: date,
    service_ids: List[int] = Query(default=[]),
    session: Session = Depends(get_session),
):
    booking.get_professional(session, professional_id)

    minutes = 0
    if service_ids:
        services = booking.load_services(session, service_ids)
        minutes = booking.required_minutes(services)
    minutes = max(minutes, shop_settings["slot_minutes"])

    available = booking.available_starts(session, professional_id, date, minutes, now=datetime.now())
    return {
        "professional_id": professional_id,
        "date": date,
        "duration_minutes": minutes,
        "available_starts": available,
    }
