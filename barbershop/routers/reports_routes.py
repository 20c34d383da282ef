# barbershop/routers/reports_routes.py

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from barbershop.db import get_session
from barbershop.models import User
from barbershop.schemas import FinancialReport, ProfessionalsReport, ServicesReport
from barbershop.auth import get_current_user
from barbershop.deps import require_admin
from barbershop.services import cash_flow, reports

router = APIRouter(
    prefix="/admin/reports",
    tags=["reports"],
)


def _period(start_date: Optional[date], end_date: Optional[date]):
    start_date, end_date = cash_flow.default_period(start_date, end_date)
    if start_date > end_date:
        raise HTTPException(status_code=422, detail="start_date must be on or before end_date")
    return start_date, end_date


@router.get("/financial", response_model=FinancialReport)
def financial(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    require_admin(current_user)
    return reports.financial_report(session, *_period(start_date, end_date))


@router.get("/services", response_model=ServicesReport)
def services(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    require_admin(current_user)
    return reports.services_report(session, *_period(start_date, end_date))


@router.get("/professionals", response_model=ProfessionalsReport)
def professionals(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    require_admin(current_user)
    return reports.professionals_report(session, *_period(start_date, end_date))
