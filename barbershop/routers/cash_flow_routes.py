# barbershop/routers/cash_flow_routes.py

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from barbershop.db import get_session
from barbershop.models import Appointment, Product, User
from barbershop.schemas import (
    CashFlowCreate,
    CashFlowPublic,
    CashFlowSummary,
    ExpenseCreate,
    ProductSaleCreate,
    ReconciliationReport,
    TransactionType,
    UserRole,
)
from barbershop.auth import get_current_user
from barbershop.deps import require_admin, require_role
from barbershop.services import cash_flow

router = APIRouter(
    prefix="/admin/cash-flow",
    tags=["cash-flow"],
)


@router.get("", response_model=List[CashFlowPublic])
def list_cash_flow(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    type: Optional[TransactionType] = None,
    category: Optional[str] = None,
    appointment_id: Optional[int] = None,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    require_admin(current_user)
    return cash_flow.list_transactions(
        session,
        start_date=start_date,
        end_date=end_date,
        type=type,
        category=category,
        appointment_id=appointment_id,
    )


@router.post("", response_model=CashFlowPublic, status_code=201)
def create_cash_flow(
    data: CashFlowCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    require_admin(current_user)
    if data.type == TransactionType.income and data.appointment_id is not None:
        # appointment income only comes from completing the appointment
        raise HTTPException(status_code=422, detail="Appointment income is recorded when the appointment is completed")
    if data.appointment_id is not None and session.get(Appointment, data.appointment_id) is None:
        raise HTTPException(status_code=404, detail="Appointment not found")

    entry = cash_flow.record_transaction(
        session,
        date=data.date,
        type=data.type,
        amount=data.amount,
        description=data.description,
        category=data.category,
        appointment_id=data.appointment_id,
        created_by_id=current_user.id,
    )
    session.commit()
    session.refresh(entry)
    return entry


@router.post("/expense", response_model=CashFlowPublic, status_code=201)
def create_expense(
    data: ExpenseCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    require_admin(current_user)
    entry = cash_flow.record_expense(
        session,
        date=data.date,
        amount=data.amount,
        description=data.description,
        category=data.category,
        created_by_id=current_user.id,
    )
    session.commit()
    session.refresh(entry)
    return entry


@router.post("/product-sale", response_model=CashFlowPublic, status_code=201)
def create_product_sale(
    data: ProductSaleCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    require_role(current_user, UserRole.admin.value, UserRole.professional.value)

    product = None
    if data.product_id is not None:
        product = session.get(Product, data.product_id)
        if product is None:
            raise HTTPException(status_code=404, detail="Product not found")

    entry = cash_flow.record_product_sale(
        session,
        date=data.date,
        description=data.description,
        amount=data.amount,
        product=product,
        quantity=data.quantity,
        created_by_id=current_user.id,
    )
    session.commit()
    session.refresh(entry)
    return entry


@router.get("/summary", response_model=CashFlowSummary)
def cash_flow_summary(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    require_admin(current_user)
    return cash_flow.summarize(session, start_date, end_date)


# Dry run: reports discrepancies without touching the ledger
@router.get("/reconciliation", response_model=ReconciliationReport)
def check_reconciliation(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    require_admin(current_user)
    return cash_flow.reconcile(session, fix=False)


@router.post("/reconciliation", response_model=ReconciliationReport)
def fix_reconciliation(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    require_admin(current_user)
    return cash_flow.reconcile(session, fix=True)
