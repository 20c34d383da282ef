# barbershop/services/cash_flow.py
"""
Cash-flow ledger.

Every amount is an integer number of cents. INCOME and PRODUCT_SALE entries
credit the till, EXPENSE and REFUND debit it, ADJUSTMENT carries its own sign.

Functions here never commit, except `reconcile(fix=True)` which commits its
repairs: callers own the transaction so that a status change and its ledger
entry land together.
"""

import logging
from collections import defaultdict
from datetime import date
from typing import Iterable, List, Optional

from sqlmodel import Session, select

from barbershop.core import format_cents
from barbershop.errors import LedgerError, StockError
from barbershop.models import Appointment, AppointmentService, CashFlow, Product
from barbershop.schemas import AppointmentStatus, TransactionType

logger = logging.getLogger(__name__)

CREDIT_TYPES = (TransactionType.income.value, TransactionType.product_sale.value)
DEBIT_TYPES = (TransactionType.expense.value, TransactionType.refund.value)

DEFAULT_CATEGORIES = {
    TransactionType.income.value: "services",
    TransactionType.product_sale.value: "products",
    TransactionType.expense.value: "general",
    TransactionType.refund.value: "refunds",
    TransactionType.adjustment.value: "adjustments",
}


def _type_value(type_) -> str:
    return type_.value if isinstance(type_, TransactionType) else TransactionType(type_).value


def record_transaction(
    session: Session,
    *,
    date: date,
    type,
    amount: int,
    description: Optional[str] = None,
    category: Optional[str] = None,
    appointment_id: Optional[int] = None,
    created_by_id: Optional[int] = None,
) -> CashFlow:
    type_value = _type_value(type)

    if type_value == TransactionType.adjustment.value:
        if amount == 0:
            raise LedgerError("Adjustment amount cannot be zero")
    elif amount <= 0:
        raise LedgerError("Amount must be greater than zero")

    entry = CashFlow(
        date=date,
        type=type_value,
        category=category or DEFAULT_CATEGORIES[type_value],
        amount=amount,
        description=description,
        appointment_id=appointment_id,
        created_by_id=created_by_id,
    )
    session.add(entry)
    session.flush()

    logger.info("Recorded %s of %s (entry #%s)", type_value, format_cents(amount), entry.id)
    return entry


def list_transactions(
    session: Session,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    type=None,
    category: Optional[str] = None,
    appointment_id: Optional[int] = None,
) -> List[CashFlow]:
    stmt = select(CashFlow)

    if start_date is not None:
        stmt = stmt.where(CashFlow.date >= start_date)
    if end_date is not None:
        stmt = stmt.where(CashFlow.date <= end_date)
    if type is not None:
        stmt = stmt.where(CashFlow.type == _type_value(type))
    if category is not None:
        stmt = stmt.where(CashFlow.category == category)
    if appointment_id is not None:
        stmt = stmt.where(CashFlow.appointment_id == appointment_id)

    stmt = stmt.order_by(CashFlow.date.desc(), CashFlow.id.desc())
    return session.exec(stmt).all()


def signed_amount(entry: CashFlow) -> int:
    if entry.type in DEBIT_TYPES:
        return -entry.amount
    return entry.amount


def calculate_balance(entries: Iterable[CashFlow]) -> int:
    return sum(signed_amount(e) for e in entries)


def default_period(start_date: Optional[date], end_date: Optional[date]) -> tuple:
    """Fill a missing bound with month-to-date: the 1st of this month through today."""
    if start_date is None:
        start_date = date.today().replace(day=1)
    if end_date is None:
        end_date = date.today()
    return start_date, end_date


def summarize(
    session: Session,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> dict:
    start_date, end_date = default_period(start_date, end_date)

    entries = list_transactions(session, start_date, end_date)

    totals = {"income": 0, "expense": 0, "refund": 0, "adjustment": 0, "product_sales": 0}
    keys = {
        TransactionType.income.value: "income",
        TransactionType.expense.value: "expense",
        TransactionType.refund.value: "refund",
        TransactionType.adjustment.value: "adjustment",
        TransactionType.product_sale.value: "product_sales",
    }
    by_category = defaultdict(lambda: {"income": 0, "expense": 0})

    for entry in entries:
        totals[keys[entry.type]] += entry.amount
        amount = signed_amount(entry)
        if amount >= 0:
            by_category[entry.category]["income"] += amount
        else:
            by_category[entry.category]["expense"] += -amount

    categories = [
        {
            "category": name,
            "income": values["income"],
            "expense": values["expense"],
            "balance": values["income"] - values["expense"],
        }
        for name, values in sorted(by_category.items())
    ]

    return {
        "start_date": start_date,
        "end_date": end_date,
        "totals": totals,
        "net_balance": calculate_balance(entries),
        "categories": categories,
        "record_count": len(entries),
    }


def appointment_total(session: Session, appointment_id: int) -> int:
    lines = session.exec(
        select(AppointmentService).where(AppointmentService.appointment_id == appointment_id)
    ).all()
    return sum(line.price or 0 for line in lines)


def income_entries(session: Session, appointment_id: int) -> List[CashFlow]:
    return session.exec(
        select(CashFlow)
        .where(CashFlow.appointment_id == appointment_id)
        .where(CashFlow.type == TransactionType.income.value)
        .order_by(CashFlow.id)
    ).all()


def record_appointment_income(session: Session, appointment: Appointment) -> Optional[CashFlow]:
    """Book the income of a completed appointment.

    Idempotent: an existing INCOME entry for the appointment is returned
    untouched. Nothing is recorded when the services add up to zero
    (variable-price services only).
    """
    existing = income_entries(session, appointment.id)
    if existing:
        logger.info("Appointment #%s already has income entry #%s", appointment.id, existing[0].id)
        return existing[0]

    total = appointment_total(session, appointment.id)
    appointment.total_value = total
    if total == 0:
        logger.warning("Appointment #%s has no billable services, no income recorded", appointment.id)
        return None

    return record_transaction(
        session,
        date=appointment.date,
        type=TransactionType.income,
        amount=total,
        description=f"Service payment - appointment #{appointment.id}",
        appointment_id=appointment.id,
    )


def remove_appointment_income(session: Session, appointment_id: int) -> List[CashFlow]:
    removed = income_entries(session, appointment_id)
    if not removed:
        logger.info("No income entry for appointment #%s, nothing to remove", appointment_id)
        return []

    for entry in removed:
        session.delete(entry)
    session.flush()

    logger.info(
        "Removed %d income entr%s for appointment #%s",
        len(removed), "y" if len(removed) == 1 else "ies", appointment_id,
    )
    return removed


def record_expense(
    session: Session,
    date: date,
    amount: int,
    description: str,
    category: str = "general",
    created_by_id: Optional[int] = None,
) -> CashFlow:
    return record_transaction(
        session,
        date=date,
        type=TransactionType.expense,
        amount=amount,
        description=description,
        category=category,
        created_by_id=created_by_id,
    )


def record_product_sale(
    session: Session,
    date: date,
    description: str,
    amount: Optional[int] = None,
    product: Optional[Product] = None,
    quantity: int = 1,
    created_by_id: Optional[int] = None,
) -> CashFlow:
    if product is not None:
        if product.stock_quantity < quantity:
            raise StockError(f"Only {product.stock_quantity} unit(s) of {product.name} in stock")
        product.stock_quantity -= quantity
        product.in_stock = product.stock_quantity > 0
        session.add(product)
        if amount is None:
            amount = product.price * quantity
        logger.info("Sold %d x %s, %d left", quantity, product.name, product.stock_quantity)

    if amount is None:
        raise LedgerError("amount is required when no product is given")

    return record_transaction(
        session,
        date=date,
        type=TransactionType.product_sale,
        amount=amount,
        description=description,
        created_by_id=created_by_id,
    )


def _issue(kind, appointment_id, expected, actual, entries):
    return {
        "kind": kind,
        "appointment_id": appointment_id,
        "expected": expected,
        "actual": actual,
        "entry_ids": [e.id for e in entries],
        "fixed": False,
    }


def reconcile(session: Session, fix: bool = False) -> dict:
    """Audit that every completed appointment has exactly one income entry.

    The entry must equal the sum of the appointment's service prices, and no
    other appointment may carry one. With ``fix`` the discrepancies are
    repaired and committed.
    """
    completed = session.exec(
        select(Appointment)
        .where(Appointment.status == AppointmentStatus.completed.value)
        .order_by(Appointment.id)
    ).all()

    by_appointment = defaultdict(list)
    linked = session.exec(
        select(CashFlow)
        .where(CashFlow.type == TransactionType.income.value)
        .where(CashFlow.appointment_id.is_not(None))
        .order_by(CashFlow.id)
    ).all()
    for entry in linked:
        by_appointment[entry.appointment_id].append(entry)

    issues = []
    for appt in completed:
        expected = appointment_total(session, appt.id)
        entries = by_appointment.pop(appt.id, [])

        if not entries:
            if expected == 0:
                continue
            issue = _issue("missing_income", appt.id, expected, 0, [])
            if fix:
                record_appointment_income(session, appt)
                issue["fixed"] = True
            issues.append(issue)
            continue

        keep, extra = entries[0], entries[1:]
        if extra:
            issue = _issue("duplicate_income", appt.id, expected, sum(e.amount for e in entries), extra)
            if fix:
                for entry in extra:
                    session.delete(entry)
                issue["fixed"] = True
            issues.append(issue)

        if keep.amount != expected:
            issue = _issue("amount_mismatch", appt.id, expected, keep.amount, [keep])
            if fix:
                if expected == 0:
                    session.delete(keep)
                else:
                    keep.amount = expected
                    session.add(keep)
                appt.total_value = expected
                session.add(appt)
                issue["fixed"] = True
            issues.append(issue)

    # whatever is left belongs to appointments that are not completed
    for appointment_id, entries in by_appointment.items():
        issue = _issue("orphan_income", appointment_id, 0, sum(e.amount for e in entries), entries)
        if fix:
            for entry in entries:
                session.delete(entry)
            issue["fixed"] = True
        issues.append(issue)

    fixed = sum(1 for i in issues if i["fixed"])
    if fix:
        session.commit()

    for issue in issues:
        logger.log(
            logging.INFO if issue["fixed"] else logging.WARNING,
            "Ledger %s on appointment #%s: expected %s, found %s%s",
            issue["kind"],
            issue["appointment_id"],
            format_cents(issue["expected"]),
            format_cents(issue["actual"]),
            " (fixed)" if issue["fixed"] else "",
        )
    logger.info("Reconciled %d completed appointments, %d issue(s), %d fixed", len(completed), len(issues), fixed)

    return {"checked": len(completed), "issues": issues, "fixed": fixed}
