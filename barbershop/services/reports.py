# barbershop/services/reports.py

from collections import defaultdict
from datetime import date, datetime
from typing import List

from sqlmodel import Session, select

from barbershop.models import Appointment, AppointmentService, Professional, Service, User
from barbershop.schemas import AppointmentStatus
from barbershop.services import cash_flow


def completed_appointments(session: Session, start_date: date, end_date: date) -> List[Appointment]:
    return session.exec(
        select(Appointment)
        .where(Appointment.status == AppointmentStatus.completed.value)
        .where(Appointment.date >= start_date)
        .where(Appointment.date <= end_date)
        .order_by(Appointment.date, Appointment.start_time)
    ).all()


def _service_lines(session: Session, appointment_id: int):
    return session.exec(
        select(AppointmentService, Service)
        .join(Service, Service.id == AppointmentService.service_id)
        .where(AppointmentService.appointment_id == appointment_id)
    ).all()


def financial_report(session: Session, start_date: date, end_date: date) -> dict:
    transactions = cash_flow.list_transactions(session, start_date, end_date)
    summary = cash_flow.summarize(session, start_date, end_date)

    by_date = defaultdict(lambda: {"income": 0, "expense": 0})
    for entry in transactions:
        amount = cash_flow.signed_amount(entry)
        if amount >= 0:
            by_date[entry.date]["income"] += amount
        else:
            by_date[entry.date]["expense"] += -amount

    appointments = []
    for appt in completed_appointments(session, start_date, end_date):
        client = session.get(User, appt.user_id)
        professional = session.get(Professional, appt.professional_id)
        lines = _service_lines(session, appt.id)
        appointments.append({
            "id": appt.id,
            "date": appt.date,
            "start_time": appt.start_time,
            "client_name": (client.name or client.username) if client else "Unknown client",
            "professional_name": professional.name if professional else "Unknown professional",
            "services": [service.name for _, service in lines],
            "total": sum(line.price for line, _ in lines),
        })

    return {
        "start_date": start_date,
        "end_date": end_date,
        "summary": summary,
        "transactions": transactions,
        "transactions_by_date": [
            {"date": day, "income": v["income"], "expense": v["expense"], "balance": v["income"] - v["expense"]}
            for day, v in sorted(by_date.items())
        ],
        "appointments": appointments,
        "generated_at": datetime.now(),
    }


def appointments_in_period(session: Session, start_date: date, end_date: date) -> List[Appointment]:
    return session.exec(
        select(Appointment)
        .where(Appointment.date >= start_date)
        .where(Appointment.date <= end_date)
        .order_by(Appointment.date, Appointment.start_time)
    ).all()


def services_report(session: Session, start_date: date, end_date: date) -> dict:
    """Bookings per service in the period.

    ``count`` includes every status; revenue comes from completed
    appointments only, at the booked price.
    """
    stats = {}
    for service in session.exec(select(Service).where(Service.is_active == True)).all():  # noqa: E712
        stats[service.id] = _service_row(service)

    appointments = appointments_in_period(session, start_date, end_date)
    for appt in appointments:
        completed = appt.status == AppointmentStatus.completed.value
        for line, service in _service_lines(session, appt.id):
            row = stats.get(service.id)
            if row is None:
                row = stats[service.id] = _service_row(service)
            row["count"] += 1
            if completed:
                row["completed"] += 1
                row["revenue"] += line.price

    rows = sorted(stats.values(), key=lambda r: (-r["revenue"], -r["count"], r["service_id"]))
    return {
        "start_date": start_date,
        "end_date": end_date,
        "services": rows,
        "total_appointments": len(appointments),
        "total_services": sum(r["count"] for r in rows),
        "total_revenue": sum(r["revenue"] for r in rows),
        "generated_at": datetime.now(),
    }


def _service_row(service: Service) -> dict:
    return {
        "service_id": service.id,
        "name": service.name,
        "price": service.price,
        "count": 0,
        "completed": 0,
        "revenue": 0,
    }


def _professional_row(professional: Professional) -> dict:
    row = {"professional_id": professional.id, "name": professional.name, "services": 0, "revenue": 0}
    row.update({status.value: 0 for status in AppointmentStatus})
    return row


def professionals_report(session: Session, start_date: date, end_date: date) -> dict:
    stats = {}
    for professional in session.exec(
        select(Professional).where(Professional.is_active == True).order_by(Professional.id)  # noqa: E712
    ).all():
        stats[professional.id] = _professional_row(professional)

    appointments = appointments_in_period(session, start_date, end_date)
    for appt in appointments:
        row = stats.get(appt.professional_id)
        if row is None:
            # deactivated professionals still show up when they had bookings
            professional = session.get(Professional, appt.professional_id)
            if professional is None:
                continue
            row = stats[appt.professional_id] = _professional_row(professional)

        row[appt.status] += 1
        if appt.status == AppointmentStatus.completed.value:
            lines = _service_lines(session, appt.id)
            row["services"] += len(lines)
            row["revenue"] += sum(line.price for line, _ in lines)

    rows = []
    for row in stats.values():
        row["total_appointments"] = sum(row[status.value] for status in AppointmentStatus)
        rows.append(row)
    rows.sort(key=lambda r: (-r["revenue"], -r["total_appointments"], r["professional_id"]))

    return {
        "start_date": start_date,
        "end_date": end_date,
        "professionals": rows,
        "total_appointments": len(appointments),
        "total_revenue": sum(r["revenue"] for r in rows),
        "generated_at": datetime.now(),
    }
