# barbershop/services/loyalty.py

import logging
from typing import Optional

from sqlmodel import Session, select, func

from barbershop.config import LOYALTY_POINTS_PER_SERVICE, LOYALTY_POINTS_PER_LEVEL
from barbershop.errors import LoyaltyError, NotFoundError
from barbershop.models import Appointment, AppointmentService, LoyaltyHistory, LoyaltyReward, User

logger = logging.getLogger(__name__)


def _record(session: Session, user: User, points: int, description: str, **links) -> LoyaltyHistory:
    entry = LoyaltyHistory(user_id=user.id, points=points, description=description, **links)
    session.add(user)
    session.add(entry)
    session.flush()
    return entry


def points_for_appointment(session: Session, appointment_id: int) -> int:
    """Net points currently credited for an appointment."""
    total = session.exec(
        select(func.coalesce(func.sum(LoyaltyHistory.points), 0))
        .where(LoyaltyHistory.appointment_id == appointment_id)
    ).one()
    return int(total)


def award_appointment_points(session: Session, appointment: Appointment) -> Optional[LoyaltyHistory]:
    if points_for_appointment(session, appointment.id) > 0:
        logger.info("Points for appointment #%s already awarded", appointment.id)
        return None

    service_count = len(session.exec(
        select(AppointmentService).where(AppointmentService.appointment_id == appointment.id)
    ).all())
    points = service_count * LOYALTY_POINTS_PER_SERVICE
    if points <= 0:
        return None

    user = session.get(User, appointment.user_id)
    if user is None:
        logger.warning("Appointment #%s has no client, no points awarded", appointment.id)
        return None

    user.loyalty_points += points
    logger.info("Awarded %d points to user #%s for appointment #%s", points, user.id, appointment.id)
    return _record(
        session, user, points,
        f"Completed appointment #{appointment.id}",
        appointment_id=appointment.id,
    )


def revoke_appointment_points(session: Session, appointment: Appointment) -> Optional[LoyaltyHistory]:
    credited = points_for_appointment(session, appointment.id)
    if credited <= 0:
        return None

    user = session.get(User, appointment.user_id)
    if user is None:
        return None

    # points may already have been spent; the balance never goes negative
    user.loyalty_points = max(0, user.loyalty_points - credited)
    logger.info("Revoked %d points from user #%s for appointment #%s", credited, user.id, appointment.id)
    return _record(
        session, user, -credited,
        f"Appointment #{appointment.id} reopened",
        appointment_id=appointment.id,
    )


def add_points(session: Session, user: User, points: int, description: Optional[str] = None) -> LoyaltyHistory:
    if points <= 0:
        raise LoyaltyError("Points must be greater than zero", status_code=422)

    user.loyalty_points += points
    logger.info("Added %d points to user #%s", points, user.id)
    return _record(session, user, points, description or "Points added by staff")


def redeem_reward(session: Session, user: User, reward: LoyaltyReward) -> LoyaltyHistory:
    if reward is None or not reward.is_active:
        raise NotFoundError("Reward not found")
    if user.loyalty_points < reward.points_cost:
        missing = reward.points_cost - user.loyalty_points
        raise LoyaltyError(f"Not enough points: {missing} more needed for {reward.name}")

    user.loyalty_points -= reward.points_cost
    logger.info("User #%s redeemed reward #%s for %d points", user.id, reward.id, reward.points_cost)
    return _record(
        session, user, -reward.points_cost,
        f"Redeemed {reward.name}",
        reward_id=reward.id,
    )


def loyalty_status(session: Session, user: User) -> dict:
    history = session.exec(
        select(LoyaltyHistory)
        .where(LoyaltyHistory.user_id == user.id)
        .order_by(LoyaltyHistory.created_at.desc(), LoyaltyHistory.id.desc())
    ).all()

    points = user.loyalty_points
    return {
        "user_id": user.id,
        "points": points,
        "level": points // LOYALTY_POINTS_PER_LEVEL + 1,
        "points_to_next_level": LOYALTY_POINTS_PER_LEVEL - points % LOYALTY_POINTS_PER_LEVEL,
        "history": history,
    }
