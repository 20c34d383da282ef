# barbershop/routers/loyalty_routes.py

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlmodel import Session, select

from barbershop.db import get_session
from barbershop.models import LoyaltyHistory, LoyaltyReward, User
from barbershop.schemas import (
    AddPoints,
    LoyaltyHistoryPublic,
    LoyaltyRewardCreate,
    LoyaltyRewardPublic,
    LoyaltyRewardUpdate,
    LoyaltyStatus,
    UserRole,
)
from barbershop.auth import get_current_user
from barbershop.deps import require_admin, require_role
from barbershop.services import loyalty

router = APIRouter(
    tags=["loyalty"],
)


def _get_reward(session: Session, reward_id: int) -> LoyaltyReward:
    reward = session.get(LoyaltyReward, reward_id)
    if reward is None:
        raise HTTPException(status_code=404, detail="Reward not found")
    return reward


@router.get("/loyalty-rewards", response_model=List[LoyaltyRewardPublic])
def list_rewards(session: Session = Depends(get_session)):
    return session.exec(
        select(LoyaltyReward)
        .where(LoyaltyReward.is_active == True)  # noqa: E712
        .order_by(LoyaltyReward.points_cost, LoyaltyReward.id)
    ).all()


@router.get("/loyalty-rewards/{reward_id}", response_model=LoyaltyRewardPublic)
def get_reward(reward_id: int, session: Session = Depends(get_session)):
    return _get_reward(session, reward_id)


@router.post("/loyalty-rewards", response_model=LoyaltyRewardPublic, status_code=201)
def create_reward(
    data: LoyaltyRewardCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    require_admin(current_user)
    reward = LoyaltyReward(**data.model_dump())
    session.add(reward)
    session.commit()
    session.refresh(reward)
    return reward


@router.put("/loyalty-rewards/{reward_id}", response_model=LoyaltyRewardPublic)
def update_reward(
    reward_id: int,
    data: LoyaltyRewardUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    require_admin(current_user)
    reward = _get_reward(session, reward_id)
    for key, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(reward, key, value)
    session.add(reward)
    session.commit()
    session.refresh(reward)
    return reward


@router.delete("/loyalty-rewards/{reward_id}", status_code=204)
def delete_reward(
    reward_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    require_admin(current_user)
    reward = _get_reward(session, reward_id)

    redeemed = session.exec(
        select(LoyaltyHistory).where(LoyaltyHistory.reward_id == reward_id)
    ).first()
    if redeemed is not None:
        reward.is_active = False
        session.add(reward)
    else:
        session.delete(reward)

    session.commit()
    return Response(status_code=204)


@router.post("/loyalty-rewards/{reward_id}/redeem", response_model=LoyaltyHistoryPublic, status_code=201)
def redeem(
    reward_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    reward = session.get(LoyaltyReward, reward_id)
    entry = loyalty.redeem_reward(session, current_user, reward)
    session.commit()
    session.refresh(entry)
    return entry


@router.get("/me/loyalty", response_model=LoyaltyStatus)
def my_loyalty(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return loyalty.loyalty_status(session, current_user)


@router.post("/admin/loyalty/add-points", response_model=LoyaltyHistoryPublic, status_code=201)
def add_points(
    data: AddPoints,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    require_role(current_user, UserRole.admin.value, UserRole.professional.value)

    user = session.get(User, data.user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")

    entry = loyalty.add_points(session, user, data.points, data.description)
    session.commit()
    session.refresh(entry)
    return entry
