# barbershop/routers/admin_routes.py

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from barbershop.db import get_session
from barbershop.models import Professional, User
from barbershop.schemas import AdminInitialize, RoleUpdate, UserPublic, UserRole
from barbershop.auth import get_current_user
from barbershop.deps import require_admin

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
)


@router.post("/initialize", response_model=UserPublic)
def initialize_admin(
    data: AdminInitialize,
    session: Session = Depends(get_session),
):
    # Only usable on a fresh install, before any admin exists
    existing = session.exec(
        select(User).where(User.role == UserRole.admin.value)
    ).first()
    if existing is not None:
        raise HTTPException(status_code=403, detail="An admin already exists")

    user = session.get(User, data.user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")

    user.role = UserRole.admin.value
    session.add(user)
    session.commit()
    session.refresh(user)
    logger.info("User #%s (%s) initialized as first admin", user.id, user.username)
    return user


@router.patch("/users/{user_id}/role", response_model=UserPublic)
def update_role(
    user_id: int,
    data: RoleUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    require_admin(current_user)

    user = session.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")

    if data.role == UserRole.professional:
        if data.professional_id is None:
            raise HTTPException(status_code=422, detail="professional_id is required for professionals")
        if session.get(Professional, data.professional_id) is None:
            raise HTTPException(status_code=404, detail="Professional not found")
        user.professional_id = data.professional_id
    elif data.role == UserRole.client:
        user.professional_id = None
    elif data.professional_id is not None:
        if session.get(Professional, data.professional_id) is None:
            raise HTTPException(status_code=404, detail="Professional not found")
        user.professional_id = data.professional_id

    old_role = user.role
    user.role = data.role.value
    session.add(user)
    session.commit()
    session.refresh(user)
    logger.info("User #%s role changed: %s -> %s", user.id, old_role, user.role)
    return user
