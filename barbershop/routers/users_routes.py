# barbershop/routers/users_routes.py

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from barbershop.db import get_session
from barbershop.models import User
from barbershop.schemas import UserPublic, UserUpdate, UserRole
from barbershop.auth import get_current_user

router = APIRouter(
    tags=["users"],
)


@router.get("/me", response_model=UserPublic)
def me(current_user: User = Depends(get_current_user)):
    return current_user


@router.patch("/me", response_model=UserPublic)
def update_me(
    data: UserUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    for key, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(current_user, key, value)

    session.add(current_user)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise HTTPException(status_code=409, detail="Email already registered")
    session.refresh(current_user)
    return current_user


@router.get("/users/{user_id}", response_model=UserPublic)
def get_user(
    user_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    # users see themselves, staff see everyone
    if current_user.id != user_id and current_user.role == UserRole.client.value:
        raise HTTPException(status_code=403, detail="Forbidden")

    user = session.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user
