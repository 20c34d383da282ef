# barbershop/routers/auth_routes.py

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from barbershop.db import get_session
from barbershop.models import User
from barbershop.schemas import Token, UserCreate, UserPublic, UserRole
from barbershop.auth import find_user, hash_password, verify_password, create_access_token

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["auth"],
)


@router.post("/register", status_code=201, response_model=UserPublic)
def register(
    user: UserCreate,
    session: Session = Depends(get_session),
):
    # 1) Check if username or email already exists
    existing = session.exec(
        select(User).where((User.username == user.username) | (User.email == user.email))
    ).first()
    if existing is not None:
        raise HTTPException(status_code=409, detail="Username or email already registered")

    # 2) Create user in DB, always as a client
    db_user = User(
        username=user.username,
        email=user.email,
        password_hash=hash_password(user.password),
        name=user.name,
        phone=user.phone,
        role=UserRole.client.value,
    )

    session.add(db_user)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise HTTPException(status_code=409, detail="Username or email already registered")

    session.refresh(db_user)
    logger.info("Registered user #%s (%s)", db_user.id, db_user.username)
    return db_user


@router.post("/login", response_model=Token)
def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    session: Session = Depends(get_session),
):
    user = find_user(session, form_data.username)

    if user is None or not verify_password(form_data.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    token = create_access_token({"sub": user.username})
    return {"access_token": token, "token_type": "bearer"}
