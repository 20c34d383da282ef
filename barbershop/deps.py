# barbershop/deps.py

from fastapi import HTTPException

from barbershop.models import User
from barbershop.schemas import UserRole

STAFF_ROLES = (UserRole.professional.value, UserRole.admin.value)


def require_role(user: User, *roles: str):
    if user.role not in roles:
        raise HTTPException(status_code=403, detail="Forbidden")


def require_admin(user: User):
    require_role(user, UserRole.admin.value)


def is_staff(user: User) -> bool:
    return user.role in STAFF_ROLES


def require_own_professional_or_admin(user: User, professional_id: int):
    if user.role == UserRole.admin.value:
        return
    if user.role == UserRole.professional.value and user.professional_id == professional_id:
        return
    raise HTTPException(status_code=403, detail="Forbidden")
