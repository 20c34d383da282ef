# barbershop/routers/services_routes.py

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlmodel import Session, select

from barbershop.db import get_session
from barbershop.models import AppointmentService, ProfessionalService, Service, ServiceCategory, User
from barbershop.schemas import (
    PriceType,
    ServiceCategoryCreate,
    ServiceCategoryPublic,
    ServiceCreate,
    ServicePublic,
    ServiceUpdate,
)
from barbershop.auth import get_current_user
from barbershop.deps import require_admin

router = APIRouter(
    tags=["services"],
)


def _check_price(price_type, price):
    if price_type == PriceType.fixed.value and price is None:
        raise HTTPException(status_code=422, detail="Fixed-price services need a price")


@router.get("/service-categories", response_model=List[ServiceCategoryPublic])
def list_service_categories(session: Session = Depends(get_session)):
    return session.exec(select(ServiceCategory).order_by(ServiceCategory.id)).all()


@router.get("/service-categories/{category_id}", response_model=ServiceCategoryPublic)
def get_service_category(category_id: int, session: Session = Depends(get_session)):
    category = session.get(ServiceCategory, category_id)
    if category is None:
        raise HTTPException(status_code=404, detail="Category not found")
    return category


@router.post("/service-categories", response_model=ServiceCategoryPublic, status_code=201)
def create_service_category(
    data: ServiceCategoryCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    require_admin(current_user)
    category = ServiceCategory(**data.model_dump())
    session.add(category)
    session.commit()
    session.refresh(category)
    return category


@router.get("/services", response_model=List[ServicePublic])
def list_services(
    category_id: Optional[int] = None,
    session: Session = Depends(get_session),
):
    stmt = select(Service).where(Service.is_active == True)  # noqa: E712
    if category_id is not None:
        stmt = stmt.where(Service.category_id == category_id)
    return session.exec(stmt.order_by(Service.id)).all()


@router.get("/services/{service_id}", response_model=ServicePublic)
def get_service(service_id: int, session: Session = Depends(get_session)):
    service = session.get(Service, service_id)
    if service is None:
        raise HTTPException(status_code=404, detail="Service not found")
    return service


@router.post("/services", response_model=ServicePublic, status_code=201)
def create_service(
    data: ServiceCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    require_admin(current_user)
    _check_price(data.price_type.value, data.price)
    if session.get(ServiceCategory, data.category_id) is None:
        raise HTTPException(status_code=422, detail="Category not found")

    service = Service(**data.model_dump(exclude={"price_type"}), price_type=data.price_type.value)
    session.add(service)
    session.commit()
    session.refresh(service)
    return service


@router.put("/services/{service_id}", response_model=ServicePublic)
def update_service(
    service_id: int,
    data: ServiceUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    require_admin(current_user)
    service = session.get(Service, service_id)
    if service is None:
        raise HTTPException(status_code=404, detail="Service not found")

    changes = data.model_dump(exclude_unset=True)
    # only price may be cleared explicitly
    changes = {k: v for k, v in changes.items() if v is not None or k == "price"}
    if "price_type" in changes:
        changes["price_type"] = PriceType(changes["price_type"]).value
    if "category_id" in changes and session.get(ServiceCategory, changes["category_id"]) is None:
        raise HTTPException(status_code=422, detail="Category not found")

    for key, value in changes.items():
        setattr(service, key, value)
    _check_price(service.price_type, service.price)

    session.add(service)
    session.commit()
    session.refresh(service)
    return service


@router.delete("/services/{service_id}", status_code=204)
def delete_service(
    service_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    require_admin(current_user)
    service = session.get(Service, service_id)
    if service is None:
        raise HTTPException(status_code=404, detail="Service not found")

    booked = session.exec(
        select(AppointmentService).where(AppointmentService.service_id == service_id)
    ).first()
    if booked is not None:
        # keep history intact, just hide it from the catalogue
        service.is_active = False
        session.add(service)
    else:
        for link in session.exec(
            select(ProfessionalService).where(ProfessionalService.service_id == service_id)
        ).all():
            session.delete(link)
        session.delete(service)

    session.commit()
    return Response(status_code=204)
