# tests/conftest.py
import os
from datetime import date, time, timedelta

# keep hashing fast and stay away from the real database
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from barbershop.auth import create_access_token, hash_password
from barbershop.db import get_session
from barbershop.main import app
from barbershop.models import Professional, Schedule, Service, ServiceCategory, User


@pytest.fixture
def session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(session):
    """Test client whose requests all run on the test session."""
    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_user(session, username, role="client", professional_id=None, points=0):
    user = User(
        username=username,
        email=f"{username}@example.com",
        password_hash=hash_password("secret123"),
        name=username.title(),
        role=role,
        professional_id=professional_id,
        loyalty_points=points,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def headers_for(user):
    return {"Authorization": f"Bearer {create_access_token({'sub': user.username})}"}


@pytest.fixture
def admin(session):
    return make_user(session, "admin", role="admin")


@pytest.fixture
def admin_headers(admin):
    return headers_for(admin)


@pytest.fixture
def customer(session):
    return make_user(session, "carlos")


@pytest.fixture
def customer_headers(customer):
    return headers_for(customer)


@pytest.fixture
def professional(session):
    pro = Professional(name="Joao Barber", specialties=["fade", "beard"])
    session.add(pro)
    session.commit()
    session.refresh(pro)

    # open every day so tests do not depend on the weekday
    for day in range(7):
        session.add(Schedule(
            professional_id=pro.id,
            day_of_week=day,
            start_time=time(9, 0),
            end_time=time(18, 0),
        ))
    session.commit()
    return pro


@pytest.fixture
def barber(session, professional):
    return make_user(session, "joao", role="professional", professional_id=professional.id)


@pytest.fixture
def barber_headers(barber):
    return headers_for(barber)


@pytest.fixture
def services(session):
    category = ServiceCategory(name="Hair")
    session.add(category)
    session.commit()
    session.refresh(category)

    haircut = Service(name="Haircut", price=3500, duration_minutes=30, category_id=category.id)
    beard = Service(name="Beard trim", price=2000, duration_minutes=15, category_id=category.id)
    treatment = Service(
        name="Hair treatment", price=None, price_type="variable",
        duration_minutes=45, category_id=category.id,
    )
    session.add_all([haircut, beard, treatment])
    session.commit()
    for service in (haircut, beard, treatment):
        session.refresh(service)
    return {"haircut": haircut, "beard": beard, "treatment": treatment}


@pytest.fixture
def next_week():
    return date.today() + timedelta(days=7)


@pytest.fixture
def book(client, customer_headers, professional, next_week):
    """Book an appointment as the customer and return the JSON body."""
    def _book(service_ids, start="10:00", day=None, headers=None, **extra):
        payload = {
            "professional_id": professional.id,
            "date": (day or next_week).isoformat(),
            "start_time": start,
            "service_ids": service_ids,
            **extra,
        }
        r = client.post("/appointments", json=payload, headers=headers or customer_headers)
        assert r.status_code == 201, r.text
        return r.json()
    return _book


@pytest.fixture
def complete(client, admin_headers):
    def _complete(appointment_id):
        r = client.patch(
            f"/appointments/{appointment_id}/status",
            json={"status": "completed"},
            headers=admin_headers,
        )
        assert r.status_code == 200, r.text
        return r.json()
    return _complete


@pytest.fixture
def account(session):
    """Create an extra user, returns ``(user, headers)``."""
    def _account(username, role="client", professional_id=None, points=0):
        user = make_user(session, username, role=role, professional_id=professional_id, points=points)
        return user, headers_for(user)
    return _account
