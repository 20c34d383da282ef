# barbershop/models.py

from typing import Optional, List
from datetime import datetime, date as Date, time

from sqlalchemy import UniqueConstraint
from sqlalchemy.types import JSON
from sqlmodel import SQLModel, Field, Column


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    username: str = Field(index=True, unique=True)
    email: str = Field(index=True, unique=True)
    password_hash: str
    name: Optional[str] = None
    phone: Optional[str] = None
    role: str = "client"  # client, professional or admin
    loyalty_points: int = 0
    # set for staff accounts that act on behalf of a professional
    professional_id: Optional[int] = Field(default=None, foreign_key="professionals.id")
    created_at: datetime = Field(default_factory=datetime.now)


class ServiceCategory(SQLModel, table=True):
    __tablename__ = "service_categories"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    icon: str = "scissors"


class Service(SQLModel, table=True):
    __tablename__ = "services"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    price: Optional[int] = None  # cents; None when price_type is "variable"
    price_type: str = "fixed"
    duration_minutes: int
    category_id: int = Field(foreign_key="service_categories.id", index=True)
    description: Optional[str] = None
    is_active: bool = True


class Professional(SQLModel, table=True):
    __tablename__ = "professionals"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    avatar: Optional[str] = None
    rating: Optional[int] = None  # 0-50, tenths of a star
    review_count: int = 0
    specialties: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    bio: Optional[str] = None
    is_active: bool = True


class ProfessionalService(SQLModel, table=True):
    __tablename__ = "professional_services"

    professional_id: int = Field(foreign_key="professionals.id", primary_key=True)
    service_id: int = Field(foreign_key="services.id", primary_key=True)


class Schedule(SQLModel, table=True):
    __tablename__ = "schedules"
    __table_args__ = (
        UniqueConstraint("professional_id", "day_of_week", name="uq_professional_day"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    professional_id: int = Field(foreign_key="professionals.id", index=True)
    day_of_week: int  # 0=Mon ... 6=Sun
    start_time: time
    end_time: time
    is_available: bool = True


class BlockedTime(SQLModel, table=True):
    __tablename__ = "blocked_times"

    id: Optional[int] = Field(default=None, primary_key=True)
    professional_id: int = Field(foreign_key="professionals.id", index=True)
    date: Date = Field(index=True)
    start: datetime
    end: datetime
    reason: Optional[str] = None


class Appointment(SQLModel, table=True):
    __tablename__ = "appointments"
    __table_args__ = (
        UniqueConstraint("professional_id", "date", "start_time", name="uq_professional_start"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    professional_id: int = Field(foreign_key="professionals.id", index=True)
    date: Date = Field(index=True)
    start_time: time
    end_time: time
    status: str = "pending"
    notes: Optional[str] = None
    total_value: int = 0  # cents
    created_at: datetime = Field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None


class AppointmentService(SQLModel, table=True):
    __tablename__ = "appointment_services"

    id: Optional[int] = Field(default=None, primary_key=True)
    appointment_id: int = Field(foreign_key="appointments.id", index=True)
    service_id: int = Field(foreign_key="services.id")
    price: int = 0  # cents, snapshot taken at booking time


class ProductCategory(SQLModel, table=True):
    __tablename__ = "product_categories"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    icon: str = "package"


class Product(SQLModel, table=True):
    __tablename__ = "products"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    price: int  # cents
    description: Optional[str] = None
    image_url: Optional[str] = None
    category_id: int = Field(foreign_key="product_categories.id", index=True)
    stock_quantity: int = 0
    in_stock: bool = False


class LoyaltyReward(SQLModel, table=True):
    __tablename__ = "loyalty_rewards"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    description: Optional[str] = None
    points_cost: int
    icon: Optional[str] = None
    is_active: bool = True


class LoyaltyHistory(SQLModel, table=True):
    __tablename__ = "loyalty_history"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    points: int  # signed
    description: Optional[str] = None
    appointment_id: Optional[int] = Field(default=None, foreign_key="appointments.id", index=True)
    reward_id: Optional[int] = Field(default=None, foreign_key="loyalty_rewards.id")
    created_at: datetime = Field(default_factory=datetime.now)


class CashFlow(SQLModel, table=True):
    __tablename__ = "cash_flow"

    id: Optional[int] = Field(default=None, primary_key=True)
    date: Date = Field(index=True)
    type: str = Field(index=True)  # INCOME, EXPENSE, REFUND, ADJUSTMENT, PRODUCT_SALE
    category: str = "general"
    amount: int  # cents; only ADJUSTMENT may be negative
    description: Optional[str] = None
    appointment_id: Optional[int] = Field(default=None, foreign_key="appointments.id", index=True)
    created_by_id: Optional[int] = Field(default=None, foreign_key="users.id")
    created_at: datetime = Field(default_factory=datetime.now)
