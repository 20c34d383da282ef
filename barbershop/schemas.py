# barbershop/schemas.py

from pydantic import BaseModel, Field
from enum import Enum
from datetime import datetime, date, time
from typing import List, Optional


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserRole(str, Enum):
    client = "client"
    professional = "professional"
    admin = "admin"


class PriceType(str, Enum):
    fixed = "fixed"
    variable = "variable"


class AppointmentStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    completed = "completed"
    cancelled = "cancelled"


class TransactionType(str, Enum):
    income = "INCOME"
    expense = "EXPENSE"
    refund = "REFUND"
    adjustment = "ADJUSTMENT"
    product_sale = "PRODUCT_SALE"


# --- users -------------------------------------------------------------------

class UserCreate(BaseModel):
    username: str = Field(min_length=3, max_length=50)
    email: str
    password: str = Field(min_length=8, max_length=72)
    name: Optional[str] = None
    phone: Optional[str] = None


class UserPublic(BaseModel):
    id: int
    username: str
    email: str
    name: Optional[str] = None
    phone: Optional[str] = None
    role: UserRole
    loyalty_points: int
    professional_id: Optional[int] = None


class UserUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class RoleUpdate(BaseModel):
    role: UserRole
    professional_id: Optional[int] = None


class AdminInitialize(BaseModel):
    user_id: int


# --- services ----------------------------------------------------------------

class ServiceCategoryCreate(BaseModel):
    name: str
    icon: str = "scissors"


class ServiceCategoryPublic(BaseModel):
    id: int
    name: str
    icon: str


class ServiceCreate(BaseModel):
    name: str
    price: Optional[int] = Field(default=None, ge=0)
    price_type: PriceType = PriceType.fixed
    duration_minutes: int = Field(gt=0)
    category_id: int
    description: Optional[str] = None


class ServiceUpdate(BaseModel):
    name: Optional[str] = None
    price: Optional[int] = Field(default=None, ge=0)
    price_type: Optional[PriceType] = None
    duration_minutes: Optional[int] = Field(default=None, gt=0)
    category_id: Optional[int] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None


class ServicePublic(BaseModel):
    id: int
    name: str
    price: Optional[int] = None
    price_type: PriceType
    duration_minutes: int
    category_id: int
    description: Optional[str] = None
    is_active: bool


# --- professionals -----------------------------------------------------------

class ProfessionalCreate(BaseModel):
    name: str
    avatar: Optional[str] = None
    rating: Optional[int] = Field(default=None, ge=0, le=50)
    specialties: List[str] = []
    bio: Optional[str] = None


class ProfessionalUpdate(BaseModel):
    name: Optional[str] = None
    avatar: Optional[str] = None
    rating: Optional[int] = Field(default=None, ge=0, le=50)
    review_count: Optional[int] = Field(default=None, ge=0)
    specialties: Optional[List[str]] = None
    bio: Optional[str] = None
    is_active: Optional[bool] = None


class ProfessionalPublic(BaseModel):
    id: int
    name: str
    avatar: Optional[str] = None
    rating: Optional[int] = None
    review_count: int
    specialties: List[str]
    bio: Optional[str] = None
    is_active: bool


class ProfessionalServiceAssign(BaseModel):
    service_id: int


class ScheduleEntry(BaseModel):
    day_of_week: int     # 0=Mon, 1=Tues....
    start_time: time
    end_time: time
    is_available: bool = True


class SchedulePublic(ScheduleEntry):
    id: int
    professional_id: int


class BlockedTimeCreate(BaseModel):
    date: date
    start_time: time
    end_time: time
    reason: Optional[str] = None


class BlockedTimePublic(BaseModel):
    id: int
    professional_id: int
    date: date
    start: datetime
    end: datetime
    reason: Optional[str] = None


class AvailabilityResponse(BaseModel):
    professional_id: int
    date: date
    duration_minutes: int
    available_starts: List[str]


# --- appointments ------------------------------------------------------------

class AppointmentCreate(BaseModel):
    professional_id: int
    date: date
    start_time: time
    service_ids: List[int] = Field(min_length=1)
    notes: Optional[str] = None
    # staff may book on behalf of a client
    user_id: Optional[int] = None


class AppointmentPublic(BaseModel):
    id: int
    user_id: int
    professional_id: int
    date: date
    start_time: time
    end_time: time
    status: AppointmentStatus
    notes: Optional[str] = None
    total_value: int
    created_at: datetime
    completed_at: Optional[datetime] = None


class AppointmentServicePublic(BaseModel):
    id: int
    appointment_id: int
    service_id: int
    price: int


class StatusUpdate(BaseModel):
    status: AppointmentStatus


# --- products ----------------------------------------------------------------

class ProductCategoryCreate(BaseModel):
    name: str
    icon: str = "package"


class ProductCategoryPublic(BaseModel):
    id: int
    name: str
    icon: str


class ProductCreate(BaseModel):
    name: str
    price: int = Field(ge=0)
    description: Optional[str] = None
    image_url: Optional[str] = None
    category_id: int
    stock_quantity: int = Field(default=0, ge=0)


class ProductUpdate(BaseModel):
    name: Optional[str] = None
    price: Optional[int] = Field(default=None, ge=0)
    description: Optional[str] = None
    image_url: Optional[str] = None
    category_id: Optional[int] = None
    stock_quantity: Optional[int] = Field(default=None, ge=0)


class ProductPublic(BaseModel):
    id: int
    name: str
    price: int
    description: Optional[str] = None
    image_url: Optional[str] = None
    category_id: int
    stock_quantity: int
    in_stock: bool


# --- loyalty -----------------------------------------------------------------

class LoyaltyRewardCreate(BaseModel):
    name: str
    description: Optional[str] = None
    points_cost: int = Field(gt=0)
    icon: Optional[str] = None
    is_active: bool = True


class LoyaltyRewardUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    points_cost: Optional[int] = Field(default=None, gt=0)
    icon: Optional[str] = None
    is_active: Optional[bool] = None


class LoyaltyRewardPublic(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    points_cost: int
    icon: Optional[str] = None
    is_active: bool


class AddPoints(BaseModel):
    user_id: int
    points: int = Field(gt=0)
    description: Optional[str] = None


class LoyaltyHistoryPublic(BaseModel):
    id: int
    user_id: int
    points: int
    description: Optional[str] = None
    appointment_id: Optional[int] = None
    reward_id: Optional[int] = None
    created_at: datetime


class LoyaltyStatus(BaseModel):
    user_id: int
    points: int
    level: int
    points_to_next_level: int
    history: List[LoyaltyHistoryPublic]


# --- cash flow ---------------------------------------------------------------

class CashFlowCreate(BaseModel):
    date: date
    amount: int
    type: TransactionType
    description: str
    category: Optional[str] = None
    appointment_id: Optional[int] = None


class ExpenseCreate(BaseModel):
    date: date
    amount: int = Field(gt=0)
    description: str
    category: str = "general"


class ProductSaleCreate(BaseModel):
    date: date
    description: str
    amount: Optional[int] = Field(default=None, gt=0)
    product_id: Optional[int] = None
    quantity: int = Field(default=1, gt=0)


class CashFlowPublic(BaseModel):
    id: int
    date: date
    type: TransactionType
    category: str
    amount: int
    description: Optional[str] = None
    appointment_id: Optional[int] = None
    created_by_id: Optional[int] = None
    created_at: datetime


class CategoryTotals(BaseModel):
    category: str
    income: int
    expense: int
    balance: int


class CashFlowTotals(BaseModel):
    income: int
    expense: int
    refund: int
    adjustment: int
    product_sales: int


class CashFlowSummary(BaseModel):
    start_date: date
    end_date: date
    totals: CashFlowTotals
    net_balance: int
    categories: List[CategoryTotals]
    record_count: int


class ReconciliationIssue(BaseModel):
    kind: str  # missing_income, amount_mismatch, duplicate_income, orphan_income
    appointment_id: int
    expected: int
    actual: int
    entry_ids: List[int]
    fixed: bool = False


class ReconciliationReport(BaseModel):
    checked: int
    issues: List[ReconciliationIssue]
    fixed: int


# --- reports -----------------------------------------------------------------

class DailyTotals(BaseModel):
    date: date
    income: int
    expense: int
    balance: int


class AppointmentReportLine(BaseModel):
    id: int
    date: date
    start_time: time
    client_name: str
    professional_name: str
    services: List[str]
    total: int


class FinancialReport(BaseModel):
    start_date: date
    end_date: date
    summary: CashFlowSummary
    transactions: List[CashFlowPublic]
    transactions_by_date: List[DailyTotals]
    appointments: List[AppointmentReportLine]
    generated_at: datetime


class ServiceReportLine(BaseModel):
    service_id: int
    name: str
    price: Optional[int] = None
    count: int       # bookings in any status
    completed: int
    revenue: int     # completed appointments only


class ServicesReport(BaseModel):
    start_date: date
    end_date: date
    services: List[ServiceReportLine]
    total_appointments: int
    total_services: int
    total_revenue: int
    generated_at: datetime


class ProfessionalReportLine(BaseModel):
    professional_id: int
    name: str
    pending: int
    confirmed: int
    completed: int
    cancelled: int
    total_appointments: int
    services: int    # services delivered in completed appointments
    revenue: int


class ProfessionalsReport(BaseModel):
    start_date: date
    end_date: date
    professionals: List[ProfessionalReportLine]
    total_appointments: int
    total_revenue: int
    generated_at: datetime
