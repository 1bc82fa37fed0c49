"""Pydantic schemas shared across the services."""
from __future__ import annotations

from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field, computed_field, field_validator, model_validator

from .liveness import is_lock_online, signal_label
from .models import BookingStatus, LockStatus, PaymentMethod, PaymentStatus, RoleEnum, RoomStatus


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class SignUpRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)


class UserRead(BaseModel):
    id: int
    email: EmailStr
    created_at: datetime

    model_config = {"from_attributes": True}


class SessionInfo(BaseModel):
    token_id: str
    expires_at: datetime


class SessionRead(BaseModel):
    user: Optional[UserRead] = None
    session: Optional[SessionInfo] = None
    is_authenticated: bool = False


class HotelBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    address: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[EmailStr] = None
    timezone: str = "UTC"


class HotelCreate(HotelBase):
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)


class HotelUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    address: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[EmailStr] = None
    timezone: Optional[str] = None

    @field_validator("name", "timezone")
    @classmethod
    def reject_null(cls, value):
        return _reject_null(value)


class HotelRead(HotelBase):
    id: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ProfileUpdate(BaseModel):
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)


class ProfileRead(BaseModel):
    id: int
    user_id: int
    hotel_id: int
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: RoleEnum

    model_config = {"from_attributes": True}


class HotelContext(BaseModel):
    hotel: HotelRead
    profile: ProfileRead


def _require_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    stripped = value.strip()
    if not stripped:
        raise ValueError("must not be blank")
    return stripped


def _reject_null(value):
    # Partial updates may omit a field, but an explicit null would clear a required column.
    if value is None:
        raise ValueError("may not be null")
    return value


class RoomBase(BaseModel):
    room_number: str = Field(..., max_length=20)
    room_type: str = Field(..., max_length=50)
    floor: int = Field(1, ge=1)
    capacity: int = Field(1, ge=1)
    price_per_night: float = Field(..., gt=0)
    status: RoomStatus = RoomStatus.AVAILABLE
    amenities: List[str] = Field(default_factory=list)

    @field_validator("room_number", "room_type")
    @classmethod
    def strip_text(cls, value: Optional[str]) -> Optional[str]:
        return _require_text(value)


class RoomCreate(RoomBase):
    pass


class RoomUpdate(BaseModel):
    room_number: Optional[str] = Field(None, max_length=20)
    room_type: Optional[str] = Field(None, max_length=50)
    floor: Optional[int] = Field(None, ge=1)
    capacity: Optional[int] = Field(None, ge=1)
    price_per_night: Optional[float] = Field(None, gt=0)
    status: Optional[RoomStatus] = None
    amenities: Optional[List[str]] = None

    @field_validator("room_number", "room_type", "floor", "capacity", "price_per_night", "status", "amenities")
    @classmethod
    def reject_null(cls, value):
        return _reject_null(value)

    @field_validator("room_number", "room_type")
    @classmethod
    def strip_text(cls, value: Optional[str]) -> Optional[str]:
        return _require_text(value)


class RoomRead(RoomBase):
    id: int
    hotel_id: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class GuestBase(BaseModel):
    first_name: str = Field(..., max_length=100)
    last_name: str = Field(..., max_length=100)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=50)
    id_type: Optional[str] = Field(None, max_length=50)
    id_number: Optional[str] = Field(None, max_length=100)
    address: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=100)
    country: Optional[str] = Field(None, max_length=100)
    date_of_birth: Optional[date] = None

    @field_validator("first_name", "last_name")
    @classmethod
    def strip_names(cls, value: Optional[str]) -> Optional[str]:
        return _require_text(value)


class GuestCreate(GuestBase):
    room_id: Optional[int] = Field(None, description="Assign the new guest to this room right away")
    check_in_date: Optional[date] = None
    check_out_date: Optional[date] = None


class GuestUpdate(BaseModel):
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    id_type: Optional[str] = Field(None, max_length=50)
    id_number: Optional[str] = Field(None, max_length=100)
    address: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=100)
    country: Optional[str] = Field(None, max_length=100)
    date_of_birth: Optional[date] = None

    @field_validator("first_name", "last_name", "email")
    @classmethod
    def reject_null(cls, value):
        return _reject_null(value)

    @field_validator("first_name", "last_name")
    @classmethod
    def strip_names(cls, value: Optional[str]) -> Optional[str]:
        return _require_text(value)


class GuestRead(GuestBase):
    id: int
    hotel_id: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class GuestSummary(BaseModel):
    first_name: str
    last_name: str
    email: str

    model_config = {"from_attributes": True}


class RoomSummary(BaseModel):
    room_number: str
    room_type: str

    model_config = {"from_attributes": True}


class BookingBase(BaseModel):
    guest_id: int
    room_id: int
    check_in_date: date
    check_out_date: date
    total_amount: float = Field(0.0, ge=0)
    status: BookingStatus = BookingStatus.CONFIRMED
    special_requests: Optional[str] = Field(None, max_length=1000)

    @model_validator(mode="after")
    def check_dates(self) -> "BookingBase":
        if self.check_out_date <= self.check_in_date:
            raise ValueError("check_out_date must be after check_in_date")
        return self


class BookingCreate(BookingBase):
    pass


class BookingUpdate(BaseModel):
    guest_id: Optional[int] = None
    room_id: Optional[int] = None
    check_in_date: Optional[date] = None
    check_out_date: Optional[date] = None
    total_amount: Optional[float] = Field(None, ge=0)
    status: Optional[BookingStatus] = None
    special_requests: Optional[str] = Field(None, max_length=1000)

    @field_validator("guest_id", "room_id", "check_in_date", "check_out_date", "total_amount", "status")
    @classmethod
    def reject_null(cls, value):
        return _reject_null(value)


class BookingRead(BaseModel):
    id: int
    hotel_id: int
    guest_id: int
    room_id: int
    check_in_date: date
    check_out_date: date
    total_amount: float
    status: BookingStatus
    special_requests: Optional[str] = None
    created_at: datetime
    guest: GuestSummary
    room: RoomSummary

    model_config = {"from_attributes": True}


class PaymentBase(BaseModel):
    booking_id: int
    amount: float = Field(..., gt=0)
    payment_method: PaymentMethod
    payment_status: PaymentStatus = PaymentStatus.PENDING
    transaction_id: Optional[str] = Field(None, max_length=100)
    paid_at: Optional[datetime] = None


class PaymentCreate(PaymentBase):
    pass


class PaymentUpdate(BaseModel):
    amount: Optional[float] = Field(None, gt=0)
    payment_method: Optional[PaymentMethod] = None
    payment_status: Optional[PaymentStatus] = None
    transaction_id: Optional[str] = Field(None, max_length=100)
    paid_at: Optional[datetime] = None

    @field_validator("amount", "payment_method", "payment_status")
    @classmethod
    def reject_null(cls, value):
        return _reject_null(value)


class PaymentRead(PaymentBase):
    id: int
    hotel_id: int
    created_at: datetime

    model_config = {"from_attributes": True}


class PaymentSummary(BaseModel):
    total_revenue: float
    revenue_this_month: float
    by_status: dict[str, int]


class SmartLockCreate(BaseModel):
    room_id: int
    lock_id: str = Field(..., min_length=1, max_length=100)
    status: LockStatus = LockStatus.LOCKED
    battery_level: int = Field(100, ge=0, le=100)
    signal_strength: Optional[int] = Field(None, ge=0, le=100)
    error_message: Optional[str] = None


class SmartLockUpdate(BaseModel):
    room_id: Optional[int] = None
    status: Optional[LockStatus] = None
    battery_level: Optional[int] = Field(None, ge=0, le=100)
    signal_strength: Optional[int] = Field(None, ge=0, le=100)
    error_message: Optional[str] = None

    @field_validator("room_id", "status")
    @classmethod
    def reject_null(cls, value):
        return _reject_null(value)


class SmartLockRead(BaseModel):
    id: int
    hotel_id: int
    room_id: int
    lock_id: str
    status: LockStatus
    battery_level: Optional[int] = None
    signal_strength: Optional[int] = None
    last_heartbeat: Optional[datetime] = None
    last_ping: Optional[datetime] = None
    error_message: Optional[str] = None
    created_at: datetime
    room: RoomSummary

    model_config = {"from_attributes": True}

    @computed_field  # type: ignore[misc]
    @property
    def is_online(self) -> bool:
        return is_lock_online(self.last_ping)

    @computed_field  # type: ignore[misc]
    @property
    def signal(self) -> str:
        return signal_label(self.signal_strength)


class HotelSettings(BaseModel):
    name: str = Field("Grand Plaza Hotel", min_length=1, max_length=200)
    address: str = "123 Main Street, City, State 12345"
    phone: str = "+1 (555) 123-4567"
    email: EmailStr = "info@grandplaza.com"
    timezone: str = "UTC-5 (Eastern)"


class NotificationSettings(BaseModel):
    check_ins: bool = True
    payments: bool = True
    maintenance: bool = False
    security: bool = True
    low_battery: bool = True


class SearchResult(BaseModel):
    type: Literal["room", "guest", "booking"]
    id: int
    title: str
    description: str
    url: str


class DemoDataRequest(BaseModel):
    rooms_count: int = Field(20, ge=0, le=400)
    guests_count: int = Field(30, ge=0, le=500)
    locks_count: int = Field(10, ge=0, le=400)


class DemoDataSummary(BaseModel):
    rooms_inserted: int
    guests_inserted: int
    bookings_inserted: int
    payments_inserted: int
    locks_inserted: int


class RoomStats(BaseModel):
    total: int
    available: int
    occupied: int
    maintenance: int
    cleaning: int


class LockStats(BaseModel):
    total: int
    online: int
    offline: int


class DashboardOverview(BaseModel):
    hotel_name: str
    rooms: RoomStats
    guests: int
    revenue_total: float
    revenue_this_month: float
    locks: LockStats


class DailyRevenue(BaseModel):
    day: date
    amount: float


class AnalyticsReport(BaseModel):
    occupancy_rate: float
    revenue_by_day: List[DailyRevenue]
    bookings_by_status: dict[str, int]


class Notification(BaseModel):
    id: str
    title: str
    message: str
    type: Literal["info", "warning", "success", "error"]
