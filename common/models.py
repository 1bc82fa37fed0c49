"""SQLAlchemy models shared across all services."""
from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any, List, Optional

from sqlalchemy import (
    Date,
    DateTime,
    Enum as SqlEnum,
    Float,
    ForeignKey,
    Integer,
    JSON,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .database import Base


class RoleEnum(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    STAFF = "staff"


class RoomStatus(str, Enum):
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    MAINTENANCE = "maintenance"
    CLEANING = "cleaning"


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"
    CANCELLED = "cancelled"


class PaymentMethod(str, Enum):
    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"
    CASH = "cash"
    BANK_TRANSFER = "bank_transfer"


class PaymentStatus(str, Enum):
    COMPLETED = "completed"
    PENDING = "pending"
    FAILED = "failed"
    REFUNDED = "refunded"


class LockStatus(str, Enum):
    LOCKED = "locked"
    UNLOCKED = "unlocked"


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class User(TimestampMixin, Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255))

    profile: Mapped[Optional["Profile"]] = relationship(back_populates="user", cascade="all, delete-orphan")


class RevokedToken(Base):
    __tablename__ = "revoked_tokens"

    jti: Mapped[str] = mapped_column(String(64), primary_key=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime, index=True)
    revoked_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class Hotel(TimestampMixin, Base):
    __tablename__ = "hotels"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(200))
    address: Mapped[Optional[str]] = mapped_column(String(255), default=None)
    phone: Mapped[Optional[str]] = mapped_column(String(50), default=None)
    email: Mapped[Optional[str]] = mapped_column(String(255), default=None)
    timezone: Mapped[str] = mapped_column(String(64), default="UTC")

    profiles: Mapped[List["Profile"]] = relationship(back_populates="hotel", cascade="all, delete-orphan")
    rooms: Mapped[List["Room"]] = relationship(back_populates="hotel", cascade="all, delete-orphan")
    guests: Mapped[List["Guest"]] = relationship(back_populates="hotel", cascade="all, delete-orphan")
    smart_locks: Mapped[List["SmartLock"]] = relationship(back_populates="hotel", cascade="all, delete-orphan")
    settings: Mapped[List["HotelSetting"]] = relationship(back_populates="hotel", cascade="all, delete-orphan")


class Profile(TimestampMixin, Base):
    __tablename__ = "profiles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), unique=True, index=True)
    hotel_id: Mapped[int] = mapped_column(ForeignKey("hotels.id", ondelete="CASCADE"), index=True)
    first_name: Mapped[Optional[str]] = mapped_column(String(100), default=None)
    last_name: Mapped[Optional[str]] = mapped_column(String(100), default=None)
    role: Mapped[RoleEnum] = mapped_column(SqlEnum(RoleEnum), default=RoleEnum.STAFF)

    user: Mapped[User] = relationship(back_populates="profile")
    hotel: Mapped[Hotel] = relationship(back_populates="profiles")


class Room(TimestampMixin, Base):
    __tablename__ = "rooms"
    __table_args__ = (UniqueConstraint("hotel_id", "room_number", name="uq_rooms_hotel_room_number"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    hotel_id: Mapped[int] = mapped_column(ForeignKey("hotels.id", ondelete="CASCADE"), index=True)
    room_number: Mapped[str] = mapped_column(String(20), index=True)
    room_type: Mapped[str] = mapped_column(String(50))
    floor: Mapped[int] = mapped_column(Integer, default=1)
    capacity: Mapped[int] = mapped_column(Integer, default=1)
    price_per_night: Mapped[float] = mapped_column(Float)
    status: Mapped[RoomStatus] = mapped_column(SqlEnum(RoomStatus), default=RoomStatus.AVAILABLE, index=True)
    amenities: Mapped[list[str]] = mapped_column(JSON, default=list)

    hotel: Mapped[Hotel] = relationship(back_populates="rooms")
    bookings: Mapped[List["Booking"]] = relationship(back_populates="room", cascade="all, delete-orphan")
    smart_locks: Mapped[List["SmartLock"]] = relationship(back_populates="room", cascade="all, delete-orphan")


class Guest(TimestampMixin, Base):
    __tablename__ = "guests"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    hotel_id: Mapped[int] = mapped_column(ForeignKey("hotels.id", ondelete="CASCADE"), index=True)
    first_name: Mapped[str] = mapped_column(String(100))
    last_name: Mapped[str] = mapped_column(String(100))
    email: Mapped[str] = mapped_column(String(255), index=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), default=None)
    id_type: Mapped[Optional[str]] = mapped_column(String(50), default=None)
    id_number: Mapped[Optional[str]] = mapped_column(String(100), default=None)
    address: Mapped[Optional[str]] = mapped_column(String(255), default=None)
    city: Mapped[Optional[str]] = mapped_column(String(100), default=None)
    country: Mapped[Optional[str]] = mapped_column(String(100), default=None)
    date_of_birth: Mapped[Optional[date]] = mapped_column(Date, default=None)

    hotel: Mapped[Hotel] = relationship(back_populates="guests")
    bookings: Mapped[List["Booking"]] = relationship(back_populates="guest", cascade="all, delete-orphan")


class Booking(TimestampMixin, Base):
    __tablename__ = "bookings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    hotel_id: Mapped[int] = mapped_column(ForeignKey("hotels.id", ondelete="CASCADE"), index=True)
    guest_id: Mapped[int] = mapped_column(ForeignKey("guests.id", ondelete="CASCADE"), index=True)
    room_id: Mapped[int] = mapped_column(ForeignKey("rooms.id", ondelete="CASCADE"), index=True)
    check_in_date: Mapped[date] = mapped_column(Date, index=True)
    check_out_date: Mapped[date] = mapped_column(Date, index=True)
    total_amount: Mapped[float] = mapped_column(Float, default=0.0)
    status: Mapped[BookingStatus] = mapped_column(SqlEnum(BookingStatus), default=BookingStatus.CONFIRMED)
    special_requests: Mapped[Optional[str]] = mapped_column(Text, default=None)

    guest: Mapped[Guest] = relationship(back_populates="bookings")
    room: Mapped[Room] = relationship(back_populates="bookings")
    payments: Mapped[List["Payment"]] = relationship(back_populates="booking", cascade="all, delete-orphan")


class Payment(TimestampMixin, Base):
    __tablename__ = "payments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    hotel_id: Mapped[int] = mapped_column(ForeignKey("hotels.id", ondelete="CASCADE"), index=True)
    booking_id: Mapped[int] = mapped_column(ForeignKey("bookings.id", ondelete="CASCADE"), index=True)
    amount: Mapped[float] = mapped_column(Float)
    payment_method: Mapped[PaymentMethod] = mapped_column(SqlEnum(PaymentMethod))
    payment_status: Mapped[PaymentStatus] = mapped_column(
        SqlEnum(PaymentStatus), default=PaymentStatus.PENDING, index=True
    )
    transaction_id: Mapped[Optional[str]] = mapped_column(String(100), default=None)
    paid_at: Mapped[Optional[datetime]] = mapped_column(DateTime, default=None)

    booking: Mapped[Booking] = relationship(back_populates="payments")


class SmartLock(TimestampMixin, Base):
    __tablename__ = "smart_locks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    hotel_id: Mapped[int] = mapped_column(ForeignKey("hotels.id", ondelete="CASCADE"), index=True)
    room_id: Mapped[int] = mapped_column(ForeignKey("rooms.id", ondelete="CASCADE"), index=True)
    lock_id: Mapped[str] = mapped_column(String(100), unique=True)
    status: Mapped[LockStatus] = mapped_column(SqlEnum(LockStatus), default=LockStatus.LOCKED)
    battery_level: Mapped[Optional[int]] = mapped_column(Integer, default=100)
    signal_strength: Mapped[Optional[int]] = mapped_column(Integer, default=None)
    last_heartbeat: Mapped[Optional[datetime]] = mapped_column(DateTime, default=None)
    last_ping: Mapped[Optional[datetime]] = mapped_column(DateTime, default=None)
    error_message: Mapped[Optional[str]] = mapped_column(Text, default=None)

    hotel: Mapped[Hotel] = relationship(back_populates="smart_locks")
    room: Mapped[Room] = relationship(back_populates="smart_locks")


class HotelSetting(TimestampMixin, Base):
    __tablename__ = "hotel_settings"
    __table_args__ = (UniqueConstraint("hotel_id", "key", name="uq_hotel_settings_key"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    hotel_id: Mapped[int] = mapped_column(ForeignKey("hotels.id", ondelete="CASCADE"), index=True)
    key: Mapped[str] = mapped_column(String(50))
    value: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)

    hotel: Mapped[Hotel] = relationship(back_populates="settings")
