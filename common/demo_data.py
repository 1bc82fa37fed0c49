"""Randomised sample data for trial hotels.

The whole run happens in one transaction: either every room, guest,
booking, payment and lock is written, or none is.
"""
from __future__ import annotations

import logging
import random
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional, Set

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .availability import is_room_free
from .models import (
    Booking,
    BookingStatus,
    Guest,
    Hotel,
    LockStatus,
    Payment,
    PaymentMethod,
    PaymentStatus,
    Profile,
    RoleEnum,
    Room,
    RoomStatus,
    SmartLock,
    User,
)

logger = logging.getLogger(__name__)

MAX_FLOOR = 20
ROOMS_PER_FLOOR = 20

ROOM_TYPES = ["Single", "Double", "Suite"]
BASE_PRICE_BY_TYPE = {"Single": 80, "Double": 120, "Suite": 220}
CAPACITIES = [1, 2, 3, 4]
AMENITIES = ["WiFi", "TV", "AC"]

FIRST_NAMES = ["Alex", "Jamie", "Taylor", "Morgan", "Jordan", "Casey", "Riley", "Avery", "Parker", "Quinn"]
LAST_NAMES = ["Smith", "Johnson", "Brown", "Davis", "Miller", "Wilson", "Moore", "Taylor", "Anderson", "Thomas"]
COUNTRIES = ["USA", "Canada", "UK", "Germany", "France", "Spain", "Italy", "Australia", "India", "Japan"]
ID_TYPES = ["Passport", "National ID", "Driver License"]
SEEDED_PAYMENT_STATUSES = [PaymentStatus.COMPLETED, PaymentStatus.PENDING, PaymentStatus.FAILED]


class DemoDataError(RuntimeError):
    """Raised when seeding fails; nothing from the run is kept."""


def base_room_number(room_number: str) -> str:
    return room_number.split("-")[0]


def sequential_room_numbers(existing: Iterable[str], count: int) -> List[str]:
    """Return up to ``count`` numbers like 101, 102 ... 2020 not already in ``existing``.

    Numbers are compared on their base part, so ``101-a1b2`` blocks ``101``.
    """

    taken: Set[str] = {base_room_number(number) for number in existing}
    numbers: List[str] = []
    for floor in range(1, MAX_FLOOR + 1):
        for number in range(1, ROOMS_PER_FLOOR + 1):
            if len(numbers) >= count:
                return numbers
            candidate = f"{floor}{number:02d}"
            if candidate not in taken:
                numbers.append(candidate)
                taken.add(candidate)
    return numbers


def floor_of(room_number: str) -> int:
    return int(base_room_number(room_number)[:-2])


def ensure_hotel(db: Session, user: User) -> int:
    """Return the caller's hotel id, creating a demo hotel and admin profile if needed."""

    profile = db.query(Profile).filter(Profile.user_id == user.id).first()
    if profile:
        return profile.hotel_id

    hotel = Hotel(
        name="Demo Hotel",
        address="123 Demo Street, Demo City, Demo State 12345",
        phone="+1 (555) 123-4567",
        email="demo@hotel.com",
        timezone="UTC-5 (Eastern)",
    )
    db.add(hotel)
    db.flush()
    db.add(Profile(user_id=user.id, hotel_id=hotel.id, first_name="Demo", last_name="User", role=RoleEnum.ADMIN))
    db.flush()
    logger.info("Created demo hotel %s for user %s", hotel.id, user.id)
    return hotel.id


def _build_rooms(rng: random.Random, hotel_id: int, numbers: List[str]) -> List[Room]:
    rooms = []
    for room_number in numbers:
        room_type = rng.choice(ROOM_TYPES)
        rooms.append(
            Room(
                hotel_id=hotel_id,
                room_number=room_number,
                room_type=room_type,
                capacity=rng.choice(CAPACITIES),
                floor=floor_of(room_number),
                price_per_night=float(BASE_PRICE_BY_TYPE[room_type] + rng.randrange(60)),
                status=RoomStatus.AVAILABLE,
                amenities=AMENITIES[: 1 + rng.randrange(len(AMENITIES))],
            )
        )
    return rooms


def _build_guests(rng: random.Random, hotel_id: int, count: int) -> List[Guest]:
    guests = []
    for _ in range(count):
        first = rng.choice(FIRST_NAMES)
        last = rng.choice(LAST_NAMES)
        guests.append(
            Guest(
                hotel_id=hotel_id,
                first_name=first,
                last_name=last,
                email=f"{first.lower()}.{last.lower()}{rng.randrange(1000)}@example.com",
                phone=f"+1-555-{rng.randint(1000000, 9999999)}",
                id_type=rng.choice(ID_TYPES),
                id_number=str(rng.randint(100000000, 999999999)),
                address=f"{rng.randint(100, 999)} Main St",
                city="Metropolis",
                country=rng.choice(COUNTRIES),
            )
        )
    return guests


def _unique_lock_id(rng: random.Random, hotel_id: int, taken: Set[str]) -> str:
    while True:
        lock_id = f"LOCK-{rng.randint(100000, 999999)}-{hotel_id}"
        if lock_id not in taken:
            taken.add(lock_id)
            return lock_id


def seed_demo_data(
    db: Session,
    user: User,
    rooms_count: int = 20,
    guests_count: int = 30,
    locks_count: int = 10,
    rng: Optional[random.Random] = None,
) -> Dict[str, int]:
    rng = rng or random.Random()
    try:
        hotel_id = ensure_hotel(db, user)

        existing_rooms = db.query(Room).filter(Room.hotel_id == hotel_id).order_by(Room.room_number).all()
        numbers = sequential_room_numbers((room.room_number for room in existing_rooms), rooms_count)
        new_rooms = _build_rooms(rng, hotel_id, numbers)
        db.add_all(new_rooms)

        guests = _build_guests(rng, hotel_id, guests_count)
        db.add_all(guests)
        db.flush()

        all_rooms = existing_rooms + new_rooms
        today = date.today()
        now = datetime.utcnow()
        bookings_created = 0
        payments_created = 0
        if all_rooms and guests:
            for room in rng.sample(all_rooms, min(len(guests), len(all_rooms))):
                check_in_offset = rng.randint(-2, 3)
                nights = rng.randint(1, 4)
                check_in = today + timedelta(days=check_in_offset)
                check_out = check_in + timedelta(days=nights)
                if not is_room_free(db, room.id, check_in, check_out):
                    continue
                booking = Booking(
                    hotel_id=hotel_id,
                    guest_id=guests[bookings_created % len(guests)].id,
                    room_id=room.id,
                    check_in_date=check_in,
                    check_out_date=check_out,
                    total_amount=room.price_per_night * nights,
                    status=BookingStatus.CONFIRMED,
                )
                db.add(booking)
                db.flush()
                bookings_created += 1

                payment_status = rng.choice(SEEDED_PAYMENT_STATUSES)
                completed = payment_status == PaymentStatus.COMPLETED
                db.add(
                    Payment(
                        hotel_id=hotel_id,
                        booking_id=booking.id,
                        amount=booking.total_amount,
                        payment_method=rng.choice(list(PaymentMethod)),
                        payment_status=payment_status,
                        transaction_id=f"TXN-{rng.randint(100000, 999999)}" if completed else None,
                        paid_at=now if completed else None,
                    )
                )
                payments_created += 1

                if check_in_offset <= 0:
                    room.status = RoomStatus.OCCUPIED

        locks_created = 0
        if all_rooms:
            taken_lock_ids = {lock_id for (lock_id,) in db.query(SmartLock.lock_id).all()}
            for room in rng.sample(all_rooms, min(locks_count, len(all_rooms))):
                db.add(
                    SmartLock(
                        hotel_id=hotel_id,
                        room_id=room.id,
                        lock_id=_unique_lock_id(rng, hotel_id, taken_lock_ids),
                        status=LockStatus.LOCKED if rng.random() > 0.3 else LockStatus.UNLOCKED,
                        battery_level=30 + rng.randrange(70),
                        signal_strength=1 + rng.randrange(5),
                        last_ping=now - timedelta(minutes=rng.randrange(10)),
                    )
                )
                locks_created += 1

        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Demo data generation failed, rolled back: %s", exc)
        raise DemoDataError(f"Demo data generation failed: {exc}") from exc

    summary = {
        "rooms_inserted": len(new_rooms),
        "guests_inserted": len(guests),
        "bookings_inserted": bookings_created,
        "payments_inserted": payments_created,
        "locks_inserted": locks_created,
    }
    logger.info("Demo data generated for hotel %s: %s", hotel_id, summary)
    return summary
