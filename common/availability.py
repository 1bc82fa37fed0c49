"""Date-range overlap checks for room bookings."""
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from .models import Booking, BookingStatus


def find_overlapping_booking(
    db: Session,
    room_id: int,
    check_in: date,
    check_out: date,
    exclude_booking_id: Optional[int] = None,
) -> Optional[Booking]:
    """Return a non-cancelled booking of ``room_id`` that overlaps ``[check_in, check_out)``."""

    query = db.query(Booking).filter(
        Booking.room_id == room_id,
        Booking.status != BookingStatus.CANCELLED,
        Booking.check_in_date < check_out,
        Booking.check_out_date > check_in,
    )
    if exclude_booking_id:
        query = query.filter(Booking.id != exclude_booking_id)
    return query.first()


def is_room_free(db: Session, room_id: int, check_in: date, check_out: date) -> bool:
    return find_overlapping_booking(db, room_id, check_in, check_out) is None
