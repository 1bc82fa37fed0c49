"""Substring search across rooms, guests and bookings of one hotel."""
from __future__ import annotations

from typing import Any, Dict, List

from sqlalchemy import String, cast, or_
from sqlalchemy.orm import Session, joinedload

from .models import Booking, Guest, Room


LIKE_ESCAPE = "\\"


def _label(value: Any) -> str:
    return getattr(value, "value", value)


def contains_pattern(text: str) -> str:
    """Build an ``ilike`` pattern matching ``text`` literally anywhere in a column.

    Use it with ``escape=LIKE_ESCAPE`` so ``%`` and ``_`` typed by a user are not wildcards.
    """

    escaped = (
        text.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"


def search_hotel(db: Session, hotel_id: int, query: str) -> List[Dict[str, Any]]:
    """Return rooms, then guests, then bookings matching ``query``.

    Blank queries return an empty list without touching the database.
    Results are not scored, paginated or de-duplicated.
    """

    if not query or not query.strip():
        return []
    term = contains_pattern(query.strip())

    rooms = (
        db.query(Room)
        .filter(
            Room.hotel_id == hotel_id,
            or_(Room.room_number.ilike(term, escape=LIKE_ESCAPE), Room.room_type.ilike(term, escape=LIKE_ESCAPE)),
        )
        .all()
    )
    guests = (
        db.query(Guest)
        .filter(
            Guest.hotel_id == hotel_id,
            or_(
                Guest.first_name.ilike(term, escape=LIKE_ESCAPE),
                Guest.last_name.ilike(term, escape=LIKE_ESCAPE),
                Guest.email.ilike(term, escape=LIKE_ESCAPE),
            ),
        )
        .all()
    )
    bookings = (
        db.query(Booking)
        .options(joinedload(Booking.guest), joinedload(Booking.room))
        .filter(Booking.hotel_id == hotel_id, cast(Booking.status, String).ilike(term, escape=LIKE_ESCAPE))
        .all()
    )

    results: List[Dict[str, Any]] = [
        {
            "type": "room",
            "id": room.id,
            "title": f"Room {room.room_number}",
            "description": f"{room.room_type} - {_label(room.status)}",
            "url": "/rooms",
        }
        for room in rooms
    ]
    results.extend(
        {
            "type": "guest",
            "id": guest.id,
            "title": f"{guest.first_name} {guest.last_name}",
            "description": guest.email,
            "url": "/guests",
        }
        for guest in guests
    )
    results.extend(
        {
            "type": "booking",
            "id": booking.id,
            "title": f"Booking - {booking.guest.first_name} {booking.guest.last_name}",
            "description": f"Room {booking.room.room_number} - {_label(booking.status)}",
            "url": "/calendar",
        }
        for booking in bookings
    )
    return results
