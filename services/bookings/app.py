from datetime import date
from typing import List, Optional

from fastapi import Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session, joinedload

from common.app_factory import create_service_app
from common.availability import find_overlapping_booking
from common.database import get_db
from common.dependencies import get_current_hotel_id
from common.events import publish_event
from common.models import Booking, BookingStatus, Guest, Room
from common.rate_limit import READ_LIMIT, WRITE_LIMIT, limiter
from common.schemas import BookingCreate, BookingRead, BookingUpdate

app = create_service_app("Bookings Service", "bookings")


def _booking_query(db: Session, hotel_id: int):
    return (
        db.query(Booking)
        .options(joinedload(Booking.guest), joinedload(Booking.room))
        .filter(Booking.hotel_id == hotel_id)
    )


def _get_booking(db: Session, hotel_id: int, booking_id: int) -> Booking:
    booking = _booking_query(db, hotel_id).filter(Booking.id == booking_id).first()
    if not booking:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found")
    return booking


def _ensure_references(db: Session, hotel_id: int, guest_id: int, room_id: int) -> None:
    if not db.query(Guest).filter(Guest.id == guest_id, Guest.hotel_id == hotel_id).first():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Guest not found")
    if not db.query(Room).filter(Room.id == room_id, Room.hotel_id == hotel_id).first():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Room not found")


def _ensure_availability(
    db: Session, room_id: int, check_in: date, check_out: date, exclude_booking_id: int | None = None
) -> None:
    if find_overlapping_booking(db, room_id, check_in, check_out, exclude_booking_id):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Room already booked for those dates")


@app.get("/bookings", response_model=List[BookingRead])
@limiter.limit(READ_LIMIT)
def list_bookings(
    request: Request,
    status_filter: Optional[BookingStatus] = Query(None, alias="status"),
    hotel_id: int = Depends(get_current_hotel_id),
    db: Session = Depends(get_db),
) -> List[Booking]:
    query = _booking_query(db, hotel_id)
    if status_filter:
        query = query.filter(Booking.status == status_filter)
    return query.order_by(Booking.created_at.desc(), Booking.id.desc()).all()


@app.get("/bookings/availability")
@limiter.limit(READ_LIMIT)
def check_availability(
    request: Request,
    room_id: int,
    check_in_date: date = Query(...),
    check_out_date: date = Query(...),
    hotel_id: int = Depends(get_current_hotel_id),
    db: Session = Depends(get_db),
) -> dict[str, bool]:
    if check_out_date <= check_in_date:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="check_out_date must be after check_in_date")
    if not db.query(Room).filter(Room.id == room_id, Room.hotel_id == hotel_id).first():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Room not found")
    _ensure_availability(db, room_id, check_in_date, check_out_date)
    return {"available": True}


@app.post("/bookings", response_model=BookingRead, status_code=status.HTTP_201_CREATED)
@limiter.limit(WRITE_LIMIT)
def create_booking(
    request: Request,
    booking_in: BookingCreate,
    hotel_id: int = Depends(get_current_hotel_id),
    db: Session = Depends(get_db),
) -> Booking:
    _ensure_references(db, hotel_id, booking_in.guest_id, booking_in.room_id)
    _ensure_availability(db, booking_in.room_id, booking_in.check_in_date, booking_in.check_out_date)
    booking = Booking(hotel_id=hotel_id, **booking_in.model_dump())
    db.add(booking)
    db.commit()
    publish_event(
        "booking_created",
        booking_id=booking.id,
        guest_id=booking.guest_id,
        room_id=booking.room_id,
        check_in_date=booking.check_in_date,
        check_out_date=booking.check_out_date,
    )
    return _get_booking(db, hotel_id, booking.id)


@app.get("/bookings/{booking_id}", response_model=BookingRead)
@limiter.limit(READ_LIMIT)
def get_booking(
    request: Request,
    booking_id: int,
    hotel_id: int = Depends(get_current_hotel_id),
    db: Session = Depends(get_db),
) -> Booking:
    return _get_booking(db, hotel_id, booking_id)


@app.put("/bookings/{booking_id}", response_model=BookingRead)
@limiter.limit(WRITE_LIMIT)
def update_booking(
    request: Request,
    booking_id: int,
    booking_update: BookingUpdate,
    hotel_id: int = Depends(get_current_hotel_id),
    db: Session = Depends(get_db),
) -> Booking:
    booking = _get_booking(db, hotel_id, booking_id)

    data = booking_update.model_dump(exclude_unset=True)
    guest_id = data.get("guest_id") or booking.guest_id
    room_id = data.get("room_id") or booking.room_id
    check_in = data.get("check_in_date") or booking.check_in_date
    check_out = data.get("check_out_date") or booking.check_out_date
    if check_out <= check_in:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="check_out_date must be after check_in_date")
    _ensure_references(db, hotel_id, guest_id, room_id)
    if data.get("status", booking.status) != BookingStatus.CANCELLED:
        _ensure_availability(db, room_id, check_in, check_out, exclude_booking_id=booking.id)

    for key, value in data.items():
        setattr(booking, key, value)
    db.commit()
    return _get_booking(db, hotel_id, booking.id)


@app.delete("/bookings/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit(WRITE_LIMIT)
def delete_booking(
    request: Request,
    booking_id: int,
    hotel_id: int = Depends(get_current_hotel_id),
    db: Session = Depends(get_db),
) -> None:
    booking = _get_booking(db, hotel_id, booking_id)
    db.delete(booking)
    db.commit()
