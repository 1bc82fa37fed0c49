from datetime import date, timedelta
from typing import List, Optional

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from common.app_factory import create_service_app
from common.database import get_db
from common.dependencies import get_current_hotel_id
from common.events import publish_event
from common.models import Booking, BookingStatus, Guest, Room, RoomStatus
from common.rate_limit import READ_LIMIT, WRITE_LIMIT, limiter
from common.search import LIKE_ESCAPE, contains_pattern
from common.schemas import GuestCreate, GuestRead, GuestUpdate

app = create_service_app("Guests Service", "guests")


def _get_guest(db: Session, hotel_id: int, guest_id: int) -> Guest:
    guest = db.query(Guest).filter(Guest.id == guest_id, Guest.hotel_id == hotel_id).first()
    if not guest:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Guest not found")
    return guest


@app.get("/guests", response_model=List[GuestRead])
@limiter.limit(READ_LIMIT)
def list_guests(
    request: Request,
    q: Optional[str] = None,
    hotel_id: int = Depends(get_current_hotel_id),
    db: Session = Depends(get_db),
) -> List[Guest]:
    query = db.query(Guest).filter(Guest.hotel_id == hotel_id)
    if q and q.strip():
        term = contains_pattern(q.strip())
        query = query.filter(
            or_(
                Guest.first_name.ilike(term, escape=LIKE_ESCAPE),
                Guest.last_name.ilike(term, escape=LIKE_ESCAPE),
                Guest.email.ilike(term, escape=LIKE_ESCAPE),
            )
        )
    return query.order_by(Guest.created_at.desc(), Guest.id.desc()).all()


@app.post("/guests", response_model=GuestRead, status_code=status.HTTP_201_CREATED)
@limiter.limit(WRITE_LIMIT)
def create_guest(
    request: Request,
    guest_in: GuestCreate,
    hotel_id: int = Depends(get_current_hotel_id),
    db: Session = Depends(get_db),
) -> Guest:
    """Create a guest, optionally checking them into an available room.

    The guest row and its booking are committed together.
    """

    room: Room | None = None
    if guest_in.room_id is not None:
        room = db.query(Room).filter(Room.id == guest_in.room_id, Room.hotel_id == hotel_id).first()
        if not room:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Room not found")
        if room.status != RoomStatus.AVAILABLE:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Room is not available")
    check_in = guest_in.check_in_date or date.today()
    check_out = guest_in.check_out_date or check_in + timedelta(days=1)
    if check_out <= check_in:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="check_out_date must be after check_in_date",
        )

    guest = Guest(hotel_id=hotel_id, **guest_in.model_dump(exclude={"room_id", "check_in_date", "check_out_date"}))
    db.add(guest)

    booking: Booking | None = None
    if room is not None:
        db.flush()
        booking = Booking(
            hotel_id=hotel_id,
            guest_id=guest.id,
            room_id=room.id,
            check_in_date=check_in,
            check_out_date=check_out,
            total_amount=room.price_per_night * (check_out - check_in).days,
            status=BookingStatus.CONFIRMED,
        )
        db.add(booking)
        room.status = RoomStatus.OCCUPIED

    db.commit()
    db.refresh(guest)
    if booking is not None:
        publish_event("booking_created", booking_id=booking.id, guest_id=guest.id, room_id=booking.room_id)
    return guest


@app.get("/guests/{guest_id}", response_model=GuestRead)
@limiter.limit(READ_LIMIT)
def get_guest(
    request: Request,
    guest_id: int,
    hotel_id: int = Depends(get_current_hotel_id),
    db: Session = Depends(get_db),
) -> Guest:
    return _get_guest(db, hotel_id, guest_id)


@app.put("/guests/{guest_id}", response_model=GuestRead)
@limiter.limit(WRITE_LIMIT)
def update_guest(
    request: Request,
    guest_id: int,
    guest_update: GuestUpdate,
    hotel_id: int = Depends(get_current_hotel_id),
    db: Session = Depends(get_db),
) -> Guest:
    guest = _get_guest(db, hotel_id, guest_id)
    for key, value in guest_update.model_dump(exclude_unset=True).items():
        setattr(guest, key, value)
    db.commit()
    db.refresh(guest)
    return guest


@app.delete("/guests/{guest_id}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit(WRITE_LIMIT)
def delete_guest(
    request: Request,
    guest_id: int,
    hotel_id: int = Depends(get_current_hotel_id),
    db: Session = Depends(get_db),
) -> None:
    guest = _get_guest(db, hotel_id, guest_id)
    db.delete(guest)
    db.commit()
