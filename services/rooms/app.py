from typing import List, Optional

from circuitbreaker import circuit
from fastapi import Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from common.app_factory import create_service_app
from common.database import get_db
from common.dependencies import allow_roles, get_current_hotel_id
from common.models import Profile, RoleEnum, Room, RoomStatus
from common.rate_limit import READ_LIMIT, WRITE_LIMIT, limiter
from common.schemas import RoomCreate, RoomRead, RoomUpdate

app = create_service_app("Rooms Service", "rooms")

room_managers = allow_roles(RoleEnum.ADMIN, RoleEnum.MANAGER)


def _get_room(db: Session, hotel_id: int, room_id: int) -> Room:
    room = db.query(Room).filter(Room.id == room_id, Room.hotel_id == hotel_id).first()
    if not room:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Room not found")
    return room


def _ensure_unique_number(db: Session, hotel_id: int, room_number: str, exclude_room_id: int | None = None) -> None:
    query = db.query(Room).filter(Room.hotel_id == hotel_id, Room.room_number == room_number)
    if exclude_room_id:
        query = query.filter(Room.id != exclude_room_id)
    if query.first():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Room number already exists")


@app.get("/rooms", response_model=List[RoomRead])
@limiter.limit(READ_LIMIT)
@circuit(failure_threshold=5, recovery_timeout=60)
def list_rooms(
    request: Request,
    status_filter: Optional[RoomStatus] = Query(None, alias="status"),
    room_type: Optional[str] = None,
    hotel_id: int = Depends(get_current_hotel_id),
    db: Session = Depends(get_db),
) -> List[Room]:
    query = db.query(Room).filter(Room.hotel_id == hotel_id)
    if status_filter:
        query = query.filter(Room.status == status_filter)
    if room_type:
        query = query.filter(Room.room_type.ilike(room_type))
    return query.order_by(Room.room_number.asc()).all()


@app.post("/rooms", response_model=RoomRead, status_code=status.HTTP_201_CREATED)
@limiter.limit(WRITE_LIMIT)
def create_room(
    request: Request,
    room_in: RoomCreate,
    profile: Profile = Depends(room_managers),
    db: Session = Depends(get_db),
) -> Room:
    _ensure_unique_number(db, profile.hotel_id, room_in.room_number)
    room = Room(hotel_id=profile.hotel_id, **room_in.model_dump())
    db.add(room)
    db.commit()
    db.refresh(room)
    return room


@app.get("/rooms/{room_id}", response_model=RoomRead)
@limiter.limit(READ_LIMIT)
def get_room(
    request: Request,
    room_id: int,
    hotel_id: int = Depends(get_current_hotel_id),
    db: Session = Depends(get_db),
) -> Room:
    return _get_room(db, hotel_id, room_id)


@app.put("/rooms/{room_id}", response_model=RoomRead)
@limiter.limit(WRITE_LIMIT)
def update_room(
    request: Request,
    room_id: int,
    room_update: RoomUpdate,
    profile: Profile = Depends(room_managers),
    db: Session = Depends(get_db),
) -> Room:
    room = _get_room(db, profile.hotel_id, room_id)
    update_data = room_update.model_dump(exclude_unset=True)
    new_number = update_data.get("room_number")
    if new_number and new_number != room.room_number:
        _ensure_unique_number(db, profile.hotel_id, new_number, exclude_room_id=room.id)

    for key, value in update_data.items():
        setattr(room, key, value)
    db.commit()
    db.refresh(room)
    return room


@app.delete("/rooms/{room_id}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit(WRITE_LIMIT)
def delete_room(
    request: Request,
    room_id: int,
    profile: Profile = Depends(room_managers),
    db: Session = Depends(get_db),
) -> None:
    room = _get_room(db, profile.hotel_id, room_id)
    db.delete(room)
    db.commit()
