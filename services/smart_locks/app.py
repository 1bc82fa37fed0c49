from datetime import datetime
from typing import List, Optional

from fastapi import Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session, joinedload

from common.app_factory import create_service_app
from common.database import get_db
from common.dependencies import get_current_hotel_id
from common.events import publish_event
from common.liveness import is_lock_online
from common.models import LockStatus, Room, SmartLock
from common.rate_limit import READ_LIMIT, WRITE_LIMIT, limiter
from common.schemas import SmartLockCreate, SmartLockRead, SmartLockUpdate

app = create_service_app("Smart Locks Service", "smart_locks")


def _get_lock(db: Session, hotel_id: int, lock_pk: int) -> SmartLock:
    lock = (
        db.query(SmartLock)
        .options(joinedload(SmartLock.room))
        .filter(SmartLock.id == lock_pk, SmartLock.hotel_id == hotel_id)
        .first()
    )
    if not lock:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Smart lock not found")
    return lock


def _ensure_room(db: Session, hotel_id: int, room_id: int) -> None:
    if not db.query(Room).filter(Room.id == room_id, Room.hotel_id == hotel_id).first():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Room not found")


def _set_lock_status(db: Session, hotel_id: int, lock_pk: int, new_status: LockStatus) -> SmartLock:
    lock = _get_lock(db, hotel_id, lock_pk)
    if not is_lock_online(lock.last_ping):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Lock is offline; controls are disabled")
    now = datetime.utcnow()
    lock.status = new_status
    lock.last_heartbeat = now
    lock.last_ping = now
    db.commit()
    db.refresh(lock)
    publish_event("lock_status_changed", lock_id=lock.lock_id, room_id=lock.room_id, status=new_status.value)
    return lock


@app.get("/smart-locks", response_model=List[SmartLockRead])
@limiter.limit(READ_LIMIT)
def list_locks(
    request: Request,
    room_id: Optional[int] = None,
    status_filter: Optional[LockStatus] = Query(None, alias="status"),
    hotel_id: int = Depends(get_current_hotel_id),
    db: Session = Depends(get_db),
) -> List[SmartLock]:
    query = db.query(SmartLock).options(joinedload(SmartLock.room)).filter(SmartLock.hotel_id == hotel_id)
    if room_id is not None:
        query = query.filter(SmartLock.room_id == room_id)
    if status_filter:
        query = query.filter(SmartLock.status == status_filter)
    return query.order_by(SmartLock.created_at.desc(), SmartLock.id.desc()).all()


@app.post("/smart-locks", response_model=SmartLockRead, status_code=status.HTTP_201_CREATED)
@limiter.limit(WRITE_LIMIT)
def create_lock(
    request: Request,
    lock_in: SmartLockCreate,
    hotel_id: int = Depends(get_current_hotel_id),
    db: Session = Depends(get_db),
) -> SmartLock:
    _ensure_room(db, hotel_id, lock_in.room_id)
    if db.query(SmartLock).filter(SmartLock.lock_id == lock_in.lock_id).first():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Lock ID already exists")
    lock = SmartLock(hotel_id=hotel_id, last_ping=datetime.utcnow(), **lock_in.model_dump())
    db.add(lock)
    db.commit()
    return _get_lock(db, hotel_id, lock.id)


@app.get("/smart-locks/{lock_pk}", response_model=SmartLockRead)
@limiter.limit(READ_LIMIT)
def get_lock(
    request: Request,
    lock_pk: int,
    hotel_id: int = Depends(get_current_hotel_id),
    db: Session = Depends(get_db),
) -> SmartLock:
    return _get_lock(db, hotel_id, lock_pk)


@app.put("/smart-locks/{lock_pk}", response_model=SmartLockRead)
@limiter.limit(WRITE_LIMIT)
def update_lock(
    request: Request,
    lock_pk: int,
    lock_update: SmartLockUpdate,
    hotel_id: int = Depends(get_current_hotel_id),
    db: Session = Depends(get_db),
) -> SmartLock:
    lock = _get_lock(db, hotel_id, lock_pk)
    data = lock_update.model_dump(exclude_unset=True)
    if data.get("room_id") is not None:
        _ensure_room(db, hotel_id, data["room_id"])
    for key, value in data.items():
        setattr(lock, key, value)
    # any write counts as contact from the device
    lock.last_ping = datetime.utcnow()
    db.commit()
    return _get_lock(db, hotel_id, lock.id)


@app.post("/smart-locks/{lock_pk}/lock", response_model=SmartLockRead)
@limiter.limit(WRITE_LIMIT)
def lock_door(
    request: Request,
    lock_pk: int,
    hotel_id: int = Depends(get_current_hotel_id),
    db: Session = Depends(get_db),
) -> SmartLock:
    return _set_lock_status(db, hotel_id, lock_pk, LockStatus.LOCKED)


@app.post("/smart-locks/{lock_pk}/unlock", response_model=SmartLockRead)
@limiter.limit(WRITE_LIMIT)
def unlock_door(
    request: Request,
    lock_pk: int,
    hotel_id: int = Depends(get_current_hotel_id),
    db: Session = Depends(get_db),
) -> SmartLock:
    return _set_lock_status(db, hotel_id, lock_pk, LockStatus.UNLOCKED)


@app.delete("/smart-locks/{lock_pk}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit(WRITE_LIMIT)
def delete_lock(
    request: Request,
    lock_pk: int,
    hotel_id: int = Depends(get_current_hotel_id),
    db: Session = Depends(get_db),
) -> None:
    lock = _get_lock(db, hotel_id, lock_pk)
    db.delete(lock)
    db.commit()
