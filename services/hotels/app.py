from random import Random
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from common.app_factory import create_service_app
from common.database import get_db
from common.demo_data import DemoDataError, seed_demo_data
from common.dependencies import allow_roles, get_current_profile, get_current_user
from common.models import Hotel, Profile, RoleEnum, User
from common.rate_limit import BULK_LIMIT, READ_LIMIT, WRITE_LIMIT, limiter
from common.schemas import (
    DemoDataRequest,
    DemoDataSummary,
    HotelContext,
    HotelCreate,
    HotelRead,
    HotelUpdate,
    ProfileRead,
    ProfileUpdate,
)

app = create_service_app("Hotels Service", "hotels")


@app.post("/hotels", response_model=HotelContext, status_code=status.HTTP_201_CREATED)
@limiter.limit(WRITE_LIMIT)
def create_hotel(
    request: Request,
    hotel_in: HotelCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> HotelContext:
    """Onboard the caller: create their hotel and an admin profile linking them to it."""

    if db.query(Profile).filter(Profile.user_id == current_user.id).first():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Account already belongs to a hotel")

    hotel = Hotel(**hotel_in.model_dump(exclude={"first_name", "last_name"}))
    db.add(hotel)
    db.flush()
    profile = Profile(
        user_id=current_user.id,
        hotel_id=hotel.id,
        first_name=hotel_in.first_name,
        last_name=hotel_in.last_name,
        role=RoleEnum.ADMIN,
    )
    db.add(profile)
    db.commit()
    db.refresh(hotel)
    db.refresh(profile)
    return HotelContext(hotel=HotelRead.model_validate(hotel), profile=ProfileRead.model_validate(profile))


@app.get("/hotels/me", response_model=HotelContext)
@limiter.limit(READ_LIMIT)
def my_hotel(
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> HotelContext:
    profile = db.query(Profile).filter(Profile.user_id == current_user.id).first()
    if not profile:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
    hotel = db.query(Hotel).filter(Hotel.id == profile.hotel_id).first()
    if not hotel:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Hotel not found")
    return HotelContext(hotel=HotelRead.model_validate(hotel), profile=ProfileRead.model_validate(profile))


@app.put("/hotels/me", response_model=HotelRead)
@limiter.limit(WRITE_LIMIT)
def update_hotel(
    request: Request,
    hotel_update: HotelUpdate,
    profile: Profile = Depends(allow_roles(RoleEnum.ADMIN, RoleEnum.MANAGER)),
    db: Session = Depends(get_db),
) -> Hotel:
    hotel = db.query(Hotel).filter(Hotel.id == profile.hotel_id).first()
    if not hotel:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Hotel not found")
    for key, value in hotel_update.model_dump(exclude_unset=True).items():
        setattr(hotel, key, value)
    db.commit()
    db.refresh(hotel)
    return hotel


@app.put("/profiles/me", response_model=ProfileRead)
@limiter.limit(WRITE_LIMIT)
def update_profile(
    request: Request,
    profile_update: ProfileUpdate,
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
) -> Profile:
    for key, value in profile_update.model_dump(exclude_unset=True).items():
        setattr(profile, key, value)
    db.commit()
    db.refresh(profile)
    return profile


@app.post("/hotels/demo-data", response_model=DemoDataSummary, status_code=status.HTTP_201_CREATED)
@limiter.limit(BULK_LIMIT)
def generate_demo_data(
    request: Request,
    demo_in: Optional[DemoDataRequest] = None,
    seed: Optional[int] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict[str, int]:
    demo_in = demo_in or DemoDataRequest()
    try:
        return seed_demo_data(
            db,
            current_user,
            rooms_count=demo_in.rooms_count,
            guests_count=demo_in.guests_count,
            locks_count=demo_in.locks_count,
            rng=Random(seed) if seed is not None else None,
        )
    except DemoDataError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc
