from fastapi import Depends, Request
from sqlalchemy.orm import Session

from common.app_factory import create_service_app
from common.database import get_db
from common.dependencies import allow_roles, get_current_hotel_id
from common.hotel_settings import HOTEL_KEY, NOTIFICATIONS_KEY, hotel_settings, notification_settings, save_settings
from common.models import Profile, RoleEnum
from common.rate_limit import READ_LIMIT, WRITE_LIMIT, limiter
from common.schemas import HotelSettings, NotificationSettings

app = create_service_app("Settings Service", "settings")

settings_managers = allow_roles(RoleEnum.ADMIN, RoleEnum.MANAGER)


@app.get("/settings/hotel", response_model=HotelSettings)
@limiter.limit(READ_LIMIT)
def get_hotel_settings(
    request: Request,
    hotel_id: int = Depends(get_current_hotel_id),
    db: Session = Depends(get_db),
) -> HotelSettings:
    return hotel_settings(db, hotel_id)


@app.put("/settings/hotel", response_model=HotelSettings)
@limiter.limit(WRITE_LIMIT)
def update_hotel_settings(
    request: Request,
    settings_in: HotelSettings,
    profile: Profile = Depends(settings_managers),
    db: Session = Depends(get_db),
) -> HotelSettings:
    current = hotel_settings(db, profile.hotel_id)
    updated = current.model_copy(update=settings_in.model_dump(exclude_unset=True))
    save_settings(db, profile.hotel_id, HOTEL_KEY, updated)
    return updated


@app.get("/settings/notifications", response_model=NotificationSettings)
@limiter.limit(READ_LIMIT)
def get_notification_settings(
    request: Request,
    hotel_id: int = Depends(get_current_hotel_id),
    db: Session = Depends(get_db),
) -> NotificationSettings:
    return notification_settings(db, hotel_id)


@app.put("/settings/notifications", response_model=NotificationSettings)
@limiter.limit(WRITE_LIMIT)
def update_notification_settings(
    request: Request,
    settings_in: NotificationSettings,
    hotel_id: int = Depends(get_current_hotel_id),
    db: Session = Depends(get_db),
) -> NotificationSettings:
    current = notification_settings(db, hotel_id)
    updated = current.model_copy(update=settings_in.model_dump(exclude_unset=True))
    save_settings(db, hotel_id, NOTIFICATIONS_KEY, updated)
    return updated
