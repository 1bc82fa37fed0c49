"""Per-hotel settings documents stored as JSON rows with model defaults."""
from __future__ import annotations

from typing import Type, TypeVar

from pydantic import BaseModel
from sqlalchemy.orm import Session

from .models import HotelSetting
from .schemas import HotelSettings, NotificationSettings

HOTEL_KEY = "hotel"
NOTIFICATIONS_KEY = "notifications"

SettingsModel = TypeVar("SettingsModel", bound=BaseModel)


def load_settings(db: Session, hotel_id: int, key: str, model: Type[SettingsModel]) -> SettingsModel:
    """Return the stored document for ``key`` merged over the model defaults."""

    row = db.query(HotelSetting).filter(HotelSetting.hotel_id == hotel_id, HotelSetting.key == key).first()
    if row is None or not row.value:
        return model()
    return model(**row.value)


def save_settings(db: Session, hotel_id: int, key: str, document: BaseModel) -> None:
    row = db.query(HotelSetting).filter(HotelSetting.hotel_id == hotel_id, HotelSetting.key == key).first()
    value = document.model_dump(mode="json")
    if row is None:
        db.add(HotelSetting(hotel_id=hotel_id, key=key, value=value))
    else:
        row.value = value
    db.commit()


def notification_settings(db: Session, hotel_id: int) -> NotificationSettings:
    return load_settings(db, hotel_id, NOTIFICATIONS_KEY, NotificationSettings)


def hotel_settings(db: Session, hotel_id: int) -> HotelSettings:
    return load_settings(db, hotel_id, HOTEL_KEY, HotelSettings)
