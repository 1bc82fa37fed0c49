"""Smart-lock liveness and signal helpers."""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from .config import get_settings


def is_lock_online(last_ping: Optional[datetime], now: Optional[datetime] = None) -> bool:
    """Return True if the lock pinged within the configured online window.

    Timestamps are naive UTC, as stored by the models.
    """

    if last_ping is None:
        return False
    now = now or datetime.utcnow()
    window = timedelta(seconds=get_settings().lock_online_window_seconds)
    return now - last_ping < window


def signal_label(strength: Optional[int]) -> str:
    if not strength:
        return "Poor"
    if strength > 70:
        return "Strong"
    if strength > 40:
        return "Medium"
    return "Weak"
