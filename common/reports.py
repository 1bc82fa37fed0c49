"""Revenue and status aggregates shared by payments and the dashboard."""
from __future__ import annotations

from datetime import date, datetime, timedelta
from enum import Enum
from typing import Dict, List, Optional, Tuple, Type

from dateutil.relativedelta import relativedelta
from sqlalchemy import func
from sqlalchemy.orm import Session

from .models import Payment, PaymentStatus


def month_bounds(now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """Return the start of the current calendar month and of the next one."""

    now = now or datetime.utcnow()
    start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    return start, start + relativedelta(months=1)


def completed_revenue(
    db: Session, hotel_id: int, since: Optional[datetime] = None, until: Optional[datetime] = None
) -> float:
    query = db.query(func.coalesce(func.sum(Payment.amount), 0.0)).filter(
        Payment.hotel_id == hotel_id,
        Payment.payment_status == PaymentStatus.COMPLETED,
    )
    if since is not None:
        query = query.filter(Payment.paid_at >= since)
    if until is not None:
        query = query.filter(Payment.paid_at < until)
    return float(query.scalar() or 0.0)


def revenue_by_day(db: Session, hotel_id: int, days: int, today: Optional[date] = None) -> List[Tuple[date, float]]:
    """Completed revenue per day for the last ``days`` days, oldest first, zero-filled."""

    today = today or datetime.utcnow().date()
    first_day = today - timedelta(days=days - 1)
    totals: Dict[date, float] = {first_day + timedelta(days=offset): 0.0 for offset in range(days)}
    payments = (
        db.query(Payment.paid_at, Payment.amount)
        .filter(
            Payment.hotel_id == hotel_id,
            Payment.payment_status == PaymentStatus.COMPLETED,
            Payment.paid_at >= datetime.combine(first_day, datetime.min.time()),
        )
        .all()
    )
    for paid_at, amount in payments:
        day = paid_at.date()
        if day in totals:
            totals[day] += amount
    return sorted(totals.items())


def count_by_status(db: Session, column, hotel_column, hotel_id: int, enum: Type[Enum]) -> Dict[str, int]:
    """Count rows per enum member, including members with no rows."""

    counts = {member.value: 0 for member in enum}
    rows = db.query(column, func.count()).filter(hotel_column == hotel_id).group_by(column).all()
    for member, total in rows:
        counts[member.value] = total
    return counts
