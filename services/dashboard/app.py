from datetime import datetime
from typing import List

from fastapi import Depends, HTTPException, Query, Request, status
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from common.app_factory import create_service_app
from common.config import get_settings
from common.database import get_db
from common.dependencies import get_current_profile
from common.hotel_settings import notification_settings
from common.liveness import is_lock_online
from common.models import (
    Booking,
    BookingStatus,
    Guest,
    Hotel,
    Payment,
    PaymentStatus,
    Profile,
    Room,
    RoomStatus,
    SmartLock,
)
from common.rate_limit import READ_LIMIT, limiter
from common.reports import completed_revenue, count_by_status, month_bounds, revenue_by_day
from common.schemas import (
    AnalyticsReport,
    DailyRevenue,
    DashboardOverview,
    LockStats,
    Notification,
    RoomStats,
)

app = create_service_app("Dashboard Service", "dashboard")


@app.get("/dashboard/overview", response_model=DashboardOverview)
@limiter.limit(READ_LIMIT)
def get_dashboard_overview(
    request: Request,
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
) -> DashboardOverview:
    """Headline numbers for the main dashboard."""

    hotel_id = profile.hotel_id
    hotel = db.query(Hotel).filter(Hotel.id == hotel_id).first()
    if not hotel:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Hotel not found")

    room_counts = count_by_status(db, Room.status, Room.hotel_id, hotel_id, RoomStatus)
    guest_count = db.query(func.count(Guest.id)).filter(Guest.hotel_id == hotel_id).scalar() or 0
    last_pings = [row[0] for row in db.query(SmartLock.last_ping).filter(SmartLock.hotel_id == hotel_id).all()]
    online = sum(1 for last_ping in last_pings if is_lock_online(last_ping))
    month_start, next_month = month_bounds()

    return DashboardOverview(
        hotel_name=hotel.name,
        rooms=RoomStats(total=sum(room_counts.values()), **room_counts),
        guests=guest_count,
        revenue_total=completed_revenue(db, hotel_id),
        revenue_this_month=completed_revenue(db, hotel_id, month_start, next_month),
        locks=LockStats(total=len(last_pings), online=online, offline=len(last_pings) - online),
    )


@app.get("/dashboard/analytics", response_model=AnalyticsReport)
@limiter.limit(READ_LIMIT)
def get_analytics(
    request: Request,
    days: int = Query(7, ge=1, le=365),
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
) -> AnalyticsReport:
    hotel_id = profile.hotel_id
    total_rooms = db.query(func.count(Room.id)).filter(Room.hotel_id == hotel_id).scalar() or 0
    occupied = (
        db.query(func.count(Room.id))
        .filter(Room.hotel_id == hotel_id, Room.status == RoomStatus.OCCUPIED)
        .scalar()
        or 0
    )
    occupancy_rate = round(occupied / total_rooms * 100, 2) if total_rooms else 0.0

    return AnalyticsReport(
        occupancy_rate=occupancy_rate,
        revenue_by_day=[DailyRevenue(day=day, amount=amount) for day, amount in revenue_by_day(db, hotel_id, days)],
        bookings_by_status=count_by_status(db, Booking.status, Booking.hotel_id, hotel_id, BookingStatus),
    )


@app.get("/dashboard/notifications", response_model=List[Notification])
@limiter.limit(READ_LIMIT)
def get_notifications(
    request: Request,
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
) -> List[Notification]:
    """Build the notification feed from current data, honoring the hotel's notification settings."""

    hotel_id = profile.hotel_id
    prefs = notification_settings(db, hotel_id)
    notifications: List[Notification] = []

    if prefs.low_battery or prefs.security:
        locks = (
            db.query(SmartLock)
            .options(joinedload(SmartLock.room))
            .filter(SmartLock.hotel_id == hotel_id)
            .order_by(SmartLock.id)
            .all()
        )
        threshold = get_settings().low_battery_threshold
        for lock in locks:
            if prefs.low_battery and lock.battery_level is not None and lock.battery_level < threshold:
                notifications.append(
                    Notification(
                        id=f"battery-{lock.id}",
                        title="Low Battery",
                        message=f"Smart lock in Room {lock.room.room_number} has {lock.battery_level}% battery",
                        type="warning",
                    )
                )
            if prefs.security and lock.error_message and not is_lock_online(lock.last_ping):
                notifications.append(
                    Notification(
                        id=f"lock-{lock.id}",
                        title="Lock Offline",
                        message=f"Room {lock.room.room_number}: {lock.error_message}",
                        type="error",
                    )
                )

    if prefs.maintenance:
        rooms = (
            db.query(Room)
            .filter(Room.hotel_id == hotel_id, Room.status == RoomStatus.MAINTENANCE)
            .order_by(Room.room_number)
            .all()
        )
        notifications.extend(
            Notification(
                id=f"maintenance-{room.id}",
                title="Maintenance Required",
                message=f"Room {room.room_number} is under maintenance",
                type="info",
            )
            for room in rooms
        )

    if prefs.payments:
        pending = (
            db.query(Payment)
            .filter(Payment.hotel_id == hotel_id, Payment.payment_status == PaymentStatus.PENDING)
            .order_by(Payment.id)
            .all()
        )
        notifications.extend(
            Notification(
                id=f"payment-{payment.id}",
                title="Payment Pending",
                message=f"Payment of ${payment.amount:.2f} is awaiting confirmation",
                type="warning",
            )
            for payment in pending
        )

    if prefs.check_ins:
        arrivals = (
            db.query(Booking)
            .options(joinedload(Booking.guest), joinedload(Booking.room))
            .filter(
                Booking.hotel_id == hotel_id,
                Booking.check_in_date == datetime.utcnow().date(),
                Booking.status.in_([BookingStatus.PENDING, BookingStatus.CONFIRMED]),
            )
            .order_by(Booking.id)
            .all()
        )
        notifications.extend(
            Notification(
                id=f"checkin-{booking.id}",
                title="Check-in Today",
                message=f"{booking.guest.first_name} {booking.guest.last_name} arrives in Room {booking.room.room_number}",
                type="success",
            )
            for booking in arrivals
        )

    return notifications
