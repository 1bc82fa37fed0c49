from datetime import datetime
from typing import List, Optional

from fastapi import Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from common.app_factory import create_service_app
from common.database import get_db
from common.dependencies import get_current_hotel_id
from common.events import publish_event
from common.models import Booking, Payment, PaymentStatus
from common.rate_limit import READ_LIMIT, WRITE_LIMIT, limiter
from common.reports import completed_revenue, count_by_status, month_bounds
from common.schemas import PaymentCreate, PaymentRead, PaymentSummary, PaymentUpdate

app = create_service_app("Payments Service", "payments")


def _get_payment(db: Session, hotel_id: int, payment_id: int) -> Payment:
    payment = db.query(Payment).filter(Payment.id == payment_id, Payment.hotel_id == hotel_id).first()
    if not payment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Payment not found")
    return payment


def _stamp_paid_at(payment: Payment) -> None:
    if payment.payment_status == PaymentStatus.COMPLETED and payment.paid_at is None:
        payment.paid_at = datetime.utcnow()


@app.get("/payments", response_model=List[PaymentRead])
@limiter.limit(READ_LIMIT)
def list_payments(
    request: Request,
    status_filter: Optional[PaymentStatus] = Query(None, alias="status"),
    hotel_id: int = Depends(get_current_hotel_id),
    db: Session = Depends(get_db),
) -> List[Payment]:
    query = db.query(Payment).filter(Payment.hotel_id == hotel_id)
    if status_filter:
        query = query.filter(Payment.payment_status == status_filter)
    return query.order_by(Payment.created_at.desc(), Payment.id.desc()).all()


@app.get("/payments/summary", response_model=PaymentSummary)
@limiter.limit(READ_LIMIT)
def payment_summary(
    request: Request,
    hotel_id: int = Depends(get_current_hotel_id),
    db: Session = Depends(get_db),
) -> PaymentSummary:
    month_start, next_month = month_bounds()
    return PaymentSummary(
        total_revenue=completed_revenue(db, hotel_id),
        revenue_this_month=completed_revenue(db, hotel_id, month_start, next_month),
        by_status=count_by_status(db, Payment.payment_status, Payment.hotel_id, hotel_id, PaymentStatus),
    )


@app.post("/payments", response_model=PaymentRead, status_code=status.HTTP_201_CREATED)
@limiter.limit(WRITE_LIMIT)
def create_payment(
    request: Request,
    payment_in: PaymentCreate,
    hotel_id: int = Depends(get_current_hotel_id),
    db: Session = Depends(get_db),
) -> Payment:
    booking = db.query(Booking).filter(Booking.id == payment_in.booking_id, Booking.hotel_id == hotel_id).first()
    if not booking:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found")
    payment = Payment(hotel_id=hotel_id, **payment_in.model_dump())
    _stamp_paid_at(payment)
    db.add(payment)
    db.commit()
    db.refresh(payment)
    publish_event(
        "payment_recorded",
        payment_id=payment.id,
        booking_id=payment.booking_id,
        amount=payment.amount,
        payment_status=payment.payment_status.value,
    )
    return payment


@app.get("/payments/{payment_id}", response_model=PaymentRead)
@limiter.limit(READ_LIMIT)
def get_payment(
    request: Request,
    payment_id: int,
    hotel_id: int = Depends(get_current_hotel_id),
    db: Session = Depends(get_db),
) -> Payment:
    return _get_payment(db, hotel_id, payment_id)


@app.put("/payments/{payment_id}", response_model=PaymentRead)
@limiter.limit(WRITE_LIMIT)
def update_payment(
    request: Request,
    payment_id: int,
    payment_update: PaymentUpdate,
    hotel_id: int = Depends(get_current_hotel_id),
    db: Session = Depends(get_db),
) -> Payment:
    payment = _get_payment(db, hotel_id, payment_id)
    for key, value in payment_update.model_dump(exclude_unset=True).items():
        setattr(payment, key, value)
    _stamp_paid_at(payment)
    db.commit()
    db.refresh(payment)
    return payment


@app.delete("/payments/{payment_id}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit(WRITE_LIMIT)
def delete_payment(
    request: Request,
    payment_id: int,
    hotel_id: int = Depends(get_current_hotel_id),
    db: Session = Depends(get_db),
) -> None:
    payment = _get_payment(db, hotel_id, payment_id)
    db.delete(payment)
    db.commit()
