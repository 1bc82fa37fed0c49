from datetime import datetime

import pytest

from common.models import Payment


def test_payment_crud_and_paid_at_stamping(payments_client, auth_headers, make_booking):
    booking = make_booking()

    completed = payments_client.post(
        "/payments",
        json={"booking_id": booking["id"], "amount": 240.0, "payment_method": "credit_card", "payment_status": "completed"},
        headers=auth_headers,
    )
    assert completed.status_code == 201
    assert completed.json()["paid_at"] is not None

    pending = payments_client.post(
        "/payments",
        json={"booking_id": booking["id"], "amount": 60.0, "payment_method": "cash"},
        headers=auth_headers,
    )
    assert pending.status_code == 201
    pending_body = pending.json()
    assert pending_body["payment_status"] == "pending"
    assert pending_body["paid_at"] is None

    listed = payments_client.get("/payments", headers=auth_headers).json()
    assert [item["id"] for item in listed] == [pending_body["id"], completed.json()["id"]]

    only_pending = payments_client.get("/payments?status=pending", headers=auth_headers).json()
    assert [item["id"] for item in only_pending] == [pending_body["id"]]

    settled = payments_client.put(
        f"/payments/{pending_body['id']}",
        json={"payment_status": "completed", "transaction_id": "TXN-123456"},
        headers=auth_headers,
    )
    assert settled.status_code == 200
    assert settled.json()["paid_at"] is not None
    assert settled.json()["transaction_id"] == "TXN-123456"

    assert payments_client.delete(f"/payments/{pending_body['id']}", headers=auth_headers).status_code == 204
    assert payments_client.get(f"/payments/{pending_body['id']}", headers=auth_headers).status_code == 404


def test_payment_requires_booking_in_hotel(payments_client, auth_headers):
    response = payments_client.post(
        "/payments",
        json={"booking_id": 999, "amount": 10.0, "payment_method": "cash"},
        headers=auth_headers,
    )
    assert response.status_code == 404
    assert response.json()["detail"] == "Booking not found"


def test_payment_rejects_unknown_method(payments_client, auth_headers, make_booking):
    booking = make_booking()
    response = payments_client.post(
        "/payments",
        json={"booking_id": booking["id"], "amount": 10.0, "payment_method": "barter"},
        headers=auth_headers,
    )
    assert response.status_code == 422


def test_payment_summary(payments_client, auth_headers, make_booking, db_session):
    booking = make_booking()
    for amount, payment_status in ((200.0, "completed"), (50.0, "completed"), (80.0, "pending"), (30.0, "failed")):
        payments_client.post(
            "/payments",
            json={
                "booking_id": booking["id"],
                "amount": amount,
                "payment_method": "debit_card",
                "payment_status": payment_status,
            },
            headers=auth_headers,
        )

    # move one completed payment into an earlier month
    old_payment = db_session.query(Payment).filter(Payment.amount == 50.0).one()
    old_payment.paid_at = datetime(2020, 1, 15)
    db_session.commit()

    summary = payments_client.get("/payments/summary", headers=auth_headers).json()
    assert summary["total_revenue"] == 250.0
    assert summary["revenue_this_month"] == 200.0
    assert summary["by_status"] == {"completed": 2, "pending": 1, "failed": 1, "refunded": 0}


@pytest.mark.parametrize("field", ["amount", "payment_method", "payment_status"])
def test_update_rejects_null_for_required_fields(payments_client, auth_headers, make_booking, field):
    booking = make_booking()
    payment = payments_client.post(
        "/payments", json={"booking_id": booking["id"], "amount": 80.0, "payment_method": "cash"}, headers=auth_headers
    ).json()

    response = payments_client.put(f"/payments/{payment['id']}", json={field: None}, headers=auth_headers)

    assert response.status_code == 422
    assert response.json()["detail"][0]["loc"] == ["body", field]
