import pytest


def test_booking_flow(bookings_client, auth_headers, make_room, make_guest):
    room = make_room("410", room_type="Suite")
    guest = make_guest("Rosalind", "Franklin")

    create_resp = bookings_client.post(
        "/bookings",
        json={
            "guest_id": guest["id"],
            "room_id": room["id"],
            "check_in_date": "2030-05-01",
            "check_out_date": "2030-05-04",
            "total_amount": 750.0,
            "special_requests": "Late arrival",
        },
        headers=auth_headers,
    )
    assert create_resp.status_code == 201
    booking = create_resp.json()
    assert booking["guest"] == {"first_name": "Rosalind", "last_name": "Franklin", "email": "rosalind@example.com"}
    assert booking["room"] == {"room_number": "410", "room_type": "Suite"}

    overlap = bookings_client.post(
        "/bookings",
        json={
            "guest_id": guest["id"],
            "room_id": room["id"],
            "check_in_date": "2030-05-03",
            "check_out_date": "2030-05-06",
        },
        headers=auth_headers,
    )
    assert overlap.status_code == 409

    availability = bookings_client.get(
        f"/bookings/availability?room_id={room['id']}&check_in_date=2030-05-04&check_out_date=2030-05-06",
        headers=auth_headers,
    )
    assert availability.status_code == 200
    assert availability.json()["available"] is True

    update_resp = bookings_client.put(
        f"/bookings/{booking['id']}", json={"status": "checked_in"}, headers=auth_headers
    )
    assert update_resp.status_code == 200
    assert update_resp.json()["status"] == "checked_in"

    filtered = bookings_client.get("/bookings?status=checked_in", headers=auth_headers).json()
    assert [item["id"] for item in filtered] == [booking["id"]]

    assert bookings_client.delete(f"/bookings/{booking['id']}", headers=auth_headers).status_code == 204
    assert bookings_client.get(f"/bookings/{booking['id']}", headers=auth_headers).status_code == 404


def test_check_out_must_follow_check_in(bookings_client, auth_headers, make_room, make_guest):
    room = make_room("411")
    guest = make_guest()

    response = bookings_client.post(
        "/bookings",
        json={
            "guest_id": guest["id"],
            "room_id": room["id"],
            "check_in_date": "2030-05-04",
            "check_out_date": "2030-05-04",
        },
        headers=auth_headers,
    )
    assert response.status_code == 422

    booking_id = bookings_client.post(
        "/bookings",
        json={
            "guest_id": guest["id"],
            "room_id": room["id"],
            "check_in_date": "2030-05-04",
            "check_out_date": "2030-05-05",
        },
        headers=auth_headers,
    ).json()["id"]
    inverted = bookings_client.put(
        f"/bookings/{booking_id}", json={"check_out_date": "2030-05-01"}, headers=auth_headers
    )
    assert inverted.status_code == 400


def test_cancelled_booking_frees_the_room(bookings_client, auth_headers, make_room, make_guest, make_booking):
    room = make_room("412")
    guest = make_guest()
    booking = make_booking("2030-06-01", "2030-06-03", room=room, guest=guest)

    bookings_client.put(f"/bookings/{booking['id']}", json={"status": "cancelled"}, headers=auth_headers)

    rebooked = make_booking("2030-06-02", "2030-06-04", room=room, guest=guest)
    assert rebooked["status"] == "confirmed"


def test_booking_references_must_belong_to_hotel(bookings_client, auth_headers, onboard, make_room, make_guest):
    room = make_room("413")
    guest = make_guest()
    rival_headers = onboard("rival@example.com", "Rival Hotel")

    response = bookings_client.post(
        "/bookings",
        json={
            "guest_id": guest["id"],
            "room_id": room["id"],
            "check_in_date": "2030-07-01",
            "check_out_date": "2030-07-02",
        },
        headers=rival_headers,
    )
    assert response.status_code == 404
    assert response.json()["detail"] == "Guest not found"


@pytest.mark.parametrize(
    "field", ["guest_id", "room_id", "check_in_date", "check_out_date", "total_amount", "status"]
)
def test_update_rejects_null_for_required_fields(bookings_client, auth_headers, make_booking, field):
    booking = make_booking()

    response = bookings_client.put(f"/bookings/{booking['id']}", json={field: None}, headers=auth_headers)

    assert response.status_code == 422
    assert response.json()["detail"][0]["loc"] == ["body", field]


def test_update_may_clear_special_requests(bookings_client, auth_headers, make_booking):
    booking = make_booking(special_requests="late arrival")

    response = bookings_client.put(f"/bookings/{booking['id']}", json={"special_requests": None}, headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["special_requests"] is None
