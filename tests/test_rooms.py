import pytest

from common.models import Profile, RoleEnum, Room

ROOM_PAYLOAD = {
    "room_number": "101",
    "room_type": "Suite",
    "floor": 1,
    "capacity": 2,
    "price_per_night": 250.0,
    "amenities": ["WiFi", "TV"],
}


def test_room_crud(rooms_client, auth_headers):
    create_resp = rooms_client.post("/rooms", json=ROOM_PAYLOAD, headers=auth_headers)
    assert create_resp.status_code == 201
    room = create_resp.json()
    assert room["status"] == "available"
    assert room["amenities"] == ["WiFi", "TV"]

    get_resp = rooms_client.get(f"/rooms/{room['id']}", headers=auth_headers)
    assert get_resp.status_code == 200
    assert get_resp.json()["room_type"] == "Suite"

    update_resp = rooms_client.put(
        f"/rooms/{room['id']}", json={"status": "maintenance", "price_per_night": 199.0}, headers=auth_headers
    )
    assert update_resp.status_code == 200
    assert update_resp.json()["status"] == "maintenance"
    assert update_resp.json()["price_per_night"] == 199.0

    delete_resp = rooms_client.delete(f"/rooms/{room['id']}", headers=auth_headers)
    assert delete_resp.status_code == 204

    list_resp = rooms_client.get("/rooms", headers=auth_headers)
    assert list_resp.status_code == 200
    assert all(item["id"] != room["id"] for item in list_resp.json())
    assert rooms_client.get(f"/rooms/{room['id']}", headers=auth_headers).status_code == 404


def test_duplicate_room_number_rejected_before_insert(rooms_client, auth_headers, db_session):
    assert rooms_client.post("/rooms", json=ROOM_PAYLOAD, headers=auth_headers).status_code == 201

    duplicate = rooms_client.post("/rooms", json=ROOM_PAYLOAD, headers=auth_headers)
    assert duplicate.status_code == 400
    assert duplicate.json()["detail"] == "Room number already exists"
    assert db_session.query(Room).count() == 1


def test_update_to_taken_number_rejected(rooms_client, auth_headers, make_room):
    make_room("101")
    second = make_room("102")

    response = rooms_client.put(f"/rooms/{second['id']}", json={"room_number": "101"}, headers=auth_headers)
    assert response.status_code == 400

    same_number = rooms_client.put(f"/rooms/{second['id']}", json={"room_number": "102"}, headers=auth_headers)
    assert same_number.status_code == 200


def test_room_list_is_sorted_and_filtered(rooms_client, auth_headers, make_room):
    make_room("203", room_type="Single")
    make_room("101", status="maintenance")
    make_room("102")

    numbers = [room["room_number"] for room in rooms_client.get("/rooms", headers=auth_headers).json()]
    assert numbers == ["101", "102", "203"]

    maintenance = rooms_client.get("/rooms?status=maintenance", headers=auth_headers).json()
    assert [room["room_number"] for room in maintenance] == ["101"]

    singles = rooms_client.get("/rooms?room_type=single", headers=auth_headers).json()
    assert [room["room_number"] for room in singles] == ["203"]


def test_room_validation_errors(rooms_client, auth_headers):
    response = rooms_client.post(
        "/rooms",
        json={"room_number": "  ", "room_type": "Double", "floor": 0, "price_per_night": 0},
        headers=auth_headers,
    )
    assert response.status_code == 422
    fields = {error["loc"][-1] for error in response.json()["detail"]}
    assert {"room_number", "floor", "price_per_night"} <= fields


def test_rooms_are_isolated_per_hotel(rooms_client, auth_headers, onboard, make_room):
    room = make_room("101")
    other_headers = onboard("rival@example.com", "Rival Hotel")

    assert rooms_client.get("/rooms", headers=other_headers).json() == []
    assert rooms_client.get(f"/rooms/{room['id']}", headers=other_headers).status_code == 404
    # the same number is free in another hotel
    assert rooms_client.post("/rooms", json=ROOM_PAYLOAD, headers=other_headers).status_code == 201


def test_staff_cannot_create_rooms(rooms_client, auth_headers, db_session):
    profile = db_session.query(Profile).first()
    profile.role = RoleEnum.STAFF
    db_session.commit()

    assert rooms_client.post("/rooms", json=ROOM_PAYLOAD, headers=auth_headers).status_code == 403
    assert rooms_client.get("/rooms", headers=auth_headers).status_code == 200


@pytest.mark.parametrize("field", ["price_per_night", "room_number", "room_type", "floor", "capacity", "status", "amenities"])
def test_update_rejects_null_for_required_fields(rooms_client, auth_headers, make_room, field):
    room = make_room("110", price_per_night=150.0)

    response = rooms_client.put(f"/rooms/{room['id']}", json={field: None}, headers=auth_headers)

    assert response.status_code == 422
    assert response.json()["detail"][0]["loc"] == ["body", field]
    assert rooms_client.get(f"/rooms/{room['id']}", headers=auth_headers).json()["price_per_night"] == 150.0
