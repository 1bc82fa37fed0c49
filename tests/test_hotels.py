from common.models import Profile, RoleEnum


def test_onboarding_creates_hotel_and_admin_profile(sign_in, hotels_client):
    headers = sign_in()

    missing = hotels_client.get("/hotels/me", headers=headers)
    assert missing.status_code == 404
    assert missing.json()["detail"] == "Profile not found"

    created = hotels_client.post(
        "/hotels",
        json={"name": "Harbor View", "email": "desk@harborview.com", "first_name": "Sam", "last_name": "Stone"},
        headers=headers,
    )
    assert created.status_code == 201
    body = created.json()
    assert body["hotel"]["name"] == "Harbor View"
    assert body["profile"]["role"] == RoleEnum.ADMIN.value
    assert body["profile"]["hotel_id"] == body["hotel"]["id"]

    context = hotels_client.get("/hotels/me", headers=headers)
    assert context.status_code == 200
    assert context.json()["hotel"]["id"] == body["hotel"]["id"]

    again = hotels_client.post("/hotels", json={"name": "Second"}, headers=headers)
    assert again.status_code == 409


def test_update_hotel_and_profile(auth_headers, hotels_client):
    hotel_resp = hotels_client.put("/hotels/me", json={"name": "Seaside Resort", "phone": "+1 555 0100"}, headers=auth_headers)
    assert hotel_resp.status_code == 200
    assert hotel_resp.json()["name"] == "Seaside Resort"
    assert hotel_resp.json()["phone"] == "+1 555 0100"

    profile_resp = hotels_client.put("/profiles/me", json={"first_name": "Olivia"}, headers=auth_headers)
    assert profile_resp.status_code == 200
    assert profile_resp.json()["first_name"] == "Olivia"
    assert profile_resp.json()["last_name"] == "Owner"


def test_staff_cannot_update_hotel(auth_headers, hotels_client, db_session):
    profile = db_session.query(Profile).first()
    profile.role = RoleEnum.STAFF
    db_session.commit()

    response = hotels_client.put("/hotels/me", json={"name": "Renamed"}, headers=auth_headers)
    assert response.status_code == 403
    assert response.json()["detail"] == "Insufficient permissions"


def test_hotel_endpoints_require_token(hotels_client):
    response = hotels_client.get("/hotels/me")
    assert response.status_code == 401


def test_hotel_name_cannot_be_cleared(auth_headers, hotels_client):
    response = hotels_client.put("/hotels/me", json={"name": None}, headers=auth_headers)

    assert response.status_code == 422
    assert response.json()["detail"][0]["loc"] == ["body", "name"]
