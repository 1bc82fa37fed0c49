import os
from typing import Callable, Generator

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("RATE_LIMITING_ENABLED", "false")
os.environ.setdefault("METRICS_ENABLED", "false")
os.environ.setdefault("EVENT_BROKER_ENABLED", "false")
os.environ.setdefault("LOG_DIR", "./test-logs")

from common.config import reset_settings_cache  # noqa: E402

reset_settings_cache()

from common.database import Base, SessionLocal, engine  # noqa: E402
from services.auth.app import app as auth_app  # noqa: E402
from services.bookings.app import app as bookings_app  # noqa: E402
from services.dashboard.app import app as dashboard_app  # noqa: E402
from services.guests.app import app as guests_app  # noqa: E402
from services.hotels.app import app as hotels_app  # noqa: E402
from services.payments.app import app as payments_app  # noqa: E402
from services.rooms.app import app as rooms_app  # noqa: E402
from services.search.app import app as search_app  # noqa: E402
from services.settings.app import app as settings_app  # noqa: E402
from services.smart_locks.app import app as smart_locks_app  # noqa: E402

PASSWORD = "Passw0rd!"


@pytest.fixture(autouse=True, scope="function")
def _create_test_database() -> Generator[None, None, None]:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db_session() -> Generator:
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def _client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as client:
        yield client


@pytest.fixture()
def auth_client() -> Generator[TestClient, None, None]:
    yield from _client(auth_app)


@pytest.fixture()
def hotels_client() -> Generator[TestClient, None, None]:
    yield from _client(hotels_app)


@pytest.fixture()
def rooms_client() -> Generator[TestClient, None, None]:
    yield from _client(rooms_app)


@pytest.fixture()
def guests_client() -> Generator[TestClient, None, None]:
    yield from _client(guests_app)


@pytest.fixture()
def bookings_client() -> Generator[TestClient, None, None]:
    yield from _client(bookings_app)


@pytest.fixture()
def payments_client() -> Generator[TestClient, None, None]:
    yield from _client(payments_app)


@pytest.fixture()
def smart_locks_client() -> Generator[TestClient, None, None]:
    yield from _client(smart_locks_app)


@pytest.fixture()
def settings_client() -> Generator[TestClient, None, None]:
    yield from _client(settings_app)


@pytest.fixture()
def search_client() -> Generator[TestClient, None, None]:
    yield from _client(search_app)


@pytest.fixture()
def dashboard_client() -> Generator[TestClient, None, None]:
    yield from _client(dashboard_app)


@pytest.fixture()
def sign_in(auth_client) -> Callable[..., dict[str, str]]:
    """Register (if needed) and sign in, returning bearer headers."""

    def _sign_in(email: str = "owner@example.com", password: str = PASSWORD) -> dict[str, str]:
        auth_client.post("/auth/sign-up", json={"email": email, "password": password})
        response = auth_client.post(
            "/auth/sign-in",
            data={"username": email, "password": password},
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )
        token = response.json()["access_token"]
        return {"Authorization": f"Bearer {token}"}

    return _sign_in


@pytest.fixture()
def onboard(sign_in, hotels_client) -> Callable[..., dict[str, str]]:
    """Sign in and create a hotel for the account."""

    def _onboard(email: str = "owner@example.com", hotel_name: str = "Seaside Inn") -> dict[str, str]:
        headers = sign_in(email)
        response = hotels_client.post(
            "/hotels",
            json={"name": hotel_name, "first_name": "Olive", "last_name": "Owner"},
            headers=headers,
        )
        assert response.status_code == 201, response.text
        return headers

    return _onboard


@pytest.fixture()
def auth_headers(onboard) -> dict[str, str]:
    return onboard()


@pytest.fixture()
def make_room(rooms_client, auth_headers) -> Callable[..., dict]:
    def _make_room(room_number: str = "101", headers: dict[str, str] | None = None, **fields) -> dict:
        payload = {"room_number": room_number, "room_type": "Double", "floor": 1, "price_per_night": 120.0}
        payload.update(fields)
        response = rooms_client.post("/rooms", json=payload, headers=headers or auth_headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _make_room


@pytest.fixture()
def make_guest(guests_client, auth_headers) -> Callable[..., dict]:
    def _make_guest(first_name: str = "Ada", last_name: str = "Lovelace", headers: dict[str, str] | None = None, **fields) -> dict:
        payload = {"first_name": first_name, "last_name": last_name, "email": f"{first_name.lower()}@example.com"}
        payload.update(fields)
        response = guests_client.post("/guests", json=payload, headers=headers or auth_headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _make_guest


@pytest.fixture()
def make_booking(bookings_client, auth_headers, make_room, make_guest) -> Callable[..., dict]:
    def _make_booking(check_in: str = "2030-01-10", check_out: str = "2030-01-12", **fields) -> dict:
        room = fields.pop("room", None) or make_room()
        guest = fields.pop("guest", None) or make_guest()
        payload = {
            "guest_id": guest["id"],
            "room_id": room["id"],
            "check_in_date": check_in,
            "check_out_date": check_out,
            "total_amount": 240.0,
        }
        payload.update(fields)
        response = bookings_client.post("/bookings", json=payload, headers=auth_headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _make_booking
