from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from services.rental.app.dependencies import get_member_repository, get_rental_service
from services.rental.app.main import app

from conftest import make_token


@pytest.fixture
def client(rental_service, member_repository):
    app.dependency_overrides[get_rental_service] = lambda: rental_service
    app.dependency_overrides[get_member_repository] = lambda: member_repository
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


def _auth(subject_id: int, subject_type: str = "member") -> dict:
    return {"Authorization": f"Bearer {make_token(subject_id, subject_type)}"}


def _create(client, subject_id=1, **overrides):
    body = {
        "vehicleId": 1,
        "startDate": "2026-03-15T00:00:00+09:00",
        "endDate": "2026-03-18T00:00:00+09:00",
    }
    body.update(overrides)
    return client.post("/rentals", json=body, headers=_auth(subject_id))


def test_health_check(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["status"] == "running"


def test_create_rental(client):
    response = _create(client, couponCode="SPRING20")

    assert response.status_code == 201
    body = response.json()
    assert body["vehicleId"] == 1
    assert body["rentedBy"] == 1
    assert Decimal(str(body["totalPrice"])) == Decimal("120")


def test_overlapping_rental_returns_conflict(client):
    assert _create(client).status_code == 201

    response = _create(client, subject_id=2, startDate="2026-03-17T00:00:00+09:00")

    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "ERR-UNAVAILABLE"


def test_reused_coupon_is_not_acceptable(client):
    assert _create(client, couponCode="HALF").status_code == 201

    response = _create(
        client,
        vehicleId=3,
        couponCode="HALF",
    )

    assert response.status_code == 406
    assert response.json()["detail"]["code"] == "ERR-ALREADY-USED"


def test_invalid_period_is_bad_request(client):
    response = _create(client, endDate="2026-03-15T00:00:00+09:00")

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "ERR-IVD-DATE"


def test_requires_authentication(client):
    response = client.post(
        "/rentals",
        json={"vehicleId": 1, "startDate": "2026-03-15T00:00:00", "endDate": "2026-03-18T00:00:00"},
    )

    assert response.status_code == 401


def test_partner_cannot_rent(client):
    response = client.post(
        "/rentals",
        json={"vehicleId": 1, "startDate": "2026-03-15T00:00:00", "endDate": "2026-03-18T00:00:00"},
        headers=_auth(1, "partner"),
    )

    assert response.status_code == 403


def test_unknown_member_cannot_rent(client):
    response = _create(client, subject_id=999)

    assert response.status_code == 403
    assert response.json()["detail"]["code"] == "ERR-NOT-MEMBER"


def test_cancel_rental(client):
    rental_id = _create(client).json()["rentalId"]

    not_owner = client.delete(f"/rentals/{rental_id}", headers=_auth(2))
    owner = client.delete(f"/rentals/{rental_id}", headers=_auth(1))
    again = client.delete(f"/rentals/{rental_id}", headers=_auth(1))

    assert not_owner.status_code == 404
    assert not_owner.json()["detail"]["code"] == "ERR-NOT-FOUND-RENTAL"
    assert owner.status_code == 204
    assert again.status_code == 404
    assert again.json() == not_owner.json()


def test_list_my_rentals(client):
    _create(client)
    _create(client, vehicleId=3)
    _create(client, subject_id=2, startDate="2026-03-20T00:00:00+09:00", endDate="2026-03-21T00:00:00+09:00")

    response = client.get("/rentals", params={"page": 1, "size": 10}, headers=_auth(1))

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 2
    assert {item["vehicleId"] for item in body["items"]} == {1, 3}


def test_check_availability(client):
    _create(client)

    free = client.get(
        "/rentals/availability",
        params={"vehicleId": 1, "startDate": "2026-03-18T00:00:00", "endDate": "2026-03-20T00:00:00"},
        headers=_auth(1),
    )
    busy = client.get(
        "/rentals/availability",
        params={"vehicleId": 1, "startDate": "2026-03-16T00:00:00", "endDate": "2026-03-20T00:00:00"},
        headers=_auth(1),
    )
    missing = client.get(
        "/rentals/availability",
        params={"vehicleId": 99, "startDate": "2026-03-16T00:00:00", "endDate": "2026-03-20T00:00:00"},
        headers=_auth(1),
    )

    assert free.status_code == 200
    assert free.json()["available"] is True
    assert Decimal(str(free.json()["estimatedPrice"])) == Decimal("100")
    assert busy.json()["available"] is False
    assert missing.status_code == 404
