from cinebook.database import models


def _book(client, headers, showtime_id, seat_ids):
    return client.post(
        "/api/bookings",
        json={"showtime_id": showtime_id, "seat_ids": seat_ids},
        headers=headers,
    )


def test_root_and_health(client):
    assert client.get("/").json()["success"] is True

    response = client.get("/api/health")
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"] == {"database": "ok", "reaper_running": False}


def test_create_booking_returns_201_envelope(client, catalog, user_headers):
    response = _book(client, user_headers, catalog.showtime.id, catalog.seat_ids[:2])

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert "error" not in body
    assert "15 minutes" in body["message"]
    assert body["data"]["total_amount"] == 400.0
    assert body["data"]["booking_code"].startswith("BK")
    assert set(body["data"]) == {"booking_id", "booking_code", "total_amount"}


def test_booking_requires_a_token(client, catalog):
    response = _book(client, {}, catalog.showtime.id, [catalog.seat_ids[0]])
    assert response.status_code == 401
    assert response.json() == {"success": False, "error": "Authorization header required"}


def test_invalid_token_is_rejected(client, catalog):
    response = _book(client, {"Authorization": "Bearer not-a-jwt"}, catalog.showtime.id, [catalog.seat_ids[0]])
    assert response.status_code == 401
    assert response.json()["success"] is False


def test_token_without_claims_is_rejected(client, catalog, token_for):
    headers = {"Authorization": f"Bearer {token_for(None, 'user')}"}
    response = _book(client, headers, catalog.showtime.id, [catalog.seat_ids[0]])
    assert response.status_code == 401


def test_malformed_body_is_a_400_envelope(client, catalog, user_headers):
    response = _book(client, user_headers, catalog.showtime.id, [catalog.seat_ids[0], catalog.seat_ids[0]])
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert "duplicates" in body["error"]

    response = client.post("/api/bookings", json={"seat_ids": []}, headers=user_headers)
    assert response.status_code == 400


def test_unknown_showtime_is_404(client, catalog, user_headers):
    response = _book(client, user_headers, 9999, [catalog.seat_ids[0]])
    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Showtime not found"}


def test_taken_seat_is_409(client, catalog, user_headers, other_user_headers):
    assert _book(client, user_headers, catalog.showtime.id, [catalog.seat_ids[0]]).status_code == 201
    response = _book(client, other_user_headers, catalog.showtime.id, [catalog.seat_ids[0]])
    assert response.status_code == 409
    assert "currently reserved" in response.json()["error"]


def test_owner_can_view_and_other_user_cannot(client, catalog, user_headers, other_user_headers, admin_headers):
    booking_id = _book(client, user_headers, catalog.showtime.id, [catalog.seat_ids[0]]).json()["data"]["booking_id"]

    mine = client.get(f"/api/bookings/{booking_id}", headers=user_headers)
    assert mine.status_code == 200
    assert mine.json()["data"]["booking_id"] == booking_id
    assert mine.json()["data"]["seats"][0]["seat_id"] == catalog.seat_ids[0]

    assert client.get(f"/api/bookings/{booking_id}", headers=other_user_headers).status_code == 403
    assert client.get(f"/api/bookings/{booking_id}", headers=admin_headers).status_code == 200
    assert client.get("/api/bookings/4242", headers=user_headers).status_code == 404


def test_other_user_cannot_confirm_or_cancel(client, catalog, user_headers, other_user_headers):
    booking_id = _book(client, user_headers, catalog.showtime.id, [catalog.seat_ids[0]]).json()["data"]["booking_id"]

    response = client.put(f"/api/bookings/{booking_id}/confirm-payment", headers=other_user_headers)
    assert response.status_code == 403
    assert response.json()["success"] is False
    assert client.delete(f"/api/bookings/{booking_id}", headers=other_user_headers).status_code == 403


def test_confirm_then_cancel_is_rejected(client, db, catalog, user_headers):
    booking_id = _book(client, user_headers, catalog.showtime.id, [catalog.seat_ids[0]]).json()["data"]["booking_id"]

    confirmed = client.put(f"/api/bookings/{booking_id}/confirm-payment", headers=user_headers)
    assert confirmed.status_code == 200
    assert confirmed.json()["data"]["booking_status"] == "confirmed"
    assert confirmed.json()["data"]["payment_status"] == "paid"
    assert confirmed.json()["message"] == "Payment confirmed successfully"

    again = client.put(f"/api/bookings/{booking_id}/confirm-payment", headers=user_headers)
    assert again.status_code == 400

    cancelled = client.delete(f"/api/bookings/{booking_id}", headers=user_headers)
    assert cancelled.status_code == 400
    assert cancelled.json() == {"success": False, "error": "Confirmed bookings cannot be cancelled"}


def test_cancel_frees_the_seat_in_the_seat_map(client, catalog, user_headers):
    booking_id = _book(client, user_headers, catalog.showtime.id, catalog.seat_ids[:2]).json()["data"]["booking_id"]

    seat_map = client.get(f"/api/showtimes/{catalog.showtime.id}/seats").json()["data"]
    assert seat_map["available_seats"] == 2

    response = client.delete(f"/api/bookings/{booking_id}", headers=user_headers)
    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Booking cancelled successfully"}

    seat_map = client.get(f"/api/showtimes/{catalog.showtime.id}/seats").json()["data"]
    assert seat_map["available_seats"] == 4
    assert {seat["status"] for seat in seat_map["seats"]} == {"available"}


def test_my_bookings_lists_only_callers_active_bookings(client, catalog, user_headers, other_user_headers):
    kept = _book(client, user_headers, catalog.showtime.id, [catalog.seat_ids[0]]).json()["data"]["booking_id"]
    dropped = _book(client, user_headers, catalog.showtime.id, [catalog.seat_ids[1]]).json()["data"]["booking_id"]
    _book(client, other_user_headers, catalog.showtime.id, [catalog.seat_ids[2]])
    client.delete(f"/api/bookings/{dropped}", headers=user_headers)

    response = client.get("/api/bookings/my-bookings", headers=user_headers)
    assert response.status_code == 200
    data = response.json()["data"]
    assert [b["booking_id"] for b in data] == [kept]
    assert data[0]["seats"][0]["seat_row"] == "A"


def test_expired_hold_is_released_by_admin_sweep(client, db, catalog, clock, user_headers, admin_headers):
    booking_id = _book(client, user_headers, catalog.showtime.id, [catalog.seat_ids[0]]).json()["data"]["booking_id"]
    clock.advance(minutes=16)

    response = client.post("/api/admin/cron/cancel-expired", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["data"]["cancelled_count"] == 1

    db.expire_all()
    assert db.get(models.Booking, booking_id).booking_status == "cancelled"
    late = client.put(f"/api/bookings/{booking_id}/confirm-payment", headers=user_headers)
    assert late.status_code == 400
