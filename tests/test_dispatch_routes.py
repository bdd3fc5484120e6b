from ride_dispatch.engine.sessions import sessions
from ride_dispatch.utils.jwt_utils import create_access_token


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"


def test_issue_driver_token_and_me(client):
    resp = client.post("/auth/driver-token", json={"driver_id": "driver-42", "name": "Kim"})
    assert resp.status_code == 201
    token = resp.json()["token"]

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["driver"]["driver_id"] == "driver-42"


def test_state_requires_auth(client):
    resp = client.get("/dispatch/state")
    assert resp.status_code in (401, 403)

    resp = client.get("/dispatch/state", headers={"Authorization": "Bearer not-a-token"})
    assert resp.status_code == 401


def test_rider_token_is_forbidden(client):
    token = create_access_token({"user_id": "rider-1", "role": "rider"})
    resp = client.get("/dispatch/state", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 403


def test_initial_state_is_offline(client, driver_headers):
    resp = client.get("/dispatch/state", headers=driver_headers)
    assert resp.status_code == 200
    state = resp.json()["state"]
    assert state["driver_id"] == "driver-7"
    assert state["is_online"] is False
    assert state["pending_rides"] == []
    assert state["popup"] is None
    assert state["active_ride"] is None


def test_online_accept_complete_flow(client, driver_headers):
    resp = client.post("/dispatch/online", headers=driver_headers)
    assert resp.status_code == 200
    state = resp.json()["state"]
    assert state["is_online"] is True
    popup = state["popup"]
    assert [ride["id"] for ride in state["pending_rides"]] == [popup["id"]]

    resp = client.post(f"/dispatch/rides/{popup['id']}/accept", headers=driver_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["ride"]["status"] == "accepted"
    assert body["state"]["active_ride"]["id"] == popup["id"]
    assert body["state"]["popup"] is None
    assert body["state"]["popup_accepted"] is True

    resp = client.post("/dispatch/active/complete", headers=driver_headers)
    assert resp.status_code == 200
    assert resp.json()["ride"]["status"] == "completed"

    resp = client.post("/dispatch/active/complete", headers=driver_headers)
    assert resp.status_code == 409
    assert resp.json()["code"] == "no_active_ride"


def test_accept_unknown_ride_is_404(client, driver_headers):
    client.post("/dispatch/online", headers=driver_headers)
    resp = client.post("/dispatch/rides/ride_unknown/accept", headers=driver_headers)
    assert resp.status_code == 404
    body = resp.json()
    assert body["success"] is False
    assert body["code"] == "ride_not_found"
    assert body["ride_id"] == "ride_unknown"


def test_second_accept_conflicts(client, driver_headers):
    client.post("/dispatch/online", headers=driver_headers)
    engine = sessions.get("driver-7")
    r1 = engine.current_popup
    client.post(f"/dispatch/rides/{r1.id}/accept", headers=driver_headers)

    # Put a second ride in the queue without waiting for the clock
    client.post("/dispatch/offline", headers=driver_headers)
    client.post("/dispatch/online", headers=driver_headers)
    r2 = engine.current_popup

    resp = client.post(f"/dispatch/rides/{r2.id}/accept", headers=driver_headers)
    assert resp.status_code == 409
    assert resp.json()["code"] == "ride_conflict"
    assert engine.active_ride.id == r1.id
    assert [ride.id for ride in engine.pending_rides] == [r2.id]


def test_decline_and_dismiss(client, driver_headers):
    state = client.post("/dispatch/online", headers=driver_headers).json()["state"]
    ride_id = state["popup"]["id"]

    resp = client.post("/dispatch/popup/dismiss", headers=driver_headers)
    assert resp.status_code == 200
    state = resp.json()["state"]
    assert state["popup"] is None
    assert [ride["id"] for ride in state["pending_rides"]] == [ride_id]

    resp = client.post(f"/dispatch/rides/{ride_id}/decline", headers=driver_headers)
    assert resp.status_code == 200
    assert resp.json()["state"]["pending_rides"] == []

    # Declining again is tolerated
    resp = client.post(f"/dispatch/rides/{ride_id}/decline", headers=driver_headers)
    assert resp.status_code == 200


def test_offline_keeps_active_ride(client, driver_headers):
    state = client.post("/dispatch/online", headers=driver_headers).json()["state"]
    ride_id = state["popup"]["id"]
    client.post(f"/dispatch/rides/{ride_id}/accept", headers=driver_headers)

    resp = client.post("/dispatch/offline", headers=driver_headers)
    state = resp.json()["state"]
    assert state["is_online"] is False
    assert state["pending_rides"] == []
    assert state["active_ride"]["id"] == ride_id

    resp = client.post("/dispatch/active/cancel", headers=driver_headers)
    assert resp.status_code == 200
    assert resp.json()["ride"]["status"] == "cancelled"


def test_sessions_are_per_driver(client, driver_headers):
    other = create_access_token({"user_id": "driver-8", "role": "driver"})
    client.post("/dispatch/online", headers=driver_headers)

    resp = client.get("/dispatch/state", headers={"Authorization": f"Bearer {other}"})
    assert resp.json()["state"]["is_online"] is False
    assert len(sessions) == 2
