import json

import pytest

from eventcheckin.schemas.user import RoleEnum


@pytest.fixture
def event(make_event):
    return make_event("Drone Building")


@pytest.fixture
def org_headers(organizer, auth_headers):
    return auth_headers(organizer)


def _issue(client, event_id, headers):
    response = client.post("/attendance/generate-qr", json={"event_id": event_id}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestOrganizerRoutes:
    def test_generate_qr(self, client, event, org_headers):
        body = _issue(client, event.id, org_headers)

        assert body["event_id"] == event.id
        assert body["active"] is True
        assert body["token_id"]
        assert body["issued_at"]
        assert body["scannable_image"].startswith("data:image/png;base64,")

    def test_generate_qr_unknown_event(self, client, org_headers):
        response = client.post("/attendance/generate-qr", json={"event_id": 999}, headers=org_headers)

        assert response.status_code == 404
        assert response.json()["error"] == "EventNotFound"

    def test_participant_cannot_generate(self, client, event, make_user, auth_headers):
        headers = auth_headers(make_user(RoleEnum.participant))

        response = client.post("/attendance/generate-qr", json={"event_id": event.id}, headers=headers)

        assert response.status_code == 403

    def test_requires_authentication(self, client, event):
        response = client.post("/attendance/generate-qr", json={"event_id": event.id})

        assert response.status_code in (401, 403)

    def test_active_qr_and_png(self, client, event, org_headers):
        issued = _issue(client, event.id, org_headers)

        active = client.get(f"/attendance/event/{event.id}/qr", headers=org_headers)
        png = client.get(f"/attendance/event/{event.id}/qr.png", headers=org_headers)

        assert active.status_code == 200
        assert active.json()["token_id"] == issued["token_id"]
        assert png.status_code == 200
        assert png.headers["content-type"] == "image/png"
        assert png.content.startswith(b"\x89PNG")

    def test_active_qr_missing(self, client, event, org_headers):
        response = client.get(f"/attendance/event/{event.id}/qr", headers=org_headers)

        assert response.status_code == 404
        assert response.json()["error"] == "ActiveTokenNotFound"

    def test_out_of_range_event_id_rejected(self, client, org_headers):
        assert client.get(f"/attendance/event/{10**30}/qr", headers=org_headers).status_code == 422
        assert client.get("/attendance/event/0/stats", headers=org_headers).status_code == 422
        response = client.post("/attendance/generate-qr", json={"event_id": 10**30}, headers=org_headers)
        assert response.status_code == 422

    def test_deactivate_and_history(self, client, event, org_headers):
        first = _issue(client, event.id, org_headers)
        second = _issue(client, event.id, org_headers)

        assert client.delete(f"/attendance/event/{event.id}/qr", headers=org_headers).json() == {"deactivated": True}
        assert client.delete(f"/attendance/event/{event.id}/qr", headers=org_headers).json() == {"deactivated": False}

        history = client.get(f"/attendance/event/{event.id}/qr-history", headers=org_headers).json()
        assert [item["token_id"] for item in history] == [second["token_id"], first["token_id"]]
        assert not any(item["active"] for item in history)
        assert history[0]["issued_by_name"] == "Olga Organizer"


class TestScanFlow:
    def test_verify_then_conflict(self, client, event, org_headers, make_user, inscribe, auth_headers):
        issued = _issue(client, event.id, org_headers)
        attendee = make_user()
        inscribe(attendee, event)
        headers = auth_headers(attendee)
        scan = {"qr_data": json.dumps(issued["payload"])}

        first = client.post("/attendance/verify", json=scan, headers=headers)
        second = client.post("/attendance/verify", json=scan, headers=headers)

        assert first.status_code == 201, first.text
        body = first.json()
        assert body["verification_id"]
        assert body["event_id"] == event.id
        assert body["verified_at"]
        assert body["event"]["title"] == "Drone Building"
        assert second.status_code == 409
        assert second.json()["error"] == "AlreadyVerified"

    def test_verify_not_inscribed(self, client, event, org_headers, make_user, auth_headers):
        issued = _issue(client, event.id, org_headers)

        response = client.post(
            "/attendance/verify",
            json={"qr_data": json.dumps(issued["payload"])},
            headers=auth_headers(make_user()),
        )

        assert response.status_code == 400
        assert response.json()["error"] == "NotInscribed"

    def test_verify_malformed(self, client, make_user, auth_headers):
        response = client.post("/attendance/verify", json={"qr_data": "{not json"}, headers=auth_headers(make_user()))

        assert response.status_code == 400
        assert response.json()["error"] == "MalformedToken"

    def test_oversized_event_id_is_malformed(self, client, make_user, auth_headers):
        headers = auth_headers(make_user())
        scan = {"qr_data": json.dumps({"event_id": 10**30, "token_id": "abc"})}

        for path in ("/attendance/verify", "/attendance/validate"):
            response = client.post(path, json=scan, headers=headers)
            assert response.status_code == 400
            assert response.json()["error"] == "MalformedToken"

    def test_validate_superseded_token(self, client, event, org_headers, make_user, auth_headers):
        old = _issue(client, event.id, org_headers)
        _issue(client, event.id, org_headers)

        response = client.post(
            "/attendance/validate",
            json={"qr_data": json.dumps(old["payload"])},
            headers=auth_headers(make_user()),
        )

        assert response.status_code == 400
        assert response.json()["error"] == "TokenInactiveOrUnknown"

    def test_validate_returns_event_context(self, client, event, org_headers, make_user, auth_headers):
        issued = _issue(client, event.id, org_headers)

        response = client.post(
            "/attendance/validate",
            json={"qr_data": json.dumps(issued["payload"])},
            headers=auth_headers(make_user()),
        )

        assert response.status_code == 200
        assert response.json()["event_title"] == "Drone Building"
        assert response.json()["token_id"] == issued["token_id"]

    def test_reports_after_scan(self, client, event, org_headers, make_user, inscribe, auth_headers):
        issued = _issue(client, event.id, org_headers)
        attendee = make_user(full_name="Ada")
        inscribe(attendee, event)
        inscribe(make_user(), event)
        headers = auth_headers(attendee)

        before = client.get(f"/attendance/can-evaluate/{event.id}", headers=headers).json()
        client.post("/attendance/verify", json={"qr_data": json.dumps(issued["payload"])}, headers=headers)
        after = client.get(f"/attendance/can-evaluate/{event.id}", headers=headers).json()

        assert before["can_evaluate"] is False
        assert after["can_evaluate"] is True

        stats = client.get(f"/attendance/event/{event.id}/stats", headers=org_headers).json()
        assert stats["inscribed_count"] == 2
        assert stats["verified_count"] == 1
        assert stats["attendance_rate"] == 0.5
        assert stats["attendance_percentage"] == 50.0

        verifications = client.get(f"/attendance/event/{event.id}/verifications", headers=org_headers).json()
        assert [v["attendee"]["full_name"] for v in verifications] == ["Ada"]

        mine = client.get("/attendance/user/verifications", headers=headers).json()
        assert [v["event"]["id"] for v in mine] == [event.id]


def test_health(client):
    assert client.get("/health").json()["status"] == "ok"


def test_qr_status(client, make_event, organizer, auth_headers):
    event = make_event()
    headers = auth_headers(organizer)

    assert client.get(f"/attendance/event/{event.id}/qr/status", headers=headers).json()["has_active_qr"] is False
    _issue(client, event.id, headers)
    assert client.get(f"/attendance/event/{event.id}/qr/status", headers=headers).json()["has_active_qr"] is True
