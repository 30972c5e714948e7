from labmgr.models.notification import Notification

from conftest import register, sample_payload

_PROTOCOL = {
    "title": "Water pH calibration",
    "description": "Two-point calibration before field work",
    "category": "water",
    "content": "1. Rinse electrode\n2. Buffer 4.0\n3. Buffer 7.0",
}


def _report_payload(sample_pk: int, **extra) -> dict:
    payload = {"sampleId": sample_pk, "title": "pH summary", "content": {"mean": 7.1}}
    payload.update(extra)
    return payload


# -- Reports -----------------------------------------------------------------


def test_create_report_for_own_sample_notifies(client, db) -> None:
    user_id = register(client, "alice").json()["id"]
    sample_pk = client.post("/api/samples", json=sample_payload()).json()["id"]

    response = client.post("/api/reports", json=_report_payload(sample_pk))

    assert response.status_code == 201
    assert response.json()["generatedBy"] == user_id
    assert response.json()["status"] == "draft"
    types = {n.type for n in db.query(Notification).filter(Notification.user_id == user_id)}
    assert types == {"sample_entry", "report_generated"}


def test_report_for_someone_elses_sample_is_forbidden(make_client) -> None:
    owner, stranger = make_client(), make_client()
    register(owner, "alice")
    register(stranger, "bob")
    sample_pk = owner.post("/api/samples", json=sample_payload()).json()["id"]

    assert stranger.post("/api/reports", json=_report_payload(sample_pk)).status_code == 403
    assert stranger.post("/api/reports", json=_report_payload(9999)).status_code == 404


def test_reports_are_owner_scoped(make_client, admin_client) -> None:
    owner, stranger = make_client(), make_client()
    register(owner, "alice")
    register(stranger, "bob")
    sample_pk = owner.post("/api/samples", json=sample_payload()).json()["id"]
    report_pk = owner.post("/api/reports", json=_report_payload(sample_pk)).json()["id"]

    assert stranger.get("/api/reports").json() == []
    assert stranger.get(f"/api/reports/{report_pk}").status_code == 403
    assert stranger.put(f"/api/reports/{report_pk}", json={"status": "shared"}).status_code == 403
    assert [r["id"] for r in admin_client.get("/api/reports").json()] == [report_pk]

    updated = owner.put(f"/api/reports/{report_pk}", json={"status": "completed"})
    assert updated.status_code == 200
    assert updated.json()["status"] == "completed"
    assert updated.json()["content"] == {"mean": 7.1}


# -- Protocols ---------------------------------------------------------------


def test_only_admins_add_protocols(client, admin_client) -> None:
    register(client, "alice")

    assert client.post("/api/protocols", json=_PROTOCOL).status_code == 403

    response = admin_client.post("/api/protocols", json=_PROTOCOL)
    assert response.status_code == 201
    assert response.json()["status"] == "active"


def test_protocol_search_and_lookup(client, admin_client) -> None:
    register(client, "alice")
    admin_client.post("/api/protocols", json=_PROTOCOL)
    admin_client.post("/api/protocols", json=dict(_PROTOCOL, title="Soil sieving", category="soil", description="Dry sieve"))

    assert len(client.get("/api/protocols").json()) == 2
    found = client.get("/api/protocols", params={"search": "sieving"}).json()
    assert [p["title"] for p in found] == ["Soil sieving"]

    protocol_pk = found[0]["id"]
    assert client.get(f"/api/protocols/{protocol_pk}").json()["category"] == "soil"
    assert client.get("/api/protocols/555").status_code == 404
    assert client.get("/api/protocols/x").status_code == 400


# -- Notifications -----------------------------------------------------------


def test_notifications_are_per_user_and_can_be_marked_read(make_client) -> None:
    alice, bob = make_client(), make_client()
    register(alice, "alice")
    register(bob, "bob")
    alice.post("/api/samples", json=sample_payload())

    inbox = alice.get("/api/notifications").json()
    assert len(inbox) == 1
    assert inbox[0]["read"] is False
    assert bob.get("/api/notifications").json() == []

    response = alice.put(f"/api/notifications/{inbox[0]['id']}/read")
    assert response.status_code == 200
    assert alice.get("/api/notifications").json()[0]["read"] is True
    assert alice.put("/api/notifications/999/read").status_code == 404


# -- Dashboard ---------------------------------------------------------------


def test_dashboard_counts(make_client) -> None:
    alice, bob = make_client(), make_client()
    register(alice, "alice")
    register(bob, "bob")
    first = alice.post("/api/samples", json=sample_payload("W-1")).json()["id"]
    bob.post("/api/samples", json=sample_payload("W-2", status="completed"))
    alice.post("/api/reports", json=_report_payload(first))

    stats = alice.get("/api/dashboard/stats").json()

    assert stats == {"totalSamples": 2, "activeUsers": 2, "pendingReports": 1, "completedSamples": 1}


def test_health(client) -> None:
    assert client.get("/health").json() == {"status": "ok"}


def test_report_update_rejects_null_required_fields(client) -> None:
    register(client, "alice")
    sample_pk = client.post("/api/samples", json=sample_payload()).json()["id"]
    report_pk = client.post("/api/reports", json=_report_payload(sample_pk)).json()["id"]

    for field in ("title", "content", "status"):
        response = client.put(f"/api/reports/{report_pk}", json={field: None})
        assert response.status_code == 400, field

    assert client.get(f"/api/reports/{report_pk}").json()["title"] == "pH summary"
