from __future__ import annotations

from rollcall.models import AttendanceSchedule, Notification


# ============== CRON TRIGGER ==============

def test_cron_rejects_missing_or_wrong_secret(client):
    assert client.post("/api/cron/attendance").status_code == 401
    resp = client.post("/api/cron/attendance", headers={"Authorization": "Bearer nope"})
    assert resp.status_code == 401
    assert resp.get_json()["error"] == "Unauthorized"


def test_cron_requires_configured_secret(app, client):
    app.config["CRON_SECRET"] = None

    resp = client.post("/api/cron/attendance", headers={"Authorization": "Bearer "})

    assert resp.status_code == 500
    assert "CRON_SECRET" in resp.get_json()["error"]


def test_cron_runs_the_opener(client, make):
    org = make.org()
    make.schedule(org)

    resp = client.post("/api/cron/attendance", headers={"Authorization": "Bearer test-cron-secret"})

    data = resp.get_json()
    assert resp.status_code == 200
    assert data["checked"] == 1
    assert data["results"][0]["status"] in ("created", "not_due")


# ============== CHECK-IN ==============

def test_checkin_requires_login(client):
    resp = client.get("/api/attendance/checkin/current")

    assert resp.status_code == 401
    assert resp.get_json() == {"success": False, "error": "Not authenticated"}


def test_checkin_flow_for_a_leader(client, make):
    org = make.org()
    leader = make.user(org)
    g = make.group(org, "G", leaders=[leader])
    h = make.group(org, "H")
    ann = make.person(org, "Ann", g)
    cat = make.person(org, "Cat", h)
    event = make.event(org)
    make.login(client, leader, org)

    view = client.get("/api/attendance/checkin/current").get_json()
    assert view["event"]["id"] == event.id
    assert [s["studentId"] for s in view["groups"][0]["students"]] == [ann.id]

    resp = client.post(f"/api/attendance/events/{event.id}/records", json={"records": [
        {"studentId": ann.id, "present": True, "note": "on time"},
        {"studentId": cat.id, "present": True},
    ]})
    assert resp.status_code == 200
    assert resp.get_json() == {"success": True, "saved": 1}

    resp = client.post(f"/api/attendance/events/{event.id}/records", json={"records": [
        {"studentId": cat.id, "present": True},
    ]})
    assert resp.status_code == 403

    resp = client.post(f"/api/attendance/events/{event.id}/guests", json={"guestName": "Sam", "groupId": g.id})
    assert resp.status_code == 201
    assert resp.get_json()["guest"]["guest_name"] == "Sam"

    resp = client.post(f"/api/attendance/events/{event.id}/guests", json={"guestName": ""})
    assert resp.status_code == 400

    guests = client.get(f"/api/attendance/events/{event.id}/guests").get_json()["guests"]
    assert [guest["guest_name"] for guest in guests] == ["Sam"]

    events = client.get("/api/attendance/events").get_json()["events"]
    assert events[0]["presentCount"] == 1


def test_unknown_event_is_404(client, make):
    org = make.org()
    leader = make.user(org)
    make.login(client, leader, org)

    resp = client.post("/api/attendance/events/424242/records", json={"records": [{"studentId": 1}]})

    assert resp.status_code == 404
    assert resp.get_json()["success"] is False


def test_viewer_cannot_write(client, make):
    org = make.org()
    viewer = make.user(org, role="viewer")
    event = make.event(org)
    make.login(client, viewer, org)

    assert client.get("/api/attendance/checkin/current").status_code == 200
    resp = client.post(f"/api/attendance/events/{event.id}/records", json={"records": []})
    assert resp.status_code == 403


def test_manual_event_is_admin_only(client, make):
    org = make.org()
    leader = make.user(org)
    admin = make.user(org, role="admin")

    make.login(client, leader, org)
    assert client.post("/api/attendance/events", json={"eventDateLocal": "2026-10-24"}).status_code == 403

    make.login(client, admin, org)
    resp = client.post("/api/attendance/events", json={"eventDateLocal": "2026-10-24", "startTimeLocal": "10:00"})
    assert resp.status_code == 201
    assert resp.get_json()["event"]["created_by_system"] is False


def test_session_for_foreign_org_is_rejected(client, make):
    org = make.org()
    other = make.org(name="Elsewhere")
    user = make.user(org)
    make.login(client, user, other)

    assert client.get("/api/attendance/checkin/current").status_code == 401


# ============== ADMIN ==============

def test_schedule_admin(client, make):
    org = make.org()
    admin = make.user(org, role="admin")
    make.login(client, admin, org)

    resp = client.post("/api/admin/attendance-schedule", json={
        "weekday": "wednesday", "startTimeLocal": "19:00:00", "timezone": "America/Chicago", "active": True,
    })
    assert resp.status_code == 200
    schedule = resp.get_json()["schedule"]
    assert schedule["weekday"] == 3

    resp = client.post("/api/admin/attendance-schedule", json={
        "id": schedule["id"], "weekday": 5, "startTimeLocal": "18:30", "timezone": "America/Denver", "active": False,
    })
    assert resp.status_code == 200
    assert AttendanceSchedule.query.count() == 1
    stored = AttendanceSchedule.query.one()
    assert (stored.weekday, stored.start_time_local, stored.timezone, stored.active) == (5, "18:30", "America/Denver", False)

    listed = client.get("/api/admin/attendance-schedule").get_json()["schedules"]
    assert [s["id"] for s in listed] == [schedule["id"]]


def test_schedule_validation(client, make):
    org = make.org()
    admin = make.user(org, role="admin")
    make.login(client, admin, org)
    base = {"weekday": 3, "startTimeLocal": "19:00", "timezone": "America/Chicago"}

    for bad in ({"weekday": 7}, {"weekday": "funday"}, {"startTimeLocal": "7pm"},
                {"startTimeLocal": "25:00"}, {"timezone": "Moon/Base"}, {"active": "yes"}):
        resp = client.post("/api/admin/attendance-schedule", json={**base, **bad})
        assert resp.status_code == 400, bad
    assert AttendanceSchedule.query.count() == 0


def test_leaders_cannot_use_admin_routes(client, make):
    org = make.org()
    leader = make.user(org)
    make.login(client, leader, org)

    assert client.get("/api/admin/groups").status_code == 403
    assert client.post("/api/admin/attendance-schedule", json={}).status_code == 403


def test_group_admin(client, make):
    org = make.org()
    admin = make.user(org, role="admin")
    leader = make.user(org, name="Leader")
    outsider = make.user(make.org(name="Elsewhere"))
    make.login(client, admin, org)

    resp = client.post("/api/admin/groups", json={"name": "HS Girls 10th", "sk": "hs", "section": "core"})
    assert resp.status_code == 201
    group_id = resp.get_json()["group"]["id"]

    resp = client.post(f"/api/admin/groups/{group_id}/leaders", json={"leaderUserIds": [leader.id]})
    assert resp.get_json()["group"]["leaders"][0]["userId"] == leader.id

    resp = client.post(f"/api/admin/groups/{group_id}/leaders", json={"leaderUserIds": [outsider.id]})
    assert resp.status_code == 400

    resp = client.post(f"/api/admin/groups/{group_id}/active", json={"active": False})
    assert resp.get_json()["group"]["active"] is False

    assert client.post("/api/admin/groups", json={"name": ""}).status_code == 400
    assert client.post("/api/admin/groups/9999/active", json={"active": True}).status_code == 404


# ============== NOTIFICATIONS ==============

def test_notifications_list_and_read(client, make):
    org = make.org()
    leader = make.user(org)
    from rollcall import db
    for n in range(2):
        db.session.add(Notification(organization_id=org.id, user_id=leader.id, type="attendance_open",
                                    title=f"Open {n}", action_url="http://localhost:5000/attendance"))
    db.session.commit()
    make.login(client, leader, org)

    data = client.get("/api/notifications").get_json()
    assert data["unread"] == 2

    assert client.post("/api/notifications/read", json={}).get_json()["updated"] == 2
    assert client.post("/api/notifications/read", json={}).get_json()["updated"] == 0
    assert client.get("/api/notifications").get_json()["unread"] == 0
    assert client.post("/api/notifications/read", json={"ids": "all"}).status_code == 400


def test_health(client):
    assert client.get("/health").get_json()["status"] == "healthy"
