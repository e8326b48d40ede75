from __future__ import annotations

from rollcall.models import EmailLog, Notification
from rollcall.services import notifications
from rollcall.services.email_service import email_service
from rollcall.services.notifications import (
    ATTENDANCE_OPEN,
    dispatch_event_opened,
    get_active_group_leaders,
    list_notifications,
    mark_notifications_read,
)


def _org_with_three_leaders(make):
    org = make.org()
    a = make.user(org, name="Alex")
    b = make.user(org, name="Blair")
    c = make.user(org, name="Casey")
    retired = make.user(org, name="Dana")
    make.group(org, "G", leaders=[a, b])
    make.group(org, "H", leaders=[b, c])
    make.group(org, "Old", leaders=[retired], active=False)
    return org, [a, b, c], retired


def test_fan_out_is_deduplicated_across_groups(make):
    org, leaders, retired = _org_with_three_leaders(make)
    event = make.event(org)

    result = dispatch_event_opened(event)

    rows = Notification.query.filter_by(organization_id=org.id).all()
    assert result["notified"] == 3
    assert len(rows) == 3
    assert {n.user_id for n in rows} == {u.id for u in leaders}
    assert all(n.type == ATTENDANCE_OPEN for n in rows)
    assert all(n.action_url.endswith("/attendance") for n in rows)
    assert retired.id not in {n.user_id for n in rows}


def test_leaders_from_other_organizations_are_not_notified(make):
    org, leaders, _ = _org_with_three_leaders(make)
    other = make.org(name="Elsewhere")
    outsider = make.user(other)
    make.group(other, "Theirs", leaders=[outsider])

    assert {u.id for u in get_active_group_leaders(org.id)} == {u.id for u in leaders}


def test_emails_are_logged_in_dry_run(make):
    org, leaders, _ = _org_with_three_leaders(make)
    event = make.event(org)

    result = dispatch_event_opened(event)

    assert result["emails_sent"] == 3
    logs = EmailLog.query.filter_by(event_id=event.id).all()
    assert len(logs) == 3
    assert {log.status for log in logs} == {"dry_run"}


def test_failed_sends_are_counted_not_raised(make, monkeypatch):
    org, leaders, _ = _org_with_three_leaders(make)
    event = make.event(org)
    calls = []

    def flaky_send(**kwargs):
        calls.append(kwargs["to_email"])
        if len(calls) == 1:
            raise ConnectionError("timed out")
        if len(calls) == 2:
            return {"success": False, "message_id": None, "error": "bounced"}
        return {"success": True, "message_id": "abc", "error": None}

    monkeypatch.setattr(email_service, "send_email", flaky_send)

    result = dispatch_event_opened(event)

    assert len(calls) == 3
    assert result["emails_sent"] == 1
    assert result["emails_failed"] == 2
    assert Notification.query.filter_by(organization_id=org.id).count() == 3


def test_no_leaders_means_nothing_to_do(make):
    org = make.org()
    event = make.event(org)

    result = dispatch_event_opened(event)

    assert result["notified"] == 0
    assert Notification.query.count() == 0


def test_real_send_without_api_key_fails_softly(app, make):
    org = make.org()
    leader = make.user(org)
    make.group(org, "G", leaders=[leader])
    event = make.event(org)
    app.config["BREVO_API_KEY"] = None
    email_service.init_app(app)

    result = notifications.dispatch_event_opened(event, dry_run=False)

    assert result["notified"] == 1
    assert result["emails_failed"] == 1
    log = EmailLog.query.filter_by(event_id=event.id).one()
    assert log.status == "failed"
    assert "BREVO_API_KEY" in log.error_message


def test_mark_read_is_idempotent(make):
    org, leaders, _ = _org_with_three_leaders(make)
    dispatch_event_opened(make.event(org))
    dispatch_event_opened(make.event(org, event_date_local="2026-10-28"))
    caller = make.caller(leaders[0], org)

    assert len(list_notifications(caller)) == 2
    assert mark_notifications_read(caller) == 2
    first_read_at = {n.id: n.read_at for n in list_notifications(caller)}
    assert mark_notifications_read(caller) == 0
    assert {n.id: n.read_at for n in list_notifications(caller)} == first_read_at

    # Other leaders are untouched
    other = make.caller(leaders[1], org)
    assert all(n.read_at is None for n in list_notifications(other))


def test_mark_read_by_ids(make):
    org, leaders, _ = _org_with_three_leaders(make)
    dispatch_event_opened(make.event(org))
    dispatch_event_opened(make.event(org, event_date_local="2026-10-28"))
    caller = make.caller(leaders[0], org)
    target = list_notifications(caller)[0]

    assert mark_notifications_read(caller, [target.id]) == 1
    unread = [n for n in list_notifications(caller) if n.read_at is None]
    assert len(unread) == 1


def test_attendance_email_template_is_filled_in(app):
    html = email_service.render("emails/attendance_open.html", {
        "LEADER_NAME": "Alex",
        "ORG_NAME": "Anthem Students",
        "EVENT_DATE": "Wednesday, October 21",
        "ACTION_URL": "http://localhost:5000/attendance",
    })

    assert "Alex" in html
    assert "http://localhost:5000/attendance" in html
    assert "{{" not in html
