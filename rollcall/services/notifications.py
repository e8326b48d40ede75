"""
Notification fan-out for newly opened check-in sessions.

When an event opens, every leader of an active small group in the
organization gets an in-app Notification row (the durable signal) and a
best-effort email. Email failures are logged and counted, never raised
and never retried.
"""

from datetime import date
from flask import current_app

from rollcall import db
from rollcall.models import Notification, Organization, SmallGroup, User, small_group_leaders
from rollcall.services.email_service import email_service
from rollcall.timezones import utc_now

ATTENDANCE_OPEN = 'attendance_open'


def get_active_group_leaders(organization_id: int) -> list:
    """Distinct leaders of the organization's active small groups."""
    return User.query.join(
        small_group_leaders, small_group_leaders.c.user_id == User.id
    ).join(
        SmallGroup, SmallGroup.id == small_group_leaders.c.group_id
    ).filter(
        SmallGroup.organization_id == organization_id,
        SmallGroup.active.is_(True)
    ).distinct().order_by(User.id).all()


def _pretty_date(event_date_local: str) -> str:
    try:
        return date.fromisoformat(event_date_local).strftime('%A, %B %d')
    except ValueError:
        return event_date_local


def dispatch_event_opened(event, dry_run: bool = None) -> dict:
    """
    Notify responsible leaders that a check-in session is open.

    Args:
        event: The AttendanceEvent that was just created
        dry_run: Passed through to the email service

    Returns:
        dict with 'notified', 'emails_sent', 'emails_failed', 'errors'
    """
    result = {
        'notified': 0,
        'emails_sent': 0,
        'emails_failed': 0,
        'errors': []
    }

    org = db.session.get(Organization, event.organization_id)
    org_name = org.name if org else 'your group'
    leaders = get_active_group_leaders(event.organization_id)
    if not leaders:
        current_app.logger.info(f"No active group leaders to notify for event {event.id}")
        return result

    app_url = current_app.config.get('APP_URL', 'http://localhost:5000')
    action_url = f"{app_url}/attendance"
    pretty_date = _pretty_date(event.event_date_local)
    title = 'Attendance is open'
    body = f"Check-in for {org_name} on {pretty_date} is open. Mark who's here."

    # In-app rows first, in one transaction
    for leader in leaders:
        db.session.add(Notification(
            organization_id=event.organization_id,
            user_id=leader.id,
            type=ATTENDANCE_OPEN,
            title=title,
            body=body,
            action_url=action_url,
            created_at=utc_now(),
        ))
    db.session.commit()
    result['notified'] = len(leaders)

    # Email is a convenience layer; one bad address must not stop the rest
    for leader in leaders:
        if not leader.email:
            continue
        try:
            email_result = email_service.send_email(
                to_email=leader.email,
                to_name=leader.name,
                subject=f"Attendance is open - {pretty_date}",
                template_file='emails/attendance_open.html',
                params={
                    'LEADER_NAME': leader.name,
                    'ORG_NAME': org_name,
                    'EVENT_DATE': pretty_date,
                    'ACTION_URL': action_url,
                },
                email_type=ATTENDANCE_OPEN,
                event_id=event.id,
                dry_run=dry_run
            )
        except Exception as e:
            db.session.rollback()
            email_result = {'success': False, 'error': str(e)}

        if email_result['success']:
            result['emails_sent'] += 1
        else:
            result['emails_failed'] += 1
            result['errors'].append({
                'email': leader.email,
                'error': email_result['error']
            })

    current_app.logger.info(
        f"Event {event.id} opened: notified {result['notified']} leaders, "
        f"{result['emails_sent']} emails sent, {result['emails_failed']} failed"
    )
    return result


def list_notifications(caller, limit: int = 50) -> list:
    return Notification.query.filter_by(
        organization_id=caller.organization_id,
        user_id=caller.user_id
    ).order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit).all()


def mark_notifications_read(caller, ids=None) -> int:
    """
    Mark the caller's unread notifications read.

    Already-read rows are left alone, so calling this twice is harmless.

    Returns:
        Number of notifications newly marked read
    """
    query = Notification.query.filter(
        Notification.organization_id == caller.organization_id,
        Notification.user_id == caller.user_id,
        Notification.read_at.is_(None)
    )
    if ids is not None:
        query = query.filter(Notification.id.in_(list(ids)))

    now = utc_now()
    updated = 0
    for notification in query.all():
        notification.read_at = now
        updated += 1
    db.session.commit()
    return updated
