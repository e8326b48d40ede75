"""
Attendance event opener.

Called every few minutes by the periodic trigger (POST /api/cron/attendance
or `flask open-attendance-events`). For each active schedule:

1. Work out the local weekday and clock time in the schedule's timezone.
2. The schedule is due when it is the schedule's weekday and 0 to 70
   minutes (ATTENDANCE_OPEN_WINDOW_MINUTES) have passed since the local
   start time.
3. Open at most one event per (schedule, local date). The lookup below
   is only a shortcut; the unique constraint on
   attendance_events(schedule_id, event_date_local) is what actually
   prevents duplicates when two runs overlap. Losing that race is
   reported as ALREADY_EXISTS, not as an error.
4. Newly created events are handed to the notification dispatcher.
   Dispatch problems never undo the event.

A failure on one schedule is logged and the loop moves on to the next.
"""

from collections import namedtuple
from datetime import datetime
from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from rollcall import db
from rollcall.models import AttendanceEvent, AttendanceSchedule
from rollcall.services.notifications import dispatch_event_opened
from rollcall.timezones import (
    local_date_string,
    local_datetime_to_instant,
    local_parts,
    minutes_of_day,
    parse_time_local,
    to_naive_utc,
    utc_now,
)

# Outcomes per schedule
CREATED = 'created'
ALREADY_EXISTS = 'already_exists'
NOT_DUE = 'not_due'
INVALID = 'invalid'
ERROR = 'error'

OpenOutcome = namedtuple('OpenOutcome', ['status', 'event'])

DEFAULT_WINDOW_MINUTES = 70


def check_schedule_due(schedule, now: datetime, window_minutes: int = DEFAULT_WINDOW_MINUTES):
    """
    Decide whether a schedule should open an event at `now`.

    Returns:
        (is_due, event_date_local, elapsed_minutes)

    Raises:
        ValueError: if the schedule's timezone or start time is invalid
    """
    start_hour, start_minute, _ = parse_time_local(schedule.start_time_local)
    parts = local_parts(now, schedule.timezone)

    elapsed = minutes_of_day(parts.hour, parts.minute) - minutes_of_day(start_hour, start_minute)
    is_due = parts.weekday == schedule.weekday and 0 <= elapsed <= window_minutes
    return is_due, local_date_string(parts), elapsed


def find_scheduled_event(schedule_id: int, event_date_local: str):
    return AttendanceEvent.query.filter_by(
        schedule_id=schedule_id,
        event_date_local=event_date_local
    ).first()


def open_event_for_schedule(schedule, event_date_local: str, now: datetime) -> OpenOutcome:
    """
    Create the event for (schedule, date) unless one already exists.

    Raises:
        IntegrityError: the insert failed for a reason other than a
            concurrent run creating the same (schedule, date) event
    """
    existing = find_scheduled_event(schedule.id, event_date_local)
    if existing:
        return OpenOutcome(ALREADY_EXISTS, existing)

    event = AttendanceEvent(
        organization_id=schedule.organization_id,
        schedule_id=schedule.id,
        event_date_local=event_date_local,
        starts_at=local_datetime_to_instant(event_date_local, schedule.start_time_local, schedule.timezone),
        status='open',
        opened_at=now,
        created_by_system=True,
    )
    db.session.add(event)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        existing = find_scheduled_event(schedule.id, event_date_local)
        if existing is None:
            raise
        # Another run inserted the same (schedule, date) first
        return OpenOutcome(ALREADY_EXISTS, existing)

    return OpenOutcome(CREATED, event)


def open_due_events(now: datetime = None, dry_run: bool = None) -> dict:
    """
    Evaluate every active schedule and open the events that are due.

    Args:
        now: Evaluation instant (aware, or naive UTC). Defaults to the current time.
        dry_run: Passed through to email delivery

    Returns:
        dict with 'checked', 'created', 'skipped', 'errors', 'results'
    """
    now = to_naive_utc(now) if now else utc_now()
    window = current_app.config.get('ATTENDANCE_OPEN_WINDOW_MINUTES', DEFAULT_WINDOW_MINUTES)

    summary = {
        'success': True,
        'checked': 0,
        'created': 0,
        'skipped': 0,
        'errors': 0,
        'results': []
    }

    schedules = AttendanceSchedule.query.filter_by(active=True).order_by(AttendanceSchedule.id).all()

    for schedule in schedules:
        summary['checked'] += 1
        entry = {
            'schedule_id': schedule.id,
            'organization_id': schedule.organization_id,
            'status': NOT_DUE,
            'event_id': None,
            'event_date_local': None,
        }
        summary['results'].append(entry)

        try:
            is_due, event_date_local, elapsed = check_schedule_due(schedule, now, window)
        except ValueError as e:
            entry['status'] = INVALID
            entry['error'] = str(e)
            summary['errors'] += 1
            current_app.logger.warning(f"Schedule {schedule.id} skipped: {e}")
            continue

        entry['event_date_local'] = event_date_local
        if not is_due:
            summary['skipped'] += 1
            continue

        try:
            outcome = open_event_for_schedule(schedule, event_date_local, now)
        except SQLAlchemyError as e:
            db.session.rollback()
            entry['status'] = ERROR
            entry['error'] = str(e)
            summary['errors'] += 1
            current_app.logger.error(f"Failed to open event for schedule {schedule.id}: {e}")
            continue

        entry['status'] = outcome.status
        entry['event_id'] = outcome.event.id if outcome.event else None

        if outcome.status == ALREADY_EXISTS:
            summary['skipped'] += 1
            continue

        summary['created'] += 1
        current_app.logger.info(
            f"Opened attendance event {outcome.event.id} for schedule {schedule.id} "
            f"on {event_date_local} ({elapsed} min after start)"
        )

        try:
            entry['notifications'] = dispatch_event_opened(outcome.event, dry_run=dry_run)
        except Exception as e:
            db.session.rollback()
            entry['notification_error'] = str(e)
            current_app.logger.error(f"Notification dispatch failed for event {outcome.event.id}: {e}")

    summary['success'] = summary['errors'] == 0
    return summary
