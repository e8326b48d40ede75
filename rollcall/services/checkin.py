"""
Check-in view and attendance writes.

Who sees what:
- Attendance admins see every active group plus people with no group.
- Everyone else sees only the groups they lead.

Writes follow the same scope. Records for people outside the caller's
scope are dropped from the batch rather than failing it; only a batch
with nothing left to save is rejected.
"""

from collections import OrderedDict, namedtuple
from datetime import date, datetime
from sqlalchemy import case, func, or_
from sqlalchemy.exc import IntegrityError

from rollcall import db
from rollcall.models import AttendanceEvent, AttendanceGuest, AttendanceRecord, Organization, SmallGroup
from rollcall.services.access import authorized_groups, is_attendance_admin
from rollcall.services.errors import NotFound, PermissionDenied, ValidationError
from rollcall.services.roster import list_members, member_ids_in_groups
from rollcall.timezones import get_zone, hours_ago, local_datetime_to_instant, parse_time_local, to_naive_utc, utc_now

DEFAULT_FALLBACK_HOURS = 48
UNASSIGNED_LABEL = 'Unassigned'
NOTE_MAX_LENGTH = 500
GUEST_NAME_MAX_LENGTH = 120

RecordInput = namedtuple('RecordInput', ['person_id', 'present', 'note'])


def _as_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ('true', '1', 'yes', 'on')
    return bool(value)


def _as_int(value):
    if value is None or value == '' or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _clean_note(note) -> str:
    return str(note or '').strip()[:NOTE_MAX_LENGTH]


# ============== CURRENT EVENT ==============

def get_current_event(organization_id: int, now: datetime = None, fallback_hours: int = DEFAULT_FALLBACK_HOURS):
    """
    The event check-in should target right now.

    Prefers the most recently opened 'open' event. Otherwise falls back to
    whatever event was opened in the last `fallback_hours` (meetings that
    ran over). Returns None when neither exists.
    """
    event = AttendanceEvent.query.filter_by(
        organization_id=organization_id,
        status='open'
    ).order_by(AttendanceEvent.opened_at.desc(), AttendanceEvent.id.desc()).first()
    if event:
        return event

    cutoff = hours_ago(fallback_hours, now)
    return AttendanceEvent.query.filter(
        AttendanceEvent.organization_id == organization_id,
        AttendanceEvent.opened_at >= cutoff
    ).order_by(AttendanceEvent.opened_at.desc(), AttendanceEvent.id.desc()).first()


def get_event_for_caller(caller, event_id) -> AttendanceEvent:
    """Load an event in the caller's organization or raise NotFound."""
    event_id = _as_int(event_id)
    event = db.session.get(AttendanceEvent, event_id) if event_id is not None else None
    if not event or event.organization_id != caller.organization_id:
        raise NotFound('Event not found')
    return event


# ============== VIEW BUILDER ==============

def build_view(caller, now: datetime = None, fallback_hours: int = DEFAULT_FALLBACK_HOURS) -> dict:
    """
    Assemble the check-in screen for a caller.

    Returns:
        {'event': dict or None,
         'groups': [{'groupId', 'groupName', 'students': [{'studentId', 'name', 'present', 'note'}]}]}
    """
    event = get_current_event(caller.organization_id, now, fallback_hours)
    if not event:
        return {'event': None, 'groups': []}

    is_admin = is_attendance_admin(caller)
    groups = authorized_groups(caller, is_admin)
    if not groups and not is_admin:
        return {'event': event.to_dict(), 'groups': []}

    group_ids = [g.id for g in groups]
    if is_admin:
        people = [p for p in list_members(caller.organization_id)
                  if p.group_id is None or p.group_id in group_ids]
    else:
        people = list_members(caller.organization_id, group_ids)

    existing = {}
    if people:
        existing = {
            r.person_id: r for r in AttendanceRecord.query.filter(
                AttendanceRecord.event_id == event.id,
                AttendanceRecord.person_id.in_([p.id for p in people])
            ).all()
        }

    buckets = OrderedDict()
    for group in groups:
        buckets[group.id] = {'groupId': group.id, 'groupName': group.name, 'students': []}

    for person in people:
        if person.group_id not in buckets:
            # Only reachable for people without a group (admin view)
            buckets[person.group_id] = {'groupId': None, 'groupName': UNASSIGNED_LABEL, 'students': []}
        record = existing.get(person.id)
        buckets[person.group_id]['students'].append({
            'studentId': person.id,
            'name': person.name,
            'present': record.present if record else None,
            'note': (record.note or '') if record else '',
        })

    # Unassigned bucket goes last
    if None in buckets:
        buckets.move_to_end(None)

    return {'event': event.to_dict(), 'groups': list(buckets.values())}


# ============== RECORD WRITER ==============

def _normalize_records(records) -> list:
    if not isinstance(records, list):
        raise ValidationError('records must be a list')

    normalized = []
    for item in records:
        if not isinstance(item, dict):
            continue
        person_id = _as_int(item.get('personId', item.get('studentId')))
        if person_id is None:
            continue
        normalized.append(RecordInput(
            person_id=person_id,
            present=_as_bool(item.get('present')),
            note=_clean_note(item.get('note')),
        ))
    return normalized


def _allowed_person_ids(caller, is_admin: bool) -> set:
    if is_admin:
        return member_ids_in_groups(caller.organization_id, None)
    group_ids = [g.id for g in authorized_groups(caller, is_admin)]
    return member_ids_in_groups(caller.organization_id, group_ids)


def _upsert_records(event_id: int, records: list, marked_by: int):
    now = utc_now()
    existing = {
        r.person_id: r for r in AttendanceRecord.query.filter(
            AttendanceRecord.event_id == event_id,
            AttendanceRecord.person_id.in_([r.person_id for r in records])
        ).all()
    }
    for item in records:
        record = existing.get(item.person_id)
        if record is None:
            record = AttendanceRecord(event_id=event_id, person_id=item.person_id)
            db.session.add(record)
        record.present = item.present
        record.note = item.note
        record.marked_by_user_id = marked_by
        record.marked_at = now
    db.session.commit()


def save_records(caller, event_id, records) -> int:
    """
    Save presence marks for an event.

    Marks for people outside the caller's scope are silently dropped.
    Each surviving mark overwrites present, note, marker and timestamp for
    its (event, person) row, so resubmitting a payload is harmless.

    Returns:
        Number of marks saved

    Raises:
        NotFound: event missing or in another organization
        ValidationError: malformed payload or nothing submitted
        PermissionDenied: nothing left after scope filtering
    """
    event = get_event_for_caller(caller, event_id)
    normalized = _normalize_records(records)
    if not normalized:
        raise ValidationError('No attendance records provided')

    allowed = _allowed_person_ids(caller, is_attendance_admin(caller))

    # Last mark for a person wins within one batch
    permitted = OrderedDict()
    for item in normalized:
        if item.person_id in allowed:
            permitted[item.person_id] = item
    if not permitted:
        raise PermissionDenied('You do not have access to any of these students')

    items = list(permitted.values())
    try:
        _upsert_records(event.id, items, caller.user_id)
    except IntegrityError:
        # A concurrent writer inserted one of the rows first; redo as updates
        db.session.rollback()
        _upsert_records(event.id, items, caller.user_id)

    return len(items)


# ============== GUESTS ==============

def add_guest(caller, event_id, guest_name, group_id=None, note=None) -> AttendanceGuest:
    """Log a non-roster attendee. Guests are not deduplicated."""
    event = get_event_for_caller(caller, event_id)

    name = str(guest_name or '').strip()
    if not name:
        raise ValidationError('Guest name is required')
    if len(name) > GUEST_NAME_MAX_LENGTH:
        raise ValidationError(f'Guest name must be {GUEST_NAME_MAX_LENGTH} characters or fewer')

    parsed_group_id = None
    if group_id not in (None, ''):
        parsed_group_id = _as_int(group_id)
        if parsed_group_id is None:
            raise ValidationError('Invalid group id')

        is_admin = is_attendance_admin(caller)
        if is_admin:
            group = db.session.get(SmallGroup, parsed_group_id)
            if not group or group.organization_id != caller.organization_id:
                raise NotFound('Group not found')
        elif parsed_group_id not in {g.id for g in authorized_groups(caller, is_admin)}:
            raise PermissionDenied('You do not lead this group')

    guest = AttendanceGuest(
        event_id=event.id,
        group_id=parsed_group_id,
        guest_name=name,
        note=_clean_note(note) or None,
        added_by_user_id=caller.user_id,
        created_at=utc_now(),
    )
    db.session.add(guest)
    db.session.commit()
    return guest


def list_guests(caller, event_id) -> list:
    """Guests on an event that the caller is allowed to see."""
    event = get_event_for_caller(caller, event_id)
    query = AttendanceGuest.query.filter_by(event_id=event.id)

    is_admin = is_attendance_admin(caller)
    if not is_admin:
        group_ids = [g.id for g in authorized_groups(caller, is_admin)]
        query = query.filter(or_(
            AttendanceGuest.group_id.is_(None),
            AttendanceGuest.group_id.in_(group_ids)
        ))
    return query.order_by(AttendanceGuest.created_at, AttendanceGuest.id).all()


# ============== EVENT HISTORY / MANUAL EVENTS ==============

def list_recent_events(caller, limit: int = 20) -> list:
    """Recent events with present/total record counts."""
    events = AttendanceEvent.query.filter_by(
        organization_id=caller.organization_id
    ).order_by(AttendanceEvent.opened_at.desc(), AttendanceEvent.id.desc()).limit(limit).all()
    if not events:
        return []

    counts = db.session.query(
        AttendanceRecord.event_id,
        func.count(AttendanceRecord.id),
        func.sum(case((AttendanceRecord.present.is_(True), 1), else_=0))
    ).filter(
        AttendanceRecord.event_id.in_([e.id for e in events])
    ).group_by(AttendanceRecord.event_id).all()
    by_event = {event_id: (total, present or 0) for event_id, total, present in counts}

    results = []
    for event in events:
        total, present = by_event.get(event.id, (0, 0))
        data = event.to_dict()
        data['totalRecords'] = int(total)
        data['presentCount'] = int(present)
        results.append(data)
    return results


def create_manual_event(caller, event_date_local, start_time_local=None, timezone_name=None,
                        now: datetime = None) -> AttendanceEvent:
    """Open an event by hand (no schedule, no notifications)."""
    try:
        date.fromisoformat(str(event_date_local or ''))
    except ValueError:
        raise ValidationError('eventDateLocal must be a date in YYYY-MM-DD format')

    if not timezone_name:
        org = db.session.get(Organization, caller.organization_id)
        timezone_name = org.timezone if org else 'UTC'
    try:
        get_zone(timezone_name)
    except ValueError as e:
        raise ValidationError(str(e))

    starts_at = None
    if start_time_local:
        try:
            parse_time_local(start_time_local)
        except ValueError as e:
            raise ValidationError(str(e))
        starts_at = local_datetime_to_instant(event_date_local, start_time_local, timezone_name)

    event = AttendanceEvent(
        organization_id=caller.organization_id,
        schedule_id=None,
        event_date_local=event_date_local,
        starts_at=starts_at,
        status='open',
        opened_at=to_naive_utc(now) if now else utc_now(),
        created_by_system=False,
    )
    db.session.add(event)
    db.session.commit()
    return event
