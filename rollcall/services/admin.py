"""Schedule and small-group administration for one organization."""

from rollcall import db
from rollcall.models import AttendanceSchedule, OrgMembership, SmallGroup, User
from rollcall.services.errors import NotFound, ValidationError
from rollcall.timezones import get_zone, normalize_weekday, parse_time_local

VALID_TRACKS = ('hs', 'ms')
VALID_SECTIONS = ('core', 'loose', 'fringe')


def list_schedules(organization_id: int) -> list:
    return AttendanceSchedule.query.filter_by(
        organization_id=organization_id
    ).order_by(AttendanceSchedule.id).all()


def validate_schedule_fields(weekday, start_time_local, timezone_name):
    """
    Check schedule input before anything is written.

    Returns:
        (weekday 0-6, start time string, timezone name)

    Raises:
        ValidationError
    """
    try:
        weekday = normalize_weekday(weekday)
    except ValueError as e:
        raise ValidationError(str(e))

    start_time_local = str(start_time_local or '').strip()
    try:
        parse_time_local(start_time_local)
    except ValueError as e:
        raise ValidationError(str(e))

    timezone_name = str(timezone_name or '').strip()
    try:
        get_zone(timezone_name)
    except ValueError as e:
        raise ValidationError(str(e))

    return weekday, start_time_local, timezone_name


def save_schedule(organization_id: int, data: dict) -> AttendanceSchedule:
    """Create a schedule, or update one when data has an 'id'. Schedules are never deleted."""
    weekday, start_time_local, timezone_name = validate_schedule_fields(
        data.get('weekday'),
        data.get('startTimeLocal', data.get('start_time_local')),
        data.get('timezone'),
    )
    active = data.get('active', True)
    if not isinstance(active, bool):
        raise ValidationError('active must be true or false')

    schedule_id = data.get('id')
    if schedule_id:
        try:
            schedule_id = int(schedule_id)
        except (TypeError, ValueError):
            raise ValidationError('Invalid schedule id')
        schedule = db.session.get(AttendanceSchedule, schedule_id)
        if not schedule or schedule.organization_id != organization_id:
            raise NotFound('Schedule not found')
    else:
        schedule = AttendanceSchedule(organization_id=organization_id)
        db.session.add(schedule)

    schedule.weekday = weekday
    schedule.start_time_local = start_time_local
    schedule.timezone = timezone_name
    schedule.active = active
    db.session.commit()
    return schedule


# ============== SMALL GROUPS ==============

def group_to_dict(group: SmallGroup) -> dict:
    return {
        'id': group.id,
        'name': group.name,
        'sk': group.sk,
        'section': group.section,
        'active': group.active,
        'leaders': [
            {'userId': leader.id, 'name': leader.name, 'email': leader.email}
            for leader in sorted(group.leaders, key=lambda u: u.name)
        ],
    }


def list_groups(organization_id: int) -> list:
    return SmallGroup.query.filter_by(
        organization_id=organization_id
    ).order_by(SmallGroup.name).all()


def get_group(organization_id: int, group_id) -> SmallGroup:
    group = db.session.get(SmallGroup, group_id)
    if not group or group.organization_id != organization_id:
        raise NotFound('Group not found')
    return group


def create_group(organization_id: int, name, sk='hs', section='core') -> SmallGroup:
    name = str(name or '').strip()
    if not name:
        raise ValidationError('Group name is required')
    sk = str(sk or 'hs').strip().lower()
    section = str(section or 'core').strip().lower()
    if sk not in VALID_TRACKS:
        raise ValidationError(f'Invalid track: {sk}')
    if section not in VALID_SECTIONS:
        raise ValidationError(f'Invalid section: {section}')

    group = SmallGroup(organization_id=organization_id, name=name, sk=sk, section=section, active=True)
    db.session.add(group)
    db.session.commit()
    return group


def set_group_active(organization_id: int, group_id, active) -> SmallGroup:
    if not isinstance(active, bool):
        raise ValidationError('active must be true or false')
    group = get_group(organization_id, group_id)
    group.active = active
    db.session.commit()
    return group


def set_group_leaders(organization_id: int, group_id, leader_user_ids) -> SmallGroup:
    """Replace a group's leader set. Every leader must belong to the organization."""
    group = get_group(organization_id, group_id)
    if not isinstance(leader_user_ids, list):
        raise ValidationError('leaderUserIds must be a list')

    try:
        wanted = {int(uid) for uid in leader_user_ids}
    except (TypeError, ValueError):
        raise ValidationError('leaderUserIds must be user ids')

    leaders = []
    if wanted:
        leaders = User.query.join(
            OrgMembership, OrgMembership.user_id == User.id
        ).filter(
            OrgMembership.organization_id == organization_id,
            User.id.in_(wanted)
        ).all()
        missing = wanted - {u.id for u in leaders}
        if missing:
            raise ValidationError(f'Not members of this organization: {sorted(missing)}')

    group.leaders = leaders
    db.session.commit()
    return group
