"""
Attendance check-in API.

Includes:
- Current check-in view (event + roster grouped by small group)
- Recent events with present/total counts
- Manual event creation (admins)
- Saving presence marks and logging guests
"""

from flask import Blueprint, current_app, g, jsonify, request

from rollcall.services.access import require_permission
from rollcall.services.checkin import (
    add_guest,
    build_view,
    create_manual_event,
    list_guests,
    list_recent_events,
    save_records,
)

attendance_bp = Blueprint('attendance', __name__, url_prefix='/api/attendance')


@attendance_bp.route('/checkin/current')
@require_permission('attendance', 'view')
def current_checkin():
    """Current event and the roster the caller may mark."""
    view = build_view(
        g.caller,
        fallback_hours=current_app.config.get('ATTENDANCE_FALLBACK_HOURS', 48)
    )
    return jsonify({'success': True, **view})


@attendance_bp.route('/events', methods=['GET'])
@require_permission('attendance', 'view')
def events():
    """Recent attendance events for the caller's organization."""
    return jsonify({'success': True, 'events': list_recent_events(g.caller)})


@attendance_bp.route('/events', methods=['POST'])
@require_permission('attendance', 'admin')
def create_event():
    """
    Open an event by hand.

    Body:
        eventDateLocal: YYYY-MM-DD (required)
        startTimeLocal: HH:MM or HH:MM:SS (optional)
        timezone: IANA zone (optional, defaults to the organization's)
    """
    data = request.get_json(silent=True) or {}
    event = create_manual_event(
        g.caller,
        data.get('eventDateLocal'),
        start_time_local=data.get('startTimeLocal'),
        timezone_name=data.get('timezone'),
    )
    current_app.logger.info(f"User {g.caller.user_id} opened manual event {event.id} for {event.event_date_local}")
    return jsonify({'success': True, 'event': event.to_dict()}), 201


@attendance_bp.route('/events/<int:event_id>/records', methods=['POST'])
@require_permission('attendance', 'edit')
def records(event_id):
    """Save presence marks. Body: {records: [{studentId, present, note}]}."""
    data = request.get_json(silent=True) or {}
    saved = save_records(g.caller, event_id, data.get('records'))
    return jsonify({'success': True, 'saved': saved})


@attendance_bp.route('/events/<int:event_id>/guests', methods=['GET'])
@require_permission('attendance', 'view')
def guests(event_id):
    return jsonify({
        'success': True,
        'guests': [guest.to_dict() for guest in list_guests(g.caller, event_id)]
    })


@attendance_bp.route('/events/<int:event_id>/guests', methods=['POST'])
@require_permission('attendance', 'edit')
def create_guest(event_id):
    """Log a guest. Body: {groupId?, guestName, note?}."""
    data = request.get_json(silent=True) or {}
    guest = add_guest(
        g.caller,
        event_id,
        data.get('guestName'),
        group_id=data.get('groupId'),
        note=data.get('note'),
    )
    return jsonify({'success': True, 'guest': guest.to_dict()}), 201
