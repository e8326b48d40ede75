"""
Admin API for attendance configuration.

Includes:
- Recurring attendance schedules (create/update, never delete)
- Small groups (create, activate/deactivate, assign leaders)
"""

from flask import Blueprint, current_app, g, jsonify, request

from rollcall.services.access import require_permission
from rollcall.services.admin import (
    create_group,
    group_to_dict,
    list_groups,
    list_schedules,
    save_schedule,
    set_group_active,
    set_group_leaders,
)
from rollcall.services.errors import ValidationError

admin_bp = Blueprint('admin', __name__, url_prefix='/api/admin')


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError('Expected a JSON object')
    return data


# ============== SCHEDULES ==============

@admin_bp.route('/attendance-schedule', methods=['GET'])
@require_permission('adminland', 'admin')
def schedules():
    return jsonify({
        'success': True,
        'schedules': [s.to_dict() for s in list_schedules(g.caller.organization_id)]
    })


@admin_bp.route('/attendance-schedule', methods=['POST'])
@require_permission('adminland', 'admin')
def upsert_schedule():
    """
    Create or update a schedule.

    Body:
        id: optional, updates that schedule
        weekday: 0-6 (Sunday = 0) or day name
        startTimeLocal: HH:MM or HH:MM:SS
        timezone: IANA zone
        active: bool
    """
    schedule = save_schedule(g.caller.organization_id, _json_body())
    current_app.logger.info(
        f"Schedule {schedule.id} saved by user {g.caller.user_id}: "
        f"weekday={schedule.weekday} {schedule.start_time_local} {schedule.timezone} active={schedule.active}"
    )
    return jsonify({'success': True, 'schedule': schedule.to_dict()})


# ============== SMALL GROUPS ==============

@admin_bp.route('/groups', methods=['GET'])
@require_permission('adminland', 'admin')
def groups():
    return jsonify({
        'success': True,
        'groups': [group_to_dict(group) for group in list_groups(g.caller.organization_id)]
    })


@admin_bp.route('/groups', methods=['POST'])
@require_permission('adminland', 'admin')
def add_group():
    data = _json_body()
    group = create_group(
        g.caller.organization_id,
        data.get('name'),
        sk=data.get('sk'),
        section=data.get('section'),
    )
    return jsonify({'success': True, 'group': group_to_dict(group)}), 201


@admin_bp.route('/groups/<int:group_id>/active', methods=['POST'])
@require_permission('adminland', 'admin')
def toggle_group(group_id):
    data = _json_body()
    group = set_group_active(g.caller.organization_id, group_id, data.get('active'))
    return jsonify({'success': True, 'group': group_to_dict(group)})


@admin_bp.route('/groups/<int:group_id>/leaders', methods=['POST'])
@require_permission('adminland', 'admin')
def assign_leaders(group_id):
    data = _json_body()
    group = set_group_leaders(g.caller.organization_id, group_id, data.get('leaderUserIds', []))
    return jsonify({'success': True, 'group': group_to_dict(group)})
