from flask import Blueprint, g, jsonify, request

from rollcall.services.access import login_required
from rollcall.services.errors import ValidationError
from rollcall.services.notifications import list_notifications, mark_notifications_read

notifications_bp = Blueprint('notifications', __name__, url_prefix='/api/notifications')


@notifications_bp.route('', methods=['GET'])
@login_required
def index():
    """The caller's most recent notifications."""
    notifications = list_notifications(g.caller)
    return jsonify({
        'success': True,
        'notifications': [n.to_dict() for n in notifications],
        'unread': sum(1 for n in notifications if n.read_at is None),
    })


@notifications_bp.route('/read', methods=['POST'])
@login_required
def mark_read():
    """Mark notifications read. Body: {ids?: [...]}; without ids, marks all."""
    data = request.get_json(silent=True) or {}
    ids = data.get('ids')
    if ids is not None:
        if not isinstance(ids, list):
            raise ValidationError('ids must be a list')
        try:
            ids = [int(i) for i in ids]
        except (TypeError, ValueError):
            raise ValidationError('ids must be notification ids')

    updated = mark_notifications_read(g.caller, ids)
    return jsonify({'success': True, 'updated': updated})
