"""
Periodic trigger endpoint.

An external scheduler calls this every few minutes with
`Authorization: Bearer <CRON_SECRET>`.
"""

import hmac
from flask import Blueprint, current_app, jsonify, request

from rollcall.services.scheduler import open_due_events

cron_bp = Blueprint('cron', __name__, url_prefix='/api/cron')


@cron_bp.route('/attendance', methods=['GET', 'POST'])
def attendance():
    """Open any attendance events that are due."""
    cron_secret = current_app.config.get('CRON_SECRET')
    if not cron_secret:
        current_app.logger.error("CRON_SECRET not configured - refusing cron call")
        return jsonify({'success': False, 'error': 'CRON_SECRET not configured'}), 500

    auth_header = request.headers.get('Authorization', '')
    if not hmac.compare_digest(auth_header, f'Bearer {cron_secret}'):
        current_app.logger.warning(f"Rejected cron call from {request.remote_addr}")
        return jsonify({'success': False, 'error': 'Unauthorized'}), 401

    summary = open_due_events()
    return jsonify(summary)
