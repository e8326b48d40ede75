import traceback

from flask import Flask, current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from rollcall import db
from rollcall.services.errors import AttendanceError


def handle_attendance_error(error):
    if error.status_code >= 403:
        current_app.logger.info(f"{request.method} {request.path} -> {error.status_code}: {error.message}")
    return jsonify({'success': False, 'error': error.message}), error.status_code


def handle_unhandled_exception(error):
    if isinstance(error, HTTPException):
        if request.path.startswith('/api/'):
            return jsonify({'success': False, 'error': error.description}), error.code
        return error

    db.session.rollback()
    current_app.logger.error("Unhandled exception: %s\n%s", error, traceback.format_exc())
    return jsonify({'success': False, 'error': 'Internal server error'}), 500


def register_error_handlers(app: Flask) -> None:
    app.register_error_handler(AttendanceError, handle_attendance_error)
    app.register_error_handler(Exception, handle_unhandled_exception)
