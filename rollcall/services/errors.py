"""
Errors raised by attendance services.

Routes turn these into {'success': False, 'error': message} JSON with the
carried status code (see rollcall.routes.errors).
"""


class AttendanceError(Exception):
    """Base class for caller-visible failures."""
    status_code = 400

    def __init__(self, message=None):
        super().__init__(message or self.__class__.__doc__)
        self.message = message or self.__class__.__doc__


class ValidationError(AttendanceError):
    """Invalid request."""
    status_code = 400


class AuthenticationError(AttendanceError):
    """Not authenticated."""
    status_code = 401


class PermissionDenied(AttendanceError):
    """Forbidden."""
    status_code = 403


class NotFound(AttendanceError):
    """Not found."""
    status_code = 404
