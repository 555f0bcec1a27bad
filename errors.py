# errors.py
"""Typed failures of the attendance core.

Every rejection carries a stable ``code`` for clients and the HTTP
``status`` the routes answer with.
"""


class AttendanceError(Exception):
    code = "attendance_error"
    status = 400
    default_message = "Attendance request failed"

    def __init__(self, message=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    def to_dict(self):
        return {"success": False, "error": self.code, "msg": self.message}


class TokenError(AttendanceError):
    code = "invalid_token"


class MalformedToken(TokenError):
    code = "malformed_token"
    default_message = "QR code data is malformed"


class SignatureMismatch(TokenError):
    code = "signature_mismatch"
    default_message = "QR code signature is invalid"


class TokenExpired(TokenError):
    code = "token_expired"
    default_message = "QR code expired!"


class SessionNotFound(AttendanceError):
    code = "session_not_found"
    status = 404
    default_message = "Session not found"


class OutsideCampusBoundary(AttendanceError):
    code = "outside_campus_boundary"
    default_message = "Scan location is outside campus boundary"


class AlreadyScanned(AttendanceError):
    code = "already_scanned"
    status = 409
    default_message = "Scan already recorded"


class ValidationError(AttendanceError):
    code = "validation_error"
    default_message = "Missing or invalid fields"


class AuthenticationError(AttendanceError):
    code = "authentication_error"
    status = 401
    default_message = "Invalid credentials"


class PermissionDenied(AttendanceError):
    code = "permission_denied"
    status = 403
    default_message = "Unauthorized"


class PersistenceFailure(AttendanceError):
    code = "persistence_failure"
    status = 503
    default_message = "Storage is unavailable, try again"
