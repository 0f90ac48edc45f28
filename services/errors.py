"""Error types raised by the account workflow and mapped to HTTP responses"""
from typing import Dict, List, Optional


class AuthError(Exception):
    http_status = 400
    default_message = "Request failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_response(self) -> Dict:
        return {"success": False, "message": self.message}


class ValidationError(AuthError):
    default_message = "Invalid input"


class WeakPassword(ValidationError):
    def __init__(self, violations: List[str]):
        self.violations = list(violations)
        super().__init__(", ".join(self.violations))

    def to_response(self) -> Dict:
        body = super().to_response()
        body["violations"] = self.violations
        return body


class DuplicateEmail(AuthError):
    default_message = "Email already exists"


class InvalidCredentials(AuthError):
    http_status = 401
    default_message = "Invalid credentials"


class EmailNotFound(AuthError):
    http_status = 404
    default_message = "Email not found"


class InvalidOrExpiredCode(AuthError):
    default_message = "Invalid or expired code"


class SessionExpired(AuthError):
    http_status = 403
    default_message = "Session expired"


class UserNotFound(AuthError):
    http_status = 404
    default_message = "User not found"


class MailDeliveryError(AuthError):
    http_status = 500
    default_message = "Could not send email."
