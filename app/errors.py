"""
Error taxonomy for the chat backend.

Every failure that can reach a client is raised as a ChatAppError subclass
and converted to an HTTP response at the request boundary (see app.main).
"""

from typing import Any, Dict, Optional


class ChatAppError(Exception):
    """Base exception carrying a machine code and a client-facing message"""

    status_code = 500
    body_key = "msg"

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_body(self) -> Dict[str, str]:
        return {self.body_key: self.message}


class ValidationError(ChatAppError):
    status_code = 400

    def __init__(
        self,
        message: str = "Invalid request",
        details: Optional[Dict[str, Any]] = None,
        code: str = "VALIDATION_ERROR",
    ):
        super().__init__(code, message, details)


class DuplicateIdentity(ValidationError):
    def __init__(self):
        super().__init__("User with this email already exists", code="DUPLICATE_IDENTITY")


class InvalidCredentials(ChatAppError):
    """Unknown email and wrong password share this error so neither leaks."""

    status_code = 400

    def __init__(self):
        super().__init__("INVALID_CREDENTIALS", "Invalid Credentials")


class AuthError(ChatAppError):
    status_code = 401


class MissingToken(AuthError):
    def __init__(self):
        super().__init__("MISSING_TOKEN", "No token, authorization denied")


class InvalidToken(AuthError):
    def __init__(self):
        super().__init__("INVALID_TOKEN", "Token is not valid")


class NotFoundOrForbidden(ChatAppError):
    """Raised for absent conversations and for conversations owned by someone else."""

    status_code = 404

    def __init__(self):
        super().__init__("NOT_FOUND", "Chat not found")


class UpstreamError(ChatAppError):
    status_code = 500
    body_key = "error"

    def __init__(self, message: str, code: str = "UPSTREAM_ERROR"):
        super().__init__(code, message)


class UpstreamTimeout(UpstreamError):
    def __init__(self, timeout_seconds: float):
        super().__init__(
            f"Model did not respond within {timeout_seconds:g} seconds",
            code="UPSTREAM_TIMEOUT",
        )


class UnexpectedRole(UpstreamError):
    def __init__(self, role: Any):
        super().__init__(f"Model returned unexpected role: {role!r}", code="UNEXPECTED_ROLE")
        self.details = {"role": str(role)}
