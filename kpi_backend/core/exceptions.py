"""Custom exception classes for the KPI API."""

from typing import Any, Dict


class KPIError(Exception):
    """Base exception for the KPI API; rendered as an ``{ok: false}`` envelope."""

    status_code = 400

    def __init__(self, message: str = "An error occurred"):
        self.message = message
        super().__init__(self.message)

    def payload(self) -> Dict[str, Any]:
        return {"ok": False, "error": self.message}


class ValidationError(KPIError):
    """Raised when a required field is missing or malformed."""
    status_code = 400


class NotFoundError(KPIError):
    """Raised when no matching user or record exists."""
    status_code = 404

    def __init__(self, message: str = "User not found"):
        super().__init__(message)


class AuthError(KPIError):
    """Raised by the strict auth path; reported in-payload with HTTP 200."""
    status_code = 200

    def __init__(self, code: str):
        self.code = code
        super().__init__(code)


class BackendError(KPIError):
    """Raised when the store is unreachable or a query fails."""
    status_code = 500

    def __init__(self, message: str = "Backend unavailable"):
        super().__init__(message)
