"""Exception hierarchy shared by the core and the HTTP adapter."""


class SprinterError(Exception):
    """Base exception for Sprinter."""

    def __init__(self, code: str, message: str, details=None, status_code: int = 500):
        self.code = code
        self.message = message
        self.details = details
        self.status_code = status_code
        super().__init__(message)


class ValidationError(SprinterError):
    """Business-rule rejection. Never retried; nothing has been mutated."""

    def __init__(self, message: str, details=None):
        super().__init__("VALIDATION_ERROR", message, details, status_code=400)


class NotFoundError(SprinterError):
    """Resource not found."""

    def __init__(self, resource: str, resource_id: str):
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(
            "NOT_FOUND",
            f"{resource} '{resource_id}' not found",
            status_code=404,
        )


class AuthenticationError(SprinterError):
    """Authentication required or token invalid."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__("AUTHENTICATION_ERROR", message, status_code=401)


class AccessDeniedError(SprinterError):
    """The acting user's effective role is absent or insufficient."""

    def __init__(self, message: str = "You do not have access to this project", details=None):
        super().__init__("ACCESS_DENIED", message, details, status_code=403)
