class MemoryMapError(Exception):
    """Base error for the memory map. Carries the HTTP status it maps to."""

    status_code = 500

    def __init__(self, message: str = "Something went wrong."):
        super().__init__(message)
        self.message = message


class ValidationError(MemoryMapError):
    """A required field is missing, empty or out of range."""

    status_code = 400


class AuthorizationError(MemoryMapError):
    """Missing or invalid credentials. The caller should re-authorize."""

    status_code = 401


class ForbiddenError(AuthorizationError):
    """The identity is valid but not on the allow-list."""

    status_code = 403


class ConfigurationError(MemoryMapError):
    """A server secret or credential is not set. Operator-facing."""

    status_code = 500


class TransientIOError(MemoryMapError):
    """Network failure talking to the database, blob store or API."""

    status_code = 503
