"""Exceptions raised by the capacity API client and editor."""


class CapacityClientError(Exception):
    """Base exception for capacity client errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class CapacityValidationError(CapacityClientError):
    """Raised when form input is rejected before any request is sent."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field


class CapacityServerError(CapacityClientError):
    """Raised when the API answers with a non-success response."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class CapacityNetworkError(CapacityClientError):
    """Raised when the request never produced a response."""


class CapacityPermissionError(CapacityClientError):
    """Raised when the current user's capabilities do not allow an action."""
