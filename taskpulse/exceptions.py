# taskpulse/exceptions.py
"""
Business errors raised by the services layer.

Each error carries the HTTP status it maps to so the exception handlers in
main.py stay a single lookup.
"""

from typing import Optional


class TaskPulseError(Exception):
    status_code = 500

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field


class NotFoundError(TaskPulseError):
    """The id does not resolve to an entity of the expected kind"""
    status_code = 404


class ForbiddenError(TaskPulseError):
    """The actor is authenticated but not allowed to do this"""
    status_code = 403


class UnauthenticatedError(TaskPulseError):
    status_code = 401


class ValidationError(TaskPulseError):
    """Malformed payload, dangling reference or broken invariant"""
    status_code = 400


class ConflictError(TaskPulseError):
    """Uniqueness violation or a delete blocked by required references"""
    status_code = 409


class NotifierError(TaskPulseError):
    """Delivery failure; caught at the dispatch boundary and only logged"""
