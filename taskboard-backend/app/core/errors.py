# File: app/core/errors.py

"""
Domain errors raised by the service layer.

Each error knows its `kind` (stable, machine-readable) and the HTTP status
it maps to. `app.main` registers a single handler that renders them as
{"detail": ..., "kind": ...}.
"""

from fastapi import status


class AppError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    kind: str = "internal"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UnauthenticatedError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    kind = "unauthenticated"


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    kind = "forbidden"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    kind = "not_found"


class ConflictError(AppError):
    # Duplicate email / team name are reported as 400 on the public API.
    status_code = status.HTTP_400_BAD_REQUEST
    kind = "conflict"


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    kind = "validation"
