"""Domain errors raised by the service layer.

Each error is an ``HTTPException`` so FastAPI renders it as ``{"detail": ...}``
with the matching status code, while services stay callable outside a request.
"""

from fastapi import HTTPException, status


class DomainError(HTTPException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Internal server error.'

    def __init__(self, detail: str | None = None, headers: dict[str, str] | None = None) -> None:
        super().__init__(status_code=self.status_code, detail=detail or self.default_detail, headers=headers)


class ValidationError(DomainError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid request.'


class Unauthorized(DomainError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = 'Only authorized users can access this.'

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail, headers={'WWW-Authenticate': 'Bearer'})


class Forbidden(DomainError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'You are not allowed to perform this action.'


class NotFound(DomainError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Resource not found.'


class Conflict(DomainError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'This time slot is already booked.'


class InternalError(DomainError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Something went wrong. Please try again later.'
