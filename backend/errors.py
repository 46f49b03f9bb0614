# backend/errors.py
from enum import Enum


class ErrorKind(Enum):
    VALIDATION = 'validation'
    UNAUTHENTICATED = 'unauthenticated'
    FORBIDDEN = 'forbidden'
    NOT_FOUND = 'not_found'
    CONFLICT = 'conflict'
    INTERNAL = 'internal'


# Request surface maps kinds to HTTP status codes with this table.
STATUS_CODES = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 400,
    ErrorKind.INTERNAL: 500,
}


class ShopError(Exception):
    """Base error for the shop; ``kind`` decides the response status."""

    kind = ErrorKind.INTERNAL

    def __init__(self, message, field=None):
        super().__init__(message)
        self.message = message
        self.field = field

    @property
    def status_code(self):
        return STATUS_CODES[self.kind]

    def to_dict(self):
        return {'error': self.message}


class ValidationError(ShopError):
    kind = ErrorKind.VALIDATION


class Unauthenticated(ShopError):
    kind = ErrorKind.UNAUTHENTICATED


class Forbidden(ShopError):
    kind = ErrorKind.FORBIDDEN


class NotFound(ShopError):
    kind = ErrorKind.NOT_FOUND


class Conflict(ShopError):
    kind = ErrorKind.CONFLICT
