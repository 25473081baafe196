"""Exceptions for records app.

Each error carries the HTTP status the routing layer should answer
with, so callers can map failures without inspecting messages.
"""

from http import HTTPStatus
from typing import ClassVar

from django.core.exceptions import ValidationError


class RecordError(Exception):
    """Base class for every failure raised by the records core."""

    http_status: ClassVar[HTTPStatus] = HTTPStatus.INTERNAL_SERVER_ERROR


class RecordValidationError(RecordError, ValidationError):
    """Raised for missing fields, invalid choices or malformed ids."""

    http_status = HTTPStatus.BAD_REQUEST


class RecordNotFoundError(RecordError):
    """Raised when a record id does not resolve to a stored record."""

    http_status = HTTPStatus.NOT_FOUND

    def __init__(self, record_id: object) -> None:
        """Initialize RecordNotFoundError.

        Args:
            record_id: Identifier that failed to resolve.
        """
        self.record_id = record_id
        super().__init__(f'File record not found: {record_id}')


class RecordForbiddenError(RecordError):
    """Raised when the caller is not allowed to perform an operation."""

    http_status = HTTPStatus.FORBIDDEN

    def __init__(
        self,
        caller_id: int,
        record_id: object,
        operation: str,
    ) -> None:
        """Initialize RecordForbiddenError.

        Args:
            caller_id: Identity of the refused caller.
            record_id: Record the caller tried to access.
            operation: Name of the refused operation.
        """
        self.caller_id = caller_id
        self.record_id = record_id
        self.operation = operation
        super().__init__(
            f'Caller {caller_id} may not {operation} record {record_id}',
        )


class RecordPersistenceError(RecordError):
    """Raised when the underlying store fails."""

    http_status = HTTPStatus.SERVICE_UNAVAILABLE
