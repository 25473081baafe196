"""Authorization rules for file records.

Anyone may read a public record while it is active. Every other read
and every mutation is reserved to the record's owner.
"""

import enum
import logging

from server.apps.records.exceptions import RecordForbiddenError
from server.apps.records.models import FileRecord, LifecycleState, Visibility

logger = logging.getLogger(__name__)


class Operation(enum.StrEnum):
    """Operations checked by the authorization guard."""

    READ = 'read'
    UPDATE = 'update'
    ATTACH_BLOB = 'attach_blob'
    CHANGE_VISIBILITY = 'change_visibility'
    STAR = 'star'
    TRASH = 'trash'
    RESTORE = 'restore'
    PURGE = 'purge'


def is_publicly_readable(record: FileRecord) -> bool:
    """Check whether any caller may read the record.

    Args:
        record: Record to check.

    Returns:
        True if the record is public and active.
    """
    return (
        record.visibility == Visibility.PUBLIC
        and record.lifecycle_state == LifecycleState.ACTIVE
    )


def is_allowed(
    caller_id: int,
    record: FileRecord,
    operation: Operation,
) -> bool:
    """Decide whether the caller may perform an operation on a record.

    Args:
        caller_id: Identity of the caller.
        record: Target record.
        operation: Requested operation.

    Returns:
        True if the operation may proceed.
    """
    if operation is Operation.READ and is_publicly_readable(record):
        return True
    return record.owner_id == caller_id


def authorize(
    caller_id: int,
    record: FileRecord,
    operation: Operation,
) -> None:
    """Ensure the caller may perform an operation on a record.

    Args:
        caller_id: Identity of the caller.
        record: Target record.
        operation: Requested operation.

    Raises:
        RecordForbiddenError: If the caller is not allowed.
    """
    if is_allowed(caller_id, record, operation):
        return

    logger.warning(
        'Refused %s on record %s for caller %s (owner: %s)',
        operation,
        record.pk,
        caller_id,
        record.owner_id,
    )
    raise RecordForbiddenError(caller_id, record.pk, operation)
