"""Record lookup and guarded writes against the database.

All reads and writes of a single record pass through here so that
identifier validation, not-found detection and translation of database
failures happen in one place.
"""

import logging
import uuid
from collections.abc import Mapping
from typing import Any

from django.db import DatabaseError
from django.utils import timezone

from server.apps.records.exceptions import (
    RecordNotFoundError,
    RecordPersistenceError,
    RecordValidationError,
)
from server.apps.records.models import FileRecord

logger = logging.getLogger(__name__)


def parse_record_id(raw_id: object) -> uuid.UUID:
    """Parse and validate a record identifier.

    Malformed identifiers are rejected before any query is issued.

    Args:
        raw_id: Identifier as received from the caller.

    Returns:
        Parsed UUID.

    Raises:
        RecordValidationError: If the identifier is not a valid UUID.
    """
    if isinstance(raw_id, uuid.UUID):
        return raw_id
    if not isinstance(raw_id, str) or not raw_id:
        raise RecordValidationError('Invalid record ID')
    try:
        return uuid.UUID(raw_id)
    except ValueError as error:
        raise RecordValidationError('Invalid record ID') from error


def fetch_record(raw_id: object) -> FileRecord:
    """Load a record by identifier, whatever its lifecycle state.

    Args:
        raw_id: Identifier as received from the caller.

    Returns:
        FileRecord instance.

    Raises:
        RecordValidationError: If the identifier is malformed.
        RecordNotFoundError: If no record has this identifier.
        RecordPersistenceError: If the database query fails.
    """
    record_id = parse_record_id(raw_id)
    try:
        return FileRecord.objects.select_related('owner').get(pk=record_id)
    except FileRecord.DoesNotExist as error:
        raise RecordNotFoundError(record_id) from error
    except DatabaseError as error:
        logger.exception('Failed to load file record: %s', record_id)
        raise RecordPersistenceError(str(error)) from error


def run_update(
    record_id: uuid.UUID,
    values: Mapping[str, Any],
    **conditions: Any,
) -> int:
    """Issue one conditional UPDATE for a single record.

    Args:
        record_id: Primary key of the record.
        values: Column values or expressions to write.
        **conditions: Extra filters the row must match to be updated.

    Returns:
        Number of rows updated (0 or 1).

    Raises:
        RecordPersistenceError: If the database update fails.
    """
    try:
        return FileRecord.objects.filter(
            pk=record_id,
            **conditions,
        ).update(**values)
    except DatabaseError as error:
        logger.exception('Failed to update file record: %s', record_id)
        raise RecordPersistenceError(str(error)) from error


def update_fields(
    record: FileRecord,
    *,
    touch: bool = True,
    **values: Any,
) -> FileRecord:
    """Write the given fields of one record in a single UPDATE.

    Only the named columns are written, so concurrent writers touching
    other fields never lose their changes. The written values are
    mirrored onto ``record``.

    Args:
        record: Record to update.
        touch: Whether to stamp ``updated_at`` as well.
        **values: Column values to write.

    Returns:
        The same record instance, with the new values applied.

    Raises:
        RecordNotFoundError: If the record was purged concurrently.
        RecordPersistenceError: If the database update fails.
    """
    if touch:
        values['updated_at'] = timezone.now()

    if run_update(record.pk, values) == 0:
        raise RecordNotFoundError(record.pk)

    for field_name, field_value in values.items():
        setattr(record, field_name, field_value)
    return record


def refresh_fields(record: FileRecord, *field_names: str) -> FileRecord:
    """Reload the given fields of a record from the database.

    Args:
        record: Record to refresh.
        *field_names: Fields to reload.

    Returns:
        The same record instance.

    Raises:
        RecordNotFoundError: If the record no longer exists.
        RecordPersistenceError: If the database query fails.
    """
    try:
        record.refresh_from_db(fields=list(field_names))
    except FileRecord.DoesNotExist as error:
        raise RecordNotFoundError(record.pk) from error
    except DatabaseError as error:
        logger.exception('Failed to reload file record: %s', record.pk)
        raise RecordPersistenceError(str(error)) from error
    return record


def delete_row(record_id: uuid.UUID) -> None:
    """Hard-delete one record.

    Deleting through the queryset still sends ``post_delete`` for the
    removed row, so storage cleanup runs.

    Args:
        record_id: Primary key of the record.

    Raises:
        RecordNotFoundError: If there was nothing to delete.
        RecordPersistenceError: If the database delete fails.
    """
    try:
        deleted, _ = FileRecord.objects.filter(pk=record_id).delete()
    except DatabaseError as error:
        logger.exception('Failed to delete file record: %s', record_id)
        raise RecordPersistenceError(str(error)) from error

    if deleted == 0:
        raise RecordNotFoundError(record_id)
