"""Lifecycle state machine for file records (trash, restore, purge).

A record is either active or trashed; purging removes it for good.
Every transition is defined for every state, so repeated or racing
calls never fail just because the record is already where the caller
wants it:

    active  --trash-->   trashed   (deleted_at = now)
    trashed --trash-->   trashed   (deleted_at re-stamped)
    trashed --restore--> active    (deleted_at cleared)
    active  --restore--> active    (no-op)
    any     --purge-->   removed   (irreversible)
"""

import logging

from django.utils import timezone

from server.apps.records.logic.lookup import (
    delete_row,
    refresh_fields,
    run_update,
)
from server.apps.records.models import FileRecord, LifecycleState

logger = logging.getLogger(__name__)

_LIFECYCLE_FIELDS = ('lifecycle_state', 'deleted_at', 'updated_at')


def transition(record: FileRecord, target_state: LifecycleState) -> FileRecord:
    """Move a record to the target lifecycle state.

    This is the only writer of ``lifecycle_state`` and ``deleted_at``;
    both are always written together in a single UPDATE.

    Args:
        record: Record to transition.
        target_state: State the record should end up in.

    Returns:
        The same record instance, reflecting the stored state.

    Raises:
        RecordNotFoundError: If the record was purged concurrently.
        RecordPersistenceError: If the database update fails.
    """
    now = timezone.now()

    if target_state == LifecycleState.TRASHED:
        values = {
            'lifecycle_state': LifecycleState.TRASHED,
            'deleted_at': now,
            'updated_at': now,
        }
        # Unconditional: trashing again re-stamps deleted_at
        updated = run_update(record.pk, values)
    else:
        values = {
            'lifecycle_state': LifecycleState.ACTIVE,
            'deleted_at': None,
            'updated_at': now,
        }
        # Only trashed rows change; restoring an active record is a no-op
        updated = run_update(
            record.pk,
            values,
            lifecycle_state=LifecycleState.TRASHED,
        )

    if updated == 0:
        # Nothing changed (or the row is gone): report what is stored
        return refresh_fields(record, *_LIFECYCLE_FIELDS)

    for field_name, field_value in values.items():
        setattr(record, field_name, field_value)
    return record


def trash_record(record: FileRecord) -> FileRecord:
    """Move a record to the trash (soft delete).

    Args:
        record: Record to trash.

    Returns:
        Updated record.
    """
    transition(record, LifecycleState.TRASHED)
    logger.info(
        'File record moved to trash: %s (owner: %s)',
        record.pk,
        record.owner_id,
    )
    return record


def restore_record(record: FileRecord) -> FileRecord:
    """Bring a record back from the trash.

    Args:
        record: Record to restore.

    Returns:
        Updated record.
    """
    transition(record, LifecycleState.ACTIVE)
    logger.info(
        'File record restored: %s (owner: %s)',
        record.pk,
        record.owner_id,
    )
    return record


def purge_record(record: FileRecord) -> None:
    """Permanently delete a record, trashed or not.

    The ``post_delete`` signal removes the attached blob from storage.

    Args:
        record: Record to purge.

    Raises:
        RecordNotFoundError: If the record was already purged.
    """
    record_id = record.pk
    delete_row(record_id)
    logger.info(
        'File record permanently deleted: %s (owner: %s)',
        record_id,
        record.owner_id,
    )
