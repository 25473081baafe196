"""Recency tracking for the recent view."""

import logging

from django.utils import timezone

from server.apps.records.logic.lookup import update_fields
from server.apps.records.models import FileRecord

logger = logging.getLogger(__name__)


def record_access(record: FileRecord) -> FileRecord:
    """Stamp the record as opened now.

    Recency reflects the last successful read, not the last edit, so
    ``updated_at`` is left untouched.

    Args:
        record: Record that was just read by an authorized viewer.

    Returns:
        The same record with ``last_accessed_at`` updated.
    """
    update_fields(record, touch=False, last_accessed_at=timezone.now())
    logger.debug('Recorded access to file record: %s', record.pk)
    return record
