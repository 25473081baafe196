"""Named views over file records (my-files, public, starred, recent, trash)."""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.db import DatabaseError
from django.db.models import TextChoices

from server.apps.records.exceptions import (
    RecordPersistenceError,
    RecordValidationError,
)
from server.apps.records.logic.authorization import Operation, is_allowed
from server.apps.records.models import FileRecord, FileRecordQuerySet

logger = logging.getLogger(__name__)

# Used when RECORDS_RECENT_LIMIT is not configured; also the upper bound
_DEFAULT_RECENT_LIMIT = 20


class RecordView(TextChoices):
    """Views a caller can list."""

    MY_FILES = 'my-files', 'My files'
    PUBLIC = 'public', 'Public'
    STARRED = 'starred', 'Starred'
    RECENT = 'recent', 'Recent'
    TRASH = 'trash', 'Trash'


@dataclass(frozen=True, slots=True)
class ViewRule:
    """Filter, ordering and limit that define one view."""

    select: Callable[[FileRecordQuerySet, int], FileRecordQuerySet]
    ordering: tuple[str, ...]
    limit: Callable[[], int | None] = lambda: None


def get_recent_limit() -> int:
    """Get maximum number of entries in the recent view.

    Returns:
        Limit from settings or default of 20.

    Raises:
        ImproperlyConfigured: If the limit is not between 1 and 20.
    """
    limit = getattr(settings, 'RECORDS_RECENT_LIMIT', _DEFAULT_RECENT_LIMIT)
    if not 1 <= limit <= _DEFAULT_RECENT_LIMIT:
        raise ImproperlyConfigured(
            'RECORDS_RECENT_LIMIT must be between 1 and '
            f'{_DEFAULT_RECENT_LIMIT}, got {limit}',
        )
    return limit


# Primary key is the final tiebreaker so every ordering is stable
VIEW_RULES: dict[RecordView, ViewRule] = {
    RecordView.MY_FILES: ViewRule(
        select=lambda records, caller_id: records.owned_by(caller_id).active(),
        ordering=('-created_at', 'id'),
    ),
    RecordView.PUBLIC: ViewRule(
        select=lambda records, caller_id: records.public().active(),
        ordering=('-created_at', 'id'),
    ),
    RecordView.STARRED: ViewRule(
        select=lambda records, caller_id: (
            records.owned_by(caller_id).active().filter(starred=True)
        ),
        ordering=('-updated_at', 'id'),
    ),
    RecordView.RECENT: ViewRule(
        select=lambda records, caller_id: records.owned_by(caller_id).active(),
        ordering=('-last_accessed_at', 'id'),
        limit=get_recent_limit,
    ),
    RecordView.TRASH: ViewRule(
        select=lambda records, caller_id: records.owned_by(caller_id).trashed(),
        ordering=('-deleted_at', 'id'),
    ),
}


def parse_view(view_name: str) -> RecordView:
    """Resolve a view name.

    Args:
        view_name: Name such as 'my-files' or 'trash'.

    Returns:
        Matching RecordView.

    Raises:
        RecordValidationError: If the view name is unknown.
    """
    try:
        return RecordView(view_name)
    except ValueError as error:
        raise RecordValidationError(
            f'Unknown view: {view_name}',
        ) from error


def resolve_view(view: RecordView, caller_id: int) -> list[FileRecord]:
    """List the records of a view for a caller.

    Rows are re-checked against the authorization guard, so a view can
    never expose a record the caller may not read.

    Args:
        view: View to resolve.
        caller_id: Identity of the caller.

    Returns:
        Records in view order.

    Raises:
        RecordPersistenceError: If the database query fails.
    """
    rule = VIEW_RULES[view]
    queryset = rule.select(
        FileRecord.objects.select_related('owner'),
        caller_id,
    ).order_by(*rule.ordering)

    limit = rule.limit()
    if limit is not None:
        queryset = queryset[:limit]

    try:
        candidates = list(queryset)
    except DatabaseError as error:
        logger.exception('Failed to resolve view %s', view)
        raise RecordPersistenceError(str(error)) from error

    records = [
        record
        for record in candidates
        if is_allowed(caller_id, record, Operation.READ)
    ]

    dropped = len(candidates) - len(records)
    if dropped:
        logger.warning(
            'View %s dropped %d unreadable records for caller %s',
            view,
            dropped,
            caller_id,
        )

    return records
