"""Entry points for file record operations.

These functions are the only API the routing layer calls. Each one
receives the caller identity explicitly, resolves the record (not
found is decided before authorization), checks the authorization
guard and then applies exactly one change.
"""

import logging
from typing import BinaryIO, TypedDict

from django.core.files.base import File as DjangoFile
from django.db import DatabaseError, transaction
from django.db.models import Case, Value, When
from django.utils import timezone

from server.apps.records.exceptions import (
    RecordNotFoundError,
    RecordPersistenceError,
    RecordValidationError,
)
from server.apps.records.infrastructure import storage
from server.apps.records.logic import lifecycle
from server.apps.records.logic.access import record_access
from server.apps.records.logic.authorization import Operation, authorize
from server.apps.records.logic.lookup import (
    fetch_record,
    refresh_fields,
    run_update,
    update_fields,
)
from server.apps.records.logic.view_resolver import parse_view, resolve_view
from server.apps.records.models import BlobRef, FileRecord, Visibility

logger = logging.getLogger(__name__)


class StarResult(TypedDict):
    """Outcome of a star toggle."""

    starred: bool


def _require_text(field_label: str, field_value: object) -> str:
    """Validate a required, non-blank text field.

    Args:
        field_label: Human-readable field name for the error message.
        field_value: Submitted value.

    Returns:
        The value with surrounding whitespace removed.

    Raises:
        RecordValidationError: If the value is missing, not a string
            or blank.
    """
    if not isinstance(field_value, str) or not field_value.strip():
        raise RecordValidationError(f'{field_label} is required')
    return field_value.strip()


def _parse_visibility(visibility: str) -> Visibility:
    try:
        return Visibility(visibility)
    except ValueError as error:
        raise RecordValidationError(
            f'Invalid visibility: {visibility}',
        ) from error


def _validate_blob_ref(blob_ref: BlobRef) -> BlobRef:
    if not blob_ref.url:
        raise RecordValidationError('Blob URL is required')
    return blob_ref


def create_record(  # noqa: WPS211
    caller_id: int,
    title: str,
    author: str,
    description: str = '',
    blob_ref: BlobRef | None = None,
    visibility: str = Visibility.PRIVATE,
) -> FileRecord:
    """Create a new active, unstarred record owned by the caller.

    Args:
        caller_id: Identity of the caller, stored as owner.
        title: Record title.
        author: Record author.
        description: Optional description.
        blob_ref: Optional blob already uploaded to storage.
        visibility: 'private' (default) or 'public'.

    Returns:
        Created FileRecord instance.

    Raises:
        RecordValidationError: If title or author is blank, the
            visibility is unknown or the blob has no URL.
        RecordPersistenceError: If the database insert fails.
    """
    title = _require_text('Title', title)
    author = _require_text('Author', author)
    visibility = _parse_visibility(visibility)
    if blob_ref is not None:
        _validate_blob_ref(blob_ref)

    try:
        record = FileRecord.objects.create(
            owner_id=caller_id,
            title=title,
            author=author,
            description=description or '',
            visibility=visibility,
            file_url=blob_ref.url if blob_ref else '',
            file_name=blob_ref.original_name if blob_ref else '',
            blob_key=blob_ref.key if blob_ref else '',
        )
    except DatabaseError as error:
        logger.exception('Failed to create file record for %s', caller_id)
        raise RecordPersistenceError(str(error)) from error

    logger.info(
        'File record created: %s (owner: %s, visibility: %s)',
        record.pk,
        caller_id,
        visibility,
    )
    return record


def rename_record(
    caller_id: int,
    record_id: object,
    title: str,
    *,
    author: str | None = None,
    description: str | None = None,
) -> FileRecord:
    """Change a record's title and, optionally, author and description.

    Args:
        caller_id: Identity of the caller.
        record_id: Record identifier.
        title: New title.
        author: New author, left unchanged when None.
        description: New description, left unchanged when None.

    Returns:
        Updated FileRecord instance.

    Raises:
        RecordValidationError: If the id is malformed or a required
            field is blank.
        RecordNotFoundError: If the record does not exist.
        RecordForbiddenError: If the caller is not the owner.
    """
    title = _require_text('Title', title)
    changes: dict[str, str] = {'title': title}
    if author is not None:
        changes['author'] = _require_text('Author', author)
    if description is not None:
        changes['description'] = description

    record = fetch_record(record_id)
    authorize(caller_id, record, Operation.UPDATE)

    update_fields(record, **changes)
    logger.info(
        'File record updated: %s (fields: %s)',
        record.pk,
        ', '.join(sorted(changes)),
    )
    return record


def attach_blob(
    caller_id: int,
    record_id: object,
    blob_ref: BlobRef,
) -> FileRecord:
    """Replace the blob attached to a record.

    Lifecycle state and star flag are left untouched.

    Args:
        caller_id: Identity of the caller.
        record_id: Record identifier.
        blob_ref: Blob returned by the storage collaborator.

    Returns:
        Updated FileRecord instance.

    Raises:
        RecordValidationError: If the id is malformed or the blob has
            no URL.
        RecordNotFoundError: If the record does not exist.
        RecordForbiddenError: If the caller is not the owner.
    """
    _validate_blob_ref(blob_ref)
    record = fetch_record(record_id)
    authorize(caller_id, record, Operation.ATTACH_BLOB)
    return _replace_blob(record, blob_ref)


def upload_and_attach(
    caller_id: int,
    record_id: object,
    file_obj: BinaryIO | DjangoFile,
    original_name: str,
) -> FileRecord:
    """Upload bytes to storage and attach them to a record.

    Storage first, database second: if the record update fails the
    uploaded blob is deleted again.

    Args:
        caller_id: Identity of the caller.
        record_id: Record identifier.
        file_obj: File-like object with the content.
        original_name: Name of the file as uploaded by the user.

    Returns:
        Updated FileRecord instance.

    Raises:
        RecordValidationError: If the id is malformed.
        RecordNotFoundError: If the record does not exist.
        RecordForbiddenError: If the caller is not the owner.
    """
    record = fetch_record(record_id)
    authorize(caller_id, record, Operation.ATTACH_BLOB)

    blob_ref = storage.upload_blob(record.owner_id, file_obj, original_name)
    try:
        return _replace_blob(record, blob_ref)
    except Exception:
        logger.exception(
            'Attaching blob failed, rolling back upload: %s',
            blob_ref.key,
        )
        storage.get_storage().rollback_upload(blob_ref.key)
        raise


def _replace_blob(record: FileRecord, blob_ref: BlobRef) -> FileRecord:
    """Point a record at a new blob and drop the one it replaces.

    Args:
        record: Authorized record.
        blob_ref: New blob.

    Returns:
        Updated record.
    """
    previous_key = record.blob_key
    update_fields(
        record,
        file_url=blob_ref.url,
        file_name=blob_ref.original_name,
        blob_key=blob_ref.key,
    )
    logger.info(
        'Blob attached to file record %s: %s',
        record.pk,
        blob_ref.original_name,
    )

    if previous_key and previous_key != blob_ref.key:
        try:
            storage.delete_blob(previous_key)
        except Exception:
            # Record already points at the new blob
            logger.exception(
                'Failed to delete replaced blob (orphaned): %s',
                previous_key,
            )
    return record


def change_visibility(
    caller_id: int,
    record_id: object,
    visibility: str,
) -> FileRecord:
    """Make a record public or private.

    Args:
        caller_id: Identity of the caller.
        record_id: Record identifier.
        visibility: 'private' or 'public'.

    Returns:
        Updated FileRecord instance.

    Raises:
        RecordValidationError: If the id or visibility is invalid.
        RecordNotFoundError: If the record does not exist.
        RecordForbiddenError: If the caller is not the owner.
    """
    new_visibility = _parse_visibility(visibility)
    record = fetch_record(record_id)
    authorize(caller_id, record, Operation.CHANGE_VISIBILITY)

    update_fields(record, visibility=new_visibility)
    logger.info(
        'File record visibility changed: %s -> %s',
        record.pk,
        new_visibility,
    )
    return record


def trash_record(caller_id: int, record_id: object) -> None:
    """Move a record to the trash. Trashing twice is allowed.

    Args:
        caller_id: Identity of the caller.
        record_id: Record identifier.

    Raises:
        RecordValidationError: If the id is malformed.
        RecordNotFoundError: If the record does not exist.
        RecordForbiddenError: If the caller is not the owner.
    """
    record = fetch_record(record_id)
    authorize(caller_id, record, Operation.TRASH)
    lifecycle.trash_record(record)


def restore_record(caller_id: int, record_id: object) -> FileRecord:
    """Bring a record back from the trash. Restoring twice is allowed.

    Args:
        caller_id: Identity of the caller.
        record_id: Record identifier.

    Returns:
        Restored FileRecord instance.

    Raises:
        RecordValidationError: If the id is malformed.
        RecordNotFoundError: If the record does not exist.
        RecordForbiddenError: If the caller is not the owner.
    """
    record = fetch_record(record_id)
    authorize(caller_id, record, Operation.RESTORE)
    return lifecycle.restore_record(record)


def purge_record(caller_id: int, record_id: object) -> None:
    """Permanently delete a record. This cannot be undone.

    Args:
        caller_id: Identity of the caller.
        record_id: Record identifier.

    Raises:
        RecordValidationError: If the id is malformed.
        RecordNotFoundError: If the record does not exist, including
            a second purge of the same record.
        RecordForbiddenError: If the caller is not the owner.
    """
    record = fetch_record(record_id)
    authorize(caller_id, record, Operation.PURGE)
    lifecycle.purge_record(record)


def toggle_star(caller_id: int, record_id: object) -> StarResult:
    """Flip the star flag of a record, whatever its lifecycle state.

    The flip is computed by the database, so two concurrent toggles
    always apply twice instead of overwriting each other.

    Args:
        caller_id: Identity of the caller.
        record_id: Record identifier.

    Returns:
        Mapping with the new ``starred`` value.

    Raises:
        RecordValidationError: If the id is malformed.
        RecordNotFoundError: If the record does not exist.
        RecordForbiddenError: If the caller is not the owner.
    """
    record = fetch_record(record_id)
    authorize(caller_id, record, Operation.STAR)

    flipped = Case(
        When(starred=True, then=Value(False)),
        default=Value(True),
    )
    with transaction.atomic():
        updated = run_update(
            record.pk,
            {'starred': flipped, 'updated_at': timezone.now()},
        )
        if updated == 0:
            raise RecordNotFoundError(record.pk)
        # Same transaction: reads back the value this call wrote
        refresh_fields(record, 'starred', 'updated_at')

    logger.info(
        'File record %s: %s',
        'starred' if record.starred else 'unstarred',
        record.pk,
    )
    return {'starred': record.starred}


def get_record(caller_id: int, record_id: object) -> FileRecord:
    """Read one record and mark it as recently opened.

    Owners can read their records in any state; other callers can only
    read public, active records.

    Args:
        caller_id: Identity of the caller.
        record_id: Record identifier.

    Returns:
        FileRecord instance with ``last_accessed_at`` updated.

    Raises:
        RecordValidationError: If the id is malformed.
        RecordNotFoundError: If the record does not exist.
        RecordForbiddenError: If the caller may not read it.
    """
    record = fetch_record(record_id)
    authorize(caller_id, record, Operation.READ)
    return record_access(record)


def list_view(caller_id: int, view_name: str) -> list[FileRecord]:
    """List the records of a named view for the caller.

    Args:
        caller_id: Identity of the caller.
        view_name: One of 'my-files', 'public', 'starred', 'recent',
            'trash'.

    Returns:
        Records in view order.

    Raises:
        RecordValidationError: If the view name is unknown.
    """
    return resolve_view(parse_view(view_name), caller_id)
