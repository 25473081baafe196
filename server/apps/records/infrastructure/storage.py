"""Object storage for the bytes behind file records."""

import logging
import uuid
from pathlib import Path
from typing import Any, BinaryIO, final, override

from django.core.files.base import File as DjangoFile
from django.core.files.storage import default_storage
from storages.backends.s3 import S3Storage

from server.apps.records.models import BlobRef

logger = logging.getLogger(__name__)


@final
class RecordStorage(S3Storage):
    """S3 storage backend for record blobs.

    Extends django-storages S3Storage with logging around uploads and
    deletes, and a best-effort rollback for uploads whose record was
    never saved.
    """

    @override
    def save(  # noqa: WPS211
        self,
        name: str,
        content: Any,
        max_length: int | None = None,
    ) -> str:
        """Save a blob to S3 with error logging.

        Args:
            name: Storage key for the blob.
            content: File content (file-like object).
            max_length: Optional maximum length for the key.

        Returns:
            Actual storage key used (may differ from name on conflicts).

        Raises:
            Exception: If the S3 upload fails.
        """
        try:
            logger.info('Uploading blob to storage: %s', name)
            saved_name = super().save(name, content, max_length)
        except Exception:
            logger.exception('Failed to upload blob to storage: %s', name)
            raise
        else:
            logger.info('Uploaded blob: %s', saved_name)
            return saved_name

    @override
    def delete(self, name: str) -> None:
        """Delete a blob from S3 with error logging.

        Args:
            name: Storage key of the blob.

        Raises:
            Exception: If the S3 delete fails.
        """
        try:
            logger.info('Deleting blob from storage: %s', name)
            super().delete(name)
        except Exception:
            logger.exception('Failed to delete blob from storage: %s', name)
            raise

    def rollback_upload(self, name: str) -> None:
        """Delete an uploaded blob whose record could not be saved.

        Best effort: a failure is logged and the blob is left orphaned.

        Args:
            name: Storage key of the blob.
        """
        try:
            logger.warning('Rolling back upload, deleting blob: %s', name)
            self.delete(name)
        except Exception:
            logger.exception(
                'Failed to rollback upload, orphaned blob: %s',
                name,
            )


def get_storage() -> RecordStorage:
    """Get the configured default storage backend.

    Returns:
        RecordStorage instance with the S3 configuration from settings.
    """
    return default_storage  # type: ignore[return-value]


def build_blob_key(owner_id: int, original_name: str) -> str:
    """Build a unique storage key for an upload.

    Example: (7, 'report.pdf') -> '7/3f2b.../report.pdf'

    Args:
        owner_id: Owner of the record the blob belongs to.
        original_name: Name of the uploaded file.

    Returns:
        Storage key scoped to the owner.
    """
    filename = Path(original_name).name or 'upload'
    return f'{owner_id}/{uuid.uuid4().hex}/{filename}'


def upload_blob(
    owner_id: int,
    file_obj: BinaryIO | DjangoFile,
    original_name: str,
) -> BlobRef:
    """Upload bytes to storage and describe where they ended up.

    Args:
        owner_id: Owner of the record the blob will be attached to.
        file_obj: File-like object with the content.
        original_name: Name of the file as uploaded by the user.

    Returns:
        BlobRef with the download URL, original name and storage key.
    """
    storage = get_storage()
    saved_name = storage.save(build_blob_key(owner_id, original_name), file_obj)
    return BlobRef(
        url=storage.url(saved_name),
        original_name=original_name,
        key=saved_name,
    )


def delete_blob(blob_key: str) -> None:
    """Remove a blob from storage if it is still there.

    Args:
        blob_key: Storage key of the blob.
    """
    storage = get_storage()
    if storage.exists(blob_key):
        storage.delete(blob_key)
    else:
        logger.warning(
            'Blob not found in storage (already deleted?): %s',
            blob_key,
        )
