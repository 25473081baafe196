"""Signal handlers for records app."""

import logging

from django.db.models.signals import post_delete
from django.dispatch import receiver

from server.apps.records.infrastructure.storage import delete_blob
from server.apps.records.models import FileRecord

logger = logging.getLogger(__name__)


@receiver(post_delete, sender=FileRecord)
def delete_blob_from_storage(
    sender: type[FileRecord],
    instance: FileRecord,
    **kwargs: object,
) -> None:
    """Delete the attached blob once its record has been purged.

    Records without a storage key (no blob, or a blob uploaded outside
    this project) are skipped.

    Args:
        sender: The FileRecord model class.
        instance: The FileRecord instance being deleted.
        **kwargs: Additional signal arguments.
    """
    if not instance.blob_key:
        return

    try:
        delete_blob(instance.blob_key)
    except Exception:
        # DB delete already succeeded; the blob is left orphaned
        logger.exception(
            'Failed to delete blob from storage (orphaned): %s',
            instance.blob_key,
        )
