"""Database models for records app."""

import uuid
from dataclasses import dataclass
from typing import ClassVar, Final, Self, final, override

from django.conf import settings
from django.db import models
from django.utils import timezone

# Constants for field max lengths
_TITLE_MAX_LENGTH: Final = 255
_AUTHOR_MAX_LENGTH: Final = 255
_FILE_URL_MAX_LENGTH: Final = 1024
_FILE_NAME_MAX_LENGTH: Final = 255
_BLOB_KEY_MAX_LENGTH: Final = 1024
_CHOICE_MAX_LENGTH: Final = 16


class Visibility(models.TextChoices):
    """Who may read a record."""

    PRIVATE = 'private', 'Private'
    PUBLIC = 'public', 'Public'


class LifecycleState(models.TextChoices):
    """Stored lifecycle state of a record.

    Purging is not a state: a purged record no longer exists.
    """

    ACTIVE = 'active', 'Active'
    TRASHED = 'trashed', 'Trashed'


@dataclass(frozen=True, slots=True)
class BlobRef:
    """Reference to uploaded bytes in object storage.

    ``url`` and ``original_name`` come from the upload collaborator.
    ``key`` is the storage key used to remove the bytes after a purge;
    it is empty when the blob was uploaded outside this project.
    """

    url: str
    original_name: str
    key: str = ''


class FileRecordQuerySet(models.QuerySet['FileRecord']):
    """Reusable filters for file records."""

    def active(self) -> Self:
        """Records that are not in the trash."""
        return self.filter(lifecycle_state=LifecycleState.ACTIVE)

    def trashed(self) -> Self:
        """Records that are in the trash."""
        return self.filter(lifecycle_state=LifecycleState.TRASHED)

    def owned_by(self, owner_id: int) -> Self:
        """Records created by the given user."""
        return self.filter(owner_id=owner_id)

    def public(self) -> Self:
        """Records readable by anyone while active."""
        return self.filter(visibility=Visibility.PUBLIC)


@final
class FileRecord(models.Model):
    """Metadata and policy state for a user-submitted file.

    The bytes themselves live in object storage and are referenced
    through ``blob_ref``. The record tracks ownership, visibility, the
    star flag, recency and the active/trashed lifecycle.

    ``lifecycle_state`` and ``deleted_at`` must only be written through
    ``server.apps.records.logic.lifecycle.transition``; the database
    constraint below rejects any write that lets them drift apart.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
    )

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='file_records',
    )

    title = models.CharField(max_length=_TITLE_MAX_LENGTH)
    author = models.CharField(max_length=_AUTHOR_MAX_LENGTH)
    description = models.TextField(blank=True, default='')

    # Attached blob (both empty until a file is attached)
    file_url = models.CharField(
        max_length=_FILE_URL_MAX_LENGTH,
        blank=True,
        default='',
        help_text='Download URL returned by object storage',
    )
    file_name = models.CharField(
        max_length=_FILE_NAME_MAX_LENGTH,
        blank=True,
        default='',
        help_text='Original name of the uploaded file',
    )
    blob_key = models.CharField(
        max_length=_BLOB_KEY_MAX_LENGTH,
        blank=True,
        default='',
        help_text='Storage key, used to remove the bytes after a purge',
    )

    visibility = models.CharField(
        max_length=_CHOICE_MAX_LENGTH,
        choices=Visibility.choices,
        default=Visibility.PRIVATE,
    )

    starred = models.BooleanField(default=False)

    lifecycle_state = models.CharField(
        max_length=_CHOICE_MAX_LENGTH,
        choices=LifecycleState.choices,
        default=LifecycleState.ACTIVE,
    )
    deleted_at = models.DateTimeField(null=True, blank=True)

    last_accessed_at = models.DateTimeField(default=timezone.now)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = FileRecordQuerySet.as_manager()

    class Meta:
        """Model metadata."""

        verbose_name = 'File record'  # type: ignore[mutable-override]
        verbose_name_plural = 'File records'  # type: ignore[mutable-override]
        ordering: ClassVar[list[str]] = ['-created_at']

        indexes: ClassVar[list[models.Index]] = [
            # my-files and trash views
            models.Index(
                fields=['owner', 'lifecycle_state'],
                name='records_owner_state_idx',
            ),
            # recent view
            models.Index(
                fields=['owner', 'lifecycle_state', '-last_accessed_at'],
                name='records_owner_recent_idx',
            ),
            # public view
            models.Index(
                fields=['visibility', 'lifecycle_state'],
                name='records_visibility_state_idx',
            ),
        ]

        constraints: ClassVar[list[models.BaseConstraint]] = [
            # trashed <=> deleted_at is set
            models.CheckConstraint(
                condition=(
                    models.Q(
                        lifecycle_state=LifecycleState.ACTIVE,
                        deleted_at__isnull=True,
                    ) | models.Q(
                        lifecycle_state=LifecycleState.TRASHED,
                        deleted_at__isnull=False,
                    )
                ),
                name='records_deleted_at_matches_state',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.title} ({self.lifecycle_state})'

    @property
    def is_trashed(self) -> bool:
        """Whether the record is in the trash."""
        return self.lifecycle_state == LifecycleState.TRASHED

    @property
    def is_public(self) -> bool:
        """Whether the record is marked public."""
        return self.visibility == Visibility.PUBLIC

    @property
    def blob_ref(self) -> BlobRef | None:
        """Attached blob, or None when nothing is attached.

        Returns:
            BlobRef built from the stored url, name and key.
        """
        if not self.file_url:
            return None
        return BlobRef(
            url=self.file_url,
            original_name=self.file_name,
            key=self.blob_key,
        )
