"""Tests for FileRecord model."""

import uuid

import pytest
from django.db import IntegrityError, transaction
from django.utils import timezone

from server.apps.records.models import (
    BlobRef,
    FileRecord,
    LifecycleState,
    Visibility,
)


@pytest.mark.django_db
class TestFileRecordDefaults:
    """Tests for field defaults on creation."""

    def test_new_record_is_active_private_unstarred(self, record):
        """Test defaults for a freshly created record."""
        assert isinstance(record.id, uuid.UUID)
        assert record.lifecycle_state == LifecycleState.ACTIVE
        assert record.deleted_at is None
        assert record.visibility == Visibility.PRIVATE
        assert record.starred is False
        assert record.last_accessed_at is not None
        assert record.created_at is not None

    def test_str(self, record):
        """Test FileRecord __str__ method."""
        assert str(record) == 'Report (active)'

    def test_flags(self, user, make_record):
        """Test is_public and is_trashed properties."""
        public_record = make_record(user, visibility=Visibility.PUBLIC)

        assert public_record.is_public is True
        assert public_record.is_trashed is False


@pytest.mark.django_db
class TestBlobRef:
    """Tests for the blob_ref property."""

    def test_blob_ref_none_without_url(self, record):
        """Test records without an attached file have no blob_ref."""
        assert record.blob_ref is None

    def test_blob_ref_from_fields(self, user, make_record):
        """Test blob_ref is built from the stored fields."""
        record = make_record(
            user,
            file_url='https://cdn.example.com/report.pdf',
            file_name='report.pdf',
            blob_key='1/abc/report.pdf',
        )

        assert record.blob_ref == BlobRef(
            url='https://cdn.example.com/report.pdf',
            original_name='report.pdf',
            key='1/abc/report.pdf',
        )


@pytest.mark.django_db
class TestLifecycleConstraint:
    """Tests for the state/deleted_at database constraint."""

    def test_active_with_deleted_at_rejected(self, record):
        """Test an active record cannot carry a deletion timestamp."""
        with pytest.raises(IntegrityError), transaction.atomic():
            FileRecord.objects.filter(pk=record.pk).update(
                deleted_at=timezone.now(),
            )

    def test_trashed_without_deleted_at_rejected(self, record):
        """Test a trashed record must carry a deletion timestamp."""
        with pytest.raises(IntegrityError), transaction.atomic():
            FileRecord.objects.filter(pk=record.pk).update(
                lifecycle_state=LifecycleState.TRASHED,
            )

    def test_trashed_with_deleted_at_accepted(self, record):
        """Test the consistent trashed combination is stored."""
        FileRecord.objects.filter(pk=record.pk).update(
            lifecycle_state=LifecycleState.TRASHED,
            deleted_at=timezone.now(),
        )

        assert FileRecord.objects.trashed().filter(pk=record.pk).exists()


@pytest.mark.django_db
class TestFileRecordQuerySet:
    """Tests for custom queryset filters."""

    def test_filters(self, user, other_user, make_record):
        """Test active, trashed, owned_by and public filters."""
        mine = make_record(user)
        theirs_public = make_record(other_user, visibility=Visibility.PUBLIC)
        trashed = make_record(
            user,
            lifecycle_state=LifecycleState.TRASHED,
            deleted_at=timezone.now(),
        )

        assert set(FileRecord.objects.active()) == {mine, theirs_public}
        assert list(FileRecord.objects.trashed()) == [trashed]
        assert set(FileRecord.objects.owned_by(user.id)) == {mine, trashed}
        assert list(FileRecord.objects.public()) == [theirs_public]


@pytest.mark.django_db
def test_records_cascade_delete_with_owner(user, record):
    """Test records are deleted when their owner is deleted."""
    assert FileRecord.objects.count() == 1

    user.delete()

    assert FileRecord.objects.count() == 0
