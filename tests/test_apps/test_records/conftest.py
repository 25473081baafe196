"""Shared fixtures for records app tests."""

import boto3
import pytest
from django.contrib.auth import get_user_model
from django.core.files.base import ContentFile
from moto import mock_aws

from server.apps.records.models import FileRecord, LifecycleState

User = get_user_model()

# Matches the default bucket in server/settings/components/storages.py
_TEST_BUCKET = 'file-records'


@pytest.fixture
def user(db):
    """Create test user.

    Returns:
        User instance for testing.
    """
    return User.objects.create_user(
        username='alice',
        password='testpass123',
        email='alice@example.com',
    )


@pytest.fixture
def other_user(db):
    """Create second test user for isolation tests.

    Returns:
        Second user instance.
    """
    return User.objects.create_user(
        username='bob',
        password='testpass123',
        email='bob@example.com',
    )


@pytest.fixture
def make_record(db):
    """Factory for records created straight through the ORM.

    Returns:
        Callable creating a FileRecord for the given owner.
    """
    def factory(owner, **fields):
        fields.setdefault('title', 'Report')
        fields.setdefault('author', 'Alice')
        return FileRecord.objects.create(owner=owner, **fields)

    return factory


@pytest.fixture
def record(user, make_record):
    """Private, active record owned by ``user``.

    Returns:
        FileRecord instance.
    """
    return make_record(user)


@pytest.fixture
def assert_lifecycle_invariant(db):
    """Check that a stored record's state and deleted_at agree.

    Returns:
        Callable taking a record (or its id).
    """
    def check(record_or_id):
        record_id = getattr(record_or_id, 'pk', record_or_id)
        stored = FileRecord.objects.get(pk=record_id)
        is_trashed = stored.lifecycle_state == LifecycleState.TRASHED
        assert is_trashed == (stored.deleted_at is not None)

    return check


@pytest.fixture
def mock_s3():
    """Mock S3 service with the records bucket.

    Yields:
        boto3 S3 resource with the bucket created.
    """
    with mock_aws():
        conn = boto3.resource('s3', region_name='us-east-1')
        conn.create_bucket(Bucket=_TEST_BUCKET)
        yield conn


@pytest.fixture
def s3_bucket(mock_s3):
    """Mocked records bucket.

    Returns:
        boto3 Bucket resource.
    """
    return mock_s3.Bucket(_TEST_BUCKET)


@pytest.fixture
def sample_file_content():
    """Sample file content for testing.

    Returns:
        ContentFile with test data.
    """
    return ContentFile(b'test file content', name='report.pdf')
