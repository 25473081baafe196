"""Tests for named record views."""

from datetime import timedelta
from unittest import mock

import pytest
from django.core.exceptions import ImproperlyConfigured
from django.db import DatabaseError
from django.utils import timezone

from server.apps.records.exceptions import (
    RecordPersistenceError,
    RecordValidationError,
)
from server.apps.records.logic import view_resolver
from server.apps.records.logic.view_resolver import (
    RecordView,
    ViewRule,
    get_recent_limit,
    parse_view,
    resolve_view,
)
from server.apps.records.models import (
    FileRecord,
    FileRecordQuerySet,
    LifecycleState,
    Visibility,
)


def _set_fields(record, **fields):
    """Write fields directly, bypassing auto_now and the lifecycle logic."""
    FileRecord.objects.filter(pk=record.pk).update(**fields)


def _trash(record, when=None):
    _set_fields(
        record,
        lifecycle_state=LifecycleState.TRASHED,
        deleted_at=when or timezone.now(),
    )


class TestParseView:
    """Tests for parse_view function."""

    @pytest.mark.parametrize('view_name', [
        'my-files',
        'public',
        'starred',
        'recent',
        'trash',
    ])
    def test_known_views(self, view_name):
        """Test every documented view name resolves."""
        assert parse_view(view_name) == view_name

    @pytest.mark.parametrize('view_name', ['', 'shared', 'TRASH', 'my_files'])
    def test_unknown_view(self, view_name):
        """Test unknown view names are validation errors."""
        with pytest.raises(RecordValidationError):
            parse_view(view_name)


def test_recent_limit_default(settings):
    """Test the recent limit falls back to 20."""
    del settings.RECORDS_RECENT_LIMIT

    assert get_recent_limit() == 20


@pytest.mark.parametrize('limit', [0, -1, 21, 100])
def test_recent_limit_out_of_range(settings, limit):
    """Test limits outside 1..20 are configuration errors."""
    settings.RECORDS_RECENT_LIMIT = limit

    with pytest.raises(ImproperlyConfigured):
        get_recent_limit()


@pytest.mark.django_db
class TestMyFilesView:
    """Tests for the my-files view."""

    def test_only_own_active_records(self, user, other_user, make_record):
        """Test trashed and foreign records are excluded."""
        mine = make_record(user)
        trashed = make_record(user)
        _trash(trashed)
        make_record(other_user, visibility=Visibility.PUBLIC)

        assert resolve_view(RecordView.MY_FILES, user.id) == [mine]

    def test_newest_first(self, user, make_record):
        """Test records are ordered by creation time, newest first."""
        now = timezone.now()
        older = make_record(user, title='Older')
        newer = make_record(user, title='Newer')
        _set_fields(older, created_at=now - timedelta(days=2))
        _set_fields(newer, created_at=now - timedelta(days=1))

        assert resolve_view(RecordView.MY_FILES, user.id) == [newer, older]


@pytest.mark.django_db
class TestPublicView:
    """Tests for the public view."""

    def test_public_active_records_of_everyone(
        self,
        user,
        other_user,
        make_record,
    ):
        """Test the view holds public, active records only."""
        mine = make_record(user, visibility=Visibility.PUBLIC)
        theirs = make_record(other_user, visibility=Visibility.PUBLIC)
        make_record(other_user)
        trashed_public = make_record(other_user, visibility=Visibility.PUBLIC)
        _trash(trashed_public)

        records = resolve_view(RecordView.PUBLIC, user.id)

        assert set(records) == {mine, theirs}
        assert all(record.visibility == Visibility.PUBLIC for record in records)
        assert all(
            record.lifecycle_state == LifecycleState.ACTIVE
            for record in records
        )


@pytest.mark.django_db
class TestStarredView:
    """Tests for the starred view."""

    def test_only_own_active_starred(self, user, other_user, make_record):
        """Test unstarred, trashed and foreign records are excluded."""
        starred = make_record(user, starred=True)
        make_record(user)
        trashed_starred = make_record(user, starred=True)
        _trash(trashed_starred)
        make_record(other_user, starred=True, visibility=Visibility.PUBLIC)

        assert resolve_view(RecordView.STARRED, user.id) == [starred]

    def test_recently_updated_first(self, user, make_record):
        """Test starred records are ordered by last update."""
        now = timezone.now()
        first = make_record(user, title='First', starred=True)
        second = make_record(user, title='Second', starred=True)
        _set_fields(first, updated_at=now)
        _set_fields(second, updated_at=now - timedelta(hours=1))

        assert resolve_view(RecordView.STARRED, user.id) == [first, second]


@pytest.mark.django_db
class TestRecentView:
    """Tests for the recent view."""

    def test_most_recently_opened_first(self, user, make_record):
        """Test records are ordered by last access time."""
        now = timezone.now()
        stale = make_record(user, title='Stale')
        fresh = make_record(user, title='Fresh')
        _set_fields(stale, last_accessed_at=now - timedelta(days=5))
        _set_fields(fresh, last_accessed_at=now - timedelta(minutes=5))

        assert resolve_view(RecordView.RECENT, user.id) == [fresh, stale]

    def test_capped_at_default_limit(self, user, make_record):
        """Test at most 20 records are returned, sorted descending."""
        now = timezone.now()
        for index in range(25):
            created = make_record(user, title=f'Record {index}')
            _set_fields(created, last_accessed_at=now - timedelta(hours=index))

        records = resolve_view(RecordView.RECENT, user.id)

        assert len(records) == 20
        accessed = [record.last_accessed_at for record in records]
        assert accessed == sorted(accessed, reverse=True)
        assert records[0].title == 'Record 0'

    def test_limit_from_settings(self, user, make_record, settings):
        """Test the limit follows RECORDS_RECENT_LIMIT."""
        settings.RECORDS_RECENT_LIMIT = 3
        for index in range(5):
            make_record(user, title=f'Record {index}')

        assert len(resolve_view(RecordView.RECENT, user.id)) == 3

    def test_never_more_than_twenty(self, user, make_record, settings):
        """Test a limit above 20 is refused instead of widening the view."""
        settings.RECORDS_RECENT_LIMIT = 21
        for index in range(21):
            make_record(user, title=f'Record {index}')

        with pytest.raises(ImproperlyConfigured):
            resolve_view(RecordView.RECENT, user.id)

    def test_excludes_trashed(self, user, make_record):
        """Test trashed records leave the recent view."""
        kept = make_record(user)
        trashed = make_record(user)
        _trash(trashed)

        assert resolve_view(RecordView.RECENT, user.id) == [kept]


@pytest.mark.django_db
class TestTrashView:
    """Tests for the trash view."""

    def test_only_own_trashed_newest_deletion_first(
        self,
        user,
        other_user,
        make_record,
    ):
        """Test the trash lists own trashed records by deletion time."""
        now = timezone.now()
        make_record(user)
        early = make_record(user, title='Early')
        late = make_record(user, title='Late')
        foreign = make_record(other_user, visibility=Visibility.PUBLIC)
        _trash(early, now - timedelta(days=2))
        _trash(late, now - timedelta(days=1))
        _trash(foreign)

        assert resolve_view(RecordView.TRASH, user.id) == [late, early]


@pytest.mark.django_db
class TestResolveViewGuard:
    """Tests for the authorization re-check on view results."""

    def test_unreadable_rows_are_dropped(self, user, other_user, make_record):
        """Test a too broad filter never leaks foreign private records."""
        mine = make_record(user)
        make_record(other_user)
        public = make_record(other_user, visibility=Visibility.PUBLIC)
        too_broad = ViewRule(
            select=lambda records, caller_id: records.all(),
            ordering=('title', 'id'),
        )

        with mock.patch.dict(
            view_resolver.VIEW_RULES,
            {RecordView.MY_FILES: too_broad},
        ):
            records = resolve_view(RecordView.MY_FILES, user.id)

        assert set(records) == {mine, public}

    def test_database_failure(self, user):
        """Test database errors become RecordPersistenceError."""
        with mock.patch.object(
            FileRecordQuerySet,
            '_fetch_all',
            side_effect=DatabaseError('connection lost'),
        ):
            with pytest.raises(RecordPersistenceError):
                resolve_view(RecordView.MY_FILES, user.id)
