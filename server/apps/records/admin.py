"""Django admin configuration for records app."""

from typing import override

from django.contrib import admin
from django.db.models import QuerySet
from django.http import HttpRequest
from django.utils.html import format_html

from server.apps.records.models import FileRecord


@admin.register(FileRecord)
class FileRecordAdmin(admin.ModelAdmin[FileRecord]):
    """Admin interface for FileRecord model.

    Lifecycle fields are read-only: trashing and restoring must go
    through the records logic so the state and timestamp stay in sync.
    """

    list_display = [
        'title',
        'author',
        'owner',
        'visibility',
        'starred',
        'lifecycle_state',
        'blob_display',
        'last_accessed_at',
    ]

    list_filter = [
        'lifecycle_state',
        'visibility',
        'starred',
        'created_at',
    ]

    search_fields = [
        'title',
        'author',
        'file_name',
        'owner__username',
    ]

    readonly_fields = [
        'id',
        'lifecycle_state',
        'deleted_at',
        'last_accessed_at',
        'blob_key',
        'created_at',
        'updated_at',
    ]

    fieldsets = (
        ('Record', {
            'fields': ('id', 'owner', 'title', 'author', 'description'),
        }),
        ('Blob', {
            'fields': ('file_url', 'file_name', 'blob_key'),
        }),
        ('Flags', {
            'fields': ('visibility', 'starred'),
        }),
        ('Lifecycle', {
            'fields': ('lifecycle_state', 'deleted_at'),
        }),
        ('Timestamps', {
            'fields': ('last_accessed_at', 'created_at', 'updated_at'),
        }),
    )

    def blob_display(self, obj: FileRecord) -> str:
        """Display a link to the attached blob.

        Args:
            obj: FileRecord instance.

        Returns:
            HTML link to the blob, or a dash when nothing is attached.
        """
        blob_ref = obj.blob_ref
        if blob_ref is None:
            return '-'
        return format_html(
            '<a href="{url}">{name}</a>',
            url=blob_ref.url,
            name=blob_ref.original_name or blob_ref.url,
        )
    blob_display.short_description = 'File'  # type: ignore[attr-defined]

    @override
    def get_queryset(self, request: HttpRequest) -> QuerySet[FileRecord]:
        """Optimize queryset with select_related.

        Args:
            request: HTTP request.

        Returns:
            Optimized QuerySet.
        """
        return super().get_queryset(request).select_related('owner')
