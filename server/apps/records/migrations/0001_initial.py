import uuid

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='FileRecord',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('title', models.CharField(max_length=255)),
                ('author', models.CharField(max_length=255)),
                ('description', models.TextField(blank=True, default='')),
                ('file_url', models.CharField(blank=True, default='', help_text='Download URL returned by object storage', max_length=1024)),
                ('file_name', models.CharField(blank=True, default='', help_text='Original name of the uploaded file', max_length=255)),
                ('blob_key', models.CharField(blank=True, default='', help_text='Storage key, used to remove the bytes after a purge', max_length=1024)),
                ('visibility', models.CharField(choices=[('private', 'Private'), ('public', 'Public')], default='private', max_length=16)),
                ('starred', models.BooleanField(default=False)),
                ('lifecycle_state', models.CharField(choices=[('active', 'Active'), ('trashed', 'Trashed')], default='active', max_length=16)),
                ('deleted_at', models.DateTimeField(blank=True, null=True)),
                ('last_accessed_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('owner', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='file_records', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'File record',
                'verbose_name_plural': 'File records',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['owner', 'lifecycle_state'], name='records_owner_state_idx'),
                    models.Index(fields=['owner', 'lifecycle_state', '-last_accessed_at'], name='records_owner_recent_idx'),
                    models.Index(fields=['visibility', 'lifecycle_state'], name='records_visibility_state_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(('deleted_at__isnull', True), ('lifecycle_state', 'active')),
                            models.Q(('deleted_at__isnull', False), ('lifecycle_state', 'trashed')),
                            _connector='OR',
                        ),
                        name='records_deleted_at_matches_state',
                    ),
                ],
            },
        ),
    ]
