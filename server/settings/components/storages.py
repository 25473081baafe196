"""Object storage configuration for attached file bytes.

Record metadata lives in the database; the bytes behind a record's
``blob_ref`` live in an S3-compatible bucket managed by django-storages.
Any S3-compatible service works (AWS S3, MinIO, Cloudflare R2).
"""

from typing import Any, Final

from server.settings.components import config

STORAGES: Final[dict[str, dict[str, Any]]] = {
    'default': {
        'BACKEND': (
            'server.apps.records.infrastructure.storage.RecordStorage'
        ),
        'OPTIONS': {
            'bucket_name': config(
                'AWS_STORAGE_BUCKET_NAME',
                default='file-records',
            ),
            # ``None`` falls back to the boto3 credential chain
            'access_key': config('AWS_ACCESS_KEY_ID', default=None),
            'secret_key': config('AWS_SECRET_ACCESS_KEY', default=None),
            'endpoint_url': config(
                'AWS_S3_ENDPOINT_URL',
                default=None,
            ),
            'region_name': config(
                'AWS_S3_REGION_NAME',
                default='us-east-1',
            ),
            'file_overwrite': False,
            'default_acl': None,
            'querystring_auth': config(
                'AWS_QUERYSTRING_AUTH',
                cast=bool,
                default=True,
            ),
        },
    },
    'staticfiles': {
        'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
    },
}
