"""Infrastructure layer for records app.

Integrations with external systems live here, currently the
S3-compatible object storage that holds the bytes behind a record.
"""
