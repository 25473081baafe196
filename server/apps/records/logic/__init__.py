"""Business logic layer for records app.

This package holds the file-record lifecycle engine:
- lookup: identifier parsing, fetching and guarded writes
- authorization: who may read or mutate a record
- lifecycle: active/trashed transitions and purge
- access: recency tracking for the recent view
- view_resolver: the named, filtered and sorted views
- record_operations: the entry points used by callers

Models stay a data layer; storage integration lives in
``infrastructure``.
"""
