"""File record settings."""

from server.settings.components import config

# Maximum number of entries in the "recent" view
RECORDS_RECENT_LIMIT = config('RECORDS_RECENT_LIMIT', cast=int, default=20)
