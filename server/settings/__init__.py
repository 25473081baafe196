"""Main settings file for the project.

Settings are split into components and environments and stitched
together with ``django-split-settings``. The environment is selected
with the ``DJANGO_ENV`` variable (``development`` by default).
"""

from os import environ

import django_stubs_ext
from split_settings.tools import include, optional

# Enables `ModelAdmin[Model]` and similar generics at runtime:
django_stubs_ext.monkeypatch()

environ.setdefault('DJANGO_ENV', 'development')
_ENV = environ['DJANGO_ENV']

_base_settings = (
    'components/common.py',
    'components/logging.py',
    'components/storages.py',
    'components/records.py',
    # Select the right env:
    f'environments/{_ENV}.py',
    # Optionally override some settings:
    optional('environments/local.py'),
)

include(*_base_settings)
