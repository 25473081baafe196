"""Root URL configuration.

The records core is consumed by an external routing layer; only the
admin site is mounted here.
"""

from django.contrib import admin
from django.urls import path

urlpatterns = [
    path('admin/', admin.site.urls),
]
