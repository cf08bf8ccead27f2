"""Root URL configuration.

Every API route lives under the versioned prefix `/api/v1/`.
"""

from django.contrib import admin
from django.urls import include, path

api_patterns = [
    path("", include("common.api.urls")),
    path("", include("user_auth_app.api.urls")),
    path("", include("profiles.api.urls")),
    path("", include("services.api.urls")),
    path("", include("orders.api.urls")),
    path("", include("quotes.api.urls")),
    path("", include("payments.api.urls")),
    path("", include("chat.api.urls")),
    path("", include("dashboard.api.urls")),
]

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/v1/", include(api_patterns)),
]
