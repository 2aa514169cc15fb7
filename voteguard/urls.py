from django.conf import settings
from django.contrib import admin
from django.urls import path, include
from django.http import JsonResponse
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView, SpectacularRedocView
from rest_framework.permissions import AllowAny

from .routers import router as api_router

API = f"{settings.API_PREFIX}/{settings.API_VERSION}"


def health_view(_request):
    return JsonResponse({"status": "ok", **settings.HEALTH_INFO()})


urlpatterns = [
    path("health/", health_view, name="health"),
    path("admin/", admin.site.urls),

    # OpenAPI
    path(f"{API}/schema/", SpectacularAPIView.as_view(permission_classes=[AllowAny], authentication_classes=[]),
         name="schema"),
    path(
        f"{API}/docs/",
        SpectacularSwaggerView.as_view(url_name="schema", permission_classes=[AllowAny], authentication_classes=[]),
        name="swagger-ui",
    ),
    path(
        f"{API}/redoc/",
        SpectacularRedocView.as_view(url_name="schema", permission_classes=[AllowAny], authentication_classes=[]),
        name="redoc",
    ),

    path(f"{API}/", include(api_router.urls)),
    path(f"{API}/biometrics/", include("biometrics.urls")),
    path(f"{API}/voters/", include("voters.urls")),
    path(f"{API}/voting/", include("elections.urls")),
]
