from rest_framework.permissions import BasePermission

class StationScopedPermission(BasePermission):
    """
    Autorise l'accès si l'auth HMAC a placé request.station (kiosque actif).
    """
    message = "Polling station authentication required"

    def has_permission(self, request, view):
        return bool(getattr(request, "station", None))
