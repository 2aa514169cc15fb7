from rest_framework.routers import DefaultRouter

router = DefaultRouter()

# Admin bureaux de vote & clés API
from stations.views.station import StationAdminViewSet
from apikeys.views.apikey import ApiKeyAdminViewSet
router.register(r"admin/stations", StationAdminViewSet, basename="admin-stations")
router.register(r"admin/apikeys", ApiKeyAdminViewSet, basename="admin-apikeys")

# Admin liste électorale & scrutin
from voters.views.voter import VoterAdminViewSet
from elections.views.candidate import CandidateAdminViewSet
from elections.views.manual import ManualVerificationAdminViewSet
router.register(r"admin/voters", VoterAdminViewSet, basename="admin-voters")
router.register(r"admin/candidates", CandidateAdminViewSet, basename="admin-candidates")
router.register(r"admin/manual-verifications", ManualVerificationAdminViewSet, basename="admin-manual-verifications")

# Admin Webhooks
from webhooks.views import WebhookConfigAdminViewSet, WebhookDeliveryAdminViewSet
router.register(r"admin/webhooks/configs", WebhookConfigAdminViewSet, basename="admin-webhook-configs")
router.register(r"admin/webhooks/deliveries", WebhookDeliveryAdminViewSet, basename="admin-webhook-deliveries")
