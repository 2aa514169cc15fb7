from django.urls import path

from .views.voting import VerifyVoterView, CastVoteView, ManualVerificationRequestView, ResultsView

urlpatterns = [
    path("verify", VerifyVoterView.as_view(), name="voting-verify"),
    path("cast", CastVoteView.as_view(), name="voting-cast"),
    path("manual-verification", ManualVerificationRequestView.as_view(), name="voting-manual-verification"),
    path("results", ResultsView.as_view(), name="voting-results"),
]
