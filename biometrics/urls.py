from django.urls import path

from .views.validate import ValidateBlobView
from .views.score import ScoreView
from .views.verify import VerifyView
from .views.duplicates import DuplicateCheckView

urlpatterns = [
    path("validate", ValidateBlobView.as_view(), name="biometrics-validate"),
    path("score", ScoreView.as_view(), name="biometrics-score"),
    path("verify", VerifyView.as_view(), name="biometrics-verify"),
    path("duplicates", DuplicateCheckView.as_view(), name="biometrics-duplicates"),
]
