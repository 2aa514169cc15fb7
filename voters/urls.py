from django.urls import path

from .views.register import RegisterVoterView

urlpatterns = [ path("register", RegisterVoterView.as_view(), name="voters-register") ]
