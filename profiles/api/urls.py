from django.urls import path
from .views import OwnProfileView

urlpatterns = [
    path("profile/", OwnProfileView.as_view(), name="profile"),
]
