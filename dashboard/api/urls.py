from django.urls import path
from .views import ClientUserListAPIView, DashboardAPIView

urlpatterns = [
    path("admin/dashboard/", DashboardAPIView.as_view(), name="admin-dashboard"),
    path("admin/users/", ClientUserListAPIView.as_view(), name="admin-users"),
]
