from django.urls import path
from .views import (
    FeaturedServicesAPIView,
    ServiceCategoriesAPIView,
    ServiceListCreateAPIView,
    ServiceRetrieveUpdateDestroyAPIView,
)

urlpatterns = [
    path("services/", ServiceListCreateAPIView.as_view(), name="service-list"),
    path("services/featured/", FeaturedServicesAPIView.as_view(), name="service-featured"),
    path("services/categories/", ServiceCategoriesAPIView.as_view(), name="service-categories"),
    path("services/<str:pk>/", ServiceRetrieveUpdateDestroyAPIView.as_view(), name="service-detail"),
]
