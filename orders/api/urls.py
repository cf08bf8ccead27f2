from django.urls import path
from .views import (
    OrderApproveAPIView,
    OrderAssignAPIView,
    OrderCommunicationAPIView,
    OrderDetailAPIView,
    OrderListCreateAPIView,
    OrderRejectAPIView,
    OrderStatusAPIView,
)

urlpatterns = [
    path("orders/", OrderListCreateAPIView.as_view(), name="order-list"),
    path("orders/<str:pk>/", OrderDetailAPIView.as_view(), name="order-detail"),
    path("orders/<str:pk>/approve/", OrderApproveAPIView.as_view(), name="order-approve"),
    path("orders/<str:pk>/reject/", OrderRejectAPIView.as_view(), name="order-reject"),
    path("orders/<str:pk>/status/", OrderStatusAPIView.as_view(), name="order-status"),
    path("orders/<str:pk>/assign/", OrderAssignAPIView.as_view(), name="order-assign"),
    path("orders/<str:pk>/communication/", OrderCommunicationAPIView.as_view(), name="order-communication"),
]
