from django.urls import path
from .views import ConfirmPaymentAPIView, CreatePaymentIntentAPIView, ProcessPaymentAPIView

urlpatterns = [
    path("payments/create-payment-intent/", CreatePaymentIntentAPIView.as_view(), name="payment-create-intent"),
    # Older clients post to this path; same behavior.
    path("payments/create-payment-method/", CreatePaymentIntentAPIView.as_view(), name="payment-create-method"),
    path("payments/confirm-payment/", ConfirmPaymentAPIView.as_view(), name="payment-confirm"),
    path("payments/process/", ProcessPaymentAPIView.as_view(), name="payment-process"),
]
