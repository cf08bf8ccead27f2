from django.urls import path
from .views import (
    QuoteAcceptAPIView,
    QuoteCommunicationAPIView,
    QuoteDetailAPIView,
    QuoteListCreateAPIView,
    QuoteRejectAPIView,
    QuoteRespondAPIView,
)

urlpatterns = [
    path("quotes/", QuoteListCreateAPIView.as_view(), name="quote-list"),
    path("quotes/<str:pk>/", QuoteDetailAPIView.as_view(), name="quote-detail"),
    path("quotes/<str:pk>/respond/", QuoteRespondAPIView.as_view(), name="quote-respond"),
    path("quotes/<str:pk>/accept/", QuoteAcceptAPIView.as_view(), name="quote-accept"),
    path("quotes/<str:pk>/reject/", QuoteRejectAPIView.as_view(), name="quote-reject"),
    path("quotes/<str:pk>/communication/", QuoteCommunicationAPIView.as_view(), name="quote-communication"),
]
