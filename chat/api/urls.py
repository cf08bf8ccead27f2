from django.urls import path
from .views import ChatDetailAPIView, ChatListCreateAPIView, ChatMessageCreateAPIView

urlpatterns = [
    path("chat/", ChatListCreateAPIView.as_view(), name="chat-list"),
    path("chat/<str:pk>/", ChatDetailAPIView.as_view(), name="chat-detail"),
    path("chat/<str:pk>/messages/", ChatMessageCreateAPIView.as_view(), name="chat-messages"),
]
