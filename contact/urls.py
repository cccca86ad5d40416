from django.urls import path

from .views import WebhookRelayView

urlpatterns = [
    path("api/webhook", WebhookRelayView.as_view(), name="webhook"),
]
