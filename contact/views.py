import logging

from django.http import HttpResponse
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from .relay import relay_submission

logger = logging.getLogger("contact")

RELAY_FAILED_MESSAGE = "n8n webhook failed"


def relay_failed_response():
    return HttpResponse(
        RELAY_FAILED_MESSAGE,
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content_type="text/plain; charset=utf-8",
    )


class WebhookRelayView(APIView):
    """Forward contact form submissions to the n8n automation webhook."""

    authentication_classes = []
    permission_classes = [permissions.AllowAny]

    def post(self, request, *args, **kwargs):
        try:
            result = relay_submission(request.body)
        except Exception:
            logger.exception("n8n webhook error")
            return relay_failed_response()

        if not result.ok:
            # relay_submission already logged the reason
            return relay_failed_response()

        return Response({"success": True}, status=status.HTTP_200_OK)
