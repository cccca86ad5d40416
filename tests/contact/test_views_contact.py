import json
from unittest.mock import MagicMock, patch

import requests
from django.conf import settings
from django.test import SimpleTestCase, override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

SUBMISSION = {
    "name": "John",
    "email": "j@x.com",
    "phone": "555-123-4567",
    "message": "Need a quote for a deck.",
}


class WebhookRelayViewTests(SimpleTestCase):
    def setUp(self):
        self.client = APIClient()
        self.url = reverse("webhook")

    def post_json(self, payload):
        return self.client.post(
            self.url, data=json.dumps(payload), content_type="application/json"
        )

    @patch("contact.relay.requests.post")
    def test_relay_success(self, mock_post):
        mock_post.return_value = MagicMock(status_code=200)

        response = self.post_json(SUBMISSION)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json(), {"success": True})

        mock_post.assert_called_once()
        args, kwargs = mock_post.call_args
        self.assertEqual(args[0], settings.N8N_WEBHOOK_URL)
        self.assertEqual(kwargs["json"], SUBMISSION)
        self.assertEqual(kwargs["headers"], {"Content-Type": "application/json"})

    @patch("contact.relay.requests.post")
    def test_relay_forwards_payload_without_schema_checks(self, mock_post):
        mock_post.return_value = MagicMock(status_code=204)
        payload = {"unexpected": ["shape", 1, None], "name": ""}

        response = self.post_json(payload)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(mock_post.call_args.kwargs["json"], payload)

    @patch("contact.relay.requests.post")
    def test_malformed_body_returns_500(self, mock_post):
        response = self.client.post(
            self.url, data="{not json", content_type="application/json"
        )

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.content, b"n8n webhook failed")
        mock_post.assert_not_called()

    @patch("contact.relay.requests.post")
    def test_upstream_error_status_returns_500(self, mock_post):
        mock_post.return_value = MagicMock(status_code=503)

        with self.assertLogs("contact", level="ERROR") as logs:
            response = self.post_json(SUBMISSION)

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.content, b"n8n webhook failed")
        self.assertEqual(len(logs.records), 1)
        self.assertIn("503", logs.output[0])
        mock_post.assert_called_once()

    @patch("contact.relay.requests.post")
    def test_network_failure_returns_500(self, mock_post):
        mock_post.side_effect = requests.exceptions.ConnectionError("refused")

        response = self.post_json(SUBMISSION)

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.content, b"n8n webhook failed")

    @patch("contact.views.relay_submission")
    def test_unexpected_error_is_not_disclosed(self, mock_relay):
        mock_relay.side_effect = RuntimeError("secret internals")

        response = self.post_json(SUBMISSION)

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.content, b"n8n webhook failed")
        self.assertNotIn(b"secret", response.content)

    @override_settings(N8N_WEBHOOK_URL="https://hooks.example.test/contact")
    @patch("contact.relay.requests.post")
    def test_destination_comes_from_settings(self, mock_post):
        mock_post.return_value = MagicMock(status_code=200)

        self.post_json(SUBMISSION)

        self.assertEqual(
            mock_post.call_args.args[0], "https://hooks.example.test/contact"
        )

    @patch("contact.relay.requests.post")
    def test_get_is_not_allowed(self, mock_post):
        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_405_METHOD_NOT_ALLOWED)
        mock_post.assert_not_called()
