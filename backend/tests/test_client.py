import asyncio
import unittest
from unittest import mock

import requests

from app.sync.client import MessagingClient, build_poller
from app.sync.poller import MAX_POLL_INTERVAL

def fake_response(status_code=200, payload=None, headers=None):
    response = mock.Mock()
    response.status_code = status_code
    response.headers = headers or {}
    response.reason = "Error"
    response.json.return_value = payload if payload is not None else {}
    return response

class MessagingClientTest(unittest.TestCase):
    """Cliente HTTP usado por el bucle de polling"""

    def setUp(self):
        self.session = mock.Mock()
        self.client = MessagingClient("http://api.local/api/v1/", "token-abc", session=self.session)

    def test_01_sends_bearer_token(self):
        self.session.request.return_value = fake_response(201, {"success": True, "data": {"id": "m1"}})

        result = self.client.send_message("tienda-1", "hola")

        self.assertTrue(result["success"])
        args, kwargs = self.session.request.call_args
        self.assertEqual(("POST", "http://api.local/api/v1/messages/"), args)
        self.assertEqual("Bearer token-abc", kwargs["headers"]["Authorization"])
        self.assertEqual({"counterpart_id": "tienda-1", "body": "hola"}, kwargs["json"])

    def test_02_sync_advances_cursor(self):
        self.session.request.return_value = fake_response(
            200,
            {"success": True, "data": {"server_time": "2025-03-01T12:00:00Z", "changed": True}},
            {"X-Poll-Interval": "15"},
        )

        self.client.sync()
        self.client.sync()

        first_params = self.session.request.call_args_list[0][1]["params"]
        second_params = self.session.request.call_args_list[1][1]["params"]
        self.assertIsNone(first_params)
        self.assertEqual({"since": "2025-03-01T12:00:00Z"}, second_params)
        self.assertEqual(15, self.client.poll_interval)

    def test_03_http_errors_become_failed_results(self):
        self.session.request.return_value = fake_response(404, {"detail": "Tienda no encontrada"})

        result = self.client.send_message("no-existe", "hola")

        self.assertFalse(result["success"])
        self.assertEqual("http_404", result["code"])
        self.assertEqual("Tienda no encontrada", result["message"])

    def test_04_failed_sync_keeps_cursor(self):
        self.client.cursor = "2025-03-01T12:00:00Z"
        self.session.request.return_value = fake_response(401, {"detail": "Debes iniciar sesión"})

        self.client.sync()

        self.assertEqual("2025-03-01T12:00:00Z", self.client.cursor)

    @mock.patch("app.sync.client.time.sleep")
    def test_05_connection_errors_are_retried(self, sleep):
        self.session.request.side_effect = requests.ConnectionError("rechazada")

        result = self.client.list_conversations()

        self.assertFalse(result["success"])
        self.assertEqual("connection_error", result["code"])
        self.assertEqual(3, self.session.request.call_count)
        self.assertEqual(2, sleep.call_count)

    def test_06_poller_follows_server_interval(self):
        self.session.request.return_value = fake_response(
            200,
            {"success": True, "data": {"server_time": "2025-03-01T12:00:00Z", "changed": False}},
            {"X-Poll-Interval": "30"},
        )
        poller = build_poller(self.client, interval=15)

        asyncio.run(poller.refresh_now())

        self.assertEqual(30, poller.interval)
        self.assertEqual("2025-03-01T12:00:00Z", self.client.cursor)
        self.assertEqual(1, poller.refresh_count)

    def test_07_server_interval_is_clamped(self):
        self.session.request.return_value = fake_response(
            200, {"success": True, "data": {"server_time": "2025-03-01T12:00:00Z"}}, {"X-Poll-Interval": "600"}
        )
        poller = build_poller(self.client)

        asyncio.run(poller.refresh_now())

        self.assertEqual(MAX_POLL_INTERVAL, poller.interval)

if __name__ == "__main__":
    unittest.main()
