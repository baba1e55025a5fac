"""
Cliente HTTP de referencia para la API de mensajería.

Pensado para usarse con PollingSync; build_poller además aplica el
intervalo que anuncia el servidor en X-Poll-Interval:

    client = MessagingClient("http://localhost:8000/api/v1", token)
    poller = build_poller(client)
    poller.start()
"""
import logging
import time
from typing import Any, Dict, Optional

import requests

from app.sync.poller import PollingSync

logger = logging.getLogger(__name__)

class MessagingClient:
    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: float = 10,
        max_retries: int = 3,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.max_retries = max_retries
        self.session = session or requests.Session()
        # server_time de la última sincronización, usado como `since`
        self.cursor: Optional[str] = None
        self.poll_interval: Optional[int] = None

    def _request(
        self,
        method: str,
        endpoint: str,
        data: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Realiza una solicitud con reintentos solo para errores de conexión reales."""
        url = f"{self.base_url}{endpoint}"
        headers = {"Authorization": f"Bearer {self.token}"}

        retry_count = 0
        while True:
            try:
                response = self.session.request(
                    method, url, json=data, params=params, headers=headers, timeout=self.timeout
                )
                break
            except (requests.ConnectionError, requests.Timeout) as e:
                retry_count += 1
                if retry_count >= self.max_retries:
                    logger.error(f"No se pudo conectar después de {self.max_retries} intentos: {e}")
                    return {"success": False, "message": "No se pudo conectar con el servidor", "code": "connection_error", "data": None}
                wait_time = 2 ** retry_count  # Backoff exponencial
                logger.warning(f"Error de conexión: {e}. Reintentando en {wait_time}s ({retry_count}/{self.max_retries})...")
                time.sleep(wait_time)

        if "X-Poll-Interval" in response.headers:
            self.poll_interval = int(response.headers["X-Poll-Interval"])

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.status_code >= 400:
            return {
                "success": False,
                "message": body.get("detail", response.reason) if isinstance(body, dict) else response.reason,
                "code": f"http_{response.status_code}",
                "data": None,
            }
        return body

    def send_message(self, counterpart_id: str, body: str) -> Dict[str, Any]:
        return self._request("POST", "/messages/", data={"counterpart_id": counterpart_id, "body": body})

    def list_conversations(self) -> Dict[str, Any]:
        return self._request("GET", "/messages/conversations")

    def get_conversation(self, counterpart_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/messages/{counterpart_id}")

    def mark_as_read(self, counterpart_id: str) -> Dict[str, Any]:
        return self._request("PATCH", f"/messages/{counterpart_id}/read")

    def unread_message_count(self) -> Dict[str, Any]:
        return self._request("GET", "/messages/unread-count")

    def list_notifications(self, limit: Optional[int] = None) -> Dict[str, Any]:
        params = {"limit": limit} if limit else None
        return self._request("GET", "/notifications/", params=params)

    def unread_count(self) -> Dict[str, Any]:
        return self._request("GET", "/notifications/unread-count")

    def mark_notification_read(self, notification_id: str) -> Dict[str, Any]:
        return self._request("PATCH", f"/notifications/{notification_id}/read")

    def mark_all_read(self) -> Dict[str, Any]:
        return self._request("PATCH", "/notifications/read-all")

    def sync(self) -> Dict[str, Any]:
        """Pide la instantánea de sincronización y avanza el cursor."""
        params = {"since": self.cursor} if self.cursor else None
        result = self._request("GET", "/sync/", params=params)
        data = result.get("data") if result.get("success") else None
        if data:
            self.cursor = data.get("server_time")
        return result

def build_poller(client: MessagingClient, **kwargs) -> PollingSync:
    """PollingSync que refresca con client.sync() y sigue el intervalo del servidor."""
    def refresh() -> Dict[str, Any]:
        result = client.sync()
        if client.poll_interval:
            poller.update_interval(client.poll_interval)
        return result

    poller = PollingSync(refresh, **kwargs)
    return poller
