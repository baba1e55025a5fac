"""
Bucle de polling del cliente.

Sustituye al transporte push: cada `interval` segundos vuelve a pedir los
agregados (bandeja, notificaciones, contadores). Mientras la vista no es
visible no se hacen peticiones, y al volver a ser visible se refresca de
inmediato sin esperar al siguiente tick.
"""
import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Optional

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 15
MIN_POLL_INTERVAL = 5
MAX_POLL_INTERVAL = 60

class PollingSync:
    def __init__(
        self,
        refresh: Callable[[], Any],
        interval: Optional[float] = None,
        visible: bool = True,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.refresh = refresh
        self.interval = DEFAULT_POLL_INTERVAL
        self.update_interval(interval if interval is not None else DEFAULT_POLL_INTERVAL)
        self.visible = visible
        self._sleep = sleep
        self._stopping = False
        self._task: Optional[asyncio.Task] = None
        self._pending: Optional[asyncio.Task] = None
        self.refresh_count = 0
        self.failure_count = 0

    def update_interval(self, seconds: float) -> None:
        """Ajusta el intervalo, p. ej. al recibir X-Poll-Interval del servidor."""
        self.interval = max(MIN_POLL_INTERVAL, min(MAX_POLL_INTERVAL, seconds))

    async def refresh_now(self) -> Any:
        """Ejecuta un refresco; los errores se registran y no detienen el bucle."""
        try:
            if inspect.iscoroutinefunction(self.refresh):
                result = await self.refresh()
            else:
                # Los clientes HTTP síncronos no deben bloquear el event loop
                result = await asyncio.to_thread(self.refresh)
            self.refresh_count += 1
            return result
        except Exception as e:
            self.failure_count += 1
            logger.error(f"Error en refresco de sincronización: {str(e)}")
            return None

    def set_visible(self, visible: bool) -> None:
        """
        Notifica un cambio de visibilidad. Al recuperarla se refresca
        inmediatamente; debe llamarse desde el event loop.
        """
        regained = visible and not self.visible
        self.visible = visible
        if regained and not self._stopping:
            self._pending = asyncio.get_running_loop().create_task(self.refresh_now())

    async def run(self) -> None:
        """Refresco inicial y luego uno por intervalo hasta request_stop()."""
        self._stopping = False
        if self.visible:
            await self.refresh_now()

        while not self._stopping:
            await self._sleep(self.interval)
            if self._stopping:
                break
            if self.visible:
                await self.refresh_now()
            else:
                logger.debug("Vista oculta, se omite el refresco")

    def request_stop(self) -> None:
        self._stopping = True

    def start(self) -> asyncio.Task:
        self._task = asyncio.get_running_loop().create_task(self.run())
        return self._task

    async def stop(self) -> None:
        self.request_stop()
        for task in (self._task, self._pending):
            if task is None or task.done():
                continue
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._task = None
        self._pending = None
