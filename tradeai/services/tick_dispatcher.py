# services/tick_dispatcher.py
from __future__ import annotations
import queue
import threading
from typing import Optional

from tradeai.models.market_data import MarketData
from tradeai.repositories.subscription_repository import SubscriptionRepository
from tradeai.utils.logger import logger_manager

logger = logger_manager.setup_logger(__name__)

_STOP = object()


class TickDispatcher:
    """
    Cola FIFO única entre los feeds y los listeners.

    Los hilos de lectura solo publican; un hilo worker entrega cada tick a los
    listeners del token en orden de registro. Un listener lento retrasa los
    ticks siguientes, pero no la lectura del socket.
    """

    def __init__(self, subscriptions: SubscriptionRepository) -> None:
        self._subscriptions = subscriptions
        self._queue: "queue.Queue[object]" = queue.Queue()
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    def publish(self, token: str, data: MarketData) -> None:
        self._ensure_worker()
        self._queue.put((token, data))

    def flush(self) -> None:
        """Bloquea hasta que todos los ticks encolados se hayan entregado."""
        self._queue.join()

    def stop(self, timeout: float = 5.0) -> None:
        with self._lock:
            thread, self._thread = self._thread, None
        if thread and thread.is_alive():
            self._queue.put(_STOP)
            thread.join(timeout=timeout)
        if thread is None or not thread.is_alive():
            self._drain()

    def _drain(self) -> None:
        # ticks encolados tras _STOP: sin worker que los consuma, se descartan
        while True:
            try:
                self._queue.get_nowait()
            except queue.Empty:
                return
            self._queue.task_done()

    def _ensure_worker(self) -> None:
        with self._lock:
            if self._thread is None or not self._thread.is_alive():
                self._thread = threading.Thread(target=self._run, name="tick-dispatcher", daemon=True)
                self._thread.start()

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                token, data = item  # type: ignore[misc]
                for listener in self._subscriptions.listeners(token):
                    try:
                        listener(data)
                    except Exception:
                        logger.exception(f"✗ Listener de {token} falló; se continúa con el resto")
            finally:
                self._queue.task_done()
