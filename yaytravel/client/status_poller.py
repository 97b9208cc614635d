# yaytravel/client/status_poller.py

import threading
from typing import Callable, Iterable, List, Optional

import requests

from yaytravel.client.errors import ApiError
from yaytravel.core.config_loader import settings
from yaytravel.core.logger import logger
from yaytravel.models.status_models import TASK_COMPLETE, RealTimeStatusUpdate, StatusUpdatesOut


UpdateCallback = Callable[[List[RealTimeStatusUpdate]], None]


def is_task_complete(updates: Iterable[RealTimeStatusUpdate]) -> bool:
    return any(u.is_complete for u in updates)


class StatusPoller:
    """
    Polls the status endpoint for one conversation until an agent posts
    TASK_COMPLETE.

    Each poll hands the full list fetched so far to ``on_update``. Failed
    requests are logged and retried on the next tick.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        interval: Optional[float] = None,
        session=None,
        timeout: Optional[float] = None,
    ):
        self.base_url = (base_url or settings.STATUS_BASE_URL).rstrip("/")
        self.interval = settings.status_poll_interval_seconds if interval is None else interval
        self.session = session or requests.Session()
        self.timeout = timeout or settings.request_timeout

        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.updates: List[RealTimeStatusUpdate] = []

    def fetch_status_updates(self, conversation_id: str) -> List[RealTimeStatusUpdate]:
        response = self.session.post(
            f"{self.base_url}/read",
            json={"conversation_id": conversation_id},
            timeout=self.timeout,
        )
        if not 200 <= response.status_code < 300:
            raise ApiError(f"Failed to fetch status updates ({response.status_code})", response.status_code)
        return StatusUpdatesOut.model_validate(response.json()).status_updates

    def poll(
        self,
        conversation_id: str,
        on_update: Optional[UpdateCallback] = None,
        max_polls: Optional[int] = None,
    ) -> List[RealTimeStatusUpdate]:
        self._stop_event = threading.Event()
        return self._poll(conversation_id, self._stop_event, on_update, max_polls)

    def _poll(
        self,
        conversation_id: str,
        stop_event: threading.Event,
        on_update: Optional[UpdateCallback] = None,
        max_polls: Optional[int] = None,
    ) -> List[RealTimeStatusUpdate]:
        polls = 0
        while not stop_event.is_set():
            try:
                self.updates = self.fetch_status_updates(conversation_id)
            except (requests.RequestException, ApiError, ValueError) as e:
                logger.error(f"Error fetching status updates for {conversation_id}: {e}")
            else:
                if on_update:
                    on_update(self.updates)
                if is_task_complete(self.updates):
                    logger.info(f"Conversation {conversation_id} reported {TASK_COMPLETE}")
                    break

            polls += 1
            if max_polls is not None and polls >= max_polls:
                break
            if stop_event.wait(self.interval):
                break

        return self.updates

    # ------------------------------------------------------------------
    # Background polling
    # ------------------------------------------------------------------
    def start(
        self,
        conversation_id: str,
        on_update: Optional[UpdateCallback] = None,
        on_complete: Optional[UpdateCallback] = None,
    ) -> threading.Thread:
        if self.is_running:
            raise RuntimeError("Poller is already running")

        # one event per run; stop() sets the current one
        stop_event = threading.Event()
        self._stop_event = stop_event

        def _run():
            updates = self._poll(conversation_id, stop_event, on_update=on_update)
            if on_complete and is_task_complete(updates):
                on_complete(updates)

        self._thread = threading.Thread(target=_run, name=f"status-poller-{conversation_id}", daemon=True)
        self._thread.start()
        return self._thread

    def stop(self, timeout: Optional[float] = None):
        self._stop_event.set()
        thread = self._thread
        if thread is None:
            return
        # stop() may be called from on_update/on_complete, i.e. on the poller thread
        if thread is not threading.current_thread():
            thread.join(timeout)
        if not thread.is_alive():
            self._thread = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()
