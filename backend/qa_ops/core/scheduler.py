from __future__ import annotations

import logging
import threading
from typing import Callable


logger = logging.getLogger(__name__)


class PeriodicWorker(threading.Thread):
    """Daemon thread that calls ``task`` every ``interval_seconds`` until stopped.

    A failing run is logged and the loop carries on with the next tick.
    """

    def __init__(self, name: str, interval_seconds: float, task: Callable[[], object]):
        super().__init__(name=name, daemon=True)
        self.interval_seconds = interval_seconds
        self.task = task
        self._stop_event = threading.Event()

    def run(self) -> None:
        logger.info("Periodic worker %s started (every %ss)", self.name, self.interval_seconds)
        while not self._stop_event.wait(self.interval_seconds):
            self.run_once()
        logger.info("Periodic worker %s stopped", self.name)

    def run_once(self) -> None:
        try:
            self.task()
        except Exception:  # noqa: BLE001
            logger.exception("Periodic worker %s failed", self.name)

    def stop(self) -> None:
        self._stop_event.set()


class BackgroundScheduler:
    def __init__(self) -> None:
        self._workers: list[PeriodicWorker] = []

    @property
    def workers(self) -> list[PeriodicWorker]:
        return list(self._workers)

    def add(self, name: str, interval_seconds: float, task: Callable[[], object]) -> None:
        if interval_seconds <= 0:
            logger.info("Periodic worker %s disabled (interval=%s)", name, interval_seconds)
            return
        self._workers.append(PeriodicWorker(name, interval_seconds, task))

    def start(self) -> None:
        for worker in self._workers:
            worker.start()

    def shutdown(self, timeout: float = 5.0) -> None:
        for worker in self._workers:
            worker.stop()
        for worker in self._workers:
            if worker.is_alive():
                worker.join(timeout)
        self._workers.clear()
