"""Waits for a cell's containers to drain once evacuation is requested."""

from __future__ import annotations

import logging
import threading
import time
from typing import Optional, Sequence

from .models import ExecutorClient

_POLL_STEP = 0.01

_default_logger = logging.getLogger("cellevac")


def _wait_any(events: Sequence[threading.Event], timeout: Optional[float] = None) -> Optional[threading.Event]:
    """Block until one of the events is set; return it, or None on timeout."""
    deadline = None if timeout is None else time.monotonic() + timeout
    while True:
        for event in events:
            if event.is_set():
                return event
        step = _POLL_STEP
        if deadline is not None:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return None
            step = min(step, remaining)
        events[0].wait(step)


class Evacuator:
    """Once notified, polls the executor until no containers remain or time runs out."""

    def __init__(self, logger, executor_client: ExecutorClient, notifier, cell_id: str,
                 evacuation_timeout: float, polling_interval: float) -> None:
        self._logger = logger or _default_logger
        self._executor_client = executor_client
        self._notifier = notifier
        self.cell_id = cell_id
        self.evacuation_timeout = evacuation_timeout
        self.polling_interval = polling_interval

    def run(self, stop: threading.Event, ready: threading.Event) -> None:
        """Run until stopped, or until evacuation finishes or times out."""
        logger = self._logger.getChild("running-evacuator")
        logger.info("started")
        cancel = threading.Event()
        try:
            notify = self._notifier.evacuate_notify()
            ready.set()

            if _wait_any([stop, notify]) is stop:
                logger.info("signaled")
                return None
            logger.info("notified-of-evacuation")

            done = threading.Event()
            worker = threading.Thread(
                target=self._evacuate, args=(logger, done, cancel), daemon=True
            )
            worker.start()

            fired = _wait_any([done, stop], self.evacuation_timeout)
            if fired is done:
                logger.info("evacuation-complete")
            elif fired is stop:
                logger.info("signaled")
            else:
                logger.error("failed-to-evacuate-before-timeout")
            return None
        finally:
            cancel.set()
            logger.info("finished")

    def _evacuate(self, logger: logging.Logger, done: threading.Event, cancel: threading.Event) -> None:
        logger = logger.getChild("evacuating")
        logger.info("started")
        while not self._all_containers_evacuated(logger):
            logger.info("evacuation-incomplete polling-interval=%s", self.polling_interval)
            if cancel.wait(self.polling_interval):
                return
        done.set()
        logger.info("succeeded")

    def _all_containers_evacuated(self, logger: logging.Logger) -> bool:
        try:
            containers = self._executor_client.list_containers()
        except Exception as err:
            logger.error("failed-to-list-containers error=%s", err)
            return False
        return len(containers) == 0