"""Final clean-up of a cell: reports stranded evacuations and deletes containers."""

from __future__ import annotations

import logging
import queue
import threading

from .models import ActualLRPFilter, BBSClient, ExecutorClient, IngressClient, Presence

EXIT_TIMEOUT_OFFSET = 5.0
STRANDED_EVACUATING_ACTUAL_LRPS_METRIC = "StrandedEvacuatingActualLRPs"

_default_logger = logging.getLogger("cellevac")


class CleanupTimeoutError(Exception):
    """Raised when containers are not all gone before the exit timeout."""


class EvacuationCleanup:
    """On signal, counts stranded evacuating LRPs and deletes every container.

    Durations are in seconds. ``exit_timeout`` and ``check_interval`` are
    plain attributes and may be adjusted after construction.
    """

    check_interval = 1.0

    def __init__(self, logger, cell_id: str, graceful_shutdown_interval: float,
                 proxy_reload_duration: float, bbs_client: BBSClient,
                 executor_client: ExecutorClient, metron_client: IngressClient) -> None:
        self._logger = logger or _default_logger
        self.cell_id = cell_id
        self.exit_timeout = graceful_shutdown_interval + proxy_reload_duration + EXIT_TIMEOUT_OFFSET
        self._bbs_client = bbs_client
        self._executor_client = executor_client
        self._metron_client = metron_client

    def run(self, signals: "queue.Queue", ready: threading.Event) -> None:
        """Wait for a signal, then clean up; raise if containers outlive the timeout."""
        logger = self._logger.getChild("evacuation-cleanup")
        logger.info("started")
        try:
            ready.set()
            received = signals.get()
            logger.info("signalled signal=%s", received)

            trace_id = ""
            try:
                actual_lrps = self._bbs_client.actual_lrps(trace_id, ActualLRPFilter(cell_id=self.cell_id))
            except Exception as err:
                logger.error("failed-fetching-actual-lrp-groups error=%s", err)
                raise

            stranded = sum(1 for lrp in actual_lrps if lrp.presence is Presence.EVACUATING)
            try:
                self._metron_client.send_metric(STRANDED_EVACUATING_ACTUAL_LRPS_METRIC, stranded)
            except Exception as err:
                logger.error("failed-sending-stranded-evacuating-lrp-metric error=%s count=%d", err, stranded)

            logger.info("finished-evacuating stranded-evacuating-actual-lrps=%d", stranded)
            logger.info("deleting-all-containers")

            signalled = threading.Event()
            deleted = threading.Event()
            cancel = threading.Event()
            threading.Thread(
                target=self._delete_running_containers, args=(logger, trace_id, signalled), daemon=True
            ).start()
            threading.Thread(
                target=self._check_running_containers, args=(logger, signalled, deleted, cancel), daemon=True
            ).start()

            try:
                if not deleted.wait(self.exit_timeout):
                    logger.info("failed-to-cleanup-all-containers")
                    raise CleanupTimeoutError("failed-to-cleanup-all-containers")
                logger.info("deleted-containers-successfully")
                return None
            finally:
                cancel.set()
        finally:
            logger.info("complete")

    def _has_running_containers(self, logger: logging.Logger) -> bool:
        try:
            containers = self._executor_client.list_containers()
        except Exception as err:
            logger.error("failed-listing-containers error=%s", err)
            # nothing can be learnt, so treat the cell as empty
            return False
        return len(containers) > 0

    def _check_running_containers(self, logger: logging.Logger, signalled: threading.Event,
                                  deleted: threading.Event, cancel: threading.Event) -> None:
        try:
            signalled.wait()
            while self._has_running_containers(logger):
                logger.info("waiting-for-containers-to-delete")
                if cancel.wait(self.check_interval):
                    return
        finally:
            deleted.set()

    def _delete_running_containers(self, logger: logging.Logger, trace_id: str,
                                   signalled: threading.Event) -> None:
        try:
            try:
                containers = self._executor_client.list_containers()
            except Exception as err:
                logger.error("failed-listing-containers error=%s", err)
                return

            logger.info("sending-signal-to-containers")
            workers = []
            for container in containers:
                source_name, tags = container.log_config.source_name_and_tags()
                message = f"Cell {self.cell_id} reached evacuation timeout for instance {container.guid}"
                try:
                    self._metron_client.send_app_log(message, source_name, tags)
                except Exception as err:
                    logger.debug("failed-sending-app-log-for-instance-evacuation-timeout error=%s", err)
                worker = threading.Thread(
                    target=self._delete_container, args=(logger, trace_id, container.guid), daemon=True
                )
                worker.start()
                workers.append(worker)

            logger.info("sent-signal-to-containers")
            for worker in workers:
                worker.join()
        finally:
            signalled.set()

    def _delete_container(self, logger: logging.Logger, trace_id: str, guid: str) -> None:
        try:
            self._executor_client.delete_container(trace_id, guid)
        except Exception as err:
            logger.error("failed-to-delete-container container-guid=%s error=%s", guid, err)