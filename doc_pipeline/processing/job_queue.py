from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Dict

from .errors import QueueClosed
from .models import ProcessingOptions
from .worker import ProcessingWorker

logger = logging.getLogger(__name__)


@dataclass
class WorkerConfig:
    max_concurrency: int = 8
    stage_delay_scale: float = 1.0
    thread_name_prefix: str = "doc-job"


class ThreadPoolJobQueue:
    """
    Runs processing jobs on a bounded thread pool. Every submitted job gets its
    own cancellation event; `shutdown` sets all of them so that running jobs
    stop at their next stage boundary and queued ones fail as soon as they start.
    """

    def __init__(self, worker: ProcessingWorker, config: WorkerConfig):
        self.worker = worker
        self.config = config
        self._executor = ThreadPoolExecutor(
            max_workers=config.max_concurrency,
            thread_name_prefix=config.thread_name_prefix,
        )
        self._cancel_events: Dict[str, threading.Event] = {}
        self._lock = threading.Lock()
        self._closed = False

    def enqueue(self, job_id: str, options: ProcessingOptions) -> Future:
        cancel_event = threading.Event()
        with self._lock:
            if self._closed:
                raise QueueClosed(job_id)
            self._cancel_events[job_id] = cancel_event
            try:
                future = self._executor.submit(self.worker.run_job, job_id, options, cancel_event)
            except RuntimeError as exc:
                self._cancel_events.pop(job_id, None)
                raise QueueClosed(job_id) from exc
        future.add_done_callback(lambda _: self._forget(job_id))
        logger.debug("Enqueued job %s", job_id)
        return future

    def cancel(self, job_id: str) -> bool:
        """Signal a running or queued job to stop. False when the job is not tracked."""
        with self._lock:
            cancel_event = self._cancel_events.get(job_id)
        if cancel_event is None:
            return False
        cancel_event.set()
        logger.info("Cancellation requested for job %s", job_id)
        return True

    def shutdown(self, wait: bool = True) -> None:
        with self._lock:
            self._closed = True
            events = list(self._cancel_events.values())
        for cancel_event in events:
            cancel_event.set()
        logger.info("Shutting down job queue, %d job(s) signalled", len(events))
        self._executor.shutdown(wait=wait)

    def _forget(self, job_id: str) -> None:
        with self._lock:
            self._cancel_events.pop(job_id, None)
