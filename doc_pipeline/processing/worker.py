from __future__ import annotations

import logging
import threading
from typing import Optional

from .engine import ExtractionEngine
from .errors import ProcessingError
from .models import JobRecord, JobStatus, LogEntry, LogSeverity, ProcessingOptions
from .repository import ContentRepository, JobRepository
from .stages import Stage, plan_stages

logger = logging.getLogger(__name__)

INTERRUPTED_MESSAGE = "Processing was interrupted"


class ProcessingWorker:
    """
    Drives one job through its stages. The worker holds no per-job state;
    every change goes through `JobRepository.mutate` and the artifact is
    handed to the content repository in the same mutation that completes
    the job. Errors never escape `run_job`, they end up on the job record.
    """

    def __init__(
        self,
        jobs: JobRepository,
        contents: ContentRepository,
        engine: ExtractionEngine,
        stage_delay_scale: float = 1.0,
    ):
        self.jobs = jobs
        self.contents = contents
        self.engine = engine
        self.stage_delay_scale = stage_delay_scale

    def run_job(
        self,
        job_id: str,
        options: ProcessingOptions,
        cancel_event: Optional[threading.Event] = None,
    ) -> JobStatus:
        cancel_event = cancel_event or threading.Event()
        logger.info("Starting job %s (language=%s)", job_id, options.language)
        *stages, final_stage = plan_stages(options)
        try:
            for stage in stages:
                if cancel_event.is_set():
                    return self._interrupt(job_id)
                self._advance(job_id, stage, options)
                if self._pause(stage, cancel_event):
                    return self._interrupt(job_id)
            if cancel_event.is_set():
                return self._interrupt(job_id)
            self._complete(job_id, final_stage, options)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Job %s failed", job_id)
            self._record_failure(job_id, f"Processing failed: {exc}")
            return JobStatus.FAILED
        logger.info("Job %s completed", job_id)
        return JobStatus.COMPLETED

    def _advance(self, job_id: str, stage: Stage, options: ProcessingOptions) -> None:
        entry = LogEntry.create(stage.severity, stage.render_message(options))
        self.jobs.mutate(job_id, lambda job: job.advance(stage.progress, entry))
        logger.debug("Job %s reached stage %s (%d%%)", job_id, stage.name.value, stage.progress)

    def _complete(self, job_id: str, stage: Stage, options: ProcessingOptions) -> None:
        artifact = self.engine.extract(options)
        entry = LogEntry.create(stage.severity, stage.render_message(options))

        def finish(job: JobRecord) -> None:
            job.complete(entry)
            self.contents.put(job_id, artifact)

        self.jobs.mutate(job_id, finish)

    def _pause(self, stage: Stage, cancel_event: threading.Event) -> bool:
        """Sleep for the stage delay; True when cancellation was requested meanwhile."""
        delay = stage.delay * self.stage_delay_scale
        if delay <= 0:
            return cancel_event.is_set()
        return cancel_event.wait(delay)

    def _interrupt(self, job_id: str) -> JobStatus:
        logger.warning("Job %s interrupted", job_id)
        self._record_failure(job_id, INTERRUPTED_MESSAGE)
        return JobStatus.FAILED

    def _record_failure(self, job_id: str, message: str) -> None:
        entry = LogEntry.create(LogSeverity.ERROR, message)
        try:
            self.jobs.mutate(job_id, lambda job: job.fail(entry))
        except ProcessingError:
            logger.exception("Could not record failure for job %s", job_id)
