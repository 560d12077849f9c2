from __future__ import annotations

import logging
from typing import Optional

from .engine import ExtractionEngine, SimulatedExtractionEngine
from .errors import ContentNotFound, DocumentNotFound, InvalidRequest, JobAlreadyFinished, QueueClosed
from .job_queue import ThreadPoolJobQueue, WorkerConfig
from .models import (
    ExtractionArtifact,
    JobRecord,
    JobStatus,
    LogEntry,
    LogSeverity,
    ProcessingOptions,
    new_id,
)
from .repository import (
    ContentRepository,
    InMemoryContentRepository,
    InMemoryJobRepository,
    JobRepository,
)
from .storage import InMemoryDocumentStorage
from .worker import ProcessingWorker

logger = logging.getLogger(__name__)


class DocumentProcessingService:
    """
    Entry point used by the HTTP layer. Owns the job and content stores and
    the worker pool, so independent instances never share state.
    """

    def __init__(
        self,
        documents: Optional[InMemoryDocumentStorage] = None,
        jobs: Optional[JobRepository] = None,
        contents: Optional[ContentRepository] = None,
        engine: Optional[ExtractionEngine] = None,
        config: Optional[WorkerConfig] = None,
    ):
        self.documents = documents or InMemoryDocumentStorage()
        self.jobs = jobs or InMemoryJobRepository()
        self.contents = contents or InMemoryContentRepository()
        self.config = config or WorkerConfig()
        self.worker = ProcessingWorker(
            jobs=self.jobs,
            contents=self.contents,
            engine=engine or SimulatedExtractionEngine(),
            stage_delay_scale=self.config.stage_delay_scale,
        )
        self.queue = ThreadPoolJobQueue(self.worker, self.config)

    def submit(self, document_id: str, options: ProcessingOptions) -> str:
        if not document_id:
            raise InvalidRequest("documentId is required")
        if not options.language:
            raise InvalidRequest("language is required")
        if not self.documents.document_exists(document_id):
            raise DocumentNotFound(document_id)

        job = JobRecord(id=new_id(), document_id=document_id, options=options)
        self.jobs.create(job)
        try:
            self.queue.enqueue(job.id, options)
        except QueueClosed:
            entry = LogEntry.create(LogSeverity.ERROR, "Processing was not scheduled: service is shutting down")
            self.jobs.mutate(job.id, lambda record: record.fail(entry))
            raise
        logger.info("Submitted job %s for document %s", job.id, document_id)
        return job.id

    def get_status(self, job_id: str) -> JobRecord:
        return self.jobs.get(job_id)

    def get_extract(self, job_id: str) -> ExtractionArtifact:
        job = self.jobs.get(job_id)
        if job.status is not JobStatus.COMPLETED:
            raise ContentNotFound(job_id)
        return self.contents.get(job_id)

    def cancel(self, job_id: str) -> JobRecord:
        job = self.jobs.get(job_id)
        if job.is_terminal:
            raise JobAlreadyFinished(job_id, job.status.value)
        if not self.queue.cancel(job_id):
            # The worker finished between the status read and the cancel request.
            job = self.jobs.get(job_id)
            raise JobAlreadyFinished(job_id, job.status.value)
        return job

    def shutdown(self, wait: bool = True) -> None:
        self.queue.shutdown(wait=wait)
