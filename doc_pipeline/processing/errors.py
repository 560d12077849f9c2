from __future__ import annotations


class ProcessingError(Exception):
    """Base class for every error raised by the processing subsystem."""


class NotFoundError(ProcessingError):
    pass


class JobNotFound(NotFoundError):
    def __init__(self, job_id: str):
        super().__init__(f"Job not found: {job_id}")
        self.job_id = job_id


class DocumentNotFound(NotFoundError):
    def __init__(self, document_id: str):
        super().__init__(f"Document not found: {document_id}")
        self.document_id = document_id


class ContentNotFound(NotFoundError):
    def __init__(self, job_id: str):
        super().__init__(f"Extracted content not available for job: {job_id}")
        self.job_id = job_id


class InvalidRequest(ProcessingError):
    pass


class JobAlreadyFinished(InvalidRequest):
    def __init__(self, job_id: str, status: str):
        super().__init__(f"Job {job_id} already finished with status {status}")
        self.job_id = job_id
        self.status = status


class DuplicateJobId(ProcessingError):
    pass


class DuplicateArtifact(ProcessingError):
    pass


class InvalidTransition(ProcessingError):
    pass


class QueueClosed(ProcessingError):
    def __init__(self, job_id: str):
        super().__init__(f"Job queue is shut down, job {job_id} was not scheduled")
        self.job_id = job_id
