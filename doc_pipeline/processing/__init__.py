"""
Processing subsystem exports.
"""

from .engine import ExtractionEngine, SimulatedExtractionEngine
from .errors import (
    ContentNotFound,
    DocumentNotFound,
    DuplicateArtifact,
    DuplicateJobId,
    InvalidRequest,
    InvalidTransition,
    JobAlreadyFinished,
    JobNotFound,
    NotFoundError,
    ProcessingError,
    QueueClosed,
)
from .job_queue import ThreadPoolJobQueue, WorkerConfig
from .models import (
    ExtractedDocument,
    ExtractionArtifact,
    HeadingSection,
    JobRecord,
    JobStatus,
    LogEntry,
    LogSeverity,
    ParagraphSection,
    ProcessingOptions,
    TableSection,
    UploadedDocument,
)
from .repository import ContentRepository, InMemoryContentRepository, InMemoryJobRepository, JobRepository
from .service import DocumentProcessingService
from .stages import STAGES, Stage, StageName, plan_stages
from .storage import DetectedLanguage, InMemoryDocumentStorage
from .worker import ProcessingWorker

__all__ = [
    "ContentNotFound",
    "ContentRepository",
    "DetectedLanguage",
    "DocumentNotFound",
    "DocumentProcessingService",
    "DuplicateArtifact",
    "DuplicateJobId",
    "ExtractedDocument",
    "ExtractionArtifact",
    "ExtractionEngine",
    "HeadingSection",
    "InMemoryContentRepository",
    "InMemoryDocumentStorage",
    "InMemoryJobRepository",
    "InvalidRequest",
    "InvalidTransition",
    "JobAlreadyFinished",
    "JobNotFound",
    "JobRecord",
    "JobRepository",
    "JobStatus",
    "LogEntry",
    "LogSeverity",
    "NotFoundError",
    "ParagraphSection",
    "ProcessingError",
    "ProcessingOptions",
    "ProcessingWorker",
    "QueueClosed",
    "STAGES",
    "SimulatedExtractionEngine",
    "Stage",
    "StageName",
    "TableSection",
    "ThreadPoolJobQueue",
    "UploadedDocument",
    "WorkerConfig",
    "plan_stages",
]
