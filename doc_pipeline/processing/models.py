from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from .errors import InvalidTransition

LOG_TIMESTAMP_FORMAT = "%H:%M:%S"


class JobStatus(str, Enum):
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not JobStatus.PROCESSING


class LogSeverity(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


def new_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class LogEntry:
    id: str
    severity: LogSeverity
    message: str
    timestamp: str

    @classmethod
    def create(cls, severity: LogSeverity, message: str, now: Optional[datetime] = None) -> "LogEntry":
        now = now or datetime.now()
        return cls(id=new_id(), severity=severity, message=message, timestamp=now.strftime(LOG_TIMESTAMP_FORMAT))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.severity.value,
            "message": self.message,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class ProcessingOptions:
    language: str
    extract_text: bool = True
    extract_tables: bool = False
    extract_images: bool = False


@dataclass
class JobRecord:
    """
    Mutable state of one processing job. Instances held by a repository are
    only ever changed through `JobRepository.mutate`; callers receive copies.
    """

    id: str
    document_id: str
    options: ProcessingOptions
    status: JobStatus = JobStatus.PROCESSING
    progress: int = 0
    logs: List[LogEntry] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def advance(self, progress: int, entry: LogEntry) -> None:
        self._ensure_processing()
        if not 0 <= progress <= 100:
            raise InvalidTransition(f"Progress {progress} out of range for job {self.id}")
        if progress < self.progress:
            raise InvalidTransition(f"Progress of job {self.id} cannot move back from {self.progress} to {progress}")
        if progress == 100:
            raise InvalidTransition(f"Job {self.id} reaches 100 only by completing")
        self.progress = progress
        self.logs.append(entry)
        self.updated_at = datetime.utcnow()

    def complete(self, entry: LogEntry) -> None:
        self._ensure_processing()
        self.progress = 100
        self.status = JobStatus.COMPLETED
        self.logs.append(entry)
        self.updated_at = datetime.utcnow()

    def fail(self, entry: LogEntry) -> None:
        self._ensure_processing()
        self.status = JobStatus.FAILED
        self.logs.append(entry)
        self.updated_at = datetime.utcnow()

    def _ensure_processing(self) -> None:
        if self.is_terminal:
            raise InvalidTransition(f"Job {self.id} is already {self.status.value}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "jobId": self.id,
            "status": self.status.value,
            "progress": self.progress,
            "logs": [entry.to_dict() for entry in self.logs],
        }


@dataclass(frozen=True)
class HeadingSection:
    text: str
    level: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return {"type": "heading", "content": self.text, "level": self.level}


@dataclass(frozen=True)
class ParagraphSection:
    text: str

    def to_dict(self) -> Dict[str, Any]:
        return {"type": "paragraph", "content": self.text}


@dataclass(frozen=True)
class TableSection:
    rows: int
    columns: int
    data: tuple

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "table",
            "rows": self.rows,
            "columns": self.columns,
            "data": [list(row) for row in self.data],
        }


Section = Union[HeadingSection, ParagraphSection, TableSection]


@dataclass(frozen=True)
class ExtractedDocument:
    title: str
    pages: int
    word_count: int
    language: str
    sections: tuple = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "pages": self.pages,
            "wordCount": self.word_count,
            "language": self.language,
            "sections": [section.to_dict() for section in self.sections],
        }


@dataclass(frozen=True)
class ExtractionArtifact:
    document: ExtractedDocument
    markdown: str
    summary: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "document": self.document.to_dict(),
            "markdown": self.markdown,
            "summary": self.summary,
        }


@dataclass(frozen=True)
class UploadedDocument:
    id: str
    file_name: Optional[str]
    content_type: Optional[str]
    size: int
    data: bytes = field(repr=False)
    uploaded_at: datetime = field(default_factory=datetime.utcnow)
