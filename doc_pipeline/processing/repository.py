from __future__ import annotations

import logging
import threading
from copy import deepcopy
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, TypeVar

from .errors import ContentNotFound, DuplicateArtifact, DuplicateJobId, JobNotFound
from .models import ExtractionArtifact, JobRecord

logger = logging.getLogger(__name__)

T = TypeVar("T")


class JobRepository:
    """
    Persistence boundary for job state. Implementations must make `mutate`
    atomic per job: readers either see the state before the update function
    ran or after it returned, never anything in between.
    """

    def create(self, job: JobRecord) -> None:
        raise NotImplementedError

    def get(self, job_id: str) -> JobRecord:
        raise NotImplementedError

    def mutate(self, job_id: str, fn: Callable[[JobRecord], T]) -> JobRecord:
        raise NotImplementedError


class ContentRepository:
    """
    Write-once storage for extraction artifacts, keyed by job id.
    """

    def put(self, job_id: str, artifact: ExtractionArtifact) -> None:
        raise NotImplementedError

    def get(self, job_id: str) -> ExtractionArtifact:
        raise NotImplementedError

    def exists(self, job_id: str) -> bool:
        raise NotImplementedError


@dataclass
class _JobSlot:
    record: JobRecord
    lock: threading.Lock = field(default_factory=threading.Lock)


class InMemoryJobRepository(JobRepository):
    """
    Process-local job store. The store lock only guards the id -> slot map;
    each job carries its own lock so reads and writes of different jobs never
    contend. Callers always get deep copies, the stored record is never shared.
    """

    def __init__(self):
        self._slots: Dict[str, _JobSlot] = {}
        self._lock = threading.Lock()

    def _clone(self, job: JobRecord) -> JobRecord:
        return deepcopy(job)

    def _slot(self, job_id: str) -> _JobSlot:
        with self._lock:
            slot = self._slots.get(job_id)
        if slot is None:
            raise JobNotFound(job_id)
        return slot

    def create(self, job: JobRecord) -> None:
        with self._lock:
            if job.id in self._slots:
                raise DuplicateJobId(f"Job already exists: {job.id}")
            self._slots[job.id] = _JobSlot(record=self._clone(job))
        logger.debug("Created job %s for document %s", job.id, job.document_id)

    def get(self, job_id: str) -> JobRecord:
        slot = self._slot(job_id)
        with slot.lock:
            return self._clone(slot.record)

    def mutate(self, job_id: str, fn: Callable[[JobRecord], T]) -> JobRecord:
        """
        Apply `fn` to a working copy of the job and commit it only when `fn`
        returns normally. Returns a snapshot of the committed state.
        """
        slot = self._slot(job_id)
        with slot.lock:
            working = self._clone(slot.record)
            fn(working)
            slot.record = working
            return self._clone(working)


class InMemoryContentRepository(ContentRepository):
    """
    Artifacts are frozen dataclasses, so they are handed out without copying.
    """

    def __init__(self):
        self._artifacts: Dict[str, ExtractionArtifact] = {}
        self._lock = threading.Lock()

    def put(self, job_id: str, artifact: ExtractionArtifact) -> None:
        with self._lock:
            if job_id in self._artifacts:
                raise DuplicateArtifact(f"Artifact already stored for job: {job_id}")
            self._artifacts[job_id] = artifact

    def get(self, job_id: str) -> ExtractionArtifact:
        with self._lock:
            artifact: Optional[ExtractionArtifact] = self._artifacts.get(job_id)
        if artifact is None:
            raise ContentNotFound(job_id)
        return artifact

    def exists(self, job_id: str) -> bool:
        with self._lock:
            return job_id in self._artifacts
