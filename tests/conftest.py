import time

import pytest

from doc_pipeline.processing import DocumentProcessingService, WorkerConfig


def _wait_until(predicate, timeout: float = 5.0, interval: float = 0.01):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        result = predicate()
        if result:
            return result
        time.sleep(interval)
    raise AssertionError("condition not met before timeout")


@pytest.fixture
def wait_until():
    return _wait_until


@pytest.fixture
def service():
    svc = DocumentProcessingService(config=WorkerConfig(max_concurrency=8, stage_delay_scale=0))
    yield svc
    svc.shutdown()


@pytest.fixture
def slow_service():
    # Long enough that a job parks after its first stage until cancelled.
    svc = DocumentProcessingService(config=WorkerConfig(max_concurrency=1, stage_delay_scale=100))
    yield svc
    svc.shutdown()


@pytest.fixture
def document_id(service):
    return service.documents.save_upload(b"%PDF-1.4 sample", "sample.pdf", "application/pdf").id
