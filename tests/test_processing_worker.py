import threading

import pytest

from doc_pipeline.processing import (
    ContentNotFound,
    DocumentNotFound,
    DocumentProcessingService,
    ExtractionEngine,
    InMemoryContentRepository,
    InMemoryJobRepository,
    InvalidRequest,
    JobAlreadyFinished,
    JobNotFound,
    JobRecord,
    JobStatus,
    LogEntry,
    LogSeverity,
    ProcessingOptions,
    ProcessingWorker,
    QueueClosed,
    SimulatedExtractionEngine,
    TableSection,
    WorkerConfig,
    plan_stages,
)
from doc_pipeline.processing.worker import INTERRUPTED_MESSAGE

TABLE_MESSAGE = "Detecting and extracting tables..."


class RecordingJobRepository(InMemoryJobRepository):
    """Keeps every committed snapshot so tests can inspect the full history."""

    def __init__(self):
        super().__init__()
        self.history = []

    def mutate(self, job_id, fn):
        snapshot = super().mutate(job_id, fn)
        self.history.append(snapshot)
        return snapshot


class FailingEngine(ExtractionEngine):
    def extract(self, options):
        raise RuntimeError("extraction backend unavailable")


def _setup(options, engine=None):
    jobs = RecordingJobRepository()
    contents = InMemoryContentRepository()
    jobs.create(JobRecord(id="job-1", document_id="doc-1", options=options))
    worker = ProcessingWorker(jobs, contents, engine or SimulatedExtractionEngine(), stage_delay_scale=0)
    return jobs, contents, worker


@pytest.mark.parametrize(
    "tables, images, expected",
    [
        (False, False, [10, 30, 85, 100]),
        (True, False, [10, 30, 50, 85, 100]),
        (False, True, [10, 30, 70, 85, 100]),
        (True, True, [10, 30, 50, 70, 85, 100]),
    ],
)
def test_stage_plan_keeps_fixed_checkpoints(tables, images, expected):
    options = ProcessingOptions(language="en", extract_tables=tables, extract_images=images)
    assert [stage.progress for stage in plan_stages(options)] == expected


def test_worker_completes_job_through_all_checkpoints():
    options = ProcessingOptions(language="de", extract_tables=True, extract_images=True)
    jobs, contents, worker = _setup(options)

    assert worker.run_job("job-1", options) == JobStatus.COMPLETED

    assert [snap.progress for snap in jobs.history] == [10, 30, 50, 70, 85, 100]
    assert [snap.status for snap in jobs.history[:-1]] == [JobStatus.PROCESSING] * 5
    job = jobs.get("job-1")
    assert job.status == JobStatus.COMPLETED
    assert [entry.message for entry in job.logs] == [
        "Starting document processing...",
        "Extracting text content...",
        TABLE_MESSAGE,
        "Processing images...",
        "Processing language: de",
        "Document processing completed successfully!",
    ]
    assert job.logs[-1].severity == LogSeverity.SUCCESS
    artifact = contents.get("job-1")
    assert artifact.document.language == "de"
    assert isinstance(artifact.document.sections[-1], TableSection)
    assert "## Data Table" in artifact.markdown
    assert "structured data tables" in artifact.summary


def test_logs_grow_as_prefixes():
    options = ProcessingOptions(language="en", extract_tables=True)
    jobs, _, worker = _setup(options)
    worker.run_job("job-1", options)

    for earlier, later in zip(jobs.history, jobs.history[1:]):
        assert later.logs[: len(earlier.logs)] == earlier.logs
        assert len(later.logs) == len(earlier.logs) + 1
        assert later.progress >= earlier.progress


def test_tables_disabled_skips_table_stage_and_section():
    options = ProcessingOptions(language="en", extract_tables=False)
    jobs, contents, worker = _setup(options)
    worker.run_job("job-1", options)

    job = jobs.get("job-1")
    assert all(entry.message != TABLE_MESSAGE for entry in job.logs)
    artifact = contents.get("job-1")
    assert not any(isinstance(section, TableSection) for section in artifact.document.sections)
    assert "|" not in artifact.markdown
    assert "tables" not in artifact.summary


def test_engine_failure_marks_job_failed_without_artifact():
    options = ProcessingOptions(language="en")
    jobs, contents, worker = _setup(options, engine=FailingEngine())

    assert worker.run_job("job-1", options) == JobStatus.FAILED

    job = jobs.get("job-1")
    assert job.status == JobStatus.FAILED
    assert job.progress == 85
    assert job.logs[-1].severity == LogSeverity.ERROR
    assert job.logs[-1].message == "Processing failed: extraction backend unavailable"
    assert not contents.exists("job-1")


def test_cancelled_before_start_fails_with_interruption():
    options = ProcessingOptions(language="en")
    jobs, contents, worker = _setup(options)
    cancel_event = threading.Event()
    cancel_event.set()

    assert worker.run_job("job-1", options, cancel_event) == JobStatus.FAILED

    job = jobs.get("job-1")
    assert job.progress == 0
    assert [entry.message for entry in job.logs] == [INTERRUPTED_MESSAGE]
    assert not contents.exists("job-1")


def test_cancel_mid_run_stops_remaining_stages(slow_service, wait_until):
    document = slow_service.documents.save_upload(b"data", "a.pdf", "application/pdf")
    job_id = slow_service.submit(document.id, ProcessingOptions(language="en", extract_tables=True))
    wait_until(lambda: slow_service.get_status(job_id).progress == 10)

    slow_service.cancel(job_id)
    wait_until(lambda: slow_service.get_status(job_id).is_terminal)

    job = slow_service.get_status(job_id)
    assert job.status == JobStatus.FAILED
    assert job.progress == 10
    assert [entry.message for entry in job.logs] == ["Starting document processing...", INTERRUPTED_MESSAGE]
    with pytest.raises(ContentNotFound):
        slow_service.get_extract(job_id)


def test_shutdown_fails_running_and_queued_jobs(slow_service, wait_until):
    document = slow_service.documents.save_upload(b"data", "a.pdf", "application/pdf")
    job_ids = [slow_service.submit(document.id, ProcessingOptions(language="en")) for _ in range(3)]
    wait_until(lambda: slow_service.get_status(job_ids[0]).progress == 10)

    slow_service.shutdown()

    for job_id in job_ids:
        job = slow_service.get_status(job_id)
        assert job.status == JobStatus.FAILED
        assert job.logs[-1].message == INTERRUPTED_MESSAGE


def test_submit_starts_in_processing_state(service, document_id):
    class DeferredQueue:
        def __init__(self):
            self.enqueued = []

        def enqueue(self, job_id, options):
            self.enqueued.append(job_id)

        def shutdown(self, wait=True):
            pass

    service.queue = DeferredQueue()
    job_id = service.submit(document_id, ProcessingOptions(language="en"))

    job = service.get_status(job_id)
    assert job.status == JobStatus.PROCESSING
    assert job.progress == 0
    assert job.logs == []
    assert service.queue.enqueued == [job_id]
    with pytest.raises(ContentNotFound):
        service.get_extract(job_id)


def test_submit_validates_document_and_language(service, document_id):
    with pytest.raises(DocumentNotFound):
        service.submit("unknown", ProcessingOptions(language="en"))
    with pytest.raises(InvalidRequest):
        service.submit(document_id, ProcessingOptions(language=""))
    with pytest.raises(JobNotFound):
        service.get_status("unknown")
    with pytest.raises(JobNotFound):
        service.get_extract("unknown")


def test_fifty_concurrent_jobs_keep_their_own_language(service, document_id, wait_until):
    languages = {}
    for index in range(50):
        language = f"lang-{index}"
        job_id = service.submit(document_id, ProcessingOptions(language=language, extract_tables=index % 2 == 0))
        languages[job_id] = language

    assert len(languages) == 50
    for job_id in languages:
        wait_until(lambda: service.get_status(job_id).is_terminal)

    for job_id, language in languages.items():
        job = service.get_status(job_id)
        assert job.status == JobStatus.COMPLETED
        assert job.progress == 100
        assert f"Processing language: {language}" in [entry.message for entry in job.logs]
        assert service.get_extract(job_id).document.language == language


def test_submit_after_shutdown_fails_the_job():
    jobs = RecordingJobRepository()
    svc = DocumentProcessingService(jobs=jobs, config=WorkerConfig(stage_delay_scale=0))
    document = svc.documents.save_upload(b"data", "a.pdf", "application/pdf")
    svc.shutdown()

    with pytest.raises(QueueClosed):
        svc.submit(document.id, ProcessingOptions(language="en"))

    failed = jobs.history[-1]
    job = svc.get_status(failed.id)
    assert job.status == JobStatus.FAILED
    assert job.logs[-1].severity == LogSeverity.ERROR
    assert job.logs[-1].message == "Processing was not scheduled: service is shutting down"
    assert svc.queue.cancel(job.id) is False


def test_cancel_of_job_finishing_meanwhile_is_rejected(service, document_id):
    job = JobRecord(id="job-race", document_id=document_id, options=ProcessingOptions(language="en"))
    service.jobs.create(job)

    class FinishingQueue:
        def cancel(self, job_id):
            entry = LogEntry.create(LogSeverity.ERROR, "Processing failed: boom")
            service.jobs.mutate(job_id, lambda record: record.fail(entry))
            return False

        def shutdown(self, wait=True):
            pass

    service.queue = FinishingQueue()
    with pytest.raises(JobAlreadyFinished):
        service.cancel("job-race")
    assert service.get_status("job-race").status == JobStatus.FAILED


def test_concurrent_pollers_see_consistent_snapshots():
    svc = DocumentProcessingService(config=WorkerConfig(max_concurrency=16, stage_delay_scale=0.005))
    document = svc.documents.save_upload(b"data", "a.pdf", "application/pdf")
    barrier = threading.Barrier(50)
    languages = {}
    errors = []
    lock = threading.Lock()

    def submit(index):
        options = ProcessingOptions(language=f"lang-{index}", extract_tables=index % 2 == 0)
        barrier.wait()
        job_id = svc.submit(document.id, options)
        with lock:
            languages[job_id] = options.language

    submitters = [threading.Thread(target=submit, args=(index,)) for index in range(50)]
    for thread in submitters:
        thread.start()
    for thread in submitters:
        thread.join(timeout=10)
    assert len(languages) == 50

    def poll():
        previous = {}
        pending = set(languages)
        while pending:
            for job_id in list(pending):
                job = svc.get_status(job_id)
                messages = [entry.message for entry in job.logs]
                reached = [stage for stage in plan_stages(job.options) if stage.progress <= job.progress]
                if job.status != JobStatus.FAILED and len(messages) != len(reached):
                    errors.append(f"{job_id}: {len(messages)} logs at progress {job.progress}")
                earlier = previous.get(job_id, [])
                if messages[: len(earlier)] != earlier:
                    errors.append(f"{job_id}: logs are not an extension of the previous read")
                previous[job_id] = messages
                if job.is_terminal:
                    pending.discard(job_id)

    pollers = [threading.Thread(target=poll) for _ in range(4)]
    for thread in pollers:
        thread.start()
    for thread in pollers:
        thread.join(timeout=30)

    try:
        assert not any(thread.is_alive() for thread in pollers)
        assert errors == []
        for job_id, language in languages.items():
            assert svc.get_status(job_id).status == JobStatus.COMPLETED
            assert svc.get_extract(job_id).document.language == language
    finally:
        svc.shutdown()
