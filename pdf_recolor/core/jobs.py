"""Background recolor jobs.

Keeps upload/processing state in memory so clients can poll progress and
fetch the result once it is ready. Each job walks the state machine

    idle -> file_selected -> processing -> done | failed

and may go back to idle (reset) from any state except processing.
"""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Optional, Union

from ..models.schemas import InvertMode, JobState, JobStatusResponse, RecolorStats, RemapMode
from .config import settings
from .errors import RecolorError
from .pdf_recolorer import PDFRecolorer

logger = logging.getLogger(__name__)

_TRANSITIONS = {
    JobState.idle: {JobState.file_selected},
    JobState.file_selected: {JobState.processing, JobState.idle},
    JobState.processing: {JobState.done, JobState.failed},
    JobState.done: {JobState.idle, JobState.file_selected},
    JobState.failed: {JobState.idle, JobState.file_selected},
}


class InvalidTransition(ValueError):
    pass


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class RecolorJob:
    id: str
    mode: Union[InvertMode, RemapMode]
    filename: str = ""
    state: JobState = JobState.idle
    progress: float = 0.0
    source: Optional[bytes] = None
    result: Optional[bytes] = None
    error: Optional[str] = None
    stats: Optional[RecolorStats] = None
    created_at: str = field(default_factory=_now)
    updated_at: str = field(default_factory=_now)

    def transition(self, new_state: JobState) -> None:
        if new_state not in _TRANSITIONS[self.state]:
            raise InvalidTransition(f"Job {self.id}: cannot go from {self.state.value} to {new_state.value}")
        self.state = new_state
        self.updated_at = _now()

    def select_file(self, filename: str, source: bytes) -> None:
        self.transition(JobState.file_selected)
        self.filename = filename
        self.source = source
        self.result = None
        self.error = None
        self.progress = 0.0

    def reset(self) -> None:
        self.transition(JobState.idle)
        self.source = None
        self.result = None
        self.error = None
        self.stats = None
        self.progress = 0.0

    @property
    def output_filename(self) -> str:
        prefix = "inverted" if isinstance(self.mode, InvertMode) else "recolored"
        return f"{prefix}-{self.filename}"

    def to_status(self) -> JobStatusResponse:
        return JobStatusResponse(
            job_id=self.id,
            filename=self.filename,
            state=self.state,
            mode=self.mode.kind,
            progress=self.progress,
            error=self.error,
            stats=self.stats,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class JobStore:
    """In-memory registry of recolor jobs, safe to share between threads"""

    def __init__(self, max_jobs: Optional[int] = None):
        self.max_jobs = max_jobs if max_jobs is not None else settings.max_jobs
        self._jobs: Dict[str, RecolorJob] = {}
        self._lock = threading.Lock()

    def create(self, filename: str, source: bytes, mode: Union[InvertMode, RemapMode]) -> RecolorJob:
        job = RecolorJob(id=uuid.uuid4().hex, mode=mode)
        job.select_file(filename, source)
        with self._lock:
            self._jobs[job.id] = job
            self._evict()
        logger.info("Created job %s for %s (%s)", job.id, filename, mode.kind)
        return job

    def get(self, job_id: str) -> Optional[RecolorJob]:
        with self._lock:
            return self._jobs.get(job_id)

    def delete(self, job_id: str) -> bool:
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                return False
            if job.state is JobState.processing:
                raise InvalidTransition(f"Job {job_id} is still processing")
            del self._jobs[job_id]
            return True

    def run(self, job_id: str) -> None:
        """Process a job to completion; errors are recorded on the job, not raised."""
        job = self.get(job_id)
        if job is None:
            logger.warning("Job %s vanished before it could run", job_id)
            return

        with self._lock:
            job.transition(JobState.processing)

        recolorer = PDFRecolorer(job.mode)

        def _on_progress(fraction: float) -> None:
            with self._lock:
                job.progress = fraction

        try:
            result = recolorer.transform(job.source, on_progress=_on_progress)
        except Exception as e:
            with self._lock:
                job.transition(JobState.failed)
                job.error = str(e)
                job.progress = 0.0
                job.result = None
            if isinstance(e, RecolorError):
                logger.warning("Job %s failed: %s", job_id, e)
            else:
                logger.exception("Job %s crashed", job_id)
            return

        with self._lock:
            job.transition(JobState.done)
            job.result = result
            job.source = None
            job.progress = 1.0
            job.stats = recolorer.stats
        logger.info("Job %s done", job_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)

    def _evict(self) -> None:
        finished = [
            job for job in self._jobs.values()
            if job.state in (JobState.done, JobState.failed, JobState.idle)
        ]
        finished.sort(key=lambda job: job.updated_at)
        while len(self._jobs) > self.max_jobs and finished:
            del self._jobs[finished.pop(0).id]


job_store = JobStore()
