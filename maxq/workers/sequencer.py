# maxq/workers/sequencer.py
import logging
from pathlib import Path

from PySide6.QtCore import QObject, Signal

from ..models.job import Job, JobStatus
from ..parsers.render_output import STDERR, STDOUT, SUCCESS, classify
from ..utils.errors import LaunchError, QueueLocked
from ..utils.paths import is_max_file

log = logging.getLogger(__name__)


class RenderQueue(QObject):
    """Ordered render jobs, dispatched one at a time through a launcher.

    Idle while no job is active, Running while exactly one is. Removing,
    reordering and clearing are refused with ``QueueLocked`` while Running.
    """

    job_changed = Signal(object)      # Job whose status/paths changed
    jobs_changed = Signal()           # list membership or order changed
    output = Signal(str, str, bool)   # job_id, text, is_error
    message = Signal(str, str)        # text, level: info/warning/error/success
    running_changed = Signal(bool)
    queue_drained = Signal()

    def __init__(self, launcher, parent: QObject | None = None):
        super().__init__(parent)
        self.launcher = launcher
        self.jobs: list[Job] = []
        self._active: Job | None = None
        self._cursor = -1
        self._project_name = ""
        launcher.output.connect(self._on_output)
        launcher.exited.connect(self._on_exited)

    @property
    def active_job(self) -> Job | None:
        return self._active

    @property
    def is_running(self) -> bool:
        return self._active is not None

    def get(self, job_id: str) -> Job | None:
        return next((j for j in self.jobs if j.id == job_id), None)

    def list_active(self) -> list[dict]:
        return [{"id": self._active.id}] if self._active else []

    # -- queue mutation -------------------------------------------------

    def enqueue(self, job: Job) -> Job:
        self.jobs.append(job)
        self.jobs_changed.emit()
        return job

    def add_files(self, paths) -> list[Job]:
        added = []
        for p in paths:
            p = str(p)
            if not is_max_file(p):
                self.message.emit(f"Skipping non-3ds Max file: {p}", "warning")
                continue
            if self._is_queued(p):
                self.message.emit(f"File already in queue: {p}", "warning")
                continue
            added.append(self.enqueue(Job(source_path=p)))
        if added:
            self.message.emit(f"Added {len(added)} file(s) to the queue.", "info")
        return added

    def _is_queued(self, path: str) -> bool:
        key = Path(path)
        return any(
            Path(j.source_path) == key and j.status in (JobStatus.PENDING, JobStatus.ACTIVE)
            for j in self.jobs
        )

    def remove(self, job_id: str) -> bool:
        if self.is_running:
            raise QueueLocked("remove jobs")
        if not (job := self.get(job_id)):
            return False
        self.jobs.remove(job)
        self.jobs_changed.emit()
        self.message.emit(f"Removed {job.name} from the queue.", "info")
        return True

    def reorder(self, job_ids: list[str]) -> None:
        if self.is_running:
            raise QueueLocked("reorder jobs")
        by_id = {j.id: j for j in self.jobs}
        if sorted(job_ids) != sorted(by_id):
            raise ValueError("new order must contain exactly the queued jobs")
        self.jobs = [by_id[i] for i in job_ids]
        self.jobs_changed.emit()

    def clear(self) -> None:
        if self.is_running:
            raise QueueLocked("clear the queue")
        self.jobs.clear()
        self._cursor = -1
        self.jobs_changed.emit()
        self.message.emit("Queue cleared.", "info")

    # -- running --------------------------------------------------------

    def start(self, project_name: str = "") -> bool:
        if self.is_running:
            return False
        if not any(j.status == JobStatus.PENDING for j in self.jobs):
            self.message.emit("Nothing to render: no pending jobs in the queue.", "warning")
            return False
        self._project_name = (project_name or "").strip()
        self.running_changed.emit(True)
        self.message.emit("Starting render queue...", "info")
        self._dispatch_next()
        return True

    def cancel(self, job_id: str) -> bool:
        job = self.get(job_id)
        if job is None or job.is_terminal:
            return False
        if job is self._active:
            self.launcher.cancel(job)
            self._finish(job, JobStatus.CANCELED, "Canceled by user")
            return True
        # pending: drop it from the run without touching any process
        job.status, job.error = JobStatus.CANCELED, "Canceled by user"
        self.job_changed.emit(job)
        self.message.emit(f"Canceled {job.name}", "warning")
        return True

    def shutdown(self) -> None:
        """Kill the live render, if any, without starting another one."""
        if job := self._active:
            self.launcher.cancel(job)
            job.status, job.error = JobStatus.CANCELED, "Application closed"
            self._active = None
            self.job_changed.emit(job)
            self.running_changed.emit(False)
        self.launcher.shutdown()

    def _dispatch_next(self) -> None:
        while True:
            job = next((j for j in self.jobs if j.status == JobStatus.PENDING), None)
            if job is None:
                self._drained()
                return

            self._active, self._cursor = job, self.jobs.index(job)
            job.status = JobStatus.ACTIVE
            if not job.project_name and self._project_name:
                job.project_name = self._project_name
            self.job_changed.emit(job)
            self.message.emit(f"Rendering [{self._cursor + 1}/{len(self.jobs)}]: {job.name}", "info")
            try:
                self.launcher.start(job)
            except LaunchError as e:
                log.warning("Launch failed for %s: %s", job.name, e)
                job.status, job.error = JobStatus.FAILED, str(e)
                self._active = None
                self.job_changed.emit(job)
                self.message.emit(f"Failed to render {job.name}: {e}", "error")
                continue
            return

    def _drained(self) -> None:
        self._active, self._cursor = None, -1
        self.message.emit("All renders completed!", "success")
        self.running_changed.emit(False)
        self.queue_drained.emit()

    def _finish(self, job: Job, status: str, error: str | None = None) -> None:
        job.status, job.error = status, error
        self.launcher.release(job)
        self._active = None
        self.job_changed.emit(job)
        if status == JobStatus.COMPLETED:
            self.message.emit(f"{job.name}: Rendering completed successfully", "success")
        elif status == JobStatus.CANCELED:
            self.message.emit(f"Canceled {job.name}", "warning")
        else:
            self.message.emit(f"{job.name} failed: {error}", "error")
        self._dispatch_next()

    def _on_output(self, job_id: str, text: str, is_error: bool) -> None:
        self.output.emit(job_id, text, is_error)
        job = self._active
        if job is None or job.id != job_id:
            return
        event = classify(text, STDERR if is_error else STDOUT)
        if not event.is_terminal:
            return
        if event.kind == SUCCESS:
            self._finish(job, JobStatus.COMPLETED)
        else:
            self._finish(job, JobStatus.FAILED, event.text.strip())

    def _on_exited(self, job_id: str, code: int) -> None:
        job = self._active
        if job is None or job.id != job_id:
            return
        self.message.emit(f"{job.name}: process exited with code {code}", "info" if code == 0 else "error")
        if code == 0:
            self._finish(job, JobStatus.COMPLETED)
        else:
            self._finish(job, JobStatus.FAILED, f"process exited with code {code}")
