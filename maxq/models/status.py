# maxq/models/status.py
from .job import Job, JobStatus

# Display label and badge colour per job status
STATUS_CONFIG = {
    JobStatus.PENDING: {"label": "Pending", "color": "#6b7280"},
    JobStatus.ACTIVE: {"label": "Rendering", "color": "#3b82f6"},
    JobStatus.COMPLETED: {"label": "Completed", "color": "#22c55e"},
    JobStatus.FAILED: {"label": "Failed", "color": "#ef4444"},
    JobStatus.CANCELED: {"label": "Canceled", "color": "#f59e0b"},
}

LEVEL_COLORS = {
    "info": None,
    "success": "#22c55e",
    "warning": "#f59e0b",
    "error": "#ef4444",
}


def status_label(job: Job) -> str:
    return STATUS_CONFIG.get(job.status, {"label": job.status})["label"]


def status_color(job: Job) -> str:
    return STATUS_CONFIG.get(job.status, {"color": "#6b7280"})["color"]


def queue_summary(jobs: list[Job], running: bool) -> str:
    if not running:
        return f"Queue: {len(jobs)} jobs loaded"
    done = sum(1 for j in jobs if j.is_terminal)
    left = sum(1 for j in jobs if j.status == JobStatus.PENDING)
    text = f"Queue: {done}/{len(jobs)} done • {left} left"
    if active := next((j for j in jobs if j.status == JobStatus.ACTIVE), None):
        text += f" • Working on: {active.name}"
    return text
