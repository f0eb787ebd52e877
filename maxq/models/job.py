# maxq/models/job.py
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


class JobStatus:
    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELED = "canceled"


TERMINAL_STATUSES = frozenset({JobStatus.COMPLETED, JobStatus.FAILED, JobStatus.CANCELED})


def _new_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass(eq=False)
class Job:
    source_path: str
    output_name: str | None = None
    project_name: str | None = None
    id: str = field(default_factory=_new_id)
    status: str = JobStatus.PENDING
    process: Any = None            # live QProcess, only while active
    output_path: Path | None = None
    log_path: Path | None = None
    error: str | None = None
    cmdline: str | None = None

    @property
    def name(self) -> str:
        return Path(self.source_path).name

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES
