from pathlib import Path

import pytest
from PySide6.QtCore import QCoreApplication, QEventLoop, QObject, QTimer, Signal

from maxq.utils.settings import SettingsStore


@pytest.fixture(scope="session", autouse=True)
def qapp():
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture
def store(tmp_path):
    s = SettingsStore(tmp_path / "settings.json")
    s.set({"output_root": str(tmp_path / "renders")})
    return s


class FakeLauncher(QObject):
    """Stands in for RenderLauncher; tests emit output/exited by hand."""

    output = Signal(str, str, bool)
    exited = Signal(str, int)

    def __init__(self):
        super().__init__()
        self.started: list[str] = []
        self.released: list[str] = []
        self.canceled: list[str] = []
        self.failures: dict[str, Exception] = {}
        self.shut_down = False

    def start(self, job):
        if err := self.failures.get(Path(job.source_path).name):
            raise err
        self.started.append(job.id)
        job.process = object()
        job.output_path = Path("/renders") / (Path(job.source_path).stem + ".jpg")
        return job.process, job.output_path

    def release(self, job):
        if job.process is not None:
            self.released.append(job.id)
        job.process = None

    def cancel(self, job):
        if job.process is not None:
            self.canceled.append(job.id)
        job.process = None

    def shutdown(self):
        self.shut_down = True


@pytest.fixture
def launcher():
    return FakeLauncher()


def wait_for(signal, timeout_ms=15000):
    """Spin an event loop until ``signal`` fires; return its argument tuples."""
    received = []
    loop = QEventLoop()

    def _got(*args):
        received.append(args)
        loop.quit()

    timer = QTimer()
    timer.setSingleShot(True)
    timer.timeout.connect(loop.quit)
    signal.connect(_got)
    timer.start(timeout_ms)
    loop.exec()
    timer.stop()
    signal.disconnect(_got)
    return received
