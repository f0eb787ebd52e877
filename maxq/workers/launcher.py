# maxq/workers/launcher.py
import logging
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO

from PySide6.QtCore import QObject, QProcess, QProcessEnvironment, Signal

from ..models.job import Job
from ..parsers.render_output import STDERR, STDOUT, OutputDecoder
from ..utils.errors import LaunchError, RendererNotFoundError
from ..utils.paths import output_dir_for, output_file_name, render_log_path

log = logging.getLogger(__name__)

START_TIMEOUT_MS = 5000


@dataclass
class ProcessSpec:
    program: str
    arguments: list[str]
    working_dir: str
    env: dict[str, str] = field(default_factory=dict)

    @property
    def cmdline(self) -> str:
        return " ".join(shlex.quote(c) for c in [self.program, *self.arguments])


def build_process_spec(job: Job, renderer: Path, settings: dict) -> tuple[ProcessSpec, Path]:
    """Work out the 3dsmaxcmd invocation for one job and create its output folder."""
    if not job.source_path:
        raise LaunchError("Job has no source file")

    dest_dir = output_dir_for(settings["output_root"], job.project_name)
    try:
        dest_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise LaunchError(f"Cannot create output folder {dest_dir}: {e}") from e

    output_path = dest_dir / output_file_name(job.source_path, job.output_name)
    args = [
        job.source_path,
        "-silent",
        f"-outputName:{output_path}",
        f"-v:{int(settings.get('verbosity', 5))}",
    ]
    if extra := settings.get("extra_args", "").strip():
        args.extend(shlex.split(extra))

    env = {str(k): str(v) for k, v in (settings.get("extra_env") or {}).items()}
    spec = ProcessSpec(
        program=str(renderer),
        arguments=args,
        working_dir=str(Path(job.source_path).parent),
        env=env,
    )
    return spec, output_path


@dataclass
class _Run:
    job: Job
    process: QProcess
    log_file: IO[str] | None
    decoders: dict[str, OutputDecoder] = field(
        default_factory=lambda: {STDOUT: OutputDecoder(), STDERR: OutputDecoder()}
    )


class RenderLauncher(QObject):
    """Starts and stops 3dsmaxcmd, one QProcess per job.

    Output and exit notifications arrive through the Qt event loop on the
    thread that owns the launcher, so no locking is needed around job state.
    """

    output = Signal(str, str, bool)   # job_id, text, is_error
    exited = Signal(str, int)         # job_id, exit code

    def __init__(self, store, resolver, parent: QObject | None = None):
        super().__init__(parent)
        self.store = store
        self.resolver = resolver
        self._runs: dict[str, _Run] = {}
        # killed but not yet reaped; shutdown waits on these too
        self._released: set[QProcess] = set()

    def start(self, job: Job) -> tuple[QProcess, Path]:
        renderer = self.resolver.resolve()
        if renderer is None:
            raise RendererNotFoundError()

        spec, output_path = build_process_spec(job, renderer, self.store.get())
        job.output_path, job.cmdline = output_path, spec.cmdline

        process = QProcess(self)
        environment = QProcessEnvironment.systemEnvironment()
        for key, value in spec.env.items():
            environment.insert(key, value)
        process.setProcessEnvironment(environment)
        process.setProgram(spec.program)
        process.setArguments(spec.arguments)
        process.setWorkingDirectory(spec.working_dir)
        process.setProcessChannelMode(QProcess.ProcessChannelMode.SeparateChannels)

        job_id = job.id
        process.readyReadStandardOutput.connect(lambda: self._forward(job_id, process, STDOUT))
        process.readyReadStandardError.connect(lambda: self._forward(job_id, process, STDERR))
        process.finished.connect(lambda code, status: self._on_finished(job_id, process, code, status))

        run = _Run(job, process, self._open_log(job, output_path, spec))
        self._runs[job_id] = run
        log.info("Starting render %s: %s", job_id, spec.cmdline)
        process.start()
        if not process.waitForStarted(START_TIMEOUT_MS):
            error = process.errorString() or "unable to start renderer"
            self._drop(job_id)
            process.deleteLater()
            raise LaunchError(f"Failed to start 3ds Max: {error}")

        job.process = process
        return process, output_path

    def release(self, job: Job) -> None:
        """Forget the job's process once its outcome is known.

        3dsmaxcmd ignores a polite close request on Windows, so a process
        still alive at this point is killed to keep one render at a time.
        """
        if run := self._drop(job.id):
            self._kill(run.process)

    def cancel(self, job: Job) -> None:
        if run := self._drop(job.id):
            log.info("Canceling render %s", job.id)
            self._kill(run.process)

    def shutdown(self) -> None:
        for job_id in list(self._runs):
            self._kill(self._drop(job_id).process)
        for process in list(self._released):
            if not process.waitForFinished(3000):
                log.warning("Render process %s did not exit", process.processId())
        self._released.clear()

    def _kill(self, process: QProcess) -> None:
        if process.state() != QProcess.ProcessState.NotRunning:
            log.info("Killing render process %s", process.processId())
            process.kill()
            self._released.add(process)

    def _drop(self, job_id: str) -> _Run | None:
        if not (run := self._runs.pop(job_id, None)):
            return None
        run.job.process = None
        if run.log_file:
            try:
                run.log_file.close()
            except OSError:
                pass
        return run

    def _open_log(self, job: Job, output_path: Path, spec: ProcessSpec) -> IO[str] | None:
        path = render_log_path(output_path)
        try:
            lf = open(path, "a", encoding="utf-8")
            lf.write(f"=== {job.name} ===\n$ {spec.cmdline}\n")
            lf.flush()
        except OSError as e:
            log.warning("Cannot open render log %s: %s", path, e)
            return None
        job.log_path = path
        return lf

    def _forward(self, job_id: str, process: QProcess, channel: str, final: bool = False) -> None:
        run = self._runs.get(job_id)
        if run is None or run.process is not process:
            return
        data = process.readAllStandardError() if channel == STDERR else process.readAllStandardOutput()
        text = run.decoders[channel].feed(bytes(data), final)
        if not text:
            return
        if run.log_file:
            try:
                run.log_file.write(text)
                run.log_file.flush()
            except OSError as e:
                log.warning("Render log write failed: %s", e)
        self.output.emit(job_id, text, channel == STDERR)

    def _on_finished(self, job_id: str, process: QProcess, code: int, status) -> None:
        run = self._runs.get(job_id)
        if run is None or run.process is not process:
            # released or canceled earlier; nothing listens for this one
            self._released.discard(process)
            process.deleteLater()
            return
        self._forward(job_id, process, STDOUT, final=True)
        self._forward(job_id, process, STDERR, final=True)
        if status == QProcess.ExitStatus.CrashExit and code == 0:
            code = -1
        self._drop(job_id)
        process.deleteLater()
        log.info("Render %s exited with code %s", job_id, code)
        self.exited.emit(job_id, code)
