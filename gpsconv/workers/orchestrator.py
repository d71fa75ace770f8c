# gpsconv/workers/orchestrator.py
import logging
import threading

from PySide6.QtCore import QObject, Signal, Slot

from ..errors import BinaryNotFound, Cancelled, GpsConvError
from ..models.format import AUTO_DETECT
from ..models.job import ConversionJob, JobState, JobStatus
from .executor import ConversionExecutor

logger = logging.getLogger(__name__)


class JobOrchestrator(QObject):
    """Runs one conversion job end to end and narrates it through ``line_out``.

    ``submit`` a job, then call ``run`` (directly or from ``QThread.started``
    after ``moveToThread``). ``cancel`` may be called from any thread.
    """

    line_out = Signal(str)
    status_changed = Signal(object)   # JobStatus
    job_done = Signal(object)         # terminal JobStatus

    def __init__(self, locator, catalog, executor: ConversionExecutor | None = None, parent=None):
        super().__init__(parent)
        self.locator = locator
        self.catalog = catalog
        self.executor = executor or ConversionExecutor()
        self._lock = threading.Lock()
        self._job: ConversionJob | None = None
        self._status: JobStatus | None = None
        self._log: list[str] = []
        self._stop_requested = False

    @property
    def status(self) -> JobStatus | None:
        with self._lock:
            return self._status

    @property
    def job(self) -> ConversionJob | None:
        with self._lock:
            return self._job

    @property
    def log(self) -> tuple[str, ...]:
        with self._lock:
            return tuple(self._log)

    def _append(self, line: str) -> None:
        with self._lock:
            self._log.append(line)
        self.line_out.emit(line)

    def _set_status(self, status: JobStatus) -> None:
        with self._lock:
            self._status = status
        self.status_changed.emit(status)

    def submit(self, job: ConversionJob) -> bool:
        with self._lock:
            if self._status is not None and not self._status.is_terminal:
                logger.warning("Rejected job %s: job %s is still %s",
                               job.id, self._job.id, self._status.state.value)
                return False
            self._job = job
            self._status = JobStatus.pending()
            self._log = []
            self._stop_requested = False
        self.status_changed.emit(JobStatus.pending())
        return True

    @Slot()
    def run(self) -> JobStatus | None:
        with self._lock:
            job = self._job
            if job is None or self._status.state is not JobState.PENDING:
                return None
        self._set_status(JobStatus.running())

        try:
            status = self._execute(job)
        except Exception as e:
            logger.exception("Unexpected error while converting %s", job.input_path)
            self._append(f"Error: {e}")
            status = JobStatus.failed(str(e))

        self._set_status(status)
        self.job_done.emit(status)
        return status

    def run_job(self, job: ConversionJob) -> JobStatus | None:
        """Submit and run in the calling thread. None if the job was rejected."""
        if not self.submit(job):
            return None
        return self.run()

    @Slot()
    def cancel(self) -> bool:
        """Request cancellation of the current job. False once it has finished.

        A request made before gpsbabel starts is kept and stops the run right
        before the process would be spawned.
        """
        with self._lock:
            if self._status is None or self._status.is_terminal:
                return False
            self._stop_requested = True
        self.executor.cancel()
        return True

    def _should_stop(self) -> bool:
        with self._lock:
            return self._stop_requested

    def _execute(self, job: ConversionJob) -> JobStatus:
        self._append("Starting conversion...")
        self._append(f"Input: {job.input_path}")
        self._append(f"Output: {job.output_path}")
        try:
            binary = self.locator.locate()

            if detected := self.catalog.detect(job.input_path):
                self._append(f"Selected: {job.input_path.name} (detected as {detected.name})")
            else:
                self._append(f"Selected: {job.input_path.name}")
            in_name = AUTO_DETECT.name if job.detects_input else job.input_format.name
            self._append(f"Format: {in_name} → {job.output_format.name}")
            for f in job.filters:
                self._append(f"Filter: {f.display_name}")

            self._append("Running gpsbabel...")
            result = self.executor.run(job, binary, self._should_stop)
        except Cancelled:
            self._append("✗ Conversion cancelled")
            return JobStatus.cancelled()
        except GpsConvError as e:
            self._append("✗ Conversion failed")
            self._append(f"Error: {e}")
            return JobStatus.failed(str(e))

        if result.stdout:
            self._append(f"Output:\n{result.stdout.rstrip()}")
        if result.stderr:
            self._append(f"Messages:\n{result.stderr.rstrip()}")
        self._append(f"✓ {result.status_message}")
        self._append(f"Duration: {result.duration:.2f}s")
        return JobStatus.completed(result)

    def check_binary(self) -> bool:
        """Log whether gpsbabel is usable and which version it is."""
        try:
            self.locator.locate()
        except BinaryNotFound as e:
            self._append(f"Error: {e}")
            return False
        try:
            version = self.locator.version()
            self._append(f"GPSBabel found: {version.splitlines()[0] if version else 'unknown version'}")
        except GpsConvError:
            self._append("GPSBabel found but version check failed")
        return True

    def load_formats(self) -> None:
        inputs, outputs = self.catalog.read_formats(), self.catalog.write_formats()
        if self.catalog.used_fallback:
            self._append("Using built-in format list")
        else:
            self._append(f"Loaded {len(inputs)} input formats and {len(outputs)} output formats")
