# gpsconv/workers/executor.py
import logging
import shlex
import subprocess
import threading
import time
from pathlib import Path

from ..errors import BinaryNotFound, Cancelled, ConversionFailed, InvalidInput, InvalidOutputPath
from ..models.job import ConversionJob
from ..models.result import ConversionResult
from ..utils.paths import make_staging_path, promote_file, remove_quietly

logger = logging.getLogger(__name__)


def build_args(job: ConversionJob, staging_path: Path) -> list[str]:
    args: list[str] = []
    if not job.detects_input:
        args += ["-i", job.input_format.id]
    args += ["-f", str(job.input_path)]
    for f in job.filters:
        args += f.args()
    args += ["-o", job.output_format.id, "-F", str(staging_path)]
    return args


def _decode(data: bytes | None) -> str:
    return (data or b"").decode("utf-8", errors="replace")


class ConversionExecutor:
    """Runs one gpsbabel conversion at a time.

    gpsbabel writes into a throwaway staging file; the caller's output path
    is only replaced after a clean exit, so a failed or cancelled run never
    leaves a partial file behind.
    """

    def __init__(self):
        self._proc: subprocess.Popen | None = None
        self._cancel_requested = False
        self._lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self._proc is not None and self._proc.poll() is None

    def cancel(self) -> bool:
        """Ask the running gpsbabel to terminate. Returns False if nothing was running."""
        with self._lock:
            proc = self._proc
            if proc is None or proc.poll() is not None:
                return False
            self._cancel_requested = True
            proc.terminate()
        logger.info("Sent terminate to gpsbabel (pid %s)", proc.pid)
        return True

    def _spawn(self, cmd: list[str], stop_requested=None) -> subprocess.Popen:
        with self._lock:
            if self._proc is not None:
                raise RuntimeError("a conversion is already running on this executor")
            # a cancel either lands here or finds the process in cancel()
            if stop_requested is not None and stop_requested():
                raise Cancelled()
            self._cancel_requested = False
            try:
                # own session: terminal Ctrl-C only reaches this process
                self._proc = subprocess.Popen(
                    cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE, start_new_session=True,
                )
            except (FileNotFoundError, PermissionError) as e:
                raise BinaryNotFound(str(e)) from e
            except OSError as e:
                raise ConversionFailed(-1, f"Failed to start gpsbabel: {e}") from e
            return self._proc

    def _wait(self, proc: subprocess.Popen) -> tuple[bytes, bytes, bool]:
        try:
            out, err = proc.communicate()
        except OSError as e:
            proc.kill()
            proc.wait()
            raise ConversionFailed(-1, f"Failed to read gpsbabel output: {e}") from e
        finally:
            with self._lock:
                self._proc = None
                cancelled = self._cancel_requested
        return out, err, cancelled

    def run(self, job: ConversionJob, binary: Path, stop_requested=None) -> ConversionResult:
        """Convert ``job`` with ``binary``.

        ``stop_requested`` is an optional callable; if it returns True when the
        process is about to start, the run ends with ``Cancelled`` instead.
        """
        if not job.input_path.is_file():
            raise InvalidInput(job.input_path)
        if not job.output_path.parent.is_dir():
            raise InvalidOutputPath(job.output_path)

        try:
            staging = make_staging_path(job.output_path.suffix)
        except OSError as e:
            raise ConversionFailed(-1, f"Failed to create staging file: {e}") from e
        try:
            cmd = [str(binary)] + build_args(job, staging)
            logger.debug("$ %s", shlex.join(cmd))

            started = time.monotonic()
            proc = self._spawn(cmd, stop_requested)
            out, err, cancel_requested = self._wait(proc)
            duration = time.monotonic() - started

            code = proc.returncode
            if cancel_requested and code != 0:
                logger.info("Conversion %s cancelled after %.2fs", job.id, duration)
                raise Cancelled()

            stdout, stderr = _decode(out), _decode(err)
            size = None
            if code == 0:
                try:
                    size = promote_file(staging, job.output_path)
                except OSError as e:
                    raise ConversionFailed(-1, f"Failed to copy output file to destination: {e}") from e
            elif code < 0 and not stderr:
                stderr = f"gpsbabel was terminated by signal {-code}"

            result = ConversionResult(
                job_id=job.id,
                exit_code=code,
                stdout=stdout,
                stderr=stderr,
                duration=duration,
                output_size=size,
            )
            if not result.is_success:
                logger.info("gpsbabel exited with %d for job %s", code, job.id)
                raise ConversionFailed(code, result.error_message.strip())
            logger.info("Job %s converted in %.2fs (%s bytes)", job.id, duration, size)
            return result
        finally:
            remove_quietly(staging)
