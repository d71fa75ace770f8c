# gpsconv/workers/locator.py
import logging
import shutil
import subprocess
import threading
from pathlib import Path

from ..errors import BinaryNotFound, InvalidBinary
from ..utils.paths import is_executable_file
from ..utils.settings import CUSTOM_BINARY_KEY

logger = logging.getLogger(__name__)

BINARY_NAME = "gpsbabel"
VERSION_TIMEOUT = 10  # seconds


def _top_dir() -> Path:
    # This file is gpsconv/workers/locator.py → parents[2] is the folder above gpsconv/
    return Path(__file__).resolve().parents[2]


BUNDLED_PATH = _top_dir() / "bin" / BINARY_NAME
WELL_KNOWN_PATHS = (
    Path("/opt/homebrew/bin") / BINARY_NAME,   # Homebrew, Apple Silicon
    Path("/usr/local/bin") / BINARY_NAME,      # Homebrew Intel / manual installs
)


def is_valid_binary(path: Path) -> bool:
    """Exists, is executable, and answers ``--version`` with exit code 0."""
    if not is_executable_file(path):
        return False
    try:
        proc = subprocess.run(
            [str(path), "--version"],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            timeout=VERSION_TIMEOUT,
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug("Candidate %s failed to run: %s", path, e)
        return False
    return proc.returncode == 0


class BinaryLocator:
    """Finds gpsbabel and remembers the first candidate that validates.

    Search order: bundled copy, the two Homebrew prefixes, the user's custom
    path from preferences, then ``PATH``. The cache is only dropped when the
    custom path changes.
    """

    def __init__(self, prefs, *, bundled_path: Path | None = BUNDLED_PATH,
                 well_known_paths=WELL_KNOWN_PATHS, search_path: str | None = None):
        self.prefs = prefs
        self.bundled_path = bundled_path
        self.well_known_paths = tuple(well_known_paths)
        self.search_path = search_path      # None => the process PATH
        self._cached: Path | None = None
        self._lock = threading.Lock()

    @property
    def custom_path(self) -> Path | None:
        value = self.prefs.get(CUSTOM_BINARY_KEY)
        return Path(value).expanduser() if value else None

    def set_custom_path(self, path: Path | str | None) -> None:
        with self._lock:
            self.prefs.set(CUSTOM_BINARY_KEY, str(path) if path else None)
            self._cached = None
        logger.info("Custom gpsbabel path %s", f"set to {path}" if path else "cleared")

    def _candidates(self):
        if self.bundled_path is not None:
            yield self.bundled_path
        yield from self.well_known_paths
        if custom := self.custom_path:
            yield custom

    def _find_in_path(self) -> Path | None:
        found = shutil.which(BINARY_NAME, path=self.search_path)
        if found and is_valid_binary(p := Path(found)):
            return p
        return None

    def locate(self) -> Path:
        with self._lock:
            if self._cached is not None:
                return self._cached
            for candidate in self._candidates():
                if is_valid_binary(candidate):
                    self._cached = candidate
                    break
            else:
                self._cached = self._find_in_path()
            if self._cached is None:
                raise BinaryNotFound()
            logger.info("Using gpsbabel at %s", self._cached)
            return self._cached

    def is_available(self) -> bool:
        try:
            self.locate()
            return True
        except BinaryNotFound:
            return False

    def version(self) -> str:
        binary = self.locate()
        try:
            proc = subprocess.run(
                [str(binary), "--version"],
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                timeout=VERSION_TIMEOUT,
            )
        except (OSError, subprocess.SubprocessError) as e:
            raise InvalidBinary(binary, str(e)) from e
        return proc.stdout.decode("utf-8", errors="replace").strip()
