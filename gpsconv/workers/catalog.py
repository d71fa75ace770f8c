# gpsconv/workers/catalog.py
import logging
import subprocess
import threading
from pathlib import Path

from ..errors import GpsConvError
from ..models.format import AUTO_DETECT, COMMON_FORMATS, GpsFormat, detect_from_extension
from ..parsers.capabilities import parse_formats

logger = logging.getLogger(__name__)

LIST_FORMATS_FLAG = "-^2"
LIST_TIMEOUT = 30  # seconds


class FormatCatalog:
    """Formats reported by ``gpsbabel -^2``, loaded once on first use.

    Discovery is best effort: if the binary is missing, the call fails or
    nothing parses, the builtin common formats are used instead.
    """

    def __init__(self, locator):
        self.locator = locator
        self._formats: list[GpsFormat] | None = None
        self.used_fallback = False
        self._lock = threading.Lock()

    def _fetch(self) -> list[GpsFormat]:
        try:
            binary = self.locator.locate()
            out = subprocess.run(
                [str(binary), LIST_FORMATS_FLAG],
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                timeout=LIST_TIMEOUT,
            ).stdout.decode("utf-8", errors="replace")
        except (GpsConvError, OSError, subprocess.SubprocessError) as e:
            logger.warning("Format listing unavailable, using built-in formats: %s", e)
            return []
        return parse_formats(out)

    def all_formats(self) -> list[GpsFormat]:
        with self._lock:
            if self._formats is None:
                parsed = self._fetch()
                self.used_fallback = not parsed
                if self.used_fallback:
                    logger.warning("No formats parsed from gpsbabel, using built-in list")
                self._formats = parsed or list(COMMON_FORMATS)
                logger.info("Loaded %d formats", len(self._formats))
            return list(self._formats)

    def reload(self) -> list[GpsFormat]:
        with self._lock:
            self._formats = None
        return self.all_formats()

    def read_formats(self) -> list[GpsFormat]:
        return [f for f in self.all_formats() if f.supports_read]

    def write_formats(self) -> list[GpsFormat]:
        return [f for f in self.all_formats() if f.supports_write and not f.is_auto]

    def input_choices(self) -> list[GpsFormat]:
        return [AUTO_DETECT] + self.read_formats()

    def find(self, format_id: str) -> GpsFormat | None:
        if format_id == AUTO_DETECT.id:
            return AUTO_DETECT
        return next((f for f in self.all_formats() if f.id == format_id), None)

    def detect(self, path: Path | str) -> GpsFormat | None:
        return detect_from_extension(path, self.all_formats())
