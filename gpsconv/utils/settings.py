# gpsconv/utils/settings.py
import json
import logging
import os
import threading
from pathlib import Path

logger = logging.getLogger(__name__)

CUSTOM_BINARY_KEY = "custom_gpsbabel_path"

DEFAULT_SETTINGS = {
    CUSTOM_BINARY_KEY: "",             # "" => no override, use the normal search
    "simplify_distance": "0.001k",     # default error for the simplify filter
    "default_output_format": "gpx",
}


def settings_file() -> Path:
    if env := os.environ.get("GPSCONV_SETTINGS"):
        return Path(env).expanduser()
    return Path.home() / ".config" / "gpsconv" / "settings.json"


def load_settings(path: Path | None = None) -> dict:
    p = path or settings_file()
    if p.exists():
        try:
            data = json.loads(p.read_text())
            return {**DEFAULT_SETTINGS, **data}
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable settings file %s: %s", p, e)
    # First run or broken file → write defaults so the file exists
    try:
        save_settings(DEFAULT_SETTINGS, p)
    except OSError as e:
        logger.warning("Could not write default settings to %s: %s", p, e)
    return DEFAULT_SETTINGS.copy()


def save_settings(data: dict, path: Path | None = None) -> None:
    p = path or settings_file()
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(data, indent=2))


class Preferences:
    """Small get/set store over the settings file. Values are strings."""

    def __init__(self, path: Path | None = None):
        self.path = path or settings_file()
        self._lock = threading.Lock()
        self._data = load_settings(self.path)

    def get(self, key: str, default: str | None = None) -> str | None:
        with self._lock:
            value = self._data.get(key, default)
        return value if value != "" else default

    def set(self, key: str, value: str | None) -> None:
        with self._lock:
            if value is None:
                self._data[key] = DEFAULT_SETTINGS.get(key, "")
            else:
                self._data[key] = str(value)
            snapshot = dict(self._data)
        save_settings(snapshot, self.path)
