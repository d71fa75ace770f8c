# gpsconv/errors.py
from pathlib import Path

INSTALL_HINT = """GPSBabel not found. Install it using your package manager:

    brew install gpsbabel        (macOS)
    sudo apt install gpsbabel    (Debian/Ubuntu)

Or download from: https://www.gpsbabel.org/download.html"""


class GpsConvError(Exception):
    """Base class for every failure a conversion can end with."""


class BinaryNotFound(GpsConvError):
    def __init__(self, detail: str | None = None):
        self.detail = detail
        super().__init__(INSTALL_HINT if not detail else f"{INSTALL_HINT}\n\n({detail})")


class InvalidBinary(GpsConvError):
    def __init__(self, path: Path | str, detail: str = ""):
        self.path = Path(path)
        msg = f"Found gpsbabel at {self.path}, but it doesn't appear to be valid or executable."
        if detail:
            msg += f" ({detail})"
        super().__init__(msg)


class InvalidInput(GpsConvError):
    def __init__(self, path: Path | str):
        self.path = Path(path)
        super().__init__(f"Cannot read input file: {self.path.name}")


class InvalidOutputPath(GpsConvError):
    def __init__(self, path: Path | str):
        self.path = Path(path)
        super().__init__(f"Cannot write to output location: {self.path}")


class ConversionFailed(GpsConvError):
    def __init__(self, exit_code: int, stderr: str):
        self.exit_code = exit_code
        self.stderr = stderr
        super().__init__(f"Conversion failed with exit code {exit_code}: {stderr}")


class Cancelled(GpsConvError):
    def __init__(self):
        super().__init__("Conversion was cancelled")
