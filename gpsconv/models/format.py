# gpsconv/models/format.py
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, eq=False)
class GpsFormat:
    """A format gpsbabel can read and/or write, keyed by its gpsbabel code."""
    id: str                                   # gpsbabel format code, e.g. "gpx"
    name: str                                 # human readable name
    extensions: tuple[str, ...] = ()          # e.g. (".gpx",)
    supports_read: bool = True
    supports_write: bool = True
    description: str = ""

    def __post_init__(self):
        object.__setattr__(self, "extensions", tuple(self.extensions))

    def __eq__(self, other):
        if not isinstance(other, GpsFormat):
            return NotImplemented
        return self.id == other.id

    def __hash__(self):
        return hash(self.id)

    @property
    def is_auto(self) -> bool:
        return self.id == AUTO_DETECT_ID

    @property
    def default_extension(self) -> str | None:
        return self.extensions[0].lstrip(".") if self.extensions else None

    def matches_extension(self, file_extension: str) -> bool:
        wanted = file_extension.lower().lstrip(".")
        return any(ext.lower().lstrip(".") == wanted for ext in self.extensions) if wanted else False


AUTO_DETECT_ID = "auto"

AUTO_DETECT = GpsFormat(
    id=AUTO_DETECT_ID,
    name="Auto-detect",
    supports_read=True,
    supports_write=False,
    description="Automatically detect the input format",
)

COMMON_FORMATS: tuple[GpsFormat, ...] = (
    GpsFormat("gpx", "GPX - GPS Exchange Format", (".gpx",),
              description="GPS Exchange Format - the standard for GPS data exchange"),
    GpsFormat("kml", "KML - Google Earth", (".kml",), description="Google Earth KML format"),
    GpsFormat("garmin_fit", "FIT - Garmin", (".fit",), description="Garmin FIT activity files"),
    GpsFormat("gtrnctr", "TCX - Training Center XML", (".tcx",), description="Garmin Training Center XML"),
    GpsFormat("csv", "CSV - Comma Separated Values", (".csv",), description="Comma-separated values"),
    GpsFormat("gdb", "GDB - Garmin Database", (".gdb",), description="Garmin GPS database"),
)


def detect_from_extension(path: Path | str, formats=COMMON_FORMATS) -> GpsFormat | None:
    suffix = Path(path).suffix
    if not suffix:
        return None
    return next((f for f in formats if not f.is_auto and f.matches_extension(suffix)), None)
