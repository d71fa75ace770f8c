# gpsconv/parsers/capabilities.py
from ..models.format import GpsFormat

_KNOWN_EXTENSIONS = {
    "gpx": (".gpx",),
    "kml": (".kml",),
    "garmin_fit": (".fit",),
    "gtrnctr": (".tcx",),
    "csv": (".csv",),
    "gdb": (".gdb",),
    "nmea": (".nmea", ".txt"),
    "gtm": (".gtm",),
    "an1": (".an1",),
    "gpsman": (".gpsman",),
}

# 4-field records: kinds that can be read / written
_READ_KINDS = {"file", "serial"}
_WRITE_KINDS = {"file"}


def infer_extensions(format_id: str) -> tuple[str, ...]:
    if known := _KNOWN_EXTENSIONS.get(format_id):
        return known
    if len(format_id) <= 4 and "_" not in format_id:
        return (f".{format_id}",)
    return ()


def split_extensions(field: str) -> tuple[str, ...]:
    exts = (e.strip() for e in field.split("/"))
    return tuple(e if e.startswith(".") else f".{e}" for e in exts if e)


def _parse_record(fields: list[str]) -> GpsFormat | None:
    if len(fields) >= 5:
        # kind, rw flags (rwrwrw = waypoints/routes/tracks), id, extensions, description
        _, flags, format_id, ext_field, description = fields[:5]
        can_read, can_write = "r" in flags, "w" in flags
        extensions = split_extensions(ext_field) or infer_extensions(format_id)
    else:
        # kind, id, parent id, description
        kind, format_id, _, description = fields
        can_read, can_write = kind in _READ_KINDS, kind in _WRITE_KINDS
        extensions = infer_extensions(format_id)

    format_id = format_id.strip()
    if not format_id or not (can_read or can_write):
        return None
    description = description.strip()
    return GpsFormat(
        id=format_id,
        name=description or format_id,
        extensions=extensions,
        supports_read=can_read,
        supports_write=can_write,
        description=description,
    )


def parse_formats(output: str) -> list[GpsFormat]:
    """Parse the tab-separated listing printed by ``gpsbabel -^2``.

    Two record layouts are in the wild depending on the gpsbabel version:
    ``kind, flags, id, extensions, description`` and the older
    ``kind, id, parent, description``. Records with fewer than four fields
    and formats that can be neither read nor written are dropped.
    """
    formats: list[GpsFormat] = []
    for line in output.splitlines():
        fields = line.split("\t")
        if len(fields) < 4:
            continue
        if fmt := _parse_record(fields):
            formats.append(fmt)
    return formats
