# gpsconv/utils/paths.py
import os
import shutil
import tempfile
import uuid
from pathlib import Path


def is_executable_file(path: Path) -> bool:
    return path.is_file() and os.access(path, os.X_OK)


def make_staging_path(suffix: str = "") -> Path:
    """Create an empty, uniquely named file in the temp dir for the tool to write into."""
    fd, name = tempfile.mkstemp(prefix="gpsconv-", suffix=suffix)
    os.close(fd)
    return Path(name)


def remove_quietly(path: Path | None) -> None:
    if path is None:
        return
    try:
        path.unlink(missing_ok=True)
    except OSError:
        pass


def promote_file(staging: Path, destination: Path) -> int:
    """Put ``staging`` at ``destination`` and return the destination size.

    The data is first copied next to the destination (the temp dir is often
    on another filesystem) and then swapped in with ``os.replace``, so the
    destination is either the old file or the complete new one.
    """
    sibling = destination.parent / f".{destination.name}.{uuid.uuid4().hex[:8]}.part"
    try:
        shutil.copyfile(staging, sibling)
        os.replace(sibling, destination)
    finally:
        remove_quietly(sibling)
    return destination.stat().st_size


def suggest_output_path(input_path: Path | str, extension: str | None) -> Path:
    """Same folder and stem as the input, with the output format's extension."""
    p = Path(input_path)
    ext = (extension or "gpx").lstrip(".")
    return p.parent / f"{p.stem}.{ext}"
