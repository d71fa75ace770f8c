# gpsconv/models/result.py
import uuid
from dataclasses import dataclass


def format_size(size: int) -> str:
    """File-style byte count: decimal units, one decimal place above bytes."""
    if size < 1000:
        return f"{size} bytes"
    value = float(size)
    for unit in ("KB", "MB", "GB", "TB"):
        value /= 1000
        if value < 1000 or unit == "TB":
            return f"{value:.1f} {unit}"
    return f"{size} bytes"


@dataclass(frozen=True)
class ConversionResult:
    job_id: uuid.UUID
    exit_code: int
    stdout: str
    stderr: str
    duration: float                 # seconds
    output_size: int | None = None  # bytes at the destination, success only

    @property
    def is_success(self) -> bool:
        return self.exit_code == 0

    @property
    def status_message(self) -> str:
        if not self.is_success:
            return f"Conversion failed with exit code {self.exit_code}."
        if self.output_size is not None:
            return f"Conversion successful. Output file size: {format_size(self.output_size)}"
        return "Conversion successful."

    @property
    def error_message(self) -> str | None:
        # gpsbabel writes to stderr even on success, so the exit code decides
        if self.is_success:
            return None
        if self.stderr:
            return self.stderr
        if self.stdout:
            return self.stdout
        return f"Conversion failed with exit code {self.exit_code}"

    @property
    def full_log(self) -> str:
        sections = []
        if self.stdout:
            sections.append(f"STDOUT:\n{self.stdout}")
        if self.stderr:
            sections.append(f"STDERR:\n{self.stderr}")
        return "\n\n".join(sections) if sections else "No output from gpsbabel"
