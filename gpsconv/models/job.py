# gpsconv/models/job.py
import uuid
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Union

from .format import GpsFormat
from .result import ConversionResult


@dataclass(frozen=True)
class Simplify:
    error_distance: str = "0.001k"

    def args(self) -> list[str]:
        return ["-x", f"simplify,error={self.error_distance}"]

    @property
    def display_name(self) -> str:
        return f"Simplify track (error: {self.error_distance})"


@dataclass(frozen=True)
class RemoveDuplicates:
    def args(self) -> list[str]:
        return ["-x", "duplicate,location"]

    @property
    def display_name(self) -> str:
        return "Remove duplicate waypoints"


@dataclass(frozen=True)
class MergeTracks:
    def args(self) -> list[str]:
        return ["-x", "track,merge"]

    @property
    def display_name(self) -> str:
        return "Merge all tracks"


FilterSpec = Union[Simplify, RemoveDuplicates, MergeTracks]


@dataclass(frozen=True)
class ConversionJob:
    input_path: Path
    input_format: GpsFormat | None     # None / auto => let gpsbabel detect
    output_path: Path
    output_format: GpsFormat
    filters: tuple[FilterSpec, ...] = ()
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    def __post_init__(self):
        object.__setattr__(self, "input_path", Path(self.input_path))
        object.__setattr__(self, "output_path", Path(self.output_path))
        object.__setattr__(self, "filters", tuple(self.filters))
        if self.output_format.is_auto or not self.output_format.supports_write:
            raise ValueError(f"{self.output_format.name} cannot be used as an output format")

    @classmethod
    def create(cls, input_path, input_format: GpsFormat | None, output_path,
               output_format: GpsFormat, filters=()):
        return cls(input_path, input_format, output_path, output_format, tuple(filters), id=uuid.uuid4())

    @property
    def detects_input(self) -> bool:
        return self.input_format is None or self.input_format.is_auto


class JobState(str, Enum):
    PENDING = "Pending"
    RUNNING = "Running"
    COMPLETED = "Completed"
    FAILED = "Failed"
    CANCELLED = "Cancelled"


@dataclass(frozen=True)
class JobStatus:
    state: JobState
    result: ConversionResult | None = None
    message: str | None = None

    @classmethod
    def pending(cls):
        return cls(JobState.PENDING)

    @classmethod
    def running(cls):
        return cls(JobState.RUNNING)

    @classmethod
    def completed(cls, result: ConversionResult):
        return cls(JobState.COMPLETED, result=result)

    @classmethod
    def failed(cls, message: str):
        return cls(JobState.FAILED, message=message)

    @classmethod
    def cancelled(cls):
        return cls(JobState.CANCELLED)

    @property
    def is_terminal(self) -> bool:
        return self.state in (JobState.COMPLETED, JobState.FAILED, JobState.CANCELLED)
