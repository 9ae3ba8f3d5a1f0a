from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class MetadataRecord:
    """
    The parts of a Takeout sidecar we care about.
    """
    source: Path
    captured_at: Optional[int] = None   # photoTakenTime.timestamp, epoch seconds


@dataclass(frozen=True)
class WorkItem:
    json_path: Path
    media_path: Path


class OutcomeKind(Enum):
    UPDATED = "updated"
    SKIPPED_HAS_DATE = "skipped_has_date"
    SKIPPED_MISSING_MEDIA = "skipped_missing_media"
    SKIPPED_MISSING_TIMESTAMP = "skipped_missing_timestamp"
    ERROR = "error"


@dataclass(frozen=True)
class Outcome:
    """
    Terminal classification of one sidecar/media pair.
    """
    kind: OutcomeKind
    json_path: Path
    media_path: Optional[Path] = None
    reason: Optional[str] = None

    @classmethod
    def from_error(cls, json_path: Path, media_path: Optional[Path], error: Exception) -> "Outcome":
        return cls(OutcomeKind.ERROR, json_path, media_path, reason=f"{type(error).__name__}: {error}")

    @property
    def is_error(self) -> bool:
        return self.kind is OutcomeKind.ERROR


@dataclass(frozen=True)
class Summary:
    found: int
    updated: int
    errors: int
    skipped_has_date: int = 0
    skipped_missing_media: int = 0
    skipped_missing_timestamp: int = 0

    @property
    def total_outcomes(self) -> int:
        return (self.updated + self.errors + self.skipped_has_date
                + self.skipped_missing_media + self.skipped_missing_timestamp)
