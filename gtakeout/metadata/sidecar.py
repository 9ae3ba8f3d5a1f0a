"""
Reads Google Takeout sidecar JSON and turns photoTakenTime into an EXIF date.
"""
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from .. import config
from ..exceptions import JsonParseError, TimestampMissingError
from ..models import MetadataRecord


def parse_sidecar(path: Path) -> MetadataRecord:
    """
    Loads a sidecar file into a MetadataRecord.

    A missing photoTakenTime block, or a missing/null/empty timestamp, gives
    captured_at=None. Anything that is present but unusable is malformed.

    Raises:
        JsonParseError: unreadable file, invalid JSON, non-object document,
                        or a timestamp that is not an integer.
    """
    try:
        with path.open('r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, UnicodeDecodeError) as e:
        raise JsonParseError(f"Cannot read {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise JsonParseError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, dict):
        raise JsonParseError(f"Expected a JSON object in {path}, got {type(data).__name__}")

    taken = data.get("photoTakenTime")
    if taken is None:
        return MetadataRecord(source=path, captured_at=None)
    if not isinstance(taken, dict):
        raise JsonParseError(f"photoTakenTime is not an object in {path}")

    return MetadataRecord(source=path, captured_at=_coerce_timestamp(taken.get("timestamp"), path))


def _coerce_timestamp(raw: Any, path: Path) -> Optional[int]:
    """Takeout writes the timestamp as a string, but plain integers are accepted too."""
    if raw is None:
        return None
    # bool is a subclass of int
    if isinstance(raw, bool):
        raise JsonParseError(f"photoTakenTime.timestamp is a boolean in {path}")
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str):
        text = raw.strip()
        if not text:
            return None
        try:
            return int(text)
        except ValueError:
            raise JsonParseError(f"photoTakenTime.timestamp is not an integer in {path}: {raw!r}") from None

    raise JsonParseError(f"photoTakenTime.timestamp has unsupported type {type(raw).__name__} in {path}")


def extract_timestamp(record: MetadataRecord) -> int:
    if record.captured_at is None:
        raise TimestampMissingError(f"No photoTakenTime.timestamp in {record.source}")
    return record.captured_at


def format_exif_datetime(timestamp: int) -> str:
    """
    Formats epoch seconds as "YYYY:MM:DD HH:MM:SS" in UTC.

    EXIF date fields carry no zone, so every write uses the same convention.
    """
    try:
        dt = datetime.fromtimestamp(timestamp, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as e:
        raise JsonParseError(f"Timestamp {timestamp} is out of range: {e}") from e
    return dt.strftime(config.EXIF_DATE_FORMAT)
