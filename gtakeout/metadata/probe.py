"""
Answers one question about a media file: does it already carry a capture date?

Strategies:
  - JPEG, TIFF, PNG: 'exifread' (fast, Python-native, no subprocess).
  - WebP, HEIC:      'exiftool' (exifread finds no tags in their EXIF chunk).
  - Video:           'exiftool' (exifread does not understand QuickTime/RIFF/Matroska).

Both raise ProbeError when the answer cannot be determined. Callers must never
read a ProbeError as "no date".
"""
import json
import logging
import subprocess
from pathlib import Path
from typing import Iterable, Mapping

import exifread

from .. import config
from ..exceptions import ProbeError
from .exiftool import run_exiftool


def is_meaningful_date(value) -> bool:
    """A date field counts only if it is non-empty and not the all-zero placeholder."""
    if value is None:
        return False
    text = str(value).strip()
    return bool(text) and text != config.NULL_EXIF_DATE


def first_present_date(tags: Mapping, fields: Iterable[str]):
    """Returns the first field (in the given order) holding a real date, or None."""
    for field in fields:
        if field in tags and is_meaningful_date(tags[field]):
            return field
    return None


class ExifReadProber:
    """In-process EXIF reader for still images."""

    def __init__(self, date_tags=None):
        self.date_tags = list(date_tags or config.EXIFREAD_DATE_TAGS)

    def probe(self, path: Path) -> bool:
        try:
            with path.open('rb') as f:
                # details=False skips MakerNotes and thumbnails
                # A file without an EXIF block comes back as {}
                tags = exifread.process_file(f, details=False)
        except OSError as e:
            raise ProbeError(f"Cannot open {path}: {e}") from e
        except Exception as e:
            raise ProbeError(f"exifread failed for {path}: {e}") from e

        field = first_present_date(tags, self.date_tags)
        if field:
            logging.debug(f"{path} already has {field}")
        return field is not None


class ExifToolProber:
    """Delegates the date query to exiftool, for containers exifread cannot parse."""

    def __init__(self, date_tags=None):
        self.date_tags = list(date_tags or config.EXIFTOOL_PROBE_TAGS)

    def probe(self, path: Path) -> bool:
        # -j = JSON output; absent tags are simply missing from the object
        args = ["-j"] + [f"-{tag}" for tag in self.date_tags] + [str(path)]

        try:
            result = run_exiftool(args)
        except FileNotFoundError as e:
            raise ProbeError(f"exiftool not found while probing {path}") from e
        except subprocess.TimeoutExpired as e:
            raise ProbeError(f"exiftool timed out probing {path}") from e
        except OSError as e:
            raise ProbeError(f"exiftool could not be run for {path}: {e}") from e

        if result.returncode != 0:
            detail = (result.stderr or result.stdout or "").strip()
            raise ProbeError(f"exiftool exited with status {result.returncode} for {path}: {detail}")

        try:
            data_list = json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise ProbeError(f"Unparsable exiftool output for {path}: {e}") from e

        if not isinstance(data_list, list) or not data_list or not isinstance(data_list[0], dict):
            raise ProbeError(f"Unexpected exiftool output for {path}")

        field = first_present_date(data_list[0], self.date_tags)
        if field:
            logging.debug(f"{path} already has {field}")
        return field is not None
