"""
Pairs Takeout sidecar files with the media file they describe.
"""
import os
from pathlib import Path
from typing import Union

from .. import config
from ..exceptions import NoMatchError
from ..models import WorkItem


def is_metadata_file(name: str) -> bool:
    """
    True if the last path component carries the supplemental-metadata suffix
    (case-sensitive) in front of a non-empty media name.
    """
    base = os.path.basename(name)
    return base.endswith(config.SUPPLEMENTAL_SUFFIX) and len(base) > len(config.SUPPLEMENTAL_SUFFIX)


def strip_metadata_suffix(json_path: str) -> str:
    """
    Removes the suffix from the path string exactly as given.

    Purely syntactic: strip_metadata_suffix(p) + SUPPLEMENTAL_SUFFIX == p
    for every accepted string p, including ones with "./" or "//".

    Raises:
        NoMatchError: if the path does not name a sidecar file.
    """
    if not is_metadata_file(json_path):
        raise NoMatchError(f"Path does not end with {config.SUPPLEMENTAL_SUFFIX}: {json_path}")

    return json_path[:-len(config.SUPPLEMENTAL_SUFFIX)]


def media_path_for(json_path: Union[str, Path]) -> Path:
    """
    Path form of strip_metadata_suffix().

    Path() collapses "." components and repeated separators, so the string
    round trip holds for Path inputs (already in that form); use
    strip_metadata_suffix() when the exact text matters.
    """
    return Path(strip_metadata_suffix(str(json_path)))


def build_work_item(json_path: Union[str, Path]) -> WorkItem:
    return WorkItem(json_path=Path(json_path), media_path=media_path_for(json_path))
