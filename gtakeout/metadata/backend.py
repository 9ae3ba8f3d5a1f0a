"""
Picks the probe/write implementation for a media file by its extension.

The reconciliation worker only ever sees the two-method capability
(probe, write), so tests can swap in a fake without touching subprocesses.
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol

from .. import config
from ..exceptions import ProbeError, WriteError
from .probe import ExifReadProber, ExifToolProber
from .writer import ExifToolWriter


class DatePresenceProber(Protocol):
    def probe(self, path: Path) -> bool: ...


class DateWriter(Protocol):
    def write(self, path: Path, exif_datetime: str) -> None: ...


class DateCapability(Protocol):
    """What the worker needs: a read-only date check and an unconditional write."""

    def probe(self, path: Path) -> bool: ...

    def write(self, path: Path, exif_datetime: str) -> None: ...


@dataclass
class MediaCapability:
    prober: DatePresenceProber
    writer: DateWriter

    def probe(self, path: Path) -> bool:
        return self.prober.probe(path)

    def write(self, path: Path, exif_datetime: str) -> None:
        self.writer.write(path, exif_datetime)


def classify_media(path: Path) -> Optional[str]:
    """Returns 'image', 'exiftool_image', 'video' or None. Case-insensitive, extension only."""
    return config.EXT_TO_TYPE.get(path.suffix.lower())


class MediaDateBackend:
    """Routes each call to the capability registered for the file's media type."""

    def __init__(self,
                 image: DateCapability,
                 video: DateCapability,
                 exiftool_image: Optional[DateCapability] = None):
        self.capabilities = {'image': image, 'video': video}
        if exiftool_image is not None:
            self.capabilities['exiftool_image'] = exiftool_image

    def _capability_for(self, path: Path) -> Optional[DateCapability]:
        media_type = classify_media(path)
        return self.capabilities.get(media_type) if media_type else None

    def probe(self, path: Path) -> bool:
        capability = self._capability_for(path)
        if capability is None:
            raise ProbeError(f"Unsupported media type '{path.suffix}': {path}")
        return capability.probe(path)

    def write(self, path: Path, exif_datetime: str) -> None:
        capability = self._capability_for(path)
        if capability is None:
            raise WriteError(f"Unsupported media type '{path.suffix}': {path}")
        capability.write(path, exif_datetime)


def build_default_backend() -> MediaDateBackend:
    return MediaDateBackend(
        image=MediaCapability(ExifReadProber(), ExifToolWriter(config.IMAGE_WRITE_TAGS)),
        video=MediaCapability(ExifToolProber(), ExifToolWriter(config.VIDEO_WRITE_TAGS)),
        exiftool_image=MediaCapability(ExifToolProber(), ExifToolWriter(config.IMAGE_WRITE_TAGS)),
    )
