import json
import threading
from pathlib import Path

import pytest

from gtakeout import config


class FakeDateBackend:
    """
    Stands in for exifread/exiftool. Keeps embedded dates in a dict and
    records every call so tests can assert on what was (not) written.
    """
    def __init__(self, dates=None, probe_errors=None, write_errors=None):
        self.dates = dict(dates or {})
        self.probe_errors = dict(probe_errors or {})
        self.write_errors = dict(write_errors or {})
        self.probed = []
        self.written = []
        self._lock = threading.Lock()

    def probe(self, path: Path) -> bool:
        with self._lock:
            self.probed.append(path)
        if path in self.probe_errors:
            raise self.probe_errors[path]
        return bool(self.dates.get(path))

    def write(self, path: Path, exif_datetime: str) -> None:
        if path in self.write_errors:
            raise self.write_errors[path]
        with self._lock:
            self.written.append((path, exif_datetime))
            self.dates[path] = exif_datetime


def write_sidecar(media_path: Path, timestamp="1482184800", **extra) -> Path:
    """Writes a Takeout-style sidecar next to media_path and returns its path."""
    doc = {"title": media_path.name, **extra}
    if timestamp is not None:
        doc["photoTakenTime"] = {"timestamp": timestamp, "formatted": "unused"}
    json_path = Path(str(media_path) + config.SUPPLEMENTAL_SUFFIX)
    json_path.write_text(json.dumps(doc), encoding="utf-8")
    return json_path


@pytest.fixture
def fake_backend():
    return FakeDateBackend()


@pytest.fixture
def takeout_dir(tmp_path):
    """
    A small export: two dateless photos, one photo with a date, one sidecar
    without media, one sidecar without a timestamp, one broken sidecar.
    """
    root = tmp_path / "Takeout" / "Google Photos" / "Photos from 2016"
    root.mkdir(parents=True)

    for name in ["IMG-1.jpg", "IMG-2.jpg", "HAS-DATE.jpg", "NO-TS.jpg", "BROKEN.jpg"]:
        (root / name).write_bytes(b"\xff\xd8fake\xff\xd9")
        if name not in ("NO-TS.jpg", "BROKEN.jpg"):
            write_sidecar(root / name)

    write_sidecar(root / "NO-TS.jpg", timestamp=None)
    (root / ("BROKEN.jpg" + config.SUPPLEMENTAL_SUFFIX)).write_text("{not json", encoding="utf-8")
    write_sidecar(root / "GONE.jpg")

    # Non-sidecar JSON must be ignored by the scanner
    (root / "metadata.json").write_text("{}", encoding="utf-8")
    return root


@pytest.fixture
def make_sidecar():
    return write_sidecar


@pytest.fixture
def make_image(tmp_path):
    """
    Factory for real image files (format picked by suffix). exif_datetime goes
    into IFD0 DateTime; exif_ifd holds ExifIFD tags such as DateTimeOriginal.
    """
    from PIL import Image

    def _make(path: Path, exif_datetime=None, exif_ifd=None) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        with Image.new("RGB", (10, 10), color="red") as im:
            if exif_datetime or exif_ifd:
                exif = Image.Exif()
                if exif_datetime:
                    exif[0x0132] = exif_datetime  # DateTime
                if exif_ifd:
                    exif[0x8769] = dict(exif_ifd)  # ExifIFD
                im.save(path, exif=exif)
            else:
                im.save(path)
        return path

    return _make
