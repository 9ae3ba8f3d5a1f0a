import logging
import subprocess
from pathlib import Path
from typing import List

from .. import config
from ..exceptions import WriteError
from .exiftool import run_exiftool


class ExifToolWriter:
    """
    Writes one date value into a fixed set of tags with a single exiftool call.

    The file is rewritten in place (-overwrite_original), so no "_original"
    backup is left next to it. This never checks existing dates; that is
    the prober's job.
    """

    def __init__(self, tags: List[str]):
        self.tags = list(tags)

    def build_args(self, path: Path, exif_datetime: str) -> List[str]:
        args = ["-overwrite_original"]
        args.extend(f"-{tag}={exif_datetime}" for tag in self.tags)
        args.append(str(path))
        return args

    def write(self, path: Path, exif_datetime: str) -> None:
        try:
            result = run_exiftool(self.build_args(path, exif_datetime))
        except FileNotFoundError as e:
            raise WriteError("exiftool not found. Please install exiftool to update EXIF data.") from e
        except subprocess.TimeoutExpired as e:
            raise WriteError(f"exiftool timed out writing {path}") from e
        except OSError as e:
            raise WriteError(f"exiftool could not be run for {path}: {e}") from e

        if result.returncode != 0:
            raise WriteError(
                f"exiftool failed for {path}",
                returncode=result.returncode,
                output="\n".join(s.strip() for s in (result.stderr, result.stdout) if s and s.strip()),
            )

        logging.debug(f"Wrote {exif_datetime} to {path}")
