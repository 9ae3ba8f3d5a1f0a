import os
import logging
from pathlib import Path
from typing import Iterator, List

from .matcher import is_metadata_file


class MetadataScanner:
    """
    Finds Takeout sidecar files under a root directory.
    Symlinks are not followed, so every sidecar is reported at most once.
    An unreadable root raises; unreadable subdirectories are skipped.
    """

    def scan(self, root: Path) -> List[Path]:
        """Collects every supplemental-metadata file under root, in stable traversal order."""
        found = [p for p in self._iter_files(root) if is_metadata_file(p.name)]
        logging.info(f"Found {len(found)} supplemental metadata files under {root}")
        return found

    def _iter_files(self, root: Path) -> Iterator[Path]:
        """Depth-first walker using os.scandir for speed."""
        stack = [root]
        while stack:
            current = stack.pop()

            try:
                with os.scandir(current) as it:
                    entries = list(it)
            except OSError as e:
                if current == root:
                    raise
                logging.warning(f"Cannot read directory {current}: {e}")
                continue

            # Sort for stable traversal order
            entries.sort(key=lambda e: e.name.lower())

            dirs = []
            files = []
            for e in entries:
                if e.is_dir(follow_symlinks=False):
                    dirs.append(Path(e.path))
                elif e.is_file(follow_symlinks=False):
                    files.append(Path(e.path))

            # Push dirs to stack (reversed so we process A before Z)
            for d in reversed(dirs):
                stack.append(d)

            for f in files:
                yield f
