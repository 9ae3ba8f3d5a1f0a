import csv
import logging
import threading
from pathlib import Path
from typing import Iterable, Optional, Tuple

from .models import Outcome, Summary


class OutcomeCsvReport:
    """
    Streams one CSV row per outcome. Safe to feed from worker threads.
    """
    HEADERS = ["Metadata Path", "Media Path", "Outcome", "Reason"]

    def __init__(self, output_csv: Path):
        self.output_csv = Path(output_csv)
        self._lock = threading.Lock()
        self._file = None
        self._writer = None
        self.rows_written = 0

    def open(self):
        self.output_csv.parent.mkdir(parents=True, exist_ok=True)
        self._file = open(self.output_csv, "w", newline="", encoding="utf-8")
        self._writer = csv.writer(self._file)
        self._writer.writerow(self.HEADERS)

    def close(self):
        if self._file:
            self._file.close()
            self._file = None
            self._writer = None

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def record(self, outcome: Outcome):
        row = [
            str(outcome.json_path),
            str(outcome.media_path) if outcome.media_path else "",
            outcome.kind.value,
            outcome.reason or "",
        ]
        with self._lock:
            if self._writer is None:
                raise RuntimeError("Report is not open")
            self._writer.writerow(row)
            self.rows_written += 1


def log_summary(summary: Summary, errors: Optional[Iterable[Tuple[str, str]]] = None):
    """Writes the end-of-run summary to the log."""
    logging.info("")
    logging.info("Summary:")
    logging.info(f"  Metadata files found: {summary.found}")
    logging.info(f"  Media files updated: {summary.updated}")
    logging.info(f"  Errors: {summary.errors}")
    logging.info(f"  Skipped (already had a date): {summary.skipped_has_date}")
    logging.info(f"  Skipped (media file missing): {summary.skipped_missing_media}")
    logging.info(f"  Skipped (no timestamp in metadata): {summary.skipped_missing_timestamp}")

    if errors:
        logging.info("Errors by file:")
        for path, reason in errors:
            logging.info(f"  {path}: {reason}")
