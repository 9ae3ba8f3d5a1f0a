import logging
from pathlib import Path

from ..exceptions import GTakeoutError, MissingMediaError, NoMatchError, TimestampMissingError
from ..metadata.backend import DateCapability
from ..metadata.sidecar import extract_timestamp, format_exif_datetime, parse_sidecar
from ..models import Outcome, OutcomeKind, WorkItem
from ..scanning.matcher import build_work_item


class ReconciliationWorker:
    """
    Runs one sidecar/media pair to a terminal Outcome.

    Steps short-circuit in order: exists -> probe -> parse -> write.
    The write is the only mutation and always comes last, so an early exit
    leaves the media file untouched. No retries happen here.
    """

    def __init__(self, backend: DateCapability):
        self.backend = backend

    def process_path(self, json_path: Path) -> Outcome:
        """Like process(), but derives the media path first."""
        try:
            item = build_work_item(json_path)
        except NoMatchError as e:
            return Outcome.from_error(Path(json_path), None, e)
        return self.process(item)

    def process(self, item: WorkItem) -> Outcome:
        try:
            return self._reconcile(item)
        except MissingMediaError:
            return Outcome(OutcomeKind.SKIPPED_MISSING_MEDIA, item.json_path, item.media_path,
                           reason="media file not found")
        except TimestampMissingError as e:
            return Outcome(OutcomeKind.SKIPPED_MISSING_TIMESTAMP, item.json_path, item.media_path,
                           reason=str(e))
        except GTakeoutError as e:
            return Outcome.from_error(item.json_path, item.media_path, e)
        except Exception as e:
            # A bug in one item must not take down the pool
            logging.debug(f"Unexpected failure for {item.json_path}", exc_info=True)
            return Outcome.from_error(item.json_path, item.media_path, e)

    def _reconcile(self, item: WorkItem) -> Outcome:
        # 1. Media must exist before we look at anything else
        if not item.media_path.is_file():
            raise MissingMediaError(str(item.media_path))

        # 2. Probe before parsing JSON; most files already have a date
        if self.backend.probe(item.media_path):
            return Outcome(OutcomeKind.SKIPPED_HAS_DATE, item.json_path, item.media_path)

        # 3. Only now read the sidecar
        record = parse_sidecar(item.json_path)
        timestamp = extract_timestamp(record)
        exif_datetime = format_exif_datetime(timestamp)

        # 4. Write (unconditional once reached)
        self.backend.write(item.media_path, exif_datetime)
        return Outcome(OutcomeKind.UPDATED, item.json_path, item.media_path, reason=exif_datetime)
