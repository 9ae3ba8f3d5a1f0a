import os
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

from tqdm import tqdm

from .. import config
from ..exceptions import DuplicateTargetError, NoMatchError
from ..models import Outcome, OutcomeKind, Summary, WorkItem
from ..scanning.matcher import build_work_item
from .counters import AtomicCounter, ErrorLog
from .worker import ReconciliationWorker

OutcomeCallback = Callable[[Outcome], None]


class ParallelOrchestrator:
    """
    Fans sidecar paths out over a thread pool and tallies the outcomes.

    Items are independent and finish in any order. A failing item is logged
    and counted; it never stops the batch. run() returns only after every
    item has reached a terminal outcome.
    """

    def __init__(self,
                 worker: ReconciliationWorker,
                 max_workers: Optional[int] = None,
                 show_progress: bool = True,
                 on_outcome: Optional[OutcomeCallback] = None):
        self.worker = worker
        self.max_workers = max_workers or config.DEFAULT_WORKERS
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {self.max_workers}")
        self.show_progress = show_progress
        self.on_outcome = on_outcome

        self.counters: Dict[OutcomeKind, AtomicCounter] = {}
        self.error_log = ErrorLog()

    def run(self, json_paths: Sequence[Union[str, Path]]) -> Summary:
        self.counters = {kind: AtomicCounter() for kind in OutcomeKind}
        self.error_log = ErrorLog()

        items, rejected = self.plan(json_paths)
        for outcome in rejected:
            try:
                self._record(outcome)
            except Exception as e:
                logging.error(f"Failed to record outcome for {outcome.json_path}: {e}")

        logging.info(f"Reconciling {len(items)} files with {self.max_workers} workers...")

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {executor.submit(self._process_and_record, item): item for item in items}

            for future in tqdm(as_completed(futures), total=len(futures),
                               desc="Reconciling", disable=not self.show_progress):
                item = futures[future]
                try:
                    future.result()
                except Exception as e:
                    # Only reachable if recording itself failed
                    logging.error(f"Failed to record outcome for {item.json_path}: {e}")

        return Summary(
            found=len(json_paths),
            updated=self.counters[OutcomeKind.UPDATED].value,
            errors=self.counters[OutcomeKind.ERROR].value,
            skipped_has_date=self.counters[OutcomeKind.SKIPPED_HAS_DATE].value,
            skipped_missing_media=self.counters[OutcomeKind.SKIPPED_MISSING_MEDIA].value,
            skipped_missing_timestamp=self.counters[OutcomeKind.SKIPPED_MISSING_TIMESTAMP].value,
        )

    def plan(self, json_paths: Sequence[Union[str, Path]]) -> Tuple[List[WorkItem], List[Outcome]]:
        """
        Builds WorkItems in input order.

        Paths without the sidecar suffix, and sidecars whose media file
        resolves to one already claimed earlier in the list, come back as
        Error outcomes instead. The first claimant keeps the target.
        """
        items: List[WorkItem] = []
        rejected: List[Outcome] = []
        claimed: Dict[str, Path] = {}

        for raw in json_paths:
            json_path = Path(raw)
            try:
                item = build_work_item(json_path)
            except NoMatchError as e:
                rejected.append(Outcome.from_error(json_path, None, e))
                continue

            key = os.path.normcase(os.path.realpath(item.media_path))
            if key in claimed:
                err = DuplicateTargetError(f"{item.media_path} is already targeted by {claimed[key]}")
                rejected.append(Outcome.from_error(json_path, item.media_path, err))
                continue

            claimed[key] = json_path
            items.append(item)

        return items, rejected

    def _process_and_record(self, item: WorkItem) -> Outcome:
        outcome = self.worker.process(item)
        self._record(outcome)
        return outcome

    def _record(self, outcome: Outcome):
        self.counters[outcome.kind].increment()

        if outcome.kind is OutcomeKind.UPDATED:
            logging.info(f"Updated: {outcome.json_path}")
        elif outcome.kind is OutcomeKind.ERROR:
            self.error_log.append(str(outcome.json_path), outcome.reason or "")
            logging.error(f"Error processing {outcome.json_path}: {outcome.reason}")
        elif outcome.kind is OutcomeKind.SKIPPED_MISSING_MEDIA:
            logging.warning(f"Skipped (media file not found): {outcome.media_path}")
        elif outcome.kind is OutcomeKind.SKIPPED_MISSING_TIMESTAMP:
            logging.warning(f"Skipped (no photoTakenTime): {outcome.json_path}")
        else:
            logging.debug(f"Skipped (already has EXIF date): {outcome.json_path}")

        if self.on_outcome:
            self.on_outcome(outcome)
