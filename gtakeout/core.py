import logging
from pathlib import Path
from typing import Optional

from .metadata.backend import DateCapability, build_default_backend
from .models import Summary
from .reconcile.orchestrator import ParallelOrchestrator
from .reconcile.worker import ReconciliationWorker
from .reporting import OutcomeCsvReport, log_summary
from .scanning.filesystem import MetadataScanner


class TakeoutDateFixer:
    def __init__(self, backend: Optional[DateCapability] = None):
        self.backend = backend if backend is not None else build_default_backend()

    def run(self,
            root: Path,
            max_workers: Optional[int] = None,
            report_csv: Optional[Path] = None,
            show_progress: bool = True) -> Summary:
        """
        Full pass over a Takeout export.
        1. Scan for supplemental metadata files
        2. Reconcile each against its media file (parallel)
        3. Log the summary (and optionally write a CSV report)
        """
        if not root.exists():
            raise FileNotFoundError(f"Directory '{root}' does not exist")
        if not root.is_dir():
            raise NotADirectoryError(f"'{root}' is not a directory")

        # --- Step 1: Scanning ---
        logging.info(f"Searching for supplemental metadata files in: {root}")
        json_paths = MetadataScanner().scan(root)

        # --- Step 2: Reconciliation ---
        worker = ReconciliationWorker(self.backend)

        if report_csv:
            with OutcomeCsvReport(report_csv) as report:
                orchestrator = ParallelOrchestrator(worker, max_workers, show_progress, on_outcome=report.record)
                summary = orchestrator.run(json_paths)
            logging.info(f"Report written: {report_csv}")
        else:
            orchestrator = ParallelOrchestrator(worker, max_workers, show_progress)
            summary = orchestrator.run(json_paths)

        # --- Step 3: Summary ---
        log_summary(summary, orchestrator.error_log.entries())
        return summary
