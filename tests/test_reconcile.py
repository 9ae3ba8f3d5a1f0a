import os
import threading
from pathlib import Path

import pytest

from gtakeout import config
from gtakeout.exceptions import ProbeError, WriteError
from gtakeout.models import OutcomeKind
from gtakeout.reconcile.counters import AtomicCounter, ErrorLog
from gtakeout.reconcile.orchestrator import ParallelOrchestrator
from gtakeout.reconcile.worker import ReconciliationWorker
from gtakeout.scanning.filesystem import MetadataScanner
from gtakeout.scanning.matcher import build_work_item

from conftest import FakeDateBackend


# --- Worker ---

def test_dateless_image_is_updated(tmp_path, make_sidecar):
    media = tmp_path / "IMG-1.jpg"
    media.write_bytes(b"jpeg")
    json_path = make_sidecar(media, timestamp="1482184800")
    backend = FakeDateBackend()

    outcome = ReconciliationWorker(backend).process(build_work_item(json_path))

    assert outcome.kind is OutcomeKind.UPDATED
    assert outcome.media_path == media
    assert backend.written == [(media, "2016:12:19 22:00:00")]


def test_dated_image_is_left_untouched(tmp_path, make_sidecar):
    media = tmp_path / "IMG-1.jpg"
    media.write_bytes(b"original bytes")
    json_path = make_sidecar(media)
    backend = FakeDateBackend(dates={media: "2010:01:01 00:00:00"})

    outcome = ReconciliationWorker(backend).process(build_work_item(json_path))

    assert outcome.kind is OutcomeKind.SKIPPED_HAS_DATE
    assert backend.written == []
    assert media.read_bytes() == b"original bytes"


def test_date_check_happens_before_sidecar_is_parsed(tmp_path):
    media = tmp_path / "IMG-1.jpg"
    media.write_bytes(b"jpeg")
    json_path = Path(str(media) + config.SUPPLEMENTAL_SUFFIX)
    json_path.write_text("{broken", encoding="utf-8")
    backend = FakeDateBackend(dates={media: "2010:01:01 00:00:00"})

    outcome = ReconciliationWorker(backend).process(build_work_item(json_path))

    assert outcome.kind is OutcomeKind.SKIPPED_HAS_DATE


def test_missing_media_is_skipped_without_probing(tmp_path, make_sidecar):
    json_path = make_sidecar(tmp_path / "GONE.jpg")
    backend = FakeDateBackend()

    outcome = ReconciliationWorker(backend).process(build_work_item(json_path))

    assert outcome.kind is OutcomeKind.SKIPPED_MISSING_MEDIA
    assert backend.probed == []


def test_missing_timestamp_is_skipped(tmp_path, make_sidecar):
    media = tmp_path / "IMG-1.jpg"
    media.write_bytes(b"jpeg")
    json_path = make_sidecar(media, timestamp=None)
    backend = FakeDateBackend()

    outcome = ReconciliationWorker(backend).process(build_work_item(json_path))

    assert outcome.kind is OutcomeKind.SKIPPED_MISSING_TIMESTAMP
    assert backend.written == []


def test_malformed_sidecar_is_an_error(tmp_path, make_sidecar):
    media = tmp_path / "IMG-1.jpg"
    media.write_bytes(b"jpeg")
    json_path = make_sidecar(media, timestamp="not-a-number")

    outcome = ReconciliationWorker(FakeDateBackend()).process(build_work_item(json_path))

    assert outcome.kind is OutcomeKind.ERROR
    assert outcome.reason.startswith("JsonParseError")


def test_date_check_failure_never_leads_to_a_write(tmp_path, make_sidecar):
    media = tmp_path / "IMG-1.jpg"
    media.write_bytes(b"jpeg")
    json_path = make_sidecar(media)
    backend = FakeDateBackend(probe_errors={media: ProbeError("exiftool exited with status 1")})

    outcome = ReconciliationWorker(backend).process(build_work_item(json_path))

    assert outcome.kind is OutcomeKind.ERROR
    assert outcome.reason.startswith("ProbeError")
    assert backend.written == []


def test_write_failure_is_an_error(tmp_path, make_sidecar):
    media = tmp_path / "IMG-1.jpg"
    media.write_bytes(b"jpeg")
    json_path = make_sidecar(media)
    backend = FakeDateBackend(write_errors={media: WriteError("exiftool failed", returncode=1, output="bad")})

    outcome = ReconciliationWorker(backend).process(build_work_item(json_path))

    assert outcome.kind is OutcomeKind.ERROR
    assert "exit status 1" in outcome.reason


def test_unexpected_exception_is_contained(tmp_path, make_sidecar):
    media = tmp_path / "IMG-1.jpg"
    media.write_bytes(b"jpeg")
    json_path = make_sidecar(media)
    backend = FakeDateBackend(probe_errors={media: RuntimeError("boom")})

    outcome = ReconciliationWorker(backend).process(build_work_item(json_path))

    assert outcome.kind is OutcomeKind.ERROR
    assert "boom" in outcome.reason


def test_process_path_rejects_non_sidecar(tmp_path):
    outcome = ReconciliationWorker(FakeDateBackend()).process_path(tmp_path / "IMG-1.jpg.json")

    assert outcome.kind is OutcomeKind.ERROR
    assert outcome.reason.startswith("NoMatchError")
    assert outcome.media_path is None


# --- Counters ---

def test_atomic_counter_sums_concurrent_increments():
    counter = AtomicCounter()

    def bump():
        for _ in range(1000):
            counter.increment()

    threads = [threading.Thread(target=bump) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert counter.value == 8000


def test_error_log_is_append_only_copy():
    log = ErrorLog()
    log.append("a.json", "reason")
    entries = log.entries()
    entries.clear()
    assert len(log) == 1
    assert log.entries() == [("a.json", "reason")]


# --- Orchestrator ---

def _expected_counts(summary):
    return (summary.found, summary.updated, summary.errors, summary.skipped_has_date,
            summary.skipped_missing_media, summary.skipped_missing_timestamp)


def _backend_for(takeout_dir):
    return FakeDateBackend(dates={takeout_dir / "HAS-DATE.jpg": "2015:01:01 00:00:00"})


@pytest.mark.parametrize("workers", [1, 4, os.cpu_count() or 1])
def test_summary_is_independent_of_pool_size(takeout_dir, workers):
    paths = MetadataScanner().scan(takeout_dir)
    orchestrator = ParallelOrchestrator(ReconciliationWorker(_backend_for(takeout_dir)),
                                        max_workers=workers, show_progress=False)

    summary = orchestrator.run(paths)

    assert _expected_counts(summary) == (6, 2, 1, 1, 1, 1)
    assert summary.total_outcomes == summary.found


def test_second_run_updates_nothing(takeout_dir):
    paths = MetadataScanner().scan(takeout_dir)
    backend = _backend_for(takeout_dir)
    orchestrator = ParallelOrchestrator(ReconciliationWorker(backend), max_workers=4, show_progress=False)

    first = orchestrator.run(paths)
    second = orchestrator.run(paths)

    assert first.updated == 2
    assert second.updated == 0
    assert second.skipped_has_date == 3
    assert len(backend.written) == 2


def test_one_bad_item_does_not_abort_the_batch(takeout_dir):
    paths = MetadataScanner().scan(takeout_dir)
    backend = _backend_for(takeout_dir)
    backend.probe_errors[takeout_dir / "IMG-1.jpg"] = ProbeError("cannot read")
    orchestrator = ParallelOrchestrator(ReconciliationWorker(backend), max_workers=4, show_progress=False)

    summary = orchestrator.run(paths)

    assert summary.updated == 1
    assert summary.errors == 2
    assert [p for p, _ in backend.written] == [takeout_dir / "IMG-2.jpg"]
    logged = dict(orchestrator.error_log.entries())
    assert str(takeout_dir / ("IMG-1.jpg" + config.SUPPLEMENTAL_SUFFIX)) in logged


def test_every_path_yields_exactly_one_outcome(takeout_dir):
    paths = MetadataScanner().scan(takeout_dir)
    paths.append(takeout_dir / "stray.json")
    seen = []
    lock = threading.Lock()

    def collect(outcome):
        with lock:
            seen.append(outcome)

    orchestrator = ParallelOrchestrator(ReconciliationWorker(_backend_for(takeout_dir)),
                                        max_workers=3, show_progress=False, on_outcome=collect)
    summary = orchestrator.run(paths)

    assert summary.found == len(paths) == 7
    assert sorted(str(o.json_path) for o in seen) == sorted(str(p) for p in paths)
    assert summary.errors == 2
    assert summary.total_outcomes == len(seen)
    for kind in OutcomeKind:
        assert orchestrator.counters[kind].value == sum(1 for o in seen if o.kind is kind)


def test_duplicate_media_target_first_claim_wins(tmp_path, make_sidecar):
    media = tmp_path / "IMG-1.jpg"
    media.write_bytes(b"jpeg")
    json_path = make_sidecar(media)
    (tmp_path / "sub").mkdir()
    alias = tmp_path / "sub" / ".." / json_path.name
    backend = FakeDateBackend()

    orchestrator = ParallelOrchestrator(ReconciliationWorker(backend), max_workers=4, show_progress=False)
    summary = orchestrator.run([json_path, alias])

    assert summary.found == 2
    assert summary.updated == 1
    assert summary.errors == 1
    assert backend.written == [(media, "2016:12:19 22:00:00")]
    (path, reason), = orchestrator.error_log.entries()
    assert path == str(alias)
    assert reason.startswith("DuplicateTargetError")


def test_empty_input_gives_empty_summary():
    orchestrator = ParallelOrchestrator(ReconciliationWorker(FakeDateBackend()), show_progress=False)
    summary = orchestrator.run([])
    assert _expected_counts(summary) == (0, 0, 0, 0, 0, 0)


def test_invalid_pool_size():
    with pytest.raises(ValueError):
        ParallelOrchestrator(ReconciliationWorker(FakeDateBackend()), max_workers=-1)


def test_failing_outcome_callback_does_not_abort_run(takeout_dir):
    paths = MetadataScanner().scan(takeout_dir)
    paths.append(takeout_dir / "stray.json")

    def broken_report(outcome):
        raise OSError("disk full")

    orchestrator = ParallelOrchestrator(ReconciliationWorker(_backend_for(takeout_dir)),
                                        max_workers=2, show_progress=False, on_outcome=broken_report)
    summary = orchestrator.run(paths)

    assert summary.found == 7
    assert summary.updated == 2
    assert summary.errors == 2
    assert summary.total_outcomes == 7
