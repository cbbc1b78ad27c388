from types import SimpleNamespace

import pytest

from port_o_potty.error_codes import ERROR_SCAN_FAILED, ScanError
from port_o_potty.models import Listener, PortRange
from port_o_potty.scan_pipeline import ScanPipeline, ScanWorker, dedup_listeners

RANGES = [PortRange(3000, 3999)]


def test_dedup_keeps_later_record():
    records = [
        Listener(port=80, pid=1, process_name="a"),
        Listener(port=80, pid=1, process_name="b"),
    ]

    result = dedup_listeners(records)

    assert result == [Listener(port=80, pid=1, process_name="b")]


def test_dedup_replaces_optional_fields_wholesale():
    records = [
        Listener(port=80, pid=1, process_name="nginx", started_seconds_ago=30),
        Listener(port=80, pid=1, process_name=None, started_seconds_ago=None),
    ]

    (result,) = dedup_listeners(records)

    assert result.process_name is None
    assert result.started_seconds_ago is None


def test_dedup_distinguishes_port_and_pid():
    records = [
        Listener(port=80, pid=1),
        Listener(port=81, pid=1),
        Listener(port=80, pid=2),
    ]

    assert len(dedup_listeners(records)) == 3


def test_pipeline_passes_ranges_to_collaborator():
    calls = []

    def fake_scan(ranges):
        calls.append(list(ranges))
        return [Listener(port=3000, pid=7), Listener(port=3000, pid=7)]

    result = ScanPipeline(fake_scan).scan(RANGES)

    assert calls == [RANGES]
    assert result == [Listener(port=3000, pid=7)]


def test_pipeline_skips_collaborator_without_ranges():
    def fake_scan(ranges):
        raise AssertionError("should not be called")

    assert ScanPipeline(fake_scan).scan([]) == []


def test_pipeline_wraps_collaborator_failures():
    def fake_scan(ranges):
        raise OSError("netlink unavailable")

    with pytest.raises(ScanError, match="netlink unavailable"):
        ScanPipeline(fake_scan).scan(RANGES)


def _make_worker_spies(scan_fn):
    worker = ScanWorker(5, ScanPipeline(scan_fn), RANGES)
    results: list[tuple[int, object]] = []
    errors: list[tuple[int, object]] = []
    finished: list[int] = []
    worker.result_ready = SimpleNamespace(emit=lambda seq, payload: results.append((seq, payload)))
    worker.error = SimpleNamespace(emit=lambda seq, payload: errors.append((seq, payload)))
    worker.finished = SimpleNamespace(emit=lambda seq: finished.append(seq))
    return worker, results, errors, finished


def test_worker_emits_result_then_finished():
    worker, results, errors, finished = _make_worker_spies(lambda ranges: [Listener(port=3001, pid=9)])

    worker.start()

    assert results == [(5, [Listener(port=3001, pid=9)])]
    assert errors == []
    assert finished == [5]


def test_worker_reports_scan_error_record():
    def failing(ranges):
        raise ScanError("permission denied")

    worker, results, errors, finished = _make_worker_spies(failing)

    worker.start()

    assert results == []
    assert errors and errors[0][0] == 5
    assert errors[0][1].code == ERROR_SCAN_FAILED.code
    assert errors[0][1].context["detail"] == "permission denied"
    assert finished == [5]
