"""Tests for the engine tracer."""

from datetime import datetime, timezone

from timeclock_engines.normalizer import normalize_punches
from timeclock_engines.tracer import TRACE_TYPE, compute_input_fingerprint, traced_engine
from timeclock_kernel.domain.timekeeping import PunchEvent, PunchKind


def _punches():
    return [
        PunchEvent("p-1", "E1", PunchKind.CLOCK_IN, datetime(2024, 3, 4, 9, tzinfo=timezone.utc)),
        PunchEvent("p-2", "E1", PunchKind.CLOCK_OUT, datetime(2024, 3, 4, 17, tzinfo=timezone.utc)),
    ]


class TestFingerprint:
    def test_deterministic(self):
        args = {"events": _punches(), "burst_window_seconds": 60}
        fields = ("events", "burst_window_seconds")
        assert compute_input_fingerprint(fields, args) == compute_input_fingerprint(fields, args)

    def test_sixteen_hex_chars(self):
        fp = compute_input_fingerprint(("events",), {"events": _punches()})
        assert len(fp) == 16
        int(fp, 16)

    def test_changes_with_input(self):
        a = compute_input_fingerprint(("events",), {"events": _punches()})
        b = compute_input_fingerprint(("events",), {"events": _punches()[:1]})
        assert a != b

    def test_missing_field_is_null(self):
        assert compute_input_fingerprint(("x",), {}) == compute_input_fingerprint(("x",), {"x": None})


class TestTracedEngine:
    def test_emits_trace_record(self, captured_logs):
        normalize_punches(_punches())
        traces = [r for r in captured_logs() if r.get("trace_type") == TRACE_TYPE]
        assert traces
        trace = traces[-1]
        assert trace["engine_name"] == "punch_normalizer"
        assert trace["engine_version"] == "1.0"
        assert len(trace["input_fingerprint"]) == 16

    def test_positional_and_keyword_calls_fingerprint_alike(self, captured_logs):
        @traced_engine("adder", "1.0", fingerprint_fields=("a", "b"))
        def add(a, b=2):
            return a + b

        assert add(1, b=2) == 3
        assert add(1) == 3
        traces = [r for r in captured_logs() if r.get("engine_name") == "adder"]
        assert traces[0]["input_fingerprint"] == traces[1]["input_fingerprint"]

    def test_result_unchanged(self):
        assert normalize_punches(_punches()) == normalize_punches(_punches())
