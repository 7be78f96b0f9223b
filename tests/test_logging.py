"""
Tests for the logging module.
"""

import time

from structlog.contextvars import get_contextvars, merge_contextvars

from deal_promoter.logging import PipelineTimer, logging_context


class TestLoggingContext:
    """Test request-scoped log bindings."""

    def test_logging_context_binds_values(self):
        with logging_context(request_id="req_123", cid="bafyroot"):
            assert get_contextvars() == {"request_id": "req_123", "cid": "bafyroot"}

    def test_logging_context_restores_values(self):
        with logging_context(request_id="outer"):
            with logging_context(request_id="inner"):
                assert get_contextvars()["request_id"] == "inner"

            assert get_contextvars()["request_id"] == "outer"

        assert "request_id" not in get_contextvars()

    def test_none_values_skipped(self):
        with logging_context(request_id=None, cid="bafy_only"):
            assert get_contextvars() == {"cid": "bafy_only"}

    def test_bindings_merged_into_events(self):
        with logging_context(request_id="req_1", cid="bafyroot"):
            event = merge_contextvars(None, "info", {"event": "fetch.complete"})

        assert event == {"event": "fetch.complete", "request_id": "req_1", "cid": "bafyroot"}


class TestPipelineTimer:
    """Test pipeline timing functionality."""

    def test_timer_records_stages(self):
        timer = PipelineTimer()

        with timer.stage("fetch"):
            time.sleep(0.01)
        with timer.stage("commp"):
            pass

        assert set(timer.stages) == {"fetch", "commp"}
        assert timer.stages["fetch"] >= 10

    def test_timer_records_failed_stage(self):
        timer = PipelineTimer()

        try:
            with timer.stage("negotiate"):
                raise RuntimeError("boom")
        except RuntimeError:
            pass

        assert "negotiate" in timer.stages

    def test_summary(self):
        timer = PipelineTimer()
        with timer.stage("fetch"):
            pass

        summary = timer.summary()

        assert summary["total_ms"] >= 0
        assert "fetch" in summary["stages"]
