"""
Unit tests for Performance Metrics Module.

Tests timing, counters and the timed decorator.
"""

import pytest

from gulfnav.metrics import PerformanceMetrics, TimingStats, metrics, timed


class TestTimingStats:
    """Unit tests for TimingStats class."""

    def test_initial_values(self):
        """Test initial stats values."""
        stats = TimingStats(name="test")

        assert stats.count == 0
        assert stats.min_ms == float('inf')
        assert stats.avg_ms == 0.0

    def test_record_multiple(self):
        """Test recording multiple timings."""
        stats = TimingStats(name="test")
        stats.record(5.0)
        stats.record(15.0)
        stats.record(10.0)

        assert stats.count == 3
        assert stats.total_ms == 30.0
        assert stats.min_ms == 5.0
        assert stats.max_ms == 15.0
        assert stats.avg_ms == 10.0

    def test_to_dict_empty(self):
        """Unused stats report a zero minimum."""
        assert TimingStats(name="test").to_dict() == {"count": 0, "avg_ms": 0.0, "min_ms": 0, "max_ms": 0.0}

    def test_recent_window_bounded(self):
        stats = TimingStats(name="test")
        for i in range(150):
            stats.record(float(i))
        assert len(stats.recent_ms) == 100
        assert stats.count == 150


class TestPerformanceMetrics:
    """Unit tests for the collector."""

    def test_timer(self):
        """Test timing a block."""
        collector = PerformanceMetrics()
        with collector.timer("op"):
            pass
        with collector.timer("op"):
            pass

        assert collector.get_timing("op").count == 2
        assert collector.get_timing("missing") is None

    def test_timer_records_on_exception(self):
        """A failing block is still timed."""
        collector = PerformanceMetrics()
        with pytest.raises(RuntimeError):
            with collector.timer("op"):
                raise RuntimeError("boom")
        assert collector.get_timing("op").count == 1

    def test_counters(self):
        """Test incrementing counters."""
        collector = PerformanceMetrics()
        collector.increment("route_engine.strategy.network")
        collector.increment("route_engine.strategy.network", 4)

        assert collector.get_counter("route_engine.strategy.network") == 5
        assert collector.get_counter("unknown") == 0

    def test_summary(self):
        """Test the summary layout."""
        collector = PerformanceMetrics()
        collector.increment("sea_route.api_errors")
        with collector.timer("op"):
            pass

        summary = collector.get_summary()
        assert set(summary) == {"uptime_seconds", "timings", "counters"}
        assert summary["counters"] == {"sea_route.api_errors": 1}
        assert summary["timings"]["op"]["count"] == 1

    def test_slow_operation_logged(self, caplog):
        """Blocks over the threshold produce a warning."""
        collector = PerformanceMetrics(slow_threshold_ms=-1.0)
        with caplog.at_level("WARNING", logger="gulfnav.metrics"):
            with collector.timer("slow"):
                pass
        assert "Slow operation: slow" in caplog.text

    def test_reset(self):
        """Test resetting everything."""
        collector = PerformanceMetrics()
        collector.increment("a")
        with collector.timer("b"):
            pass
        collector.reset()

        assert collector.get_counter("a") == 0
        assert collector.get_timing("b") is None


class TestTimedDecorator:
    """Tests for the timed decorator."""

    def test_records_on_global_collector(self):
        @timed("decorated")
        def work(x):
            return x * 2

        assert work(21) == 42
        assert work.__name__ == "work"
        assert metrics.get_timing("decorated").count == 1
