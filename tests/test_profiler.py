"""Tests for the performance profiler."""

import pytest

from sqlon.profiler import PerformanceMetrics, PerformanceProfiler


class TestPerformanceProfiler:
    """Tests for PerformanceProfiler class."""

    def setup_method(self):
        """Set up test fixtures."""
        self.profiler = PerformanceProfiler()

    def test_profile_operation_records_metrics(self):
        """Test that the context manager records one metrics entry."""
        with self.profiler.profile_operation("encode", input_size=2048) as outcome:
            outcome["output_size"] = 512

        metrics = self.profiler.last_metrics
        assert isinstance(metrics, PerformanceMetrics)
        assert metrics.operation_name == "encode"
        assert metrics.input_size == 2048
        assert metrics.output_size == 512
        assert metrics.duration >= 0
        assert metrics.duration_ms == metrics.duration * 1000
        assert metrics.memory_peak_mb >= metrics.memory_start_mb > 0
        assert self.profiler.metrics_history == [metrics]

    def test_metrics_recorded_when_operation_fails(self):
        """Test that a failing operation still closes its session."""
        with pytest.raises(RuntimeError):
            with self.profiler.profile_operation("decode", 10):
                raise RuntimeError("boom")

        assert self.profiler.last_metrics.operation_name == "decode"
        assert self.profiler.current_operation is None

    def test_stop_without_start(self):
        """Test that stopping an inactive profiler is an error."""
        with pytest.raises(ValueError, match="No active profiling session"):
            self.profiler.stop_profiling()

    def test_sample_performance_tracks_peak(self):
        """Test manual sampling inside an operation."""
        self.profiler.start_profiling("sample")
        self.profiler.sample_performance()
        metrics = self.profiler.stop_profiling()

        assert metrics.memory_peak_mb >= metrics.memory_start_mb

    def test_sample_performance_when_idle(self):
        """Test that sampling without an operation does nothing."""
        self.profiler.sample_performance()
        assert self.profiler.peak_memory == 0

    def test_empty_summary(self):
        """Test the summary before anything was profiled."""
        assert self.profiler.get_performance_summary() == {"total_operations": 0}

    def test_summary(self):
        """Test aggregation over several operations."""
        for name in ("first", "second"):
            with self.profiler.profile_operation(name, 1024 * 1024) as outcome:
                outcome["output_size"] = 1024 * 1024

        summary = self.profiler.get_performance_summary()
        assert summary["total_operations"] == 2
        assert summary["total_input_mb"] == 2.0
        assert summary["total_output_mb"] == 2.0
        assert [op["name"] for op in summary["operations"]] == ["first", "second"]
