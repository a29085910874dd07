"""
Tests for the Benchmark Command

Run with: python -m pytest tests/test_bench.py -v
"""

import pytest

from objcache import bench


class TestParseArgs:
    """Test command line parsing."""

    def test_defaults(self):
        """Test default command line values."""
        args = bench.parse_args([])
        assert args.operations == 10000
        assert args.expiry == 0
        assert args.debug is False

    def test_custom_values(self):
        """Test parsing custom operation count, value size, expiry and debug flag."""
        args = bench.parse_args(["-n", "50", "--value-size", "16", "--expiry", "2.5", "--debug"])
        assert args.operations == 50
        assert args.value_size == 16
        assert args.expiry == 2.5
        assert args.debug is True


class TestBenchmark:
    """Test the benchmark runs against a real cache."""

    def test_run_all(self, capsys):
        """Test every benchmark runs and reports a throughput."""
        results = bench.Benchmark(operations=20, value_size=8, max_size=10000, threads=2).run_all()

        assert [r["count"] for r in results] == [20] * 5
        assert all(r["ops_per_second"] > 0 for r in results)
        assert "CREATE" in capsys.readouterr().out

    def test_main_prints_table(self, capsys):
        """Test main() prints the results table."""
        bench.main(["-n", "10", "--value-size", "8", "--max-size", "10000"])
        assert "BENCHMARK RESULTS" in capsys.readouterr().out

    def test_main_rejects_oversized_values(self):
        """Test main() exits when values exceed the per-entry cap."""
        with pytest.raises(SystemExit) as exc_info:
            bench.main(["-n", "10", "--value-size", "2000", "--max-size", "10000"])
        assert exc_info.value.code == 2
