"""Tests for distbench.runner -- sequencing, watchdog, and aggregation choice."""

import unittest
from unittest import mock

from distbench.results import BenchmarkError, BenchmarkSuccess
from distbench.runner import BenchmarkRunner, run_benchmark

from fakes import FakeResponse, FakeStream, FakeTransport, ScriptedProbe

URL = "https://dist.example.com/api/v1/assets/270397"


def _success(speed=100.0, cache_status="MISS", ttfb=50.0, **kwargs):
    fields = dict(
        ttfb=ttfb,
        total_request_time=200.0,
        download_time=150.0,
        download_size=1000,
        download_speed_bps=speed,
        url=URL,
        cache_status=cache_status,
    )
    fields.update(kwargs)
    return BenchmarkSuccess(**fields)


class TestRunnerSequencing(unittest.IsolatedAsyncioTestCase):
    async def test_rejects_zero_runs(self):
        runner = BenchmarkRunner(ScriptedProbe())
        with self.assertRaises(ValueError):
            await runner.run(URL, 1000, 0)

    async def test_runs_exactly_n_times(self):
        probe = ScriptedProbe([_success() for _ in range(4)])
        runner = BenchmarkRunner(probe, read_duration_ms=1234)

        result = await runner.run(URL, 5000, 4)

        self.assertIsInstance(result, BenchmarkSuccess)
        self.assertEqual(len(probe.calls), 4)
        for _, url, size, read_ms in probe.calls:
            self.assertEqual(url, URL)
            self.assertEqual(size, 5000)
            self.assertEqual(read_ms, 1234)

    async def test_runs_are_spaced(self):
        probe = ScriptedProbe([_success() for _ in range(3)])
        await BenchmarkRunner(probe).run(URL, 1000, 3)

        starts = [call[0] for call in probe.calls]
        for prev, cur in zip(starts, starts[1:]):
            self.assertGreaterEqual(cur - prev, 0.19)

    async def test_watchdog_ms(self):
        runner = BenchmarkRunner(ScriptedProbe(connect_timeout_ms=5000), read_duration_ms=10_000)
        self.assertEqual(runner.watchdog_ms, 17_000)

    async def test_watchdog_turns_hang_into_error(self):
        probe = ScriptedProbe(hang=True, connect_timeout_ms=10)
        runner = BenchmarkRunner(probe, read_duration_ms=10, watchdog_grace_ms=10)

        result = await runner.run(URL, 1000, 1)

        self.assertIsInstance(result, BenchmarkError)
        self.assertEqual(result.error, "unexpected timeout")
        self.assertEqual(result.url, URL)


class TestRunnerAggregation(unittest.IsolatedAsyncioTestCase):
    async def test_all_errors_returns_first(self):
        errors = [
            BenchmarkError(url=URL, error="Failed with status 503 Service Unavailable"),
            BenchmarkError(url=URL, error="request time below 30ms"),
        ]
        probe = ScriptedProbe(list(errors))

        result = await BenchmarkRunner(probe, interval_ms=0).run(URL, 1000, 2)

        self.assertIs(result, errors[0])

    async def test_hits_preferred(self):
        probe = ScriptedProbe([
            _success(speed=999.0, cache_status="MISS"),
            _success(speed=100.0, cache_status="HIT"),
            BenchmarkError(url=URL, error="boom"),
            _success(speed=300.0, cache_status="HIT"),
        ])

        result = await BenchmarkRunner(probe, interval_ms=0).run(URL, 1000, 4)

        self.assertAlmostEqual(result.download_speed_bps, 200.0)
        self.assertEqual(result.cache_status, "HIT")

    async def test_no_hits_averages_all_successes(self):
        probe = ScriptedProbe([
            _success(speed=100.0, cache_status="MISS"),
            BenchmarkError(url=URL, error="boom"),
            _success(speed=200.0, cache_status="unknown"),
        ])

        result = await BenchmarkRunner(probe, interval_ms=0).run(URL, 1000, 3)

        self.assertAlmostEqual(result.download_speed_bps, 150.0)
        self.assertEqual(result.cache_status, "MISS")

    async def test_exact_mean(self):
        probe = ScriptedProbe([_success(speed=s) for s in (100.0, 200.0, 300.0)])
        result = await BenchmarkRunner(probe, interval_ms=0).run(URL, 1000, 3)
        self.assertEqual(result.download_speed_bps, 200.0)


class TestRunMany(unittest.IsolatedAsyncioTestCase):
    async def test_order_and_callback(self):
        urls = ["https://a.example.com/x", "https://b.example.com/x"]
        probe = ScriptedProbe([
            _success(url=urls[0]),
            BenchmarkError(url=urls[1], error="boom"),
        ])
        seen = []

        results = await BenchmarkRunner(probe, interval_ms=0).run_many(
            urls, 1000, 1, on_result=lambda i, n, r: seen.append((i, n, r.url)),
        )

        self.assertEqual([r.url for r in results], urls)
        self.assertEqual(seen, [(0, 2, urls[0]), (1, 2, urls[1])])
        self.assertEqual([c[1] for c in probe.calls], urls)


class TestRunBenchmark(unittest.IsolatedAsyncioTestCase):
    async def test_uses_aiohttp_transport(self):
        response = FakeResponse(stream=FakeStream([b"x" * 1000]), headers={"X-Cache": "HIT"})
        transport = FakeTransport(response, delay=0.05)

        with mock.patch("distbench.runner.AiohttpTransport", return_value=transport):
            result = await run_benchmark(URL, 1000, 1)

        self.assertTrue(transport.entered)
        self.assertTrue(transport.exited)
        self.assertIsInstance(result, BenchmarkSuccess)
        self.assertEqual(result.download_size, 1000)
        self.assertEqual(result.cache_status, "HIT")


if __name__ == "__main__":
    unittest.main()
