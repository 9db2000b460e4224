import unittest
from concurrent.futures import ThreadPoolExecutor

from windwidget.config import Settings
from windwidget.ecowitt import EcowittClient, HistoryResult, RealtimeResult
from windwidget.kv_store import InMemoryKeyValueStore
from windwidget.models import DataStatus
from windwidget.service import WindWidgetService, build_client


class FakeClient:
    def __init__(self):
        self.calls = 0

    def fetch_history(self, credentials):
        self.calls += 1
        return HistoryResult(times=["2024-01-20T17:00"], speeds=[12.0], directions=[90.0], gusts=[16.0])

    def fetch_realtime(self, credentials):
        return RealtimeResult(speed=11.2, direction=72.0, gust=15.7)

    def close(self):
        pass


class TestBuildClient(unittest.TestCase):
    def test_client_follows_settings(self):
        s = Settings(ecowitt_base_url="http://example.com/api/", max_retries=1,
                     backoff_delays_ms=[10], history_window_hours=2, history_max_points=24,
                     http_timeout_seconds=5.0)
        client = build_client(s)

        self.assertIsInstance(client, EcowittClient)
        self.assertEqual(client.base_url, "http://example.com/api")
        self.assertEqual(client.history_max_points, 24)
        self.assertEqual(client.history_window.total_seconds(), 2 * 3600)
        self.assertEqual(client.transport.max_retries, 1)
        self.assertEqual(client.transport.timeout, 5.0)
        client.close()


class TestWindWidgetService(unittest.TestCase):
    def setUp(self):
        self.client = FakeClient()
        self.service = WindWidgetService(
            Settings(default_location_name="Home"),
            store=InMemoryKeyValueStore(),
            client=self.client,
        )
        self.addCleanup(self.service.close)

    def test_orchestrators_are_reused_per_widget(self):
        self.assertIs(self.service.orchestrator(1), self.service.orchestrator(1))
        self.assertIsNot(self.service.orchestrator(1), self.service.orchestrator(2))
        self.assertEqual(self.service.orchestrator(2).widget_id, 2)

    def test_unconfigured_widget_gets_demo_with_default_location(self):
        reading = self.service.fetch(3)
        self.assertEqual(reading.status, DataStatus.DEMO)
        self.assertEqual(reading.location_name, "Home")

    def test_configured_widget_gets_live_then_cached(self):
        self.service.credential_store(1).save("app", "api", "AA", "Pier")

        self.assertEqual(self.service.fetch(1).status, DataStatus.LIVE)
        self.assertEqual(self.service.fetch(1).status, DataStatus.CACHED)
        self.assertEqual(self.service.fetch(1, force_refresh=True).status, DataStatus.LIVE)

    def test_refresh_widgets_returns_reading_per_widget(self):
        self.service.credential_store(1).save("app", "api", "AA", "Pier")

        results = self.service.refresh_widgets([1, 2])

        self.assertEqual(list(results), [1, 2])
        self.assertEqual(results[1].status, DataStatus.LIVE)
        self.assertEqual(results[2].status, DataStatus.DEMO)

    def test_injected_executor_is_not_shut_down(self):
        executor = ThreadPoolExecutor(max_workers=2)
        self.addCleanup(executor.shutdown, True)
        service = WindWidgetService(Settings(), store=InMemoryKeyValueStore(), client=FakeClient(),
                                    executor=executor)
        service.close()
        self.assertEqual(executor.submit(lambda: 42).result(), 42)


if __name__ == "__main__":
    unittest.main()
