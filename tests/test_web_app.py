import os
import sys
import unittest
from datetime import datetime, timedelta, timezone

TEST_DIR = os.path.dirname(os.path.abspath(__file__))
SRC_DIR = os.path.join(os.path.dirname(TEST_DIR), "src")
if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)

from matchtv.schedule_cache import ScheduleCache
from matchtv.schedule_models import Match
from matchtv.tvmatchen_scraper import FetchError
from matchtv.web_app import create_app


class FakeClock:
    def __init__(self):
        self.now = datetime(2023, 10, 21, 8, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


SCHEDULE = {
    "2023-10-21": (
        Match(name="Arsenal - Chelsea", league="Premier League", channel="Viaplay", time="13:30"),
        Match(name="PSG - Lyon", league="Ligue 1", channel="C More", time="21:00"),
    ),
    "2023-10-22": (),
}


class WebAppTests(unittest.TestCase):
    def setUp(self):
        self.loads = 0

        def loader():
            self.loads += 1
            return SCHEDULE

        self.cache = ScheduleCache(loader=loader)
        self.client = create_app(self.cache).test_client()

    def test_index_renders_matches_per_day(self):
        response = self.client.get("/")
        body = response.get_data(as_text=True)

        self.assertEqual(response.status_code, 200)
        self.assertIn("Match på TV:n", body)
        self.assertIn("<h2>2023-10-21</h2>", body)
        self.assertIn("<h2>2023-10-22</h2>", body)
        self.assertIn("<li>13:30 Arsenal - Chelsea (Premier League, Viaplay)</li>", body)
        self.assertIn("<li>21:00 PSG - Lyon (Ligue 1, C More)</li>", body)

    def test_requests_within_window_reuse_cached_schedule(self):
        self.client.get("/")
        self.client.get("/")
        self.client.get("/api/schedule")

        self.assertEqual(self.loads, 1)

    def test_api_schedule_returns_json(self):
        data = self.client.get("/api/schedule").get_json()

        self.assertIsNotNone(data["last_refresh"])
        self.assertEqual(data["days"]["2023-10-22"], [])
        first = data["days"]["2023-10-21"][0]
        self.assertEqual(first["name"], "Arsenal - Chelsea")
        self.assertEqual(first["display"], "13:30 Arsenal - Chelsea (Premier League, Viaplay)")

    def test_status_reports_cache_state(self):
        self.client.get("/")

        data = self.client.get("/status").get_json()

        self.assertEqual(data["status"], "running")
        self.assertTrue(data["has_schedule"])
        self.assertEqual(data["matches_count"], 2)


class WebAppLongOutageTests(unittest.TestCase):
    def test_requests_keep_succeeding_through_many_failed_refreshes(self):
        clock = FakeClock()
        fetches = []

        def loader():
            fetches.append(clock())
            raise FetchError("upstream down")

        cache = ScheduleCache(loader=loader, clock=clock)
        client = create_app(cache).test_client()

        for _ in range(50):
            clock.advance(hours=11)
            self.assertEqual(client.get("/").status_code, 200)

        self.assertEqual(len(fetches), 50)
        status = client.get("/status").get_json()
        self.assertEqual(status["next_retry_at"], (clock() + timedelta(hours=10)).isoformat())


class WebAppUpstreamDownTests(unittest.TestCase):
    def setUp(self):
        def loader():
            raise FetchError("upstream down")

        self.cache = ScheduleCache(loader=loader)
        self.client = create_app(self.cache).test_client()

    def test_index_serves_empty_schedule(self):
        response = self.client.get("/")
        body = response.get_data(as_text=True)

        self.assertEqual(response.status_code, 200)
        self.assertNotIn("<li>", body)
        self.assertNotIn("<h2>", body)

    def test_api_schedule_is_empty(self):
        data = self.client.get("/api/schedule").get_json()

        self.assertEqual(data, {"last_refresh": None, "days": {}})

    def test_status_shows_last_error(self):
        self.client.get("/")

        data = self.client.get("/status").get_json()

        self.assertFalse(data["has_schedule"])
        self.assertEqual(data["last_error"], "upstream down")
        self.assertIsNotNone(data["next_retry_at"])


if __name__ == "__main__":
    unittest.main()
