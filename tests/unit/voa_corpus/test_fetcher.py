"""Tests for voa_corpus.fetcher module."""

from unittest.mock import Mock

import requests

from voa_corpus.fetcher import RateLimitedFetcher


def _session(content: bytes = b"<html></html>") -> Mock:
    response = Mock()
    response.content = content
    response.raise_for_status.return_value = None
    session = Mock(headers={})
    session.get.return_value = response
    return session


class TestRateLimitedFetcher:
    def test_returns_response_body(self, fake_clock) -> None:
        session = _session(b"page")
        fetcher = RateLimitedFetcher(session=session, clock=fake_clock, sleep=fake_clock.sleep)
        assert fetcher.fetch("http://example.com") == b"page"
        session.get.assert_called_once_with("http://example.com", timeout=None)

    def test_sets_user_agent(self, fake_clock) -> None:
        session = _session()
        RateLimitedFetcher(user_agent="bot/1.0", session=session, clock=fake_clock)
        assert session.headers["User-Agent"] == "bot/1.0"

    def test_first_fetch_does_not_sleep(self, fake_clock) -> None:
        sleep = Mock()
        fetcher = RateLimitedFetcher(session=_session(), clock=fake_clock, sleep=sleep)
        fetcher.fetch("http://example.com")
        sleep.assert_not_called()

    def test_sleeps_remaining_interval(self, fake_clock) -> None:
        sleep = Mock(side_effect=fake_clock.sleep)
        fetcher = RateLimitedFetcher(min_interval=30, session=_session(), clock=fake_clock, sleep=sleep)
        fetcher.fetch("http://example.com/1")
        fake_clock.now += 10
        fetcher.fetch("http://example.com/2")
        sleep.assert_called_once_with(20)

    def test_no_sleep_after_interval_elapsed(self, fake_clock) -> None:
        sleep = Mock()
        fetcher = RateLimitedFetcher(min_interval=30, session=_session(), clock=fake_clock, sleep=sleep)
        fetcher.fetch("http://example.com/1")
        fake_clock.now += 31
        fetcher.fetch("http://example.com/2")
        sleep.assert_not_called()

    def test_n_fetches_take_at_least_n_minus_one_intervals(self, fake_clock) -> None:
        fetcher = RateLimitedFetcher(
            min_interval=30, session=_session(), clock=fake_clock, sleep=fake_clock.sleep
        )
        start = fake_clock.now
        for i in range(5):
            fetcher.fetch(f"http://example.com/{i}")
        assert fake_clock.now - start >= 4 * 30

    def test_last_fetch_time_is_issue_time(self, fake_clock) -> None:
        session = _session()

        def slow_get(url, timeout=None):
            fake_clock.now += 12
            return session.get.return_value

        session.get.side_effect = slow_get
        fetcher = RateLimitedFetcher(session=session, clock=fake_clock, sleep=fake_clock.sleep)
        issued_at = fake_clock.now
        fetcher.fetch("http://example.com")
        assert fetcher.last_fetch_time == issued_at

    def test_transport_error_returns_none(self, fake_clock) -> None:
        session = _session()
        session.get.side_effect = requests.ConnectionError("down")
        fetcher = RateLimitedFetcher(session=session, clock=fake_clock, sleep=fake_clock.sleep)
        assert fetcher.fetch("http://example.com") is None

    def test_http_error_returns_none(self, fake_clock) -> None:
        session = _session()
        session.get.return_value.raise_for_status.side_effect = requests.HTTPError("404")
        fetcher = RateLimitedFetcher(session=session, clock=fake_clock, sleep=fake_clock.sleep)
        assert fetcher.fetch("http://example.com") is None

    def test_failed_fetch_still_counts_for_rate_limit(self, fake_clock) -> None:
        session = _session()
        session.get.side_effect = [requests.Timeout("slow"), session.get.return_value]
        sleep = Mock(side_effect=fake_clock.sleep)
        fetcher = RateLimitedFetcher(min_interval=30, session=session, clock=fake_clock, sleep=sleep)
        fetcher.fetch("http://example.com/1")
        fetcher.fetch("http://example.com/2")
        sleep.assert_called_once_with(30)
