"""
Statistics Coordinator Unit Tests

The aggregator is patched out; these tests cover the cache contract:
read-through, per-category TTL, eviction on writes, degradation when the
cache itself fails.
"""

import pytest
from contextlib import contextmanager
from datetime import datetime
from unittest.mock import Mock, patch

from models.stat_kind import StatKind, StatCategory
from processor.statistics_coordinator import (
    StatisticsCoordinator, get_statistics_coordinator, reset_statistics_coordinator
)
from utils.cache import QueryCache
from utils.errors import StoreUnavailableError, InvalidArgumentError

NOW = datetime(2025, 6, 12, 15, 30)


@pytest.fixture
def session():
    return Mock()


@pytest.fixture
def session_factory(session):
    opened = []

    @contextmanager
    def factory():
        opened.append(session)
        yield session

    factory.opened = opened
    return factory


@pytest.fixture
def aggregator():
    with patch('processor.statistics_coordinator.StatisticsAggregator') as aggregator_cls:
        instance = aggregator_cls.return_value
        instance.dashboard_stats.side_effect = lambda now: Mock(name='dashboard')
        instance.employee_stats.side_effect = lambda employee_id, now: Mock(name=f'stats-{employee_id}')
        instance.time_series_stats.side_effect = lambda days, now: Mock(name=f'series-{days}')
        instance.employee_ranking.side_effect = lambda limit, now: Mock(name=f'ranking-{limit}')
        instance.employee_report.side_effect = lambda employee_id, stats: Mock(name='report', stats=stats)
        yield instance


@pytest.fixture
def cache(fake_clock):
    return QueryCache(clock=fake_clock)


@pytest.fixture
def coordinator(cache, settings, session_factory, aggregator):
    return StatisticsCoordinator(
        cache=cache,
        settings=settings,
        session_factory=session_factory,
        clock=lambda: NOW
    )


class TestReadThrough:

    def test_miss_computes_and_stores(self, coordinator, aggregator, cache):
        result = coordinator.get_dashboard_stats()

        aggregator.dashboard_stats.assert_called_once_with(NOW)
        assert cache.get(StatKind.dashboard()) is result

    def test_hit_skips_computation(self, coordinator, aggregator, session_factory):
        first = coordinator.get_dashboard_stats()
        second = coordinator.get_dashboard_stats()

        assert first is second
        assert aggregator.dashboard_stats.call_count == 1
        assert len(session_factory.opened) == 1

    def test_parameters_are_separate_entries(self, coordinator, aggregator):
        coordinator.get_time_series_stats(7)
        coordinator.get_time_series_stats(30)
        coordinator.get_time_series_stats(7)

        assert aggregator.time_series_stats.call_count == 2

    def test_defaults_come_from_settings(self, coordinator, aggregator):
        coordinator.get_time_series_stats()
        coordinator.get_employee_ranking()

        aggregator.time_series_stats.assert_called_once_with(30, NOW)
        aggregator.employee_ranking.assert_called_once_with(10, NOW)

    def test_entry_recomputed_after_ttl(self, coordinator, aggregator, fake_clock, settings):
        coordinator.get_employee_ranking(5)
        fake_clock.advance(settings.ranking_ttl_seconds)
        coordinator.get_employee_ranking(5)

        assert aggregator.employee_ranking.call_count == 2

    def test_per_category_ttl(self, cache, settings, session_factory, aggregator, fake_clock):
        from dataclasses import replace

        short = replace(settings, dashboard_ttl_seconds=10, ranking_ttl_seconds=600)
        coordinator = StatisticsCoordinator(cache, short, session_factory, clock=lambda: NOW)
        coordinator.get_dashboard_stats()
        coordinator.get_employee_ranking(5)

        fake_clock.advance(60)
        coordinator.get_dashboard_stats()
        coordinator.get_employee_ranking(5)

        assert aggregator.dashboard_stats.call_count == 2
        assert aggregator.employee_ranking.call_count == 1

    def test_store_error_propagates_and_caches_nothing(self, coordinator, aggregator, cache):
        aggregator.dashboard_stats.side_effect = StoreUnavailableError("down")

        with pytest.raises(StoreUnavailableError):
            coordinator.get_dashboard_stats()

        assert cache.get_stats()["total_entries"] == 0

    def test_invalid_argument_is_not_cached(self, coordinator, aggregator, cache):
        aggregator.time_series_stats.side_effect = InvalidArgumentError("days must be non-negative")

        with pytest.raises(InvalidArgumentError):
            coordinator.get_time_series_stats(-1)

        assert cache.get_stats()["total_entries"] == 0

    @patch('processor.statistics_coordinator.log_statistics_computed')
    def test_computation_is_logged_with_kind(self, mock_log, coordinator):
        coordinator.get_time_series_stats(7)

        assert mock_log.call_args[0][0] == "time_series-7"


class TestEmployeeReport:

    def test_report_is_never_cached(self, coordinator, aggregator, cache):
        coordinator.get_employee_violation_report(1)
        coordinator.get_employee_violation_report(1)

        assert aggregator.employee_report.call_count == 2
        assert cache.get(StatKind.employee_report(1)) is None

    def test_report_reuses_cached_employee_stats(self, coordinator, aggregator):
        stats = coordinator.get_employee_stats(1)

        report = coordinator.get_employee_violation_report(1)

        assert report.stats is stats
        assert aggregator.employee_stats.call_count == 1


class TestEviction:

    def _warm(self, coordinator):
        coordinator.get_dashboard_stats()
        coordinator.get_employee_stats(1)
        coordinator.get_employee_stats(2)
        coordinator.get_time_series_stats(7)
        coordinator.get_employee_ranking(10)

    def test_violation_created_evicts_every_category(self, coordinator, cache):
        self._warm(coordinator)
        assert cache.get_stats()["total_entries"] == 5

        coordinator.on_violation_created(Mock(violation_id=42))

        assert cache.get_stats()["total_entries"] == 0

    def test_violation_deleted_evicts_every_category(self, coordinator, cache):
        self._warm(coordinator)

        coordinator.on_violation_deleted(42)

        assert cache.get_stats()["total_entries"] == 0

    def test_reads_after_eviction_recompute(self, coordinator, aggregator):
        self._warm(coordinator)
        coordinator.on_violation_deleted(42)

        coordinator.get_dashboard_stats()
        coordinator.get_employee_stats(1)

        assert aggregator.dashboard_stats.call_count == 2
        assert aggregator.employee_stats.call_count == 3

    @patch('processor.statistics_coordinator.log_cache_eviction')
    def test_eviction_is_logged_per_category(self, mock_log, coordinator):
        self._warm(coordinator)

        coordinator.on_violation_created(Mock(violation_id=42))

        logged = {call.args[1]: call.args[2] for call in mock_log.call_args_list}
        assert logged == {"dashboard": 1, "employee_stats": 2, "time_series": 1, "ranking": 1}
        assert all(call.args[0] == "violation_created:42" for call in mock_log.call_args_list)


class TestCacheFailures:

    def _coordinator(self, cache, settings, session_factory):
        return StatisticsCoordinator(cache, settings, session_factory, clock=lambda: NOW)

    def test_cache_read_failure_degrades_to_recompute(self, settings, session_factory, aggregator):
        cache = Mock()
        cache.get.side_effect = RuntimeError("cache offline")
        coordinator = self._coordinator(cache, settings, session_factory)

        result = coordinator.get_dashboard_stats()

        assert result is not None
        aggregator.dashboard_stats.assert_called_once_with(NOW)

    def test_cache_write_failure_still_returns_value(self, settings, session_factory, aggregator):
        cache = Mock()
        cache.get.return_value = None
        cache.put.side_effect = RuntimeError("cache full")
        coordinator = self._coordinator(cache, settings, session_factory)

        assert coordinator.get_employee_stats(1) is not None

    def test_put_uses_category_ttl(self, settings, session_factory, aggregator):
        cache = Mock()
        cache.get.return_value = None
        coordinator = self._coordinator(cache, settings, session_factory)

        coordinator.get_time_series_stats(7)

        kind, _, ttl = cache.put.call_args[0]
        assert kind == StatKind.time_series(7)
        assert ttl == settings.time_series_ttl_seconds

    @patch('processor.statistics_coordinator.logger')
    def test_eviction_failure_does_not_stop_other_categories(self, mock_logger, settings, session_factory):
        cache = Mock()
        cache.evict_all.side_effect = [RuntimeError("boom"), 0, 0, 0]
        coordinator = self._coordinator(cache, settings, session_factory)

        coordinator.on_violation_deleted(7)

        evicted = [call.args[0] for call in cache.evict_all.call_args_list]
        assert evicted == [
            StatCategory.DASHBOARD, StatCategory.EMPLOYEE_STATS,
            StatCategory.TIME_SERIES, StatCategory.RANKING,
        ]
        mock_logger.error.assert_called_once()


class TestGlobalCoordinator:

    def test_singleton_and_reset(self, coordinator):
        reset_statistics_coordinator(coordinator)
        try:
            assert get_statistics_coordinator() is coordinator
        finally:
            reset_statistics_coordinator()

        assert get_statistics_coordinator() is not coordinator
        reset_statistics_coordinator()
