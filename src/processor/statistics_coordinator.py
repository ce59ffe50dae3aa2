"""
PPE Safety Violation Tracker - Statistics Coordinator
Public entry point for statistics: read-through caching on the read path and
category-wide eviction on the write path.

Read path:
    read(kind) -> cache.get(kind); on miss compute via StatisticsAggregator,
    cache.put(kind, value, ttl for the category), return.

Write path:
    on_violation_created / on_violation_deleted -> evict_all() for DASHBOARD,
    EMPLOYEE_STATS, TIME_SERIES and RANKING. The violation service calls these
    after its commit and before reporting success.

Accepted race:
    A read that missed before an eviction may put its (older) result after
    the eviction. That entry lives at most one TTL.
"""

import time
from contextlib import AbstractContextManager
from datetime import datetime
from threading import Lock
from typing import Any, Callable, Optional

from sqlalchemy.orm import Session

from database.connection import get_db_session
from database.repositories.user_repository import UserRepository
from database.repositories.violation_repository import ViolationRepository
from models.stat_kind import StatKind, StatCategory, CACHED_CATEGORIES
from models.statistics import (
    DashboardStats, EmployeeStats, TimeSeriesStats, EmployeeRanking, EmployeeViolationReport
)
from models.violation import ViolationRecord
from processor.statistics_aggregator import StatisticsAggregator
from utils.cache import QueryCache, get_query_cache
from utils.config import StatisticsSettings, load_statistics_settings
from utils.logger import logger, log_statistics_computed, log_cache_eviction
from utils.time_windows import get_now


class StatisticsCoordinator:
    """
    Owns the statistics cache contract.

    Attributes:
        cache: QueryCache holding computed results
        settings: Frozen statistics configuration (TTLs, defaults)
        session_factory: Zero-argument callable returning a session context manager
        clock: Returns the current reporting time as a naive datetime
    """

    def __init__(
        self,
        cache: QueryCache,
        settings: StatisticsSettings,
        session_factory: Callable[[], AbstractContextManager] = get_db_session,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.cache = cache
        self.settings = settings
        self.session_factory = session_factory
        self.clock = clock or (lambda: get_now(settings.timezone))
        self._ttls = {
            StatCategory.DASHBOARD: settings.dashboard_ttl_seconds,
            StatCategory.EMPLOYEE_STATS: settings.employee_stats_ttl_seconds,
            StatCategory.TIME_SERIES: settings.time_series_ttl_seconds,
            StatCategory.RANKING: settings.ranking_ttl_seconds,
        }

    # ------------------------------------------------------------------
    # Read path
    # ------------------------------------------------------------------

    def read(self, kind: StatKind) -> Any:
        """
        Return the statistics result for `kind`, computing it on a cache miss.

        Store errors propagate and leave the cache untouched.

        Args:
            kind: Statistic kind and parameter

        Returns:
            Result model for the kind's category
        """
        if not kind.is_cacheable:
            return self._compute(kind)

        cached = self._cache_get(kind)
        if cached is not None:
            return cached

        value = self._compute(kind)
        self._cache_put(kind, value)
        return value

    def get_dashboard_stats(self) -> DashboardStats:
        return self.read(StatKind.dashboard())

    def get_employee_stats(self, employee_id: int) -> EmployeeStats:
        return self.read(StatKind.employee_stats(employee_id))

    def get_time_series_stats(self, days: Optional[int] = None) -> TimeSeriesStats:
        if days is None:
            days = self.settings.time_series_default_days
        return self.read(StatKind.time_series(days))

    def get_employee_ranking(self, limit: Optional[int] = None) -> EmployeeRanking:
        if limit is None:
            limit = self.settings.ranking_default_limit
        return self.read(StatKind.ranking(limit))

    def get_employee_violation_report(self, employee_id: int) -> EmployeeViolationReport:
        """Never cached; its stats part comes from the EMPLOYEE_STATS entry."""
        return self.read(StatKind.employee_report(employee_id))

    # ------------------------------------------------------------------
    # Write path
    # ------------------------------------------------------------------

    def on_violation_created(self, record: ViolationRecord) -> None:
        """Evict every cached category after a violation has been stored."""
        self._evict_all_categories(f"violation_created:{record.violation_id}")

    def on_violation_deleted(self, violation_id: int) -> None:
        """Evict every cached category after a violation has been deleted."""
        self._evict_all_categories(f"violation_deleted:{violation_id}")

    def _evict_all_categories(self, reason: str) -> None:
        for category in CACHED_CATEGORIES:
            try:
                evicted = self.cache.evict_all(category)
            except Exception as e:
                # Not retried: a surviving entry expires within its TTL
                logger.error("Statistics cache eviction failed", extra={
                    "reason": reason,
                    "category": category.value,
                    "error_type": type(e).__name__,
                    "error_message": str(e)
                }, exc_info=True)
                continue
            log_cache_eviction(reason, category.value, evicted)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _compute(self, kind: StatKind) -> Any:
        started = time.perf_counter()
        now = self.clock()

        if kind.category == StatCategory.EMPLOYEE_REPORT:
            # Resolve the cached stats first, in its own session
            stats = self.get_employee_stats(kind.parameter)
            with self.session_factory() as session:
                value = self._aggregator(session).employee_report(kind.parameter, stats)
        else:
            with self.session_factory() as session:
                aggregator = self._aggregator(session)
                if kind.category == StatCategory.DASHBOARD:
                    value = aggregator.dashboard_stats(now)
                elif kind.category == StatCategory.EMPLOYEE_STATS:
                    value = aggregator.employee_stats(kind.parameter, now)
                elif kind.category == StatCategory.TIME_SERIES:
                    value = aggregator.time_series_stats(kind.parameter, now)
                elif kind.category == StatCategory.RANKING:
                    value = aggregator.employee_ranking(kind.parameter, now)
                else:
                    raise ValueError(f"Unsupported statistic kind: {kind}")

        log_statistics_computed(str(kind), (time.perf_counter() - started) * 1000)
        return value

    def _aggregator(self, session: Session) -> StatisticsAggregator:
        return StatisticsAggregator(
            ViolationRepository(session),
            UserRepository(session),
            self.settings
        )

    def _cache_get(self, kind: StatKind) -> Any:
        try:
            return self.cache.get(kind)
        except Exception as e:
            logger.warning(f"Statistics cache read failed for {kind}, recomputing: {e}")
            return None

    def _cache_put(self, kind: StatKind, value: Any) -> None:
        try:
            self.cache.put(kind, value, self._ttls[kind.category])
        except Exception as e:
            logger.warning(f"Statistics cache write failed for {kind}: {e}")


# Global coordinator instance
_coordinator: Optional[StatisticsCoordinator] = None
_coordinator_lock = Lock()


def get_statistics_coordinator() -> StatisticsCoordinator:
    """
    Get the process-wide coordinator, created on first use.

    Uses the global query cache and settings loaded from configuration.
    """
    global _coordinator
    if _coordinator is None:
        with _coordinator_lock:
            if _coordinator is None:
                _coordinator = StatisticsCoordinator(
                    cache=get_query_cache(),
                    settings=load_statistics_settings()
                )
    return _coordinator


def reset_statistics_coordinator(coordinator: Optional[StatisticsCoordinator] = None) -> None:
    """
    Replace the process-wide coordinator (tests install one bound to their own cache).

    Args:
        coordinator: New coordinator, or None to rebuild lazily on next use
    """
    global _coordinator
    with _coordinator_lock:
        _coordinator = coordinator
