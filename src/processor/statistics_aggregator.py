"""
PPE Safety Violation Tracker - Statistics Aggregator
Computes every statistics shape from record-store queries.

Nothing here caches: each method reads the store at call time and returns a
fresh immutable result. Caching and eviction belong to
processor/statistics_coordinator.py.

Windows (see utils/time_windows.py):
- Week: Monday 00:00 through now
- Month: first of the month 00:00 through now
- Time series: (today - days) 00:00 through end of today
"""

from collections import Counter
from datetime import datetime, timedelta
from typing import Dict, List

from database.repositories.user_repository import UserRepository
from database.repositories.violation_repository import ViolationRepository
from models.orm_user import Role
from models.statistics import (
    DashboardStats, EmployeeStats, TimeSeriesStats, DailyCount,
    EmployeeRanking, RankedEmployee, EmployeeViolationReport, TopViolator,
    frozen_mapping
)
from models.user import EmployeeRef
from utils.config import StatisticsSettings
from utils.errors import ResourceNotFoundError, InvalidArgumentError
from utils.time_windows import get_week_start, get_month_start, get_day_range, iter_dates


class StatisticsAggregator:
    """
    Builds statistics results from the violation and user repositories.

    Features:
    - Dashboard summary (week/month counts, label tallies, top violators)
    - Per-employee counts
    - Zero-filled daily time series with per-label breakdown
    - Monthly employee ranking with deterministic tie-breaks
    - Detailed per-employee report
    """

    def __init__(
        self,
        violations: ViolationRepository,
        users: UserRepository,
        settings: StatisticsSettings
    ):
        """
        Initialize aggregator.

        Args:
            violations: Violation record store
            users: User identity lookups
            settings: Statistics configuration (top-N sizes)
        """
        self.violations = violations
        self.users = users
        self.settings = settings

    def dashboard_stats(self, now: datetime) -> DashboardStats:
        """
        Compute the organisation-wide dashboard.

        Args:
            now: Current reporting time (upper bound of every window)

        Returns:
            DashboardStats
        """
        week_start = get_week_start(now)
        month_start = get_month_start(now)

        violations_by_label = self.violations.label_counts_in_range(month_start, now)

        # Label counts arrive ordered by count desc, first-seen on ties
        most_violated_rule, most_violated_rule_count = next(
            iter(violations_by_label.items()), (None, 0)
        )

        top_violators = []
        top_counts = self.violations.top_employee_counts_in_range(
            month_start, now, self.settings.dashboard_top_violators
        )
        for employee_id, count in top_counts:
            employee = self.users.get_by_id(employee_id)
            if employee is None:
                continue
            top_violators.append(TopViolator(
                employee_id=employee_id,
                employee_name=employee.full_name,
                violation_count=count
            ))

        return DashboardStats(
            total_violations=self.violations.count(),
            violations_this_week=self.violations.count_in_range(week_start, now),
            violations_this_month=self.violations.count_in_range(month_start, now),
            most_violated_rule=most_violated_rule,
            most_violated_rule_count=most_violated_rule_count,
            violations_by_label=frozen_mapping(violations_by_label),
            top_violators=tuple(top_violators)
        )

    def employee_stats(self, employee_id: int, now: datetime) -> EmployeeStats:
        """
        Compute total, week and month counts for one employee.

        Raises:
            ResourceNotFoundError: If the employee id does not resolve
        """
        employee = self._require_employee(employee_id)
        week_start = get_week_start(now)
        month_start = get_month_start(now)

        return EmployeeStats(
            employee_id=employee_id,
            employee_name=employee.full_name,
            total_violations=self.violations.count_by_employee(employee_id),
            violations_this_week=self.violations.count_by_employee_in_range(employee_id, week_start, now),
            violations_this_month=self.violations.count_by_employee_in_range(employee_id, month_start, now)
        )

    def time_series_stats(self, days: int, now: datetime) -> TimeSeriesStats:
        """
        Compute daily counts from (today - days) through today.

        Always returns days + 1 points, with empty days present as zero.
        by_label gets a series of the same shape for every label seen in the
        window, in the order labels first appear.

        Args:
            days: Window length; must be a non-negative integer (not clamped)
            now: Current reporting time

        Raises:
            InvalidArgumentError: If days is negative, not an integer, or
                reaches before the earliest representable date
        """
        _require_non_negative_int('days', days)

        end_date = now.date()
        try:
            start_date = end_date - timedelta(days=days)
        except OverflowError:
            raise InvalidArgumentError(f"days reaches before the earliest representable date: {days}")
        start, end = get_day_range(start_date, end_date)

        records = self.violations.find_in_range(start, end)

        daily: Counter = Counter()
        per_label: Dict[str, Counter] = {}
        for record in records:
            day = record.timestamp.date()
            daily[day] += 1
            for label in dict.fromkeys(record.labels):
                per_label.setdefault(label, Counter())[day] += 1

        dates = list(iter_dates(start_date, end_date))

        return TimeSeriesStats(
            start_date=start_date,
            end_date=end_date,
            daily_counts=_fill_series(dates, daily),
            by_label=frozen_mapping({
                label: _fill_series(dates, counts)
                for label, counts in per_label.items()
            })
        )

    def employee_ranking(self, limit: int, now: datetime) -> EmployeeRanking:
        """
        Rank every employee by violations this month.

        Ranks follow (count desc, employee id asc). top_violators is the head
        of that order; least_violators is a separate (count asc, employee id
        asc) sort, so the two lists can overlap.

        Args:
            limit: Maximum entries per list; must be a non-negative integer
            now: Current reporting time

        Raises:
            InvalidArgumentError: If limit is negative or not an integer
        """
        _require_non_negative_int('limit', limit)

        month_start = get_month_start(now)
        employees = self.users.get_by_role(Role.EMPLOYEE)

        counted = [
            (employee, self.violations.count_by_employee_in_range(employee.user_id, month_start, now))
            for employee in employees
        ]
        counted.sort(key=lambda pair: (-pair[1], pair[0].user_id))

        ranked: List[RankedEmployee] = [
            RankedEmployee(
                employee_id=employee.user_id,
                employee_name=employee.full_name,
                email=employee.email,
                violation_count=count,
                rank=position
            )
            for position, (employee, count) in enumerate(counted, start=1)
        ]

        least = sorted(ranked, key=lambda entry: (entry.violation_count, entry.employee_id))

        total_employees = len(ranked)
        average = (
            sum(entry.violation_count for entry in ranked) / total_employees
            if total_employees else 0.0
        )

        return EmployeeRanking(
            top_violators=tuple(ranked[:limit]),
            least_violators=tuple(least[:limit]),
            total_employees=total_employees,
            average_violations_per_employee=average
        )

    def employee_report(self, employee_id: int, stats: EmployeeStats) -> EmployeeViolationReport:
        """
        Build the detailed report for one employee.

        Args:
            employee_id: Employee to report on
            stats: Employee statistics (usually served from cache)

        Raises:
            ResourceNotFoundError: If the employee id does not resolve
        """
        employee = self._require_employee(employee_id)

        # Chronological order; first-seen order decides label ties
        records = self.violations.find_by_employee(employee_id)

        recent = sorted(
            records,
            key=lambda record: (record.timestamp, record.violation_id),
            reverse=True
        )[:self.settings.report_recent_violations]

        label_counts: Dict[str, int] = {}
        for record in records:
            for label in dict.fromkeys(record.labels):
                label_counts[label] = label_counts.get(label, 0) + 1
        # sorted() is stable, so equal counts keep first-seen order
        frequent = sorted(label_counts, key=lambda label: -label_counts[label])

        return EmployeeViolationReport(
            employee_id=employee_id,
            employee_name=employee.full_name,
            email=employee.email,
            stats=stats,
            recent_violations=tuple(recent),
            most_frequent_labels=tuple(frequent[:self.settings.report_top_labels])
        )

    def _require_employee(self, employee_id: int) -> EmployeeRef:
        employee = self.users.get_by_id(employee_id)
        if employee is None:
            raise ResourceNotFoundError("Employee", employee_id)
        return employee


def _require_non_negative_int(name: str, value) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidArgumentError(f"{name} must be a non-negative integer, got {value!r}")


def _fill_series(dates, counts: Counter) -> tuple:
    return tuple(DailyCount(date=day, count=counts.get(day, 0)) for day in dates)
