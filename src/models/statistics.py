"""
PPE Safety Violation Tracker - Statistics Result Models
Read-only result shapes returned by the statistics coordinator.

Instances are shared between callers through the cache, so every container
field is immutable: sequences are tuples and mappings are MappingProxyType.
"""

from dataclasses import dataclass
from datetime import date
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from models.violation import ViolationRecord


def frozen_mapping(values: dict) -> Mapping:
    """Wrap a dict in a read-only view (insertion order preserved)."""
    return MappingProxyType(dict(values))


@dataclass(frozen=True)
class TopViolator:
    """One entry of the dashboard top-violators list."""
    employee_id: int
    employee_name: str
    violation_count: int

    def to_dict(self) -> dict:
        return {
            "employeeId": self.employee_id,
            "employeeName": self.employee_name,
            "violationCount": self.violation_count
        }


@dataclass(frozen=True)
class DashboardStats:
    """Organisation-wide counts for the current week and month."""
    total_violations: int
    violations_this_week: int
    violations_this_month: int
    most_violated_rule: Optional[str]
    most_violated_rule_count: int
    violations_by_label: Mapping[str, int]
    top_violators: Tuple[TopViolator, ...]

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "totalViolations": self.total_violations,
            "violationsThisWeek": self.violations_this_week,
            "violationsThisMonth": self.violations_this_month,
            "mostViolatedRule": self.most_violated_rule,
            "mostViolatedRuleCount": self.most_violated_rule_count,
            "violationsByLabel": dict(self.violations_by_label),
            "topViolators": [violator.to_dict() for violator in self.top_violators]
        }


@dataclass(frozen=True)
class EmployeeStats:
    """Violation counts for a single employee."""
    employee_id: int
    employee_name: str
    total_violations: int
    violations_this_week: int
    violations_this_month: int

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "employeeId": self.employee_id,
            "employeeName": self.employee_name,
            "totalViolations": self.total_violations,
            "violationsThisWeek": self.violations_this_week,
            "violationsThisMonth": self.violations_this_month
        }


@dataclass(frozen=True)
class DailyCount:
    """Number of violations on one calendar day."""
    date: date
    count: int

    def to_dict(self) -> dict:
        return {"date": self.date.isoformat(), "count": self.count}


@dataclass(frozen=True)
class TimeSeriesStats:
    """
    Daily violation counts over a window of days + 1 calendar days.

    daily_counts has one zero-filled point per day; by_label holds a series
    of the same shape for every label seen in the window.
    """
    start_date: date
    end_date: date
    daily_counts: Tuple[DailyCount, ...]
    by_label: Mapping[str, Tuple[DailyCount, ...]]

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "dailyCounts": [point.to_dict() for point in self.daily_counts],
            "byLabel": {
                label: [point.to_dict() for point in series]
                for label, series in self.by_label.items()
            }
        }


@dataclass(frozen=True)
class RankedEmployee:
    """Employee position in the monthly violation ranking (1 = most violations)."""
    employee_id: int
    employee_name: str
    email: str
    violation_count: int
    rank: int

    def to_dict(self) -> dict:
        return {
            "employeeId": self.employee_id,
            "employeeName": self.employee_name,
            "email": self.email,
            "violationCount": self.violation_count,
            "rank": self.rank
        }


@dataclass(frozen=True)
class EmployeeRanking:
    """
    Top and least violators for the current month.

    The two lists are independent views of the same ranking and may overlap
    when limit is large relative to the number of employees.
    """
    top_violators: Tuple[RankedEmployee, ...]
    least_violators: Tuple[RankedEmployee, ...]
    total_employees: int
    average_violations_per_employee: float

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "topViolators": [entry.to_dict() for entry in self.top_violators],
            "leastViolators": [entry.to_dict() for entry in self.least_violators],
            "totalEmployees": self.total_employees,
            "averageViolationsPerEmployee": self.average_violations_per_employee
        }


@dataclass(frozen=True)
class EmployeeViolationReport:
    """Detailed per-employee report for the admin view."""
    employee_id: int
    employee_name: str
    email: str
    stats: EmployeeStats
    recent_violations: Tuple[ViolationRecord, ...]
    most_frequent_labels: Tuple[str, ...]

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "employeeId": self.employee_id,
            "employeeName": self.employee_name,
            "email": self.email,
            "stats": self.stats.to_dict(),
            "recentViolations": [violation.to_dict() for violation in self.recent_violations],
            "mostFrequentLabels": list(self.most_frequent_labels)
        }
