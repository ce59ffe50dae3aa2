"""
PPE Safety Violation Tracker - Statistic Kinds

A StatKind names one aggregate shape plus its parameter. It is the cache key
for computed statistics; the category is the unit of eviction.
"""

import enum
from dataclasses import dataclass
from typing import Optional


class StatCategory(str, enum.Enum):
    DASHBOARD = 'dashboard'
    EMPLOYEE_STATS = 'employee_stats'
    TIME_SERIES = 'time_series'
    RANKING = 'ranking'
    EMPLOYEE_REPORT = 'employee_report'


# Categories whose results live in the cache. Employee reports embed full
# violation projections and are always recomputed.
CACHED_CATEGORIES = (
    StatCategory.DASHBOARD,
    StatCategory.EMPLOYEE_STATS,
    StatCategory.TIME_SERIES,
    StatCategory.RANKING,
)


@dataclass(frozen=True)
class StatKind:
    """
    Hashable (category, parameter) pair.

    parameter is the employee id for EMPLOYEE_STATS / EMPLOYEE_REPORT, the
    day count for TIME_SERIES, the list limit for RANKING, and None for
    DASHBOARD.
    """
    category: StatCategory
    parameter: Optional[int] = None

    @classmethod
    def dashboard(cls) -> 'StatKind':
        return cls(StatCategory.DASHBOARD)

    @classmethod
    def employee_stats(cls, employee_id: int) -> 'StatKind':
        return cls(StatCategory.EMPLOYEE_STATS, employee_id)

    @classmethod
    def time_series(cls, days: int) -> 'StatKind':
        return cls(StatCategory.TIME_SERIES, days)

    @classmethod
    def ranking(cls, limit: int) -> 'StatKind':
        return cls(StatCategory.RANKING, limit)

    @classmethod
    def employee_report(cls, employee_id: int) -> 'StatKind':
        return cls(StatCategory.EMPLOYEE_REPORT, employee_id)

    @property
    def is_cacheable(self) -> bool:
        return self.category in CACHED_CATEGORIES

    def __str__(self) -> str:
        if self.parameter is None:
            return self.category.value
        return f"{self.category.value}-{self.parameter}"
