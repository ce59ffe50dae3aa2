"""
Operational Script Tests

seed_test_data runs against the SQLite store; warm_cache is exercised with
urllib patched out.
"""

import json
from unittest.mock import MagicMock, patch

from sqlalchemy import func, select

from models.orm_user import User, Role
from models.orm_violation import Violation, ViolationLabel
from scripts import seed_test_data, warm_cache


class TestSeedTestData:

    def test_seeds_users_and_violations(self, db_session):
        seeder = seed_test_data.TestDataSeeder(days=14, violation_count=30, seed=7)

        seeder.run()

        employees = db_session.scalar(
            select(func.count(User.user_id)).where(User.role == Role.EMPLOYEE)
        )
        assert employees == len(seed_test_data.FIRST_NAMES)
        assert db_session.scalar(select(func.count(Violation.violation_id))) == 30
        assert seeder.stats['violations_inserted'] == 30
        assert db_session.scalar(select(func.count(ViolationLabel.label_id))) == seeder.stats['labels_inserted']

    def test_last_employee_has_clean_record(self, db_session):
        seed_test_data.TestDataSeeder(days=14, violation_count=30, seed=7).run()

        last = db_session.scalar(select(User).where(User.username == seed_test_data.FIRST_NAMES[-1].lower()))
        count = db_session.scalar(
            select(func.count(Violation.violation_id)).where(Violation.employee_id == last.user_id)
        )
        assert count == 0

    def test_rerun_replaces_existing_data(self, db_session):
        seed_test_data.TestDataSeeder(days=14, violation_count=10, seed=1).run()
        seed_test_data.TestDataSeeder(days=14, violation_count=5, seed=2).run()

        assert db_session.scalar(select(func.count(Violation.violation_id))) == 5


class TestWarmCache:

    @patch('scripts.warm_cache.urllib.request.urlopen')
    def test_warm_endpoint_success(self, mock_urlopen):
        response = MagicMock()
        response.status = 200
        mock_urlopen.return_value.__enter__.return_value = response

        endpoint, _, success = warm_cache.warm_endpoint("http://api", "/api/statistics/dashboard")

        assert endpoint == "/api/statistics/dashboard"
        assert success is True
        request = mock_urlopen.call_args[0][0]
        assert request.full_url == "http://api/api/statistics/dashboard"

    @patch('scripts.warm_cache.urllib.request.urlopen', side_effect=OSError("connection refused"))
    def test_warm_endpoint_failure(self, mock_urlopen):
        _, _, success = warm_cache.warm_endpoint("http://api", "/api/statistics/ranking?limit=5")

        assert success is False

    @patch('scripts.warm_cache.urllib.request.urlopen')
    def test_top_violator_endpoints_follow_ranking(self, mock_urlopen):
        response = MagicMock()
        response.read.return_value = json.dumps({
            "success": True,
            "data": {"topViolators": [{"employeeId": 4, "rank": 1}, {"employeeId": 9, "rank": 2}]}
        }).encode()
        mock_urlopen.return_value.__enter__.return_value = response

        endpoints = warm_cache.top_violator_endpoints("http://api", 2)

        assert endpoints == ["/api/statistics/employee/4", "/api/statistics/employee/9"]
        assert mock_urlopen.call_args[0][0].full_url == "http://api/api/statistics/ranking?limit=2"

    @patch('scripts.warm_cache.urllib.request.urlopen', side_effect=OSError("connection refused"))
    def test_top_violator_endpoints_empty_when_unreachable(self, mock_urlopen):
        assert warm_cache.top_violator_endpoints("http://api", 5) == []

    @patch('scripts.warm_cache.urllib.request.urlopen')
    def test_top_violator_endpoints_skipped_for_zero(self, mock_urlopen):
        assert warm_cache.top_violator_endpoints("http://api", 0) == []
        mock_urlopen.assert_not_called()

    @patch('scripts.warm_cache.warm_endpoint')
    def test_warm_all_keeps_endpoint_order(self, mock_warm):
        mock_warm.side_effect = lambda base_url, endpoint: warm_cache.WarmResult(endpoint, 0.1, True)

        results = warm_cache.warm_all("http://api", warm_cache.STATIC_ENDPOINTS)

        assert [r.endpoint for r in results] == warm_cache.STATIC_ENDPOINTS
        assert all(r.ok for r in results)
