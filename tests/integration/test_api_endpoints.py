"""
API Endpoint Integration Tests

Drives the Flask app through its test client against in-memory SQLite.
A fresh coordinator with its own cache is installed per test.
"""

import pytest

from freezegun import freeze_time

from models.orm_user import Role
from processor.statistics_coordinator import StatisticsCoordinator, reset_statistics_coordinator
from utils.cache import QueryCache


@pytest.fixture(autouse=True)
def frozen_now():
    with freeze_time("2025-06-12 15:30:00"):
        yield


@pytest.fixture
def coordinator(sqlite_engine, settings, fake_clock):
    coordinator = StatisticsCoordinator(QueryCache(clock=fake_clock), settings)
    reset_statistics_coordinator(coordinator)
    yield coordinator
    reset_statistics_coordinator()


@pytest.fixture
def client(coordinator):
    from api.app import create_app

    app = create_app()
    app.config['TESTING'] = True
    return app.test_client()


@pytest.fixture
def alice(make_user):
    return make_user("Alice Adams")


@pytest.fixture
def specialist(make_user):
    return make_user("Sam Specialist", role=Role.SAFETY_SPECIALIST)


def post_violation(client, employee, reporter, labels=("No Helmet",), **extra):
    body = {
        "imageUrl": "https://images.example.com/1.jpg",
        "labels": list(labels),
        "employeeId": employee.user_id,
        "reportedById": reporter.user_id,
    }
    body.update(extra)
    return client.post('/api/violations', json=body)


class TestHealth:

    def test_health(self, client):
        response = client.get('/api/health')

        assert response.status_code == 200
        data = response.get_json()
        assert data["status"] == "healthy"
        assert data["checks"]["database"]["status"] == "healthy"
        assert data["checks"]["statistics_cache"]["total_entries"] == 0

    def test_index(self, client):
        response = client.get('/')

        assert response.status_code == 200
        assert response.get_json()["endpoints"]["dashboard"] == "/api/statistics/dashboard"


class TestStatisticsEndpoints:

    def test_dashboard_shape(self, client, alice, specialist):
        post_violation(client, alice, specialist, timestamp="2025-06-10T09:00:00")

        response = client.get('/api/statistics/dashboard')

        assert response.status_code == 200
        body = response.get_json()
        assert body["success"] is True
        assert body["data"]["totalViolations"] == 1
        assert body["data"]["mostViolatedRule"] == "No Helmet"
        assert body["data"]["topViolators"] == [
            {"employeeId": alice.user_id, "employeeName": "Alice Adams", "violationCount": 1}
        ]

    def test_employee_stats(self, client, alice, specialist):
        post_violation(client, alice, specialist, timestamp="2025-06-03T09:00:00")

        data = client.get(f'/api/statistics/employee/{alice.user_id}').get_json()["data"]

        assert data["employeeName"] == "Alice Adams"
        assert data["violationsThisMonth"] == 1
        assert data["violationsThisWeek"] == 0

    def test_employee_stats_unknown_id_is_404(self, client):
        response = client.get('/api/statistics/employee/999')

        assert response.status_code == 404
        body = response.get_json()
        assert body["success"] is False
        assert body["message"] == "Employee not found with id: 999"

    def test_time_series_default_days(self, client):
        data = client.get('/api/statistics/time-series').get_json()["data"]

        assert len(data["dailyCounts"]) == 31
        assert data["endDate"] == "2025-06-12"

    def test_time_series_custom_days(self, client):
        data = client.get('/api/statistics/time-series?days=7').get_json()["data"]

        assert len(data["dailyCounts"]) == 8
        assert data["startDate"] == "2025-06-05"

    @pytest.mark.parametrize("query", ["days=-1", "days=abc", "days=1000000"])
    def test_time_series_bad_days_is_400(self, client, query):
        response = client.get(f'/api/statistics/time-series?{query}')

        assert response.status_code == 400
        assert response.get_json()["success"] is False

    def test_ranking(self, client, alice, specialist):
        post_violation(client, alice, specialist, timestamp="2025-06-10T09:00:00")

        data = client.get('/api/statistics/ranking?limit=5').get_json()["data"]

        assert data["totalEmployees"] == 1
        assert data["topViolators"][0]["rank"] == 1
        assert data["topViolators"][0]["email"] == alice.email

    def test_ranking_negative_limit_is_400(self, client):
        assert client.get('/api/statistics/ranking?limit=-5').status_code == 400

    def test_employee_report(self, client, alice, specialist):
        post_violation(client, alice, specialist, labels=["No Vest", "Person"], timestamp="2025-06-10T09:00:00")

        data = client.get(f'/api/statistics/employee/{alice.user_id}/report').get_json()["data"]

        assert data["stats"]["totalViolations"] == 1
        assert data["recentViolations"][0]["labels"] == ["No Vest", "Person"]
        assert data["mostFrequentLabels"] == ["No Vest", "Person"]


class TestViolationEndpoints:

    def test_create(self, client, alice, specialist):
        response = post_violation(
            client, alice, specialist, location="Dock B", timestamp="2025-06-11T08:15:00"
        )

        assert response.status_code == 201
        data = response.get_json()["data"]
        assert data["employeeId"] == alice.user_id
        assert data["reportedByName"] == "Sam Specialist"
        assert data["timestamp"] == "2025-06-11T08:15:00"

        fetched = client.get(f'/api/violations/{data["id"]}').get_json()["data"]
        assert fetched == data

    def test_create_evicts_cached_dashboard(self, client, alice, specialist):
        assert client.get('/api/statistics/dashboard').get_json()["data"]["totalViolations"] == 0

        post_violation(client, alice, specialist)

        assert client.get('/api/statistics/dashboard').get_json()["data"]["totalViolations"] == 1

    def test_delete_evicts_cached_dashboard(self, client, alice, specialist):
        violation_id = post_violation(client, alice, specialist).get_json()["data"]["id"]
        assert client.get('/api/statistics/dashboard').get_json()["data"]["totalViolations"] == 1

        response = client.delete(f'/api/violations/{violation_id}')

        assert response.status_code == 200
        assert client.get('/api/statistics/dashboard').get_json()["data"]["totalViolations"] == 0
        assert client.get(f'/api/violations/{violation_id}').status_code == 404

    def test_invalid_label_is_400(self, client, alice, specialist):
        response = post_violation(client, alice, specialist, labels=["Sunglasses"])

        assert response.status_code == 400
        assert "Invalid label" in response.get_json()["message"]

    def test_missing_employee_id_is_400(self, client, specialist):
        response = client.post('/api/violations', json={
            "imageUrl": "https://images.example.com/1.jpg",
            "labels": ["No Vest"],
            "reportedById": specialist.user_id,
        })

        assert response.status_code == 400

    def test_bad_timestamp_is_400(self, client, alice, specialist):
        response = post_violation(client, alice, specialist, timestamp="yesterday")

        assert response.status_code == 400

    def test_unknown_employee_is_404(self, client, specialist):
        response = client.post('/api/violations', json={
            "imageUrl": "https://images.example.com/1.jpg",
            "labels": ["No Vest"],
            "employeeId": 999,
            "reportedById": specialist.user_id,
        })

        assert response.status_code == 404

    def test_delete_unknown_is_404(self, client):
        assert client.delete('/api/violations/999').status_code == 404

    def test_non_json_body_is_400(self, client):
        response = client.post('/api/violations', data="not json", content_type="text/plain")

        assert response.status_code == 400


class TestViolationListings:

    @pytest.fixture
    def bob(self, make_user):
        return make_user("Bob Brown")

    @pytest.fixture
    def stored(self, client, alice, bob, specialist):
        first = post_violation(client, alice, specialist, timestamp="2025-06-02T09:00:00")
        second = post_violation(client, bob, specialist, timestamp="2025-06-05T12:00:00")
        third = post_violation(client, alice, specialist, labels=["No Vest"], timestamp="2025-06-10T08:00:00")
        return [response.get_json()["data"]["id"] for response in (first, second, third)]

    def test_list_all_oldest_first(self, client, stored):
        body = client.get('/api/violations').get_json()

        assert body["success"] is True
        assert body["count"] == 3
        assert [v["id"] for v in body["data"]] == stored

    def test_list_empty_store(self, client):
        body = client.get('/api/violations').get_json()

        assert body["count"] == 0
        assert body["data"] == []

    def test_list_by_employee(self, client, alice, stored):
        body = client.get(f'/api/violations/employee/{alice.user_id}').get_json()

        assert [v["id"] for v in body["data"]] == [stored[0], stored[2]]
        assert all(v["employeeId"] == alice.user_id for v in body["data"])

    def test_list_by_unknown_employee_is_empty(self, client, stored):
        body = client.get('/api/violations/employee/999').get_json()

        assert body["data"] == []

    def test_date_range_is_inclusive(self, client, stored):
        response = client.get(
            '/api/violations/date-range?start=2025-06-02T09:00:00&end=2025-06-05T12:00:00'
        )

        assert response.status_code == 200
        assert [v["id"] for v in response.get_json()["data"]] == stored[:2]

    @pytest.mark.parametrize("query", [
        "start=2025-06-01T00:00:00",
        "end=2025-06-01T00:00:00",
        "start=yesterday&end=2025-06-01T00:00:00",
        "start=2025-06-10T00:00:00&end=2025-06-01T00:00:00",
    ])
    def test_date_range_bad_bounds_is_400(self, client, query):
        response = client.get(f'/api/violations/date-range?{query}')

        assert response.status_code == 400
        assert response.get_json()["success"] is False

    def test_allowed_labels(self, client):
        body = client.get('/api/violations/labels').get_json()

        assert body["data"] == ["Head", "Helmet", "No Helmet", "No Vest", "Person", "Vest"]
