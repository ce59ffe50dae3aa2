"""
PPE Safety Violation Tracker - Statistics API Routes
====================================================

Dashboard and reporting endpoints. Every read goes through the statistics
coordinator; cached categories are served from memory for up to their TTL
and evicted whenever a violation is created or deleted.

Endpoint Mapping
----------------
GET /statistics/dashboard                  -> StatKind.dashboard()          (cached)
GET /statistics/employee/<id>              -> StatKind.employee_stats(id)   (cached)
GET /statistics/time-series?days=30        -> StatKind.time_series(days)    (cached)
GET /statistics/ranking?limit=10           -> StatKind.ranking(limit)       (cached)
GET /statistics/employee/<id>/report       -> StatKind.employee_report(id)  (never cached)
"""

from flask import Blueprint, jsonify, request

from processor.statistics_coordinator import get_statistics_coordinator
from utils.errors import InvalidArgumentError

statistics_bp = Blueprint('statistics', __name__)


def _int_arg(name: str):
    """Read an optional integer query parameter (None when absent)."""
    raw = request.args.get(name)
    if raw is None or raw == '':
        return None
    try:
        return int(raw)
    except ValueError:
        raise InvalidArgumentError(f"{name} must be an integer, got {raw!r}")


@statistics_bp.route('/statistics/dashboard', methods=['GET'])
def get_dashboard_stats():
    """
    Get organisation-wide violation statistics.

    Returns:
        JSON with totals for all time, this week and this month, per-label
        counts for the month, the most violated rule and the top violators.
    """
    stats = get_statistics_coordinator().get_dashboard_stats()
    return jsonify({"success": True, "data": stats.to_dict()}), 200


@statistics_bp.route('/statistics/employee/<int:employee_id>', methods=['GET'])
def get_employee_stats(employee_id: int):
    """
    Get violation counts for one employee.

    Response:
        200 OK: Statistics retrieved
        404 Not Found: Employee does not exist
    """
    stats = get_statistics_coordinator().get_employee_stats(employee_id)
    return jsonify({"success": True, "data": stats.to_dict()}), 200


@statistics_bp.route('/statistics/time-series', methods=['GET'])
def get_time_series_stats():
    """
    Get daily violation counts for charts.

    Query Parameters:
        days (int): Number of days before today to include (default: 30).
                    The response holds days + 1 daily points.
    """
    stats = get_statistics_coordinator().get_time_series_stats(_int_arg('days'))
    return jsonify({"success": True, "data": stats.to_dict()}), 200


@statistics_bp.route('/statistics/ranking', methods=['GET'])
def get_employee_ranking():
    """
    Get top and least violators for the current month.

    Query Parameters:
        limit (int): Entries per list (default: 10)
    """
    ranking = get_statistics_coordinator().get_employee_ranking(_int_arg('limit'))
    return jsonify({"success": True, "data": ranking.to_dict()}), 200


@statistics_bp.route('/statistics/employee/<int:employee_id>/report', methods=['GET'])
def get_employee_violation_report(employee_id: int):
    """
    Get the detailed violation report for one employee.

    Includes the employee's statistics, their 10 most recent violations and
    their most frequent labels.
    """
    report = get_statistics_coordinator().get_employee_violation_report(employee_id)
    return jsonify({"success": True, "data": report.to_dict()}), 200
