"""
PPE Safety Violation Tracker - Violation API Routes
===================================================

GET    /violations                   -> all reports
GET    /violations/employee/<id>     -> reports of one employee
GET    /violations/date-range        -> reports with start <= timestamp <= end
GET    /violations/labels            -> allowed label vocabulary
POST   /violations                   -> create a report, then evict statistics
GET    /violations/<id>              -> fetch one report
DELETE /violations/<id>              -> delete a report, then evict statistics

Request body for POST:
    {
        "imageUrl": "https://.../frame.jpg",
        "labels": ["No Helmet"],
        "employeeId": 12,
        "reportedById": 3,
        "location": "Dock B",                   (optional)
        "timestamp": "2025-06-12T14:05:00"      (optional, defaults to now)
    }
"""

from datetime import datetime

from flask import Blueprint, jsonify, request

from database.connection import get_db_session
from processor.statistics_coordinator import get_statistics_coordinator
from processor.violation_service import ViolationService
from utils.errors import InvalidArgumentError

violations_bp = Blueprint('violations', __name__)


def _violation_service(session) -> ViolationService:
    coordinator = get_statistics_coordinator()
    return ViolationService(session, coordinator, coordinator.settings)


def _parse_timestamp(raw, field: str = 'timestamp'):
    if raw is None:
        return None
    try:
        return datetime.fromisoformat(raw)
    except (TypeError, ValueError):
        raise InvalidArgumentError(f"{field} must be an ISO-8601 datetime, got {raw!r}")


def _require_int(payload: dict, field: str) -> int:
    value = payload.get(field)
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgumentError(f"{field} is required and must be an integer")
    return value


def _required_query_datetime(name: str) -> datetime:
    raw = request.args.get(name)
    if raw is None:
        raise InvalidArgumentError(f"{name} query parameter is required")
    return _parse_timestamp(raw, name)


def _records_response(records):
    return jsonify({
        "success": True,
        "count": len(records),
        "data": [record.to_dict() for record in records]
    }), 200


@violations_bp.route('/violations', methods=['GET'])
def list_violations():
    """All violation reports, oldest first."""
    with get_db_session() as session:
        records = _violation_service(session).list_violations()

    return _records_response(records)


@violations_bp.route('/violations/employee/<int:employee_id>', methods=['GET'])
def list_employee_violations(employee_id: int):
    """Violation reports of one employee, oldest first."""
    with get_db_session() as session:
        records = _violation_service(session).list_employee_violations(employee_id)

    return _records_response(records)


@violations_bp.route('/violations/date-range', methods=['GET'])
def list_violations_in_range():
    """
    Violation reports inside an inclusive time range.

    Query Parameters:
        start (str): ISO-8601 datetime, required
        end (str): ISO-8601 datetime, required

    Response:
        200 OK: Reports with start <= timestamp <= end
        400 Bad Request: Missing or unparseable bound, or start after end
    """
    start = _required_query_datetime('start')
    end = _required_query_datetime('end')

    with get_db_session() as session:
        records = _violation_service(session).list_violations_in_range(start, end)

    return _records_response(records)


@violations_bp.route('/violations/labels', methods=['GET'])
def get_allowed_labels():
    coordinator = get_statistics_coordinator()
    labels = sorted(coordinator.settings.allowed_labels)

    return jsonify({"success": True, "data": labels}), 200


@violations_bp.route('/violations', methods=['POST'])
def create_violation():
    """
    Submit a violation report.

    Response:
        201 Created: Violation stored, statistics evicted
        400 Bad Request: Invalid label, missing field, or target is not an employee
        404 Not Found: Employee or reporter does not exist
    """
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise InvalidArgumentError("Request body must be a JSON object")

    labels = payload.get('labels')
    if not isinstance(labels, list) or not all(isinstance(label, str) for label in labels):
        raise InvalidArgumentError("labels must be a list of strings")

    with get_db_session() as session:
        record = _violation_service(session).create_violation(
            image_url=payload.get('imageUrl') or '',
            labels=labels,
            employee_id=_require_int(payload, 'employeeId'),
            reported_by_id=_require_int(payload, 'reportedById'),
            location=payload.get('location'),
            timestamp=_parse_timestamp(payload.get('timestamp'))
        )

    return jsonify({"success": True, "data": record.to_dict()}), 201


@violations_bp.route('/violations/<int:violation_id>', methods=['GET'])
def get_violation(violation_id: int):
    """Fetch one violation report."""
    with get_db_session() as session:
        record = _violation_service(session).get_violation(violation_id)

    return jsonify({"success": True, "data": record.to_dict()}), 200


@violations_bp.route('/violations/<int:violation_id>', methods=['DELETE'])
def delete_violation(violation_id: int):
    """
    Delete a violation report.

    Response:
        200 OK: Deleted, statistics evicted
        404 Not Found: Violation does not exist
    """
    with get_db_session() as session:
        _violation_service(session).delete_violation(violation_id)

    return jsonify({"success": True, "message": f"Violation {violation_id} deleted"}), 200
