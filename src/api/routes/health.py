"""
PPE Safety Violation Tracker - Health Check Endpoint
Provides API health status, database connectivity, and statistics cache state.
"""

from datetime import datetime, timezone

from flask import Blueprint, jsonify

from database.connection import test_database_connection
from processor.statistics_coordinator import get_statistics_coordinator
from utils.logger import logger

health_bp = Blueprint('health', __name__)


@health_bp.route('/health', methods=['GET'])
def health_check():
    """
    Health check endpoint.

    Returns:
        JSON with API health status, database connectivity and cache counters

    Response:
        200 OK: All systems operational
        503 Service Unavailable: Database connection failed
    """
    health_data = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "api_version": "1.0.0",
        "checks": {}
    }

    if test_database_connection():
        health_data["checks"]["database"] = {
            "status": "healthy",
            "message": "Database connection successful"
        }
    else:
        health_data["status"] = "unhealthy"
        health_data["checks"]["database"] = {
            "status": "unhealthy",
            "message": "Database connection failed"
        }

    cache_stats = get_statistics_coordinator().cache.get_stats()
    health_data["checks"]["statistics_cache"] = {
        "status": "healthy",
        **cache_stats
    }

    status_code = 200 if health_data["status"] == "healthy" else 503
    if status_code != 200:
        logger.warning("Health check failed", extra={"checks": health_data["checks"]})

    return jsonify(health_data), status_code
