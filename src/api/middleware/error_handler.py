"""
PPE Safety Violation Tracker - Error Handler Middleware
Standardized error responses for all API endpoints.
"""

from flask import jsonify, Flask
from werkzeug.exceptions import HTTPException

from utils.errors import ResourceNotFoundError, InvalidArgumentError, StoreUnavailableError
from utils.logger import logger


def register_error_handlers(app: Flask):
    """
    Register error handlers for Flask app.

    Args:
        app: Flask application instance
    """

    @app.errorhandler(ResourceNotFoundError)
    def resource_not_found(error):
        """Handle unknown employee / violation ids."""
        logger.info(f"Resource not found: {error}")
        return jsonify({
            "success": False,
            "error": "Not Found",
            "message": str(error)
        }), 404

    @app.errorhandler(InvalidArgumentError)
    def invalid_argument(error):
        """Handle rejected requests."""
        logger.warning(f"Invalid argument: {error}")
        return jsonify({
            "success": False,
            "error": "Bad Request",
            "message": str(error)
        }), 400

    @app.errorhandler(StoreUnavailableError)
    def store_unavailable(error):
        """Handle record store failures (transient, safe to retry)."""
        logger.error(f"Record store unavailable: {error}")
        return jsonify({
            "success": False,
            "error": "Service Unavailable",
            "message": "The violation store is temporarily unavailable. Please retry."
        }), 503

    @app.errorhandler(400)
    def bad_request(error):
        """Handle 400 Bad Request errors."""
        logger.warning(f"Bad request: {error}")
        return jsonify({
            "success": False,
            "error": "Bad Request",
            "message": str(error.description) if hasattr(error, 'description') else "Invalid request"
        }), 400

    @app.errorhandler(404)
    def not_found(error):
        """Handle 404 Not Found errors."""
        logger.info(f"Not found: {error}")
        return jsonify({
            "success": False,
            "error": "Not Found",
            "message": "The requested resource was not found"
        }), 404

    @app.errorhandler(500)
    def internal_server_error(error):
        """Handle 500 Internal Server Error."""
        logger.error(f"Internal server error: {error}", exc_info=True)
        return jsonify({
            "success": False,
            "error": "Internal Server Error",
            "message": "An unexpected error occurred. Please try again later."
        }), 500

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        """Handle all unhandled exceptions."""
        # If it's an HTTP exception, pass through to specific handler
        if isinstance(error, HTTPException):
            return error

        logger.error(f"Unexpected error: {error}", exc_info=True)

        return jsonify({
            "success": False,
            "error": "Internal Server Error",
            "message": "An unexpected error occurred. Please try again later."
        }), 500

    logger.info("Error handlers registered")
