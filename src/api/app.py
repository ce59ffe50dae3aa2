"""
PPE Safety Violation Tracker - Flask API Application
Main API application with Blueprints, CORS, and middleware.
"""

import time

from flask import Flask, g, jsonify, request
from flask_cors import CORS

from utils.config import FLASK_ENV, FLASK_DEBUG, SECRET_KEY
from utils.logger import logger, log_api_request
from api.routes.health import health_bp
from api.routes.statistics import statistics_bp
from api.routes.violations import violations_bp
from api.middleware.error_handler import register_error_handlers


def create_app() -> Flask:
    """
    Create and configure Flask application.

    Returns:
        Configured Flask app instance
    """
    app = Flask(__name__)

    # Configuration
    app.config['ENV'] = FLASK_ENV
    app.config['DEBUG'] = FLASK_DEBUG
    app.config['SECRET_KEY'] = SECRET_KEY
    app.json.sort_keys = False  # Preserve JSON key order

    # CORS configuration
    CORS(app, resources={
        r"/api/*": {
            "origins": "*",  # Configure for production
            "methods": ["GET", "POST", "DELETE", "OPTIONS"],
            "allow_headers": ["Content-Type"]
        }
    })

    # Register blueprints
    app.register_blueprint(health_bp, url_prefix='/api')
    app.register_blueprint(statistics_bp, url_prefix='/api')
    app.register_blueprint(violations_bp, url_prefix='/api')

    # Register error handlers
    register_error_handlers(app)

    # Request timing
    @app.before_request
    def start_timer():
        g.request_started = time.perf_counter()

    @app.after_request
    def log_request(response):
        started = g.get('request_started')
        if started is not None and request.path.startswith('/api/'):
            duration_ms = round((time.perf_counter() - started) * 1000, 2)
            log_api_request(request.method, request.path, response.status_code, duration_ms)
        return response

    logger.info(f"Flask app created (env={FLASK_ENV}, debug={FLASK_DEBUG})")

    # Root endpoint
    @app.route('/')
    def index():
        """Root endpoint with API information."""
        return jsonify({
            "name": "PPE Safety Violation Tracker API",
            "version": "1.0.0",
            "status": "running",
            "endpoints": {
                "health": "/api/health",
                "dashboard": "/api/statistics/dashboard",
                "employee": "/api/statistics/employee/<id>",
                "timeSeries": "/api/statistics/time-series",
                "ranking": "/api/statistics/ranking",
                "violations": "/api/violations",
                "labels": "/api/violations/labels"
            }
        })

    return app


if __name__ == '__main__':
    # Development server
    app = create_app()
    app.run(
        host='0.0.0.0',
        port=5000,
        debug=FLASK_DEBUG
    )
