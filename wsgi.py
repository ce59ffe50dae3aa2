#!/usr/bin/env python3
"""
WSGI entry point for the PPE Safety Violation Tracker API.

Usage:
    gunicorn --bind 127.0.0.1:5001 wsgi:application

For development, use the Flask development server instead:
    cd src && python -m api.app
"""

import sys
import os

# Add the src directory to Python path so "from api.app import create_app" resolves
src_path = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

# Load environment variables from .env file
from dotenv import load_dotenv
env_path = os.path.join(os.path.dirname(os.path.abspath(__file__)), '.env')
if os.path.exists(env_path):
    load_dotenv(env_path)

from api.app import create_app

application = create_app()

if __name__ == "__main__":
    application.run(host='0.0.0.0', port=5001, debug=False)
