"""
PPE Safety Violation Tracker - Configuration Management
Handles environment configuration with AWS SSM Parameter Store for production
and python-dotenv for local development.
"""

import os
from dataclasses import dataclass
from typing import Optional, FrozenSet
from dotenv import load_dotenv

# Load .env file for local development
load_dotenv()


class Config:
    """
    Configuration manager with dual-mode operation:
    - Local: Reads from .env file via python-dotenv
    - Production: Reads from AWS SSM Parameter Store
    """

    def __init__(self):
        self.environment = os.getenv('ENVIRONMENT', 'local')
        self._ssm_client = None

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """
        Fetch configuration value from SSM (production) or environment (local).

        Args:
            key: Configuration key name
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        if self.environment == 'production':
            return self._get_from_ssm(key, default)
        else:
            return os.getenv(key, default)

    def _get_from_ssm(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """
        Fetch configuration from AWS SSM Parameter Store.

        Args:
            key: Parameter key name
            default: Default value if parameter not found

        Returns:
            Parameter value or default

        Raises:
            ConfigurationError: If parameter not found and no default provided,
                               or if AWS credentials/permissions are invalid
        """
        ssm_prefix = os.getenv('AWS_SSM_PREFIX', '/ppe-safety')
        parameter_name = f"{ssm_prefix}/{key}"

        if self._ssm_client is None:
            import boto3
            self._ssm_client = boto3.client(
                'ssm',
                region_name=os.getenv('AWS_REGION', 'us-east-1')
            )

        try:
            response = self._ssm_client.get_parameter(
                Name=parameter_name,
                WithDecryption=True
            )
            return response['Parameter']['Value']

        except self._ssm_client.exceptions.ParameterNotFound:
            if default is not None:
                return default
            raise ConfigurationError(
                f"Required parameter '{key}' not found in SSM at path '{parameter_name}'. "
                f"Please create the parameter or provide a default value."
            )

        except Exception as e:
            # Credentials, permissions, network
            error_type = type(e).__name__
            if default is not None:
                import logging
                logging.warning(
                    f"Failed to fetch SSM parameter '{key}': {error_type}: {e}. "
                    f"Using default value."
                )
                return default
            raise ConfigurationError(
                f"Failed to fetch parameter '{key}' from SSM: {error_type}: {e}. "
                f"Check AWS credentials, IAM permissions, and network connectivity."
            )

    def get_int(self, key: str, default: int) -> int:
        """
        Get configuration value as integer.

        Args:
            key: Configuration key name
            default: Default value if key not found or conversion fails

        Returns:
            Integer value or default
        """
        value = self.get(key, str(default))
        try:
            return int(value)
        except (ValueError, TypeError) as e:
            import logging
            logging.warning(
                f"Invalid integer for config key '{key}': '{value}'. "
                f"Using default={default}. Error: {e}"
            )
            return default

    def get_bool(self, key: str, default: bool) -> bool:
        """
        Get configuration value as boolean.

        Args:
            key: Configuration key name
            default: Default value if key not found

        Returns:
            Boolean value or default
        """
        value = self.get(key, str(default))
        if value is None:
            return default
        return value.lower() in ('true', '1', 'yes', 'on')

    def get_list(self, key: str, default: str) -> list[str]:
        """
        Get a comma-separated configuration value as a list of stripped items.

        Empty items are dropped, so "Helmet, ,Vest" yields ["Helmet", "Vest"].
        """
        value = self.get(key, default) or ''
        return [item.strip() for item in value.split(',') if item.strip()]

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == 'production'

    @property
    def is_local(self) -> bool:
        """Check if running in local development environment."""
        return self.environment == 'local'


class ConfigurationError(Exception):
    """Raised when configuration cannot be loaded."""
    pass


# Global configuration instance
config = Config()


# Database configuration
# DATABASE_URL wins when set (e.g. sqlite:///ppe_safety.db for local work)
DATABASE_URL = config.get('DATABASE_URL', '')
DB_HOST = config.get('DB_HOST', 'localhost')
DB_PORT = config.get_int('DB_PORT', 3306)
DB_NAME = config.get('DB_NAME', 'ppe_safety_dev')
DB_USER = config.get('DB_USER', 'root')
DB_PASSWORD = config.get('DB_PASSWORD', '')

# Flask configuration
FLASK_ENV = config.get('FLASK_ENV', 'development')
FLASK_DEBUG = config.get_bool('FLASK_DEBUG', True)
SECRET_KEY = config.get('SECRET_KEY', 'dev-secret-key-change-in-production')

# Logging configuration
LOG_LEVEL = config.get('LOG_LEVEL', 'INFO')

# Reporting day boundaries (week starts Monday 00:00, month on the 1st)
REPORTING_TIMEZONE = config.get('REPORTING_TIMEZONE', 'UTC')

# Statistics cache TTLs, one per category
STATS_DASHBOARD_TTL_SECONDS = config.get_int('STATS_DASHBOARD_TTL_SECONDS', 300)
STATS_EMPLOYEE_TTL_SECONDS = config.get_int('STATS_EMPLOYEE_TTL_SECONDS', 300)
STATS_TIME_SERIES_TTL_SECONDS = config.get_int('STATS_TIME_SERIES_TTL_SECONDS', 300)
STATS_RANKING_TTL_SECONDS = config.get_int('STATS_RANKING_TTL_SECONDS', 300)

# Statistics shape defaults
DASHBOARD_TOP_VIOLATORS = config.get_int('DASHBOARD_TOP_VIOLATORS', 5)
RANKING_DEFAULT_LIMIT = config.get_int('RANKING_DEFAULT_LIMIT', 10)
TIME_SERIES_DEFAULT_DAYS = config.get_int('TIME_SERIES_DEFAULT_DAYS', 30)
REPORT_RECENT_VIOLATIONS = config.get_int('REPORT_RECENT_VIOLATIONS', 10)
REPORT_TOP_LABELS = config.get_int('REPORT_TOP_LABELS', 5)

# Labels a violation report may carry
DEFAULT_ALLOWED_LABELS = 'Helmet,Vest,Head,Person,No Helmet,No Vest'
ALLOWED_VIOLATION_LABELS = config.get_list('ALLOWED_VIOLATION_LABELS', DEFAULT_ALLOWED_LABELS)

# Database connection pool settings
DB_POOL_SIZE = 10
DB_POOL_MAX_OVERFLOW = 20
DB_POOL_RECYCLE = 3600  # Recycle connections after 1 hour
DB_POOL_PRE_PING = True  # Health check connections before use


@dataclass(frozen=True)
class StatisticsSettings:
    """
    Immutable statistics configuration, loaded once at startup and injected
    into the coordinator and the violation service.
    """
    dashboard_ttl_seconds: int = 300
    employee_stats_ttl_seconds: int = 300
    time_series_ttl_seconds: int = 300
    ranking_ttl_seconds: int = 300
    dashboard_top_violators: int = 5
    ranking_default_limit: int = 10
    time_series_default_days: int = 30
    report_recent_violations: int = 10
    report_top_labels: int = 5
    allowed_labels: FrozenSet[str] = frozenset(DEFAULT_ALLOWED_LABELS.split(','))
    timezone: str = 'UTC'


def load_statistics_settings() -> StatisticsSettings:
    """
    Build StatisticsSettings from the module-level configuration values.

    Returns:
        Frozen StatisticsSettings instance
    """
    if not ALLOWED_VIOLATION_LABELS:
        raise ConfigurationError("ALLOWED_VIOLATION_LABELS must name at least one label")

    return StatisticsSettings(
        dashboard_ttl_seconds=STATS_DASHBOARD_TTL_SECONDS,
        employee_stats_ttl_seconds=STATS_EMPLOYEE_TTL_SECONDS,
        time_series_ttl_seconds=STATS_TIME_SERIES_TTL_SECONDS,
        ranking_ttl_seconds=STATS_RANKING_TTL_SECONDS,
        dashboard_top_violators=DASHBOARD_TOP_VIOLATORS,
        ranking_default_limit=RANKING_DEFAULT_LIMIT,
        time_series_default_days=TIME_SERIES_DEFAULT_DAYS,
        report_recent_violations=REPORT_RECENT_VIOLATIONS,
        report_top_labels=REPORT_TOP_LABELS,
        allowed_labels=frozenset(ALLOWED_VIOLATION_LABELS),
        timezone=REPORTING_TIMEZONE,
    )
