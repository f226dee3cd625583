"""
Configuration management for Crownboard.
"""
import os
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str = 'false') -> bool:
    return os.getenv(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


class BaseConfig:
    """Base configuration."""
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')

    # Whop API
    WHOP_API_KEY = os.getenv('WHOP_API_KEY', '')
    WHOP_API_BASE_URL = os.getenv('WHOP_API_BASE_URL', 'https://api.whop.com/api/v2')
    WHOP_API_TIMEOUT = float(os.getenv('WHOP_API_TIMEOUT', '30'))
    WHOP_MAX_PAGES = int(os.getenv('WHOP_MAX_PAGES', '50'))

    # Session handling - dev mode injects a local session when no token is sent
    WHOP_AUTH_DEV_MODE = _env_bool('WHOP_AUTH_DEV_MODE')

    # Leaderboards
    LEADERBOARD_LIMIT = int(os.getenv('LEADERBOARD_LIMIT', '25'))
    WINNER_POOL_SIZE = int(os.getenv('WINNER_POOL_SIZE', '200'))
    CROWNBOARD_TIMEZONE = os.getenv('CROWNBOARD_TIMEZONE', 'UTC')

    # What to do when a Whop resource fails to load:
    # 'empty' - serve leaderboards from what loaded, flagged as degraded
    # 'error' - answer 502
    DEGRADED_DATA_POLICY = os.getenv('DEGRADED_DATA_POLICY', 'empty')


class DevelopmentConfig(BaseConfig):
    """Development configuration."""
    DEBUG = True
    WHOP_AUTH_DEV_MODE = _env_bool('WHOP_AUTH_DEV_MODE', 'true')


class ProductionConfig(BaseConfig):
    """Production configuration."""
    DEBUG = False

    @classmethod
    def validate(cls) -> None:
        """
        Validate production settings.

        Raises:
            RuntimeError: If the Whop API key is missing or dev mode is enabled
        """
        if not cls.WHOP_API_KEY:
            raise RuntimeError(
                "CRITICAL: WHOP_API_KEY environment variable is not set!\n"
                "Production deployments cannot load company data without it."
            )
        if cls.WHOP_AUTH_DEV_MODE:
            raise RuntimeError(
                "CRITICAL: WHOP_AUTH_DEV_MODE is enabled in production!\n"
                "Dev mode accepts requests without a Whop session token."
            )
        if cls.DEGRADED_DATA_POLICY not in DEGRADED_DATA_POLICIES:
            raise RuntimeError(
                f"CRITICAL: DEGRADED_DATA_POLICY must be one of {DEGRADED_DATA_POLICIES}"
            )


class TestingConfig(BaseConfig):
    """Testing configuration."""
    TESTING = True
    WHOP_API_KEY = 'test-api-key'
    WHOP_API_BASE_URL = 'https://api.whop.test/api/v2'
    WHOP_AUTH_DEV_MODE = False
    DEGRADED_DATA_POLICY = 'empty'
    CROWNBOARD_TIMEZONE = 'UTC'


DEGRADED_DATA_POLICIES = ('empty', 'error')

config_map = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig
}


def get_config(config_name: str = 'development'):
    """Get configuration class by name."""
    return config_map.get(config_name, DevelopmentConfig)


def validate_config(config_name: str = 'development') -> None:
    """
    Validate configuration before app startup.

    Raises:
        RuntimeError: If validation fails in production
    """
    if config_name == 'production':
        ProductionConfig.validate()
