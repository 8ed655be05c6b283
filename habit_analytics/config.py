"""Configuration management"""
import logging
import os
from dotenv import load_dotenv

from habit_analytics.exceptions import ConfigurationError

load_dotenv()

# Logging
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT: str = os.getenv("LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")

# When enabled, the insight selector logs every finding it surfaces at INFO
ANALYTICS_LOG_FINDINGS: bool = os.getenv("ANALYTICS_LOG_FINDINGS", "false").lower() == "true"

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def validate_config() -> None:
    """Validate configuration values"""
    if LOG_LEVEL not in VALID_LOG_LEVELS:
        raise ConfigurationError(
            f"LOG_LEVEL must be one of {', '.join(VALID_LOG_LEVELS)} (got '{LOG_LEVEL}')",
            config_key="LOG_LEVEL",
        )


def setup_logging() -> None:
    """Configure root logging for applications embedding the engine"""
    validate_config()
    logging.basicConfig(
        format=LOG_FORMAT,
        level=getattr(logging, LOG_LEVEL)
    )
