"""Utility modules for metagen.

This package contains shared utilities and helper functions that support the
generation pipeline. The utilities are organized into specialized modules for
different concerns:

- config.py: Environment variable management for API keys and file locations
- text.py: Length enforcement, phrase cleanup and word-boundary truncation
- monitoring.py: Usage and cost accounting over audit log entries
- __init__.py: Centralized imports and common utilities like logging

Integration Points:
    - The config module provides access to the API key and default file
      locations used by the settings loader and the CLI
    - The text module is shared by every provider and orchestrator so alt text,
      titles and descriptions are post-processed identically
    - The logger utility ensures consistent log formatting across all modules

Python Learning Notes:
    - This __init__.py file serves as a package initializer and public API
    - The __all__ list at the bottom controls what gets imported with "from utils import *"
    - Type hints (Optional[str], logging.Logger) help with code clarity and IDE support
    - The logging configuration follows Python's standard logging module patterns
"""

import logging
import logging.config
from pathlib import Path
from typing import Optional

import yaml

from .config import get_api_key, get_audit_log_path, get_settings_path

# Global flag to track if logging has been configured
_logging_configured = False

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(config_path: Optional[Path] = None, verbose: bool = False) -> None:
    """Set up logging configuration from YAML file.

    This function configures the entire logging system using a YAML configuration
    file. It should be called once at application startup, typically by the CLI
    before any other modules request loggers.

    The logging configuration includes:
    - A console handler writing to stderr so stdout stays free for JSON results
    - Package-level log levels for metagen and the HTTP libraries it uses
    - A shared format string matching LOG_FORMAT

    When the YAML file cannot be found (for example when the package is installed
    without the repository checkout), logging falls back to basicConfig with the
    same format so library users still get readable output.

    Python Learning Notes:
        - logging.config.dictConfig() applies a complete logging configuration
        - YAML files provide a clean way to define complex logging setups
        - Global configuration means all subsequent getLogger() calls use this setup

    Args:
        config_path (Optional[Path]): Path to the logging configuration YAML file.
            If None, defaults to 'logging_config.yaml' in the project root.
        verbose (bool): When True the metagen logger is switched to DEBUG after
            the configuration is applied.

    Raises:
        yaml.YAMLError: If the YAML configuration file is malformed.

    Example Usage:
        ```python
        from metagen.utils import setup_logging

        setup_logging()  # Uses default config
        # Now all modules can use: logger = logging.getLogger(__name__)
        ```
    """
    global _logging_configured

    if _logging_configured and not verbose:
        return

    if config_path is None:
        # Default to logging_config.yaml in project root
        project_root = Path(__file__).parent.parent.parent.parent
        config_path = project_root / "logging_config.yaml"

    if config_path.exists():
        with open(config_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)
        logging.config.dictConfig(config)
    else:
        logging.basicConfig(
            level=logging.INFO, format=LOG_FORMAT, datefmt=LOG_DATE_FORMAT
        )
        # Reduce noise from the HTTP stack
        logging.getLogger("openai").setLevel(logging.WARNING)
        logging.getLogger("httpx").setLevel(logging.WARNING)

    if verbose:
        logging.getLogger("metagen").setLevel(logging.DEBUG)

    _logging_configured = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a logger instance using the centralized logging configuration.

    This function returns a logger that uses the configuration set up by
    setup_logging(). If setup_logging() hasn't been called yet, it will
    be called automatically with default settings.

    Python Learning Notes:
        - logging.getLogger() with YAML config automatically applies the right setup
        - Module names (like 'metagen.generators.alt_tag') are matched
          against logger patterns in the YAML config
        - No manual handler setup needed - everything comes from the config file

    Args:
        name (Optional[str]): Logger name to use. If None, defaults to the utils
            module's __name__. For module-specific logging, pass __name__ explicitly.

    Returns:
        logging.Logger: A configured logger instance.

    Example Usage:
        ```python
        from metagen.utils import get_logger

        logger = get_logger(__name__)
        logger.info("General information")
        ```
    """
    # Ensure logging is configured before returning any logger
    if not _logging_configured:
        setup_logging()

    return logging.getLogger(name or __name__)


__all__ = [
    "get_api_key",
    "get_audit_log_path",
    "get_settings_path",
    "setup_logging",
    "get_logger",
]
