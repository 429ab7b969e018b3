"""Configuration management for metagen.

This module provides access to credentials and file locations through
environment variables. The global AI settings record itself comes from the
document store (or a settings file, see metagen.settings); the values here fill
the gaps that a deployment keeps outside that record.

Environment Variable Setup:
    ```
    METAGEN_API_KEY=sk-...            # preferred
    OPENAI_API_KEY=sk-...             # used when METAGEN_API_KEY is unset
    METAGEN_SETTINGS=ai_settings.yaml
    METAGEN_AUDIT_LOG=logs/ai_logs.jsonl
    ```

Python Learning Notes:
    - os.getenv() safely reads environment variables without raising errors
    - ValueError is raised for missing required credentials to fail fast
    - The pattern of checking "if not key" works because empty strings are falsy
"""

import os
from pathlib import Path

DEFAULT_SETTINGS_FILE = "ai_settings.yaml"
DEFAULT_AUDIT_LOG_FILE = "logs/ai_logs.jsonl"


def get_api_key() -> str:
    """Get the AI provider API key from environment variables.

    METAGEN_API_KEY wins over OPENAI_API_KEY so a deployment can point metagen
    at a different account than other OpenAI tooling on the same machine.

    Returns:
        str: The API key for the configured provider.

    Raises:
        ValueError: If neither METAGEN_API_KEY nor OPENAI_API_KEY is set or
            both are empty.

    Example Usage:
        ```python
        from metagen.utils.config import get_api_key

        try:
            api_key = get_api_key()
        except ValueError as e:
            logger.error(f"Configuration error: {e}")
        ```
    """
    key = os.getenv("METAGEN_API_KEY") or os.getenv("OPENAI_API_KEY")

    if not key or not key.strip():
        raise ValueError(
            "METAGEN_API_KEY or OPENAI_API_KEY not found in environment variables. "
            "Set it in the environment, in a .env file read by the metagen CLI, "
            "or in the AI settings record."
        )

    return key.strip()


def get_settings_path() -> Path:
    """Return the AI settings file location (METAGEN_SETTINGS or the default)."""
    return Path(os.getenv("METAGEN_SETTINGS") or DEFAULT_SETTINGS_FILE)


def get_audit_log_path() -> Path:
    """Return the JSON lines audit log location (METAGEN_AUDIT_LOG or the default)."""
    return Path(os.getenv("METAGEN_AUDIT_LOG") or DEFAULT_AUDIT_LOG_FILE)
