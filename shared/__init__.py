"""
Shared utilities for the share broker.

- logging_config: logging setup and per-operation start/end logging
- _int_env / _str_env: typed readers for SHAREBROKER_* settings
"""
import os


def _str_env(name: str, default: str) -> str:
    return str(os.getenv(name, default)).strip()


def _int_env(name: str, default: int) -> int:
    """Integer setting; unset or unparsable values fall back to default."""
    try:
        return int(_str_env(name, str(default)))
    except ValueError:
        return default
