"""
Logging configuration for share broker services.

setup_logging() is called once per process (broker API or helper script);
logged_operation() brackets broker operations with start/end log lines.
"""

import functools
import logging
import sys
from pathlib import Path
from typing import Callable, Optional, Union

DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def _resolve_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(
    component_name: str,
    level: Union[int, str] = logging.INFO,
    log_file: Optional[str] = None,
    format_string: Optional[str] = None
) -> logging.Logger:
    """
    Send broker logs to stdout, and to log_file when one is configured.

    Args:
        component_name: Tag shown in every line (e.g., 'broker', 'smoke')
        level: Level number or name such as 'DEBUG'; unknown names fall back to INFO
        log_file: Optional path; parent directories are created
        format_string: Overrides the '[time] [COMPONENT] LEVEL - message' layout
    """
    level = _resolve_level(level)
    formatter = logging.Formatter(
        format_string or f'[%(asctime)s] [{component_name.upper()}] %(levelname)s - %(message)s',
        datefmt=DATE_FORMAT,
    )

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))
    for handler in handlers:
        handler.setFormatter(formatter)

    logging.basicConfig(level=level, handlers=handlers)

    logger = logging.getLogger(component_name)
    logger.info(f"{component_name.upper()} logging initialized (level={logging.getLevelName(level)})")
    return logger


def logged_operation(operation: str, logger: Optional[logging.Logger] = None) -> Callable:
    """
    Log '<operation>.start' and '<operation>.end' around a call.

    Exceptions are logged as '<operation>.failed' and re-raised unchanged.
    """
    def decorator(func: Callable) -> Callable:
        log = logger or logging.getLogger(func.__module__)

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            log.info(f"{operation}.start")
            try:
                return func(*args, **kwargs)
            except Exception as exc:
                log.error(f"{operation}.failed: {exc}")
                raise
            finally:
                log.info(f"{operation}.end")

        return wrapper

    return decorator
