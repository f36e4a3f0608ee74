import logging
import os
import re
import sys
from typing import Iterable, Optional, TextIO

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Runs of base64 longer than this are replaced by their length in log output.
MAX_LOGGED_BASE64_CHARS = 120


class SensitiveDataFilter(logging.Filter):
    """Mask credentials and wallet keys, and shorten chunk payloads, in log records."""

    SECRET_KEYS = ('private[_-]?key', 'api[_-]?key', 'token', 'authorization', 'secret')

    PATTERNS = [
        (re.compile(rf'(({"|".join(SECRET_KEYS)})["\']?\s*[:=]\s*["\']?)([^"\'}}\s,]+)', re.IGNORECASE),
         r'\1***MASKED***'),
        (re.compile(r'(bearer\s+)([^\s,}\'\"]+)', re.IGNORECASE), r'\1***MASKED***'),
        (re.compile(r'\b0x[0-9a-fA-F]{64}\b'), '***MASKED***'),
    ]

    BASE64_RUN = re.compile(rf'[A-Za-z0-9+/]{{{MAX_LOGGED_BASE64_CHARS},}}={{0,2}}')

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = self._mask_value(record.msg)

        if record.args:
            if isinstance(record.args, dict):
                record.args = {k: self._mask_value(v) for k, v in record.args.items()}
            elif isinstance(record.args, tuple):
                record.args = tuple(self._mask_value(arg) for arg in record.args)

        return True

    def _mask_value(self, value):
        if not isinstance(value, str):
            return value
        for pattern, replacement in self.PATTERNS:
            value = pattern.sub(replacement, value)
        return self.BASE64_RUN.sub(lambda m: f'<base64 {len(m.group(0))} chars>', value)


def _resolve_level(log_level: Optional[str]) -> int:
    if log_level is None:
        log_level = os.getenv('LOG_LEVEL', 'INFO')
    return getattr(logging, log_level.upper(), logging.INFO)


def setup_logging(
    component_name: str,
    log_level: Optional[str] = None,
    correlation_id: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """
    Set up logging configuration for a component.

    Args:
        component_name: Top-level package to configure ('transfer', 'gateway', 'cli')
        log_level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to LOG_LEVEL env var or INFO
        correlation_id: Optional id (e.g. a chunk set id) included in every line
        stream: Output stream, stderr by default so progress output on stdout stays clean

    Returns:
        Configured logger instance
    """
    level = _resolve_level(log_level)

    logger = logging.getLogger(component_name)
    logger.setLevel(level)

    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    fmt = LOG_FORMAT
    if correlation_id:
        fmt = fmt.replace('%(message)s', f'[{correlation_id}] - %(message)s')

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=LOG_DATE_FORMAT))
    handler.addFilter(SensitiveDataFilter())

    logger.addHandler(handler)
    logger.propagate = False

    return logger


def configure_components(components: Iterable[str], log_level: Optional[str] = None) -> None:
    """Apply ``setup_logging`` to several top-level packages at once."""
    for component in components:
        setup_logging(component, log_level=log_level)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the given name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
