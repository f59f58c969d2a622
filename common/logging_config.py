import logging
import os
import re
import sys
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class SensitiveDataFilter(logging.Filter):
    """Filter to mask credentials and share capabilities in log records."""

    MASK = r'\1***MASKED***'

    PATTERNS = [
        (re.compile(r'(token["\']?\s*[:=]\s*["\']?)([^"\'}\s,\]]+)', re.IGNORECASE), MASK),
        (re.compile(r'(/share/)([^/\s?"\']+)', re.IGNORECASE), MASK),
        (re.compile(r'(authorization["\']?\s*[:=]\s*["\']?)([^"\'}\s,]+)', re.IGNORECASE), MASK),
        (re.compile(r'(bearer\s+)([^\s,}\'\"]+)', re.IGNORECASE), MASK),
        (re.compile(r'(cookie["\']?\s*[:=]\s*["\']?)([^"\'}\s,]+)', re.IGNORECASE), MASK),
        (re.compile(r'(secret["\']?\s*[:=]\s*["\']?)([^"\'}\s,]+)', re.IGNORECASE), MASK),
    ]

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = self._mask(record.msg)

        if record.args:
            if isinstance(record.args, dict):
                record.args = {k: self._mask(v) for k, v in record.args.items()}
            elif isinstance(record.args, tuple):
                record.args = tuple(self._mask(arg) for arg in record.args)

        return True

    def _mask(self, value):
        if not isinstance(value, str):
            return value
        for pattern, replacement in self.PATTERNS:
            value = pattern.sub(replacement, value)
        return value


def setup_logging(component_name: str, log_level: Optional[str] = None) -> logging.Logger:
    """
    Configure logging for a component.

    Handlers are attached to the component logger and to the root logger so
    that module loggers obtained through get_logger() share the same output.

    Args:
        component_name: Name of the component (e.g., 'shareline')
        log_level: DEBUG, INFO, WARNING or ERROR. Defaults to the LOG_LEVEL env var or INFO

    Returns:
        Configured component logger
    """
    if log_level is None:
        log_level = os.getenv('LOG_LEVEL', 'INFO')

    level = getattr(logging, log_level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)

    if not any(getattr(h, '_shareline_handler', False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
        handler.addFilter(SensitiveDataFilter())
        handler._shareline_handler = True
        root.addHandler(handler)

    logger = logging.getLogger(component_name)
    logger.setLevel(level)
    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a module logger.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
