"""Logging utilities for LiveRugby."""
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

DEFAULT_LOGGER_NAME = "liverugby"
DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'


def setup_logging(
    name: str = DEFAULT_LOGGER_NAME,
    log_dir: str = "logs",
    log_level: str = "INFO",
    log_format: Optional[str] = None,
    log_to_file: bool = True,
    date_suffix: Optional[str] = None
) -> logging.Logger:
    """
    Configure logging to console and, optionally, a date-specific log file.
    Args:
        name: Logger name
        log_dir: Directory to store log files
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Custom log format string
        log_to_file: Also write to {log_dir}/{name}_{date}.log
        date_suffix: Optional date suffix for log filename (e.g., '20250101')
    Returns:
        Configured logger instance
    """
    level = getattr(logging, log_level.upper())
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False
    logger.handlers = []
    formatter = logging.Formatter(log_format or DEFAULT_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(level)
    logger.addHandler(console_handler)

    if log_to_file:
        Path(log_dir).mkdir(parents=True, exist_ok=True)
        suffix = date_suffix or datetime.now().strftime('%Y%m%d')
        log_file = Path(log_dir) / f"{name}_{suffix}.log"
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(formatter)
        file_handler.setLevel(level)
        logger.addHandler(file_handler)
        logger.info(f"Logging initialized. Log file: {log_file}")
    return logger


def get_logger(name: str = DEFAULT_LOGGER_NAME) -> logging.Logger:
    """
    Get an existing logger or create a console-only one.
    Args:
        name: Logger name
    Returns:
        Logger instance
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        return setup_logging(name=name, log_to_file=False)
    return logger


class LoggerAdapter(logging.LoggerAdapter):
    """
    Logger adapter that prefixes messages with context.
    Usage:
        logger = LoggerAdapter(base_logger, {'match_id': 49925})
        logger.info("Snapshot received")
    """
    def process(self, msg, kwargs):
        """Add extra context to log messages."""
        if self.extra:
            context = ' | '.join(f"{k}={v}" for k, v in self.extra.items())
            msg = f"[{context}] {msg}"
        return msg, kwargs


_RESERVED_RECORD_KEYS = frozenset((
    'name', 'msg', 'args', 'created', 'filename', 'funcName',
    'levelname', 'levelno', 'lineno', 'module', 'msecs',
    'message', 'pathname', 'process', 'processName',
    'relativeCreated', 'thread', 'threadName', 'exc_info',
    'exc_text', 'stack_info', 'taskName',
))


class JsonFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.
    Cloud Functions and Cloud Run ingest one JSON object per line; the
    ``severity`` key is what Cloud Logging reads as the level.
    Example output:
        {"timestamp": "2025-11-26T10:30:00.123Z", "severity": "INFO",
         "logger": "liverugby", "message": "Multicast sent", "match_id": 49925}
    """
    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat() + 'Z',
            "severity": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "function": record.funcName,
            "line": record.lineno,
            "module": record.module,
        }
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            log_data["stack_info"] = self.formatStack(record.stack_info)
        for key, value in record.__dict__.items():
            if key not in _RESERVED_RECORD_KEYS:
                log_data[key] = value
        return json.dumps(log_data, default=str, ensure_ascii=False)


def setup_json_logging(
    name: str = DEFAULT_LOGGER_NAME,
    log_level: str = "INFO",
) -> logging.Logger:
    """
    Configure JSON structured logging on stdout for serverless environments.
    Args:
        name: Logger name
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    Returns:
        Configured logger with JSON formatter
    Example:
        >>> logger = setup_json_logging("liverugby", log_level="DEBUG")
        >>> logger.info("Token pruned", extra={"uid": "abc"})
    """
    level = getattr(logging, log_level.upper())
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False
    logger.handlers = []
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())
    handler.setLevel(level)
    logger.addHandler(handler)
    return logger


def configure_from_config(config) -> logging.Logger:
    """Set up the project logger from a LiveRugbyConfig."""
    if config.logging.json:
        return setup_json_logging(log_level=config.logging.level)
    return setup_logging(
        log_dir=config.logging.dir,
        log_level=config.logging.level,
        log_format=config.logging.format,
    )
