"""
Utils package - Shared utilities
"""
from .logging_utils import (
    LoggerAdapter,
    JsonFormatter,
    configure_from_config,
    get_logger,
    setup_json_logging,
    setup_logging,
)
from .extractor import SafeFieldExtractor
from .metrics import ListenerMetrics, RelayMetrics
from .date_utils import (
    current_season,
    epoch_millis,
    epoch_seconds,
    parse_display_date,
    parse_iso_datetime,
    today_display,
    utc_now,
)

__all__ = [
    'LoggerAdapter', 'JsonFormatter', 'configure_from_config', 'get_logger',
    'setup_json_logging', 'setup_logging',
    'SafeFieldExtractor',
    'ListenerMetrics', 'RelayMetrics',
    'current_season', 'epoch_millis', 'epoch_seconds', 'parse_display_date',
    'parse_iso_datetime', 'today_display', 'utc_now',
]
