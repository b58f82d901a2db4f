# songfinder/utils/__init__.py
"""
Utilities package
Logging setup, deadline tokens and text helpers
"""

from .logger import (
    get_logger,
    configure_from_settings,
    setup_logging,
    OperationLogger,
    log_performance,
)
from .helpers import (
    truncate_string,
    clean_lyrics_text,
    validate_lyrics_content,
)
from .deadline import Deadline, DeadlineExceeded

__all__ = [
    'get_logger',
    'configure_from_settings',
    'setup_logging',
    'OperationLogger',
    'log_performance',
    'truncate_string',
    'clean_lyrics_text',
    'validate_lyrics_content',
    'Deadline',
    'DeadlineExceeded',
]
