"""Logging and correlation utilities"""

from .logging_config import (
    setup_logging,
    get_logger,
    set_correlation_id,
    get_correlation_id,
    set_player_id,
    log_performance
)

__all__ = [
    "setup_logging",
    "get_logger",
    "set_correlation_id",
    "get_correlation_id",
    "set_player_id",
    "log_performance"
]
