"""
Utility modules for the weather logger backend.
"""

from weather_logger.utils.validation import (
    MAX_HISTORY_LIMIT,
    MAX_WINDOW_HOURS,
    validate_temperature,
    validate_percentage,
    validate_window_hours,
    clamp_limit,
    sanitize_filename
)

__all__ = [
    "MAX_HISTORY_LIMIT",
    "MAX_WINDOW_HOURS",
    "validate_temperature",
    "validate_percentage",
    "validate_window_hours",
    "clamp_limit",
    "sanitize_filename",
]
