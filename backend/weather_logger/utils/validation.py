"""
Input Validation Utilities
===========================

Common validation functions for sensor readings and query parameters.

The physical ranges below are the same ones the station firmware checks
before it uploads, so anything outside them is a broken sensor or a bad client.
"""

import re


# DHT sensor operating range
MIN_TEMPERATURE_C = -40.0
MAX_TEMPERATURE_C = 80.0

# Window queries
MAX_WINDOW_HOURS = 24 * 365
MAX_HISTORY_LIMIT = 1000


def validate_temperature(value: float) -> bool:
    """
    Validate a temperature reading.

    Args:
        value: Temperature in °C

    Returns:
        True if within the sensor's range, False otherwise
    """
    return MIN_TEMPERATURE_C <= value <= MAX_TEMPERATURE_C


def validate_percentage(value: float) -> bool:
    """
    Validate a percentage reading (humidity, rain sensor wetness).

    Args:
        value: Percentage value

    Returns:
        True if 0-100, False otherwise
    """
    return 0 <= value <= 100


def validate_window_hours(hours: int) -> bool:
    """
    Validate the size of a time window (must be positive and at most a year).

    Args:
        hours: Window size in hours

    Returns:
        True if valid, False otherwise
    """
    return 1 <= hours <= MAX_WINDOW_HOURS


def clamp_limit(limit: int) -> int:
    """Cap a result limit at MAX_HISTORY_LIMIT rows."""
    return min(limit, MAX_HISTORY_LIMIT)


def sanitize_filename(name: str) -> str:
    """
    Sanitize a filename down to plain ASCII letters, digits, "_", "-" and ".".

    Anything else (spaces, slashes, quotes, accented letters) becomes "_",
    so the name is always safe in a Content-Disposition header.

    Args:
        name: Original filename

    Returns:
        Sanitized filename safe for filesystem
    """
    sanitized = re.sub(r"[^A-Za-z0-9_.-]", "_", name)
    # Remove leading/trailing dots and spaces
    sanitized = sanitized.strip('. ')
    # Limit length
    return sanitized[:255]
