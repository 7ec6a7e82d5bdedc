"""
Domain services for the attendance time clock.
"""

from .clock import Clock, DayWindow, coerce_number, to_utc

__all__ = [
    "Clock",
    "DayWindow",
    "coerce_number",
    "to_utc",
]
