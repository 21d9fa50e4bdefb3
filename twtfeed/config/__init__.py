"""Configuration package exports."""

from .loader import ConfigLocator, ConfigRepository
from .models import ClientConfig, SortOrder, TwtxtSettings, parse_duration, parse_time_bound

__all__ = [
    "ClientConfig",
    "ConfigLocator",
    "ConfigRepository",
    "SortOrder",
    "TwtxtSettings",
    "parse_duration",
    "parse_time_bound",
]
