"""Utility functions."""

from .config import load_config, get_default_config
from .datetime_utils import from_minutes, parse_date, to_minutes

__all__ = ['load_config', 'get_default_config', 'from_minutes', 'parse_date', 'to_minutes']
