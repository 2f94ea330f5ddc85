"""Configuration management."""

import json
import yaml
from pathlib import Path
from typing import Dict, Any


def read_document(file_path: str) -> Any:
    """Read a YAML or JSON document."""
    path = Path(file_path)

    if not path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    with open(path, 'r') as f:
        if path.suffix.lower() in ['.yaml', '.yml']:
            return yaml.safe_load(f)
        elif path.suffix.lower() == '.json':
            return json.load(f)
        else:
            raise ValueError(f"Unsupported file format: {path.suffix}")


def load_config(config_path: str) -> Dict[str, Any]:
    """Load configuration from YAML or JSON file, on top of the defaults."""
    data = read_document(config_path) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping: {config_path}")
    return merge_config(get_default_config(), data)


def merge_config(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively overlay ``override`` on ``base`` without mutating either."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = value
    return merged


def get_default_config() -> Dict[str, Any]:
    """Get default configuration."""
    return {
        'settings': {
            'desired_sleep_duration': 8,
            'default_wake_time': '06:00',
            'default_sleep_time': '23:00',
        },
        'scheduling': {
            'min_gap_minutes': 5,
            'time_windows': {
                'morning': ['06:00', '12:00'],
                'afternoon': ['12:00', '18:00'],
                'evening': ['18:00', '23:00'],
                'anytime': ['06:00', '23:00'],
            },
        },
        'timeline': {
            'max_lanes': 3,
        },
        'tie_break': {
            'mandatory_first': True,
            'longer_first': True,
        },
        'generator': {
            'template_count': 12,
        },
    }
