"""Scheduling engine components."""

from .dependencies import DependencyResolver, build_by_id, get_dependency_status
from .filtering import filter_templates, sort_templates
from .gaps import detect_gaps, merge_intervals
from .lanes import LaneAssigner, assign_lanes
from .recurrence import RecurrenceEngine, ValidationResult, validate_rule
from .scheduler import SchedulingEngine, build_schedule

__all__ = [
    'DependencyResolver', 'build_by_id', 'get_dependency_status',
    'filter_templates', 'sort_templates',
    'detect_gaps', 'merge_intervals',
    'LaneAssigner', 'assign_lanes',
    'RecurrenceEngine', 'ValidationResult', 'validate_rule',
    'SchedulingEngine', 'build_schedule',
]
