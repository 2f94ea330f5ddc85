"""Data models for templates, recurrence rules and schedules."""

from .recurrence import (
    LAST_DAY,
    BusinessDays,
    CustomRule,
    DailyRule,
    LastWeekday,
    MonthlyRule,
    NthWeekday,
    WeeklyRule,
    Weekdays,
    Weekends,
    YearlyRule,
    rule_from_dict,
    rule_to_dict,
)
from .schedule import (
    DependencyInfo,
    Gap,
    Interval,
    LaneAssignment,
    ScheduleBlock,
    ScheduleResult,
    SchedulingDecision,
    SleepSchedule,
    TimelineBlock,
)
from .task import DailyOverride, Settings, TaskInstance, TaskTemplate

__all__ = [
    'LAST_DAY', 'BusinessDays', 'CustomRule', 'DailyRule', 'LastWeekday', 'MonthlyRule',
    'NthWeekday', 'WeeklyRule', 'Weekdays', 'Weekends', 'YearlyRule', 'rule_from_dict',
    'rule_to_dict', 'DependencyInfo', 'Gap', 'Interval', 'LaneAssignment', 'ScheduleBlock',
    'ScheduleResult', 'SchedulingDecision', 'SleepSchedule', 'TimelineBlock',
    'DailyOverride', 'Settings', 'TaskInstance', 'TaskTemplate',
]
