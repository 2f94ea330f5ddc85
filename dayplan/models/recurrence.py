"""Recurrence rule data models.

Each frequency is its own frozen dataclass so that only the fields relevant to
that frequency exist. A template without a rule (frequency ``none``) simply
has ``recurrence_rule = None``.
"""

from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Optional, Tuple, Union

from ..errors import RecurrenceError
from ..utils.datetime_utils import format_date, parse_date

# dayOfMonth sentinel for "last day of the month"
LAST_DAY = -1


@dataclass(frozen=True)
class Weekdays:
    """Monday through Friday."""


@dataclass(frozen=True)
class Weekends:
    """Saturday and Sunday."""


@dataclass(frozen=True)
class NthWeekday:
    """The nth occurrence of a weekday within its month (Sunday = 0)."""

    day_of_week: int
    nth: int


@dataclass(frozen=True)
class LastWeekday:
    """The final occurrence of a weekday within its month (Sunday = 0)."""

    day_of_week: int


@dataclass(frozen=True)
class BusinessDays:
    """Weekdays that are not holidays."""


CustomPattern = Union[Weekdays, Weekends, NthWeekday, LastWeekday, BusinessDays]


@dataclass(frozen=True)
class _RuleBase:
    interval: int = 1
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    end_after_occurrences: Optional[int] = None


@dataclass(frozen=True)
class DailyRule(_RuleBase):
    frequency = "daily"


@dataclass(frozen=True)
class WeeklyRule(_RuleBase):
    frequency = "weekly"

    days_of_week: Tuple[int, ...] = ()


@dataclass(frozen=True)
class MonthlyRule(_RuleBase):
    frequency = "monthly"

    day_of_month: Optional[int] = None


@dataclass(frozen=True)
class YearlyRule(_RuleBase):
    frequency = "yearly"

    month: Optional[int] = None
    day_of_month: Optional[int] = None


@dataclass(frozen=True)
class CustomRule(_RuleBase):
    frequency = "custom"

    pattern: Optional[CustomPattern] = None


RecurrenceRule = Union[DailyRule, WeeklyRule, MonthlyRule, YearlyRule, CustomRule]

FREQUENCIES = ("none", "daily", "weekly", "monthly", "yearly", "custom")


def _optional_date(value: Any) -> Optional[date]:
    if value in (None, ""):
        return None
    return parse_date(value)


def pattern_from_dict(data: Dict[str, Any]) -> CustomPattern:
    """Build a custom pattern from ``{'type': ..., ...}``."""
    kind = data.get("type")
    if kind == "weekdays":
        return Weekdays()
    if kind == "weekends":
        return Weekends()
    if kind == "business_days":
        return BusinessDays()
    if kind == "nth_weekday":
        return NthWeekday(day_of_week=data.get("day_of_week"), nth=data.get("nth_week", data.get("nth")))
    if kind == "last_weekday":
        return LastWeekday(day_of_week=data.get("day_of_week"))
    raise RecurrenceError(f"Unknown custom pattern: {kind!r}", [f"Unknown custom pattern: {kind}"])


def rule_from_dict(data: Optional[Dict[str, Any]]) -> Optional[RecurrenceRule]:
    """Parse the mapping form of a rule; frequency ``none`` yields ``None``."""
    if not data:
        return None
    frequency = data.get("frequency", "none")
    if frequency not in FREQUENCIES:
        raise RecurrenceError(f"Invalid frequency: {frequency!r}", ["Invalid frequency"])
    if frequency == "none":
        return None

    common = {
        "interval": data.get("interval", 1),
        "start_date": _optional_date(data.get("start_date")),
        "end_date": _optional_date(data.get("end_date")),
        "end_after_occurrences": data.get("end_after_occurrences"),
    }

    if frequency == "daily":
        return DailyRule(**common)
    if frequency == "weekly":
        return WeeklyRule(days_of_week=tuple(data.get("days_of_week") or ()), **common)
    if frequency == "monthly":
        return MonthlyRule(day_of_month=data.get("day_of_month"), **common)
    if frequency == "yearly":
        return YearlyRule(month=data.get("month"), day_of_month=data.get("day_of_month"), **common)
    pattern = data.get("custom_pattern")
    return CustomRule(pattern=pattern_from_dict(pattern) if pattern else None, **common)


def rule_to_dict(rule: Optional[RecurrenceRule]) -> Dict[str, Any]:
    """Inverse of :func:`rule_from_dict`, omitting unset fields."""
    if rule is None:
        return {"frequency": "none"}

    out: Dict[str, Any] = {"frequency": rule.frequency, "interval": rule.interval}
    if rule.start_date:
        out["start_date"] = format_date(rule.start_date)
    if rule.end_date:
        out["end_date"] = format_date(rule.end_date)
    if rule.end_after_occurrences is not None:
        out["end_after_occurrences"] = rule.end_after_occurrences

    if isinstance(rule, WeeklyRule):
        out["days_of_week"] = list(rule.days_of_week)
    elif isinstance(rule, MonthlyRule):
        out["day_of_month"] = rule.day_of_month
    elif isinstance(rule, YearlyRule):
        out["month"] = rule.month
        out["day_of_month"] = rule.day_of_month
    elif isinstance(rule, CustomRule) and rule.pattern is not None:
        p = rule.pattern
        if isinstance(p, Weekdays):
            out["custom_pattern"] = {"type": "weekdays"}
        elif isinstance(p, Weekends):
            out["custom_pattern"] = {"type": "weekends"}
        elif isinstance(p, BusinessDays):
            out["custom_pattern"] = {"type": "business_days"}
        elif isinstance(p, NthWeekday):
            out["custom_pattern"] = {"type": "nth_weekday", "day_of_week": p.day_of_week, "nth_week": p.nth}
        elif isinstance(p, LastWeekday):
            out["custom_pattern"] = {"type": "last_weekday", "day_of_week": p.day_of_week}
    return out
