"""Recurrence rule evaluation.

Each rule is compiled to a :mod:`dateutil.rrule` set. ``is_due``, ``expand``
and ``next_occurrence`` all query that one set, so the entry points never
disagree.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import FrozenSet, Iterable, List, Optional

from dateutil.rrule import DAILY, MONTHLY, WEEKLY, YEARLY, FR, MO, SA, SU, TH, TU, WE, rrule, rruleset

from ..errors import RecurrenceError
from ..models.recurrence import (
    LAST_DAY,
    BusinessDays,
    CustomRule,
    DailyRule,
    LastWeekday,
    MonthlyRule,
    NthWeekday,
    RecurrenceRule,
    WeeklyRule,
    Weekdays,
    Weekends,
    YearlyRule,
)
from ..utils.datetime_utils import DateLike, last_day_of_month, months_between, parse_date, week_start

# Interval anchor when neither the rule nor the caller provides one
EPOCH = date(1970, 1, 1)

# Indexed by Sunday = 0 weekday numbers
WEEKDAYS = (SU, MO, TU, WE, TH, FR, SA)
WORKING_DAYS = (MO, TU, WE, TH, FR)


@dataclass
class ValidationResult:
    is_valid: bool = True
    errors: List[str] = field(default_factory=list)

    def add(self, message: str):
        self.is_valid = False
        self.errors.append(message)


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_rule(rule: Optional[RecurrenceRule]) -> ValidationResult:
    """Structural validation of a rule; ``None`` (no recurrence) is valid."""
    result = ValidationResult()
    if rule is None:
        return result

    if not _is_int(rule.interval) or rule.interval < 1:
        result.add("Interval must be a positive integer")

    if rule.start_date and rule.end_date and rule.end_date < rule.start_date:
        result.add("End date must not be before start date")

    if rule.end_after_occurrences is not None:
        if not _is_int(rule.end_after_occurrences) or rule.end_after_occurrences < 1:
            result.add("end_after_occurrences must be a positive integer")
        elif rule.start_date is None:
            result.add("end_after_occurrences requires a start date")

    if isinstance(rule, WeeklyRule):
        if not rule.days_of_week:
            result.add("Weekly rule needs at least one day of week")
        elif not all(_is_int(d) and 0 <= d <= 6 for d in rule.days_of_week):
            result.add("days_of_week must be integers 0-6")

    elif isinstance(rule, (MonthlyRule, YearlyRule)):
        dom = rule.day_of_month
        dom_ok = _is_int(dom) and (1 <= dom <= 31 or dom == LAST_DAY)
        if dom is None:
            result.add("day_of_month is required")
        elif not dom_ok:
            result.add("day_of_month must be an integer 1-31 or -1 for last day")
        if isinstance(rule, YearlyRule):
            if rule.month is None:
                result.add("month is required for yearly rules")
            elif not _is_int(rule.month) or not 1 <= rule.month <= 12:
                result.add("month must be an integer 1-12")
            elif dom_ok and dom > last_day_of_month(2000, rule.month):
                # 2000 is a leap year, so Feb 29 stays valid
                result.add(f"Day {dom} never occurs in month {rule.month}")

    elif isinstance(rule, CustomRule):
        pattern = rule.pattern
        if pattern is None:
            result.add("Custom rule needs a pattern")
        elif isinstance(pattern, (NthWeekday, LastWeekday)):
            if not _is_int(pattern.day_of_week) or not 0 <= pattern.day_of_week <= 6:
                result.add("Pattern day_of_week must be an integer 0-6")
            if isinstance(pattern, NthWeekday) and (not _is_int(pattern.nth) or not 1 <= pattern.nth <= 5):
                result.add("nth_week must be an integer 1-5")

    elif not isinstance(rule, DailyRule):
        result.add("Invalid frequency")

    return result


class RecurrenceEngine:
    """Evaluates recurrence rules against dates.

    ``holidays`` feeds the ``business_days`` pattern; without it that pattern
    behaves like ``weekdays``. Holidays are excluded after occurrence
    counting, so a holiday still uses up one of ``end_after_occurrences``.
    """

    def __init__(self, holidays: Optional[Iterable[DateLike]] = None):
        self.holidays: FrozenSet[date] = frozenset(parse_date(h) for h in (holidays or ()))

    def validate_rule(self, rule: Optional[RecurrenceRule]) -> ValidationResult:
        return validate_rule(rule)

    def is_due(
        self,
        rule: Optional[RecurrenceRule],
        candidate_date: DateLike,
        anchor: Optional[DateLike] = None,
    ) -> bool:
        """Whether ``rule`` produces an occurrence on ``candidate_date``."""
        if rule is None:
            return True
        day = parse_date(candidate_date)
        return bool(self.expand(rule, day, day, anchor))

    def expand(
        self,
        rule: Optional[RecurrenceRule],
        range_start: DateLike,
        range_end: DateLike,
        anchor: Optional[DateLike] = None,
    ) -> List[date]:
        """All due dates in ``[range_start, range_end]``, ascending.

        A template without a rule has no occurrences of its own to expand.
        """
        if rule is None:
            return []
        self._check(rule)
        start = parse_date(range_start)
        end = parse_date(range_end)
        if rule.end_date and end > rule.end_date:
            end = rule.end_date
        if end < start:
            return []

        occurrences = self._compile(rule, self._anchor(rule, anchor), start)
        return [d.date() for d in occurrences.between(_midnight(start), _midnight(end), inc=True)]

    def next_occurrence(
        self,
        rule: Optional[RecurrenceRule],
        from_date: DateLike,
        anchor: Optional[DateLike] = None,
    ) -> Optional[date]:
        """First due date strictly after ``from_date``, if the rule has one."""
        if rule is None:
            return None
        self._check(rule)
        first = parse_date(from_date) + timedelta(days=1)
        if rule.end_date and first > rule.end_date:
            return None

        found = self._compile(rule, self._anchor(rule, anchor), first).after(_midnight(first), inc=True)
        if found is None or (rule.end_date and found.date() > rule.end_date):
            return None
        return found.date()

    def _check(self, rule: RecurrenceRule):
        result = validate_rule(rule)
        if not result.is_valid:
            raise RecurrenceError(f"Invalid recurrence rule: {'; '.join(result.errors)}", result.errors)

    def _anchor(self, rule: RecurrenceRule, anchor: Optional[DateLike]) -> date:
        if rule.start_date:
            return rule.start_date
        if anchor is not None:
            return parse_date(anchor)
        return EPOCH

    def _compile(self, rule: RecurrenceRule, base: date, floor: date) -> rruleset:
        """Build the occurrence set for ``rule``, started close to ``floor``."""
        options = {'dtstart': _midnight(_dtstart(rule, base, floor)), 'wkst': SU}
        if rule.end_after_occurrences is not None:
            options['count'] = rule.end_after_occurrences
        elif rule.end_date:
            options['until'] = _midnight(rule.end_date)

        if isinstance(rule, DailyRule):
            recurrence = rrule(DAILY, interval=rule.interval, **options)
        elif isinstance(rule, WeeklyRule):
            byweekday = [WEEKDAYS[d] for d in rule.days_of_week]
            recurrence = rrule(WEEKLY, interval=rule.interval, byweekday=byweekday, **options)
        elif isinstance(rule, MonthlyRule):
            recurrence = rrule(MONTHLY, interval=rule.interval, bymonthday=rule.day_of_month, **options)
        elif isinstance(rule, YearlyRule):
            recurrence = rrule(
                YEARLY, interval=rule.interval, bymonth=rule.month, bymonthday=rule.day_of_month, **options
            )
        else:
            recurrence = _pattern_rrule(rule.pattern, options)

        occurrences = rruleset()
        occurrences.rrule(recurrence)
        if isinstance(rule, CustomRule) and isinstance(rule.pattern, BusinessDays):
            for holiday in sorted(self.holidays):
                occurrences.exdate(_midnight(holiday))
        return occurrences


def _pattern_rrule(pattern, options: dict) -> rrule:
    """Custom patterns repeat on every eligible day; ``interval`` does not apply."""
    if isinstance(pattern, (Weekdays, BusinessDays)):
        return rrule(DAILY, byweekday=WORKING_DAYS, **options)
    if isinstance(pattern, Weekends):
        return rrule(DAILY, byweekday=(SA, SU), **options)
    if isinstance(pattern, NthWeekday):
        return rrule(MONTHLY, byweekday=WEEKDAYS[pattern.day_of_week](+pattern.nth), **options)
    if isinstance(pattern, LastWeekday):
        return rrule(MONTHLY, byweekday=WEEKDAYS[pattern.day_of_week](-1), **options)
    raise RecurrenceError(f"Unsupported custom pattern: {pattern!r}", ["Unsupported custom pattern"])


def _dtstart(rule: RecurrenceRule, base: date, floor: date) -> date:
    """Start of the rule's period containing ``floor``, in phase with ``base``.

    Rules counted by ``end_after_occurrences`` start at their start date. For
    the rest the anchor only fixes the interval phase, so the rule is started
    at the nearest in-phase period instead of iterating from the anchor.
    """
    if rule.end_after_occurrences is not None:
        return base

    if isinstance(rule, DailyRule):
        days = (floor - base).days
        start = base + timedelta(days=days - days % rule.interval)
    elif isinstance(rule, WeeklyRule):
        weeks = (week_start(floor) - week_start(base)).days // 7
        start = week_start(base) + timedelta(weeks=weeks - weeks % rule.interval)
    elif isinstance(rule, MonthlyRule):
        months = months_between(base, floor)
        start = _add_months(base.replace(day=1), months - months % rule.interval)
    elif isinstance(rule, YearlyRule):
        years = floor.year - base.year
        start = date(base.year + years - years % rule.interval, 1, 1)
    elif isinstance(rule.pattern, (NthWeekday, LastWeekday)):
        start = floor.replace(day=1)
    else:
        start = floor

    if rule.start_date and start < rule.start_date:
        return rule.start_date
    return start


def _add_months(value: date, months: int) -> date:
    years, month_index = divmod(value.month - 1 + months, 12)
    return value.replace(year=value.year + years, month=month_index + 1)


def _midnight(value: date) -> datetime:
    return datetime(value.year, value.month, value.day)
