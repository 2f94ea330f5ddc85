"""Core scheduling engine."""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from ..errors import RecurrenceError, ScheduleInputError
from ..models.schedule import (
    Gap,
    Interval,
    ScheduleBlock,
    ScheduleResult,
    SchedulingDecision,
    SleepSchedule,
)
from ..models.task import DailyOverride, Settings, TaskInstance, TaskTemplate
from ..policies.base import PlacementPolicy
from ..policies.priority import PriorityPolicy
from ..utils.config import get_default_config
from ..utils.datetime_utils import DateLike, format_date, from_minutes, parse_date, to_minutes
from .dependencies import OK, DependencyResolver
from .gaps import DEFAULT_MIN_GAP_MINUTES, detect_gaps
from .recurrence import RecurrenceEngine

logger = logging.getLogger(__name__)


class _Anchor:
    """A task pinned to a time of day."""

    def __init__(self, template: TaskTemplate, start: int, instance: Optional[TaskInstance], overridden: bool):
        self.template = template
        self.start = start
        self.end = start + template.duration_minutes
        self.instance = instance
        self.overridden = overridden


class SchedulingEngine:
    """Builds a conflict-aware schedule for a single date.

    Fixed tasks are pinned first; flexible tasks are then placed greedily, in
    policy order, into the earliest free gap that fits. Greedy first-fit is
    not globally optimal, which is acceptable for one person's day.
    """

    def __init__(
        self,
        config: Optional[dict] = None,
        policy: Optional[PlacementPolicy] = None,
        recurrence: Optional[RecurrenceEngine] = None,
    ):
        """Initialize engine with configuration."""
        self.config = config or get_default_config()
        self.scheduling_config = self.config.get('scheduling', {})
        self.min_gap_minutes = self.scheduling_config.get('min_gap_minutes', DEFAULT_MIN_GAP_MINUTES)
        self.time_windows = self.scheduling_config.get(
            'time_windows', get_default_config()['scheduling']['time_windows']
        )
        self.policy = policy or PriorityPolicy(self.config)
        self.recurrence = recurrence or RecurrenceEngine()

    def build_schedule(
        self,
        date: DateLike,
        templates: Sequence[TaskTemplate],
        instances: Sequence[TaskInstance],
        settings: Settings,
        daily_override: Optional[DailyOverride] = None,
        current_time: Optional[str] = None,
    ) -> ScheduleResult:
        """Generate the schedule for ``date``.

        Recoverable problems (unplaceable tasks, blocked dependencies,
        overlapping fixed tasks) are reported as advisories. Only malformed
        input yields ``success=False``.
        """
        sleep = SleepSchedule(
            wake_time=(daily_override and daily_override.wake_time) or settings.default_wake_time,
            sleep_time=(daily_override and daily_override.sleep_time) or settings.default_sleep_time,
            duration=settings.desired_sleep_duration,
        )
        try:
            day = format_date(parse_date(date))
        except ValueError as e:
            return self._failure(str(date), sleep, 'invalid_date', str(e))

        try:
            result = self._build(day, list(templates), list(instances), sleep, current_time)
        except ScheduleInputError as e:
            logger.info("Schedule for %s failed: %s (%s)", day, e.code, e)
            return self._failure(day, sleep, e.code, str(e))

        logger.info(
            "Scheduled %d/%d tasks for %s with %d advisories",
            result.scheduled_tasks, result.total_tasks, day, len(result.advisories),
        )
        return result

    def _build(
        self,
        day: str,
        templates: List[TaskTemplate],
        instances: List[TaskInstance],
        sleep: SleepSchedule,
        current_time: Optional[str],
    ) -> ScheduleResult:
        wake_min = _minutes(sleep.wake_time, 'wake time')
        sleep_min = _minutes(sleep.sleep_time, 'sleep time')
        if sleep_min <= wake_min:
            raise ScheduleInputError(
                'invalid_day_window',
                f"Sleep time {sleep.sleep_time} is not after wake time {sleep.wake_time}",
            )
        now_min = _minutes(current_time, 'current time') if current_time else None

        order_index = {t.id: i for i, t in enumerate(templates)}
        advisories: List[str] = []
        decisions: List[SchedulingDecision] = []

        # Recurrence, dependencies and instance releases
        resolver = DependencyResolver(templates)
        by_template = {i.template_id: i for i in instances if i.date == day}
        candidates: List[TaskTemplate] = []

        for template in templates:
            if not template.is_active or not self._is_due(template, day):
                continue
            if template.duration_minutes <= 0:
                raise ScheduleInputError(
                    'invalid_duration', f"Template {template.id}: duration must be positive"
                )

            info = resolver.resolve(template)
            if info is not None and info.status != OK:
                advisories.append(f"dependency_{info.status}:{template.id}")
                decisions.append(SchedulingDecision(
                    template_id=template.id,
                    start_time=None,
                    end_time=None,
                    reason=f"Prerequisite {info.depends_on_id} is {info.status}",
                    constraint_applied="dependency_block",
                ))
                continue

            instance = by_template.get(template.id)
            if instance is not None and instance.releases_slot:
                decisions.append(SchedulingDecision(
                    template_id=template.id,
                    start_time=None,
                    end_time=None,
                    reason=f"Instance {instance.status}; slot released",
                    constraint_applied="instance_released",
                ))
                continue

            candidates.append(template)

        mandatory_total = sum(t.duration_minutes for t in candidates if t.is_mandatory)
        if mandatory_total > sleep_min - wake_min:
            advisories.append("mandatory_overcommit")

        # Anchors: fixed tasks and manual start-time overrides
        anchors: List[_Anchor] = []
        flexible: List[TaskTemplate] = []
        for template in candidates:
            instance = by_template.get(template.id)
            if instance is not None and instance.modified_start_time:
                start = _minutes(instance.modified_start_time, f"start time of {template.id}")
                anchors.append(_Anchor(template, start, instance, overridden=True))
            elif template.is_fixed:
                if not template.default_time:
                    advisories.append(f"missing_default_time:{template.id}")
                    decisions.append(SchedulingDecision(
                        template_id=template.id,
                        start_time=None,
                        end_time=None,
                        reason="Fixed task has no default time",
                        constraint_applied="missing_default_time",
                    ))
                    continue
                start = _minutes(template.default_time, f"default time of {template.id}")
                anchors.append(_Anchor(template, start, instance, overridden=False))
            else:
                flexible.append(template)

        anchors.sort(key=lambda a: (a.start, order_index[a.template.id]))
        advisories.extend(self._anchor_advisories(anchors, wake_min, sleep_min))

        schedule: List[Tuple[int, ScheduleBlock]] = []
        placed_end: Dict[str, int] = {}
        for anchor in anchors:
            status = anchor.instance.status if anchor.instance else "pending"
            schedule.append((anchor.start, ScheduleBlock(
                template_id=anchor.template.id,
                start_time=from_minutes(anchor.start),
                end_time=from_minutes(anchor.end),
                status=status,
            )))
            placed_end[anchor.template.id] = anchor.end
            decisions.append(SchedulingDecision(
                template_id=anchor.template.id,
                start_time=from_minutes(anchor.start),
                end_time=from_minutes(anchor.end),
                reason="Moved by instance override" if anchor.overridden else "Fixed time",
                constraint_applied="manual_override" if anchor.overridden else "fixed",
            ))

        # Flexible tasks into the remaining gaps
        gaps = detect_gaps(
            [Interval(a.start, a.end) for a in anchors], wake_min, sleep_min, self.min_gap_minutes
        )
        ordered = _hoist_prerequisites(self.policy.order_tasks(flexible))

        for template in ordered:
            window_start, window_end = self._window(template.time_window, wake_min, sleep_min)
            earliest = window_start
            if template.depends_on in placed_end:
                earliest = max(earliest, placed_end[template.depends_on])
            # The current time only holds back a window that is already open
            if now_min is not None and window_start <= now_min < window_end:
                earliest = max(earliest, now_min)

            slot = _first_fit(gaps, earliest, window_end, template.duration_minutes)
            compressed = False
            if slot is None and template.min_duration_minutes:
                slot = _first_fit(gaps, earliest, window_end, template.min_duration_minutes, take_all=True)
                compressed = slot is not None

            if slot is None:
                advisories.append(f"unscheduled:{template.id}")
                decisions.append(SchedulingDecision(
                    template_id=template.id,
                    start_time=None,
                    end_time=None,
                    reason=f"No free gap fits {template.duration_minutes} minutes in {template.time_window} window",
                    constraint_applied="no_fit",
                ))
                logger.debug("Could not place %s", template.id)
                continue

            gap_index, start, end = slot
            gaps = self._carve(gaps, gap_index, start, end)
            placed_end[template.id] = end
            if compressed:
                advisories.append(f"min_duration_used:{template.id}")

            instance = by_template.get(template.id)
            schedule.append((start, ScheduleBlock(
                template_id=template.id,
                start_time=from_minutes(start),
                end_time=from_minutes(end),
                status=instance.status if instance else "pending",
                compressed=compressed,
            )))
            decisions.append(SchedulingDecision(
                template_id=template.id,
                start_time=from_minutes(start),
                end_time=from_minutes(end),
                reason=f"Compressed to {end - start} minutes" if compressed else "First gap that fits",
                constraint_applied="min_duration" if compressed else None,
            ))
            logger.debug("Placed %s at %s-%s", template.id, from_minutes(start), from_minutes(end))

        schedule.sort(key=lambda item: (item[0], order_index[item[1].template_id]))
        blocks = [block for _, block in schedule]

        return ScheduleResult(
            success=True,
            date=day,
            sleep_schedule=sleep,
            schedule=blocks,
            total_tasks=len(candidates),
            scheduled_tasks=len(blocks),
            advisories=advisories,
            decisions=decisions,
        )

    def _is_due(self, template: TaskTemplate, day: str) -> bool:
        try:
            return self.recurrence.is_due(template.recurrence_rule, day, template.created_on)
        except RecurrenceError as e:
            raise ScheduleInputError('invalid_recurrence_rule', f"Template {template.id}: {e}") from e

    def _anchor_advisories(self, anchors: List[_Anchor], wake_min: int, sleep_min: int) -> List[str]:
        """Overlapping or out-of-window anchors are kept and reported."""
        out = []
        for i, a in enumerate(anchors):
            if a.start < wake_min or a.end > sleep_min:
                out.append(f"outside_day_window:{a.template.id}")
            for b in anchors[i + 1:]:
                if b.start >= a.end:
                    break
                out.append(f"fixed_conflict:{a.template.id}:{b.template.id}")
        return out

    def _window(self, name: str, wake_min: int, sleep_min: int) -> Tuple[int, int]:
        bounds = self.time_windows.get(name) or self.time_windows.get('anytime')
        if not bounds:
            return wake_min, sleep_min
        return max(wake_min, _minutes(bounds[0], f"{name} window")), min(sleep_min, _minutes(bounds[1], f"{name} window"))

    def _carve(self, gaps: List[Gap], index: int, start: int, end: int) -> List[Gap]:
        """Remove ``[start, end)`` from a gap, keeping leftovers that are still usable."""
        gap = gaps[index]
        pieces = []
        if start - gap.start >= self.min_gap_minutes:
            pieces.append(Gap(gap.start, start, start - gap.start))
        if gap.end - end >= self.min_gap_minutes:
            pieces.append(Gap(end, gap.end, gap.end - end))
        return gaps[:index] + pieces + gaps[index + 1:]

    def _failure(self, day: str, sleep: SleepSchedule, code: str, message: str) -> ScheduleResult:
        return ScheduleResult(
            success=False,
            date=day,
            sleep_schedule=sleep,
            error=code,
            message=message,
        )


def build_schedule(
    date: DateLike,
    templates: Sequence[TaskTemplate],
    instances: Sequence[TaskInstance],
    settings: Settings,
    daily_override: Optional[DailyOverride] = None,
    current_time: Optional[str] = None,
    config: Optional[dict] = None,
) -> ScheduleResult:
    """Build a schedule with a default-configured engine."""
    engine = SchedulingEngine(config)
    return engine.build_schedule(date, templates, instances, settings, daily_override, current_time)


def _minutes(value: Optional[str], what: str) -> int:
    try:
        return to_minutes(value)
    except ValueError as e:
        raise ScheduleInputError('invalid_time', f"Invalid {what}: {e}") from e


def _first_fit(
    gaps: List[Gap],
    earliest: int,
    latest: int,
    needed: int,
    take_all: bool = False,
) -> Optional[Tuple[int, int, int]]:
    """First gap whose part inside ``[earliest, latest)`` holds ``needed`` minutes.

    Returns ``(gap_index, start, end)``; with ``take_all`` the whole usable
    part is taken instead of exactly ``needed`` minutes.
    """
    for index, gap in enumerate(gaps):
        start = max(gap.start, earliest)
        end = min(gap.end, latest)
        if end - start >= needed:
            return index, start, (end if take_all else start + needed)
    return None


def _hoist_prerequisites(ordered: List[TaskTemplate]) -> List[TaskTemplate]:
    """Move flexible prerequisites ahead of the tasks that depend on them."""
    by_id = {t.id: t for t in ordered}
    out: List[TaskTemplate] = []
    seen = set()

    def visit(template: TaskTemplate, chain: frozenset):
        if template.id in seen or template.id in chain:
            return
        dep = by_id.get(template.depends_on) if template.depends_on else None
        if dep is not None:
            visit(dep, chain | {template.id})
        seen.add(template.id)
        out.append(template)

    for template in ordered:
        visit(template, frozenset())
    return out
