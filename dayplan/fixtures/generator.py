"""Template and instance generator for demos and property tests."""

import random
from datetime import date, timedelta
from typing import List, Tuple

from ..models.recurrence import CustomRule, DailyRule, MonthlyRule, WeeklyRule, Weekdays, LAST_DAY
from ..models.task import FIXED, FLEXIBLE, TIME_WINDOWS, TaskInstance, TaskTemplate
from ..utils.datetime_utils import format_date, from_minutes


class TemplateGenerator:
    """Generates deterministic template sets and day instances."""

    def __init__(self, seed: int = 42, config: dict = None):
        """Initialize generator with seed for reproducibility."""
        self.seed = seed
        self.random = random.Random(seed)
        self.config = config or {}
        self.generator_config = self.config.get('generator', {})

    def generate_templates(self, count: int, start_date: date) -> List[TaskTemplate]:
        """Generate a set of templates with realistic properties."""
        templates = []
        names = ['Workout', 'Email triage', 'Deep work', 'Groceries', 'Laundry',
                 'Reading', 'Meditation', 'Standup', 'Cooking', 'Journal']

        for i in range(count):
            template_id = f"tpl_{i:03d}"

            # Roughly a third are pinned to a clock time
            if self.random.random() < 0.3:
                scheduling_type = FIXED
                default_time = from_minutes(self.random.randrange(7 * 60, 21 * 60, 15))
                time_window = 'anytime'
            else:
                scheduling_type = FLEXIBLE
                default_time = None
                time_window = self.random.choice(TIME_WINDOWS)

            duration = self.random.choice([15, 30, 45, 60, 90])
            min_duration = None
            if scheduling_type == FLEXIBLE and duration > 15 and self.random.random() < 0.3:
                min_duration = duration // 2

            # Some templates depend on an earlier one (chains, never cycles)
            depends_on = None
            if i > 0 and self.random.random() < 0.15:
                depends_on = f"tpl_{self.random.randint(0, i - 1):03d}"

            templates.append(TaskTemplate(
                id=template_id,
                task_name=f"{self.random.choice(names)} {i}",
                duration_minutes=duration,
                scheduling_type=scheduling_type,
                is_mandatory=self.random.random() < 0.3,
                priority=self.random.randint(1, 5),
                is_active=self.random.random() < 0.95,
                default_time=default_time,
                time_window=time_window,
                min_duration_minutes=min_duration,
                depends_on=depends_on,
                recurrence_rule=self._random_rule(start_date),
                created_on=start_date - timedelta(days=self.random.randint(0, 30)),
            ))

        return templates

    def _random_rule(self, start_date: date):
        roll = self.random.random()
        if roll < 0.3:
            return None
        if roll < 0.55:
            return DailyRule(interval=self.random.choice([1, 1, 2]))
        if roll < 0.8:
            days = tuple(sorted(self.random.sample(range(7), self.random.randint(1, 4))))
            return WeeklyRule(days_of_week=days)
        if roll < 0.9:
            return MonthlyRule(day_of_month=self.random.choice([1, 15, LAST_DAY]))
        return CustomRule(pattern=Weekdays(), start_date=start_date - timedelta(days=7))

    def generate_instances(self, templates: List[TaskTemplate], day: date) -> List[TaskInstance]:
        """Generate per-day instances for a subset of the templates."""
        instances = []
        for template in templates:
            if self.random.random() >= 0.2:
                continue
            status = self.random.choice(['pending', 'completed', 'skipped', 'postponed'])
            instances.append(TaskInstance(
                id=f"{template.id}@{format_date(day)}",
                template_id=template.id,
                date=format_date(day),
                status=status,
                skipped_reason="generated" if status == 'skipped' else None,
            ))
        return instances

    def generate_day(
        self,
        day: date,
        template_count: int = None,
    ) -> Tuple[List[TaskTemplate], List[TaskInstance]]:
        """Generate a complete template set with instances for ``day``."""
        template_count = template_count or self.generator_config.get('template_count', 12)

        templates = self.generate_templates(template_count, day)
        instances = self.generate_instances(templates, day)

        return templates, instances
