import unittest
from datetime import date

from dayplan.engine.scheduler import SchedulingEngine, build_schedule
from dayplan.fixtures.generator import TemplateGenerator
from dayplan.models.recurrence import DailyRule, WeeklyRule
from dayplan.models.task import DailyOverride, TaskInstance
from dayplan.utils.datetime_utils import to_minutes

from helpers import base_settings, fixed, tpl

DATE = "2025-02-01"  # a Saturday


def by_id(result):
    return {b.template_id: b for b in result.schedule}


def instance(template_id, status="pending", day=DATE, **kwargs):
    return TaskInstance(id=f"{template_id}@{day}", template_id=template_id, date=day, status=status, **kwargs)


class TestBuildSchedule(unittest.TestCase):
    def setUp(self) -> None:
        self.settings = base_settings()

    def test_fixed_then_flexible_in_earliest_gap(self) -> None:
        templates = [
            fixed("meeting", "09:00", 60, is_mandatory=True),
            tpl("walk", priority=5, duration_minutes=30),
        ]
        res = build_schedule(DATE, templates, [], self.settings)

        self.assertTrue(res.success)
        self.assertEqual([(b.template_id, b.start_time, b.end_time) for b in res.schedule],
                         [("walk", "06:00", "06:30"), ("meeting", "09:00", "10:00")])
        self.assertEqual(res.total_tasks, 2)
        self.assertEqual(res.scheduled_tasks, 2)
        self.assertEqual(res.advisories, [])
        self.assertEqual(res.sleep_schedule.wake_time, "06:00")
        self.assertEqual(res.sleep_schedule.sleep_time, "23:00")
        self.assertEqual(res.sleep_schedule.duration, 7.5)

    def test_priority_order_within_gap(self) -> None:
        templates = [
            tpl("low", priority=1, duration_minutes=60),
            tpl("high", priority=5, duration_minutes=30),
            tpl("mid_skippable", priority=3, duration_minutes=30),
            tpl("mid_mandatory", priority=3, duration_minutes=30, is_mandatory=True),
        ]
        res = build_schedule(DATE, templates, [], self.settings)
        starts = {k: v.start_time for k, v in by_id(res).items()}
        self.assertEqual(starts, {"high": "06:00", "mid_mandatory": "06:30", "mid_skippable": "07:00", "low": "07:30"})

    def test_dependency_chain_across_windows(self) -> None:
        templates = [
            tpl("laundry", time_window="morning", duration_minutes=60),
            tpl("iron", time_window="afternoon", duration_minutes=60, depends_on="laundry"),
            tpl("pack", time_window="evening", duration_minutes=60, depends_on="iron"),
        ]
        blocks = by_id(build_schedule(DATE, templates, [], self.settings))
        self.assertEqual((blocks["laundry"].start_time, blocks["laundry"].end_time), ("06:00", "07:00"))
        self.assertEqual((blocks["iron"].start_time, blocks["iron"].end_time), ("12:00", "13:00"))
        self.assertEqual((blocks["pack"].start_time, blocks["pack"].end_time), ("18:00", "19:00"))

    def test_prerequisite_placed_before_higher_priority_dependent(self) -> None:
        templates = [
            tpl("prep", priority=1, duration_minutes=60),
            tpl("cook", priority=5, duration_minutes=30, depends_on="prep"),
        ]
        blocks = by_id(build_schedule(DATE, templates, [], self.settings))
        self.assertEqual(blocks["prep"].start_time, "06:00")
        self.assertEqual(blocks["cook"].start_time, "07:00")

    def test_dependent_starts_after_fixed_prerequisite(self) -> None:
        templates = [
            fixed("shop", "10:00", 60),
            tpl("unpack", depends_on="shop"),
        ]
        blocks = by_id(build_schedule(DATE, templates, [], self.settings))
        self.assertEqual(blocks["unpack"].start_time, "11:00")

    def test_flexible_moves_after_new_anchor(self) -> None:
        templates = [
            fixed("mid", "12:00", 120, is_mandatory=True),
            tpl("groceries", time_window="afternoon", duration_minutes=60),
        ]
        self.assertEqual(by_id(build_schedule(DATE, templates, [], self.settings))["groceries"].start_time, "14:00")

        templates.append(fixed("doctor", "14:30", 60, is_mandatory=True))
        groceries = by_id(build_schedule(DATE, templates, [], self.settings))["groceries"]
        self.assertEqual(groceries.start_time, "15:30")

    def test_current_time_pushes_flexible_later(self) -> None:
        templates = [
            fixed("meeting", "10:00", 60),
            tpl("shower", time_window="morning", duration_minutes=15, min_duration_minutes=5),
        ]
        res = build_schedule(DATE, templates, [], self.settings, current_time="09:50")
        shower = by_id(res)["shower"]
        self.assertEqual((shower.start_time, shower.end_time), ("11:00", "11:15"))
        self.assertFalse(shower.compressed)

    def test_current_time_after_window_leaves_window_open(self) -> None:
        templates = [tpl("stretch", time_window="morning", duration_minutes=15)]
        res = build_schedule(DATE, templates, [], self.settings, current_time="14:00")
        self.assertEqual(by_id(res)["stretch"].start_time, "06:00")
        self.assertEqual(res.advisories, [])

    def test_current_time_before_window_changes_nothing(self) -> None:
        templates = [tpl("dinner_prep", time_window="evening", duration_minutes=30)]
        res = build_schedule(DATE, templates, [], self.settings, current_time="07:00")
        self.assertEqual(by_id(res)["dinner_prep"].start_time, "18:00")

    def test_min_duration_compression(self) -> None:
        templates = [
            fixed("block", "06:00", 350),
            tpl("stretch", time_window="morning", duration_minutes=30, min_duration_minutes=10),
        ]
        res = build_schedule(DATE, templates, [], self.settings)
        stretch = by_id(res)["stretch"]
        self.assertEqual((stretch.start_time, stretch.end_time), ("11:50", "12:00"))
        self.assertTrue(stretch.compressed)
        self.assertIn("min_duration_used:stretch", res.advisories)

    def test_unplaceable_task_is_advisory_not_error(self) -> None:
        settings = base_settings(default_sleep_time="20:00")
        templates = [
            fixed("dinner", "18:30", 60),
            tpl("movie", time_window="evening", duration_minutes=120),
        ]
        res = build_schedule(DATE, templates, [], settings)
        self.assertTrue(res.success)
        self.assertNotIn("movie", by_id(res))
        self.assertIn("unscheduled:movie", res.advisories)
        self.assertEqual(res.total_tasks, 2)
        self.assertEqual(res.scheduled_tasks, 1)

    def test_overlapping_fixed_tasks_both_kept(self) -> None:
        templates = [fixed("a", "09:00", 60), fixed("b", "09:30", 60), fixed("c", "11:00", 30)]
        res = build_schedule(DATE, templates, [], self.settings)
        self.assertEqual([b.template_id for b in res.schedule], ["a", "b", "c"])
        self.assertEqual(res.advisories, ["fixed_conflict:a:b"])

    def test_fixed_task_outside_day_window(self) -> None:
        res = build_schedule(DATE, [fixed("late", "22:30", 60)], [], self.settings)
        self.assertIn("outside_day_window:late", res.advisories)
        self.assertEqual(by_id(res)["late"].end_time, "23:30")

    def test_fixed_task_past_midnight_ends_at_day_end(self) -> None:
        res = build_schedule(DATE, [fixed("night", "23:30", 60)], [], self.settings)
        night = by_id(res)["night"]
        self.assertEqual((night.start_time, night.end_time), ("23:30", "24:00"))
        self.assertIn("outside_day_window:night", res.advisories)

    def test_fixed_task_without_time_is_dropped(self) -> None:
        templates = [tpl("call", scheduling_type="fixed", duration_minutes=30), tpl("walk")]
        res = build_schedule(DATE, templates, [], self.settings)
        self.assertTrue(res.success)
        self.assertEqual([b.template_id for b in res.schedule], ["walk"])
        self.assertEqual(by_id(res)["walk"].start_time, "06:00")
        self.assertEqual(res.advisories, ["missing_default_time:call"])

    def test_dependency_problems_drop_task(self) -> None:
        templates = [
            tpl("orphan", depends_on="ghost"),
            tpl("off", is_active=False),
            tpl("needs_off", depends_on="off"),
            tpl("a", depends_on="b"),
            tpl("b", depends_on="a"),
            tpl("fine"),
        ]
        res = build_schedule(DATE, templates, [], self.settings)
        self.assertEqual([b.template_id for b in res.schedule], ["fine"])
        self.assertEqual(res.advisories, [
            "dependency_missing:orphan",
            "dependency_disabled:needs_off",
            "dependency_cycle:a",
            "dependency_cycle:b",
        ])
        self.assertEqual(res.total_tasks, 1)

    def test_recurrence_filters_templates(self) -> None:
        templates = [
            tpl("weekday_only", recurrence_rule=WeeklyRule(days_of_week=(1, 2, 3, 4, 5))),
            tpl("saturday", recurrence_rule=WeeklyRule(days_of_week=(6,))),
            tpl("always"),
        ]
        res = build_schedule(DATE, templates, [], self.settings)
        self.assertEqual(set(by_id(res)), {"saturday", "always"})

    def test_split_recurrence_date_fences(self) -> None:
        old = tpl("t-old", recurrence_rule=DailyRule(end_date=date(2025, 6, 9)))
        new = tpl("t-new", recurrence_rule=DailyRule(start_date=date(2025, 6, 10)))
        for day, expected in [("2025-06-09", {"t-old"}), ("2025-06-10", {"t-new"}), ("2025-06-11", {"t-new"})]:
            res = build_schedule(day, [old, new], [], self.settings)
            self.assertTrue(res.success)
            self.assertEqual(set(by_id(res)), expected, day)

    def test_interval_anchor_uses_created_on(self) -> None:
        template = tpl("alt", recurrence_rule=DailyRule(interval=2), created_on=date(2025, 1, 31))
        self.assertIn("alt", by_id(build_schedule("2025-02-02", [template], [], self.settings)))
        self.assertNotIn("alt", by_id(build_schedule("2025-02-01", [template], [], self.settings)))


class TestInstanceOverrides(unittest.TestCase):
    def setUp(self) -> None:
        self.settings = base_settings()
        self.templates = [
            fixed("gym", "06:00", 180),
            tpl("read", duration_minutes=60),
        ]

    def test_skipped_instance_releases_slot(self) -> None:
        res = build_schedule(DATE, self.templates, [instance("gym", "skipped")], self.settings)
        self.assertNotIn("gym", by_id(res))
        self.assertEqual(by_id(res)["read"].start_time, "06:00")
        self.assertEqual(res.total_tasks, 1)
        self.assertEqual(res.advisories, [])

    def test_postponed_instance_releases_slot(self) -> None:
        res = build_schedule(DATE, self.templates, [instance("gym", "postponed")], self.settings)
        self.assertEqual(by_id(res)["read"].start_time, "06:00")

    def test_completed_instance_keeps_slot(self) -> None:
        res = build_schedule(DATE, self.templates, [instance("gym", "completed")], self.settings)
        blocks = by_id(res)
        self.assertEqual((blocks["gym"].start_time, blocks["gym"].status), ("06:00", "completed"))
        self.assertEqual(blocks["read"].start_time, "09:00")
        self.assertEqual(blocks["read"].status, "pending")

    def test_modified_start_time_anchors_task(self) -> None:
        instances = [
            instance("gym", modified_start_time="17:00"),
            instance("read", modified_start_time="07:15"),
        ]
        blocks = by_id(build_schedule(DATE, self.templates, instances, self.settings))
        self.assertEqual((blocks["gym"].start_time, blocks["gym"].end_time), ("17:00", "20:00"))
        self.assertEqual((blocks["read"].start_time, blocks["read"].end_time), ("07:15", "08:15"))

    def test_instances_for_other_dates_ignored(self) -> None:
        res = build_schedule(DATE, self.templates, [instance("gym", "skipped", day="2025-02-02")], self.settings)
        self.assertIn("gym", by_id(res))


class TestScheduleFailures(unittest.TestCase):
    def test_collapsed_day_window(self) -> None:
        res = build_schedule(DATE, [tpl("a")], [], base_settings(),
                             daily_override=DailyOverride(sleep_time="05:00"))
        self.assertFalse(res.success)
        self.assertEqual(res.error, "invalid_day_window")
        self.assertEqual(res.schedule, [])
        self.assertEqual(res.sleep_schedule.sleep_time, "05:00")

    def test_daily_override_moves_window(self) -> None:
        res = build_schedule(DATE, [tpl("a")], [], base_settings(),
                             daily_override=DailyOverride(wake_time="08:00"))
        self.assertEqual(by_id(res)["a"].start_time, "08:00")

    def test_invalid_recurrence_rule(self) -> None:
        res = build_schedule(DATE, [tpl("a", recurrence_rule=WeeklyRule())], [], base_settings())
        self.assertFalse(res.success)
        self.assertEqual(res.error, "invalid_recurrence_rule")
        self.assertIn("a", res.message)

    def test_invalid_time(self) -> None:
        res = build_schedule(DATE, [fixed("a", "25:99")], [], base_settings())
        self.assertFalse(res.success)
        self.assertEqual(res.error, "invalid_time")

    def test_invalid_date(self) -> None:
        res = build_schedule("02/01/2025", [tpl("a")], [], base_settings())
        self.assertFalse(res.success)
        self.assertEqual(res.error, "invalid_date")

    def test_mandatory_overcommit_is_advisory(self) -> None:
        settings = base_settings(default_wake_time="08:00", default_sleep_time="16:00")
        templates = [
            fixed("a1", "08:00", 180, is_mandatory=True),
            fixed("a2", "11:00", 240, is_mandatory=True),
            fixed("a3", "15:00", 180, is_mandatory=True),
        ]
        res = build_schedule(DATE, templates, [], settings)
        self.assertTrue(res.success)
        self.assertIn("mandatory_overcommit", res.advisories)


class TestScheduleProperties(unittest.TestCase):
    def test_deterministic(self) -> None:
        day = date(2025, 3, 14)
        templates, instances = TemplateGenerator(seed=5).generate_day(day, 25)
        engine = SchedulingEngine()
        first = engine.build_schedule(day, templates, instances, base_settings())
        second = engine.build_schedule(day, templates, instances, base_settings())
        self.assertEqual(first.to_dict(), second.to_dict())

    def test_flexible_blocks_never_overlap(self) -> None:
        for seed in range(20):
            day = date(2025, 3, 1 + seed)
            templates, instances = TemplateGenerator(seed=seed).generate_day(day, 20)
            res = build_schedule(day, templates, instances, base_settings())
            self.assertTrue(res.success, res.message)

            fixed_ids = {t.id for t in templates if t.is_fixed}
            spans = [(b.template_id, to_minutes(b.start_time), to_minutes(b.end_time)) for b in res.schedule]
            for i, (a_id, a_start, a_end) in enumerate(spans):
                if a_id not in fixed_ids:
                    self.assertGreaterEqual(a_start, 6 * 60)
                    self.assertLessEqual(a_end, 23 * 60)
                for b_id, b_start, b_end in spans[i + 1:]:
                    if a_id in fixed_ids and b_id in fixed_ids:
                        continue
                    self.assertTrue(a_end <= b_start or b_end <= a_start, f"{a_id} overlaps {b_id} (seed {seed})")

    def test_decisions_cover_every_due_template(self) -> None:
        templates = [fixed("a", "09:00"), tpl("b"), tpl("c", depends_on="ghost")]
        res = build_schedule(DATE, templates, [], base_settings())
        self.assertEqual({d.template_id for d in res.decisions}, {"a", "b", "c"})
        self.assertIn("Schedule for 2025-02-01", res.to_human_readable())


if __name__ == "__main__":
    unittest.main()
