import unittest

from dayplan.engine.filtering import filter_templates, matches_query, sort_templates

from helpers import fixed, tpl


class TestFilterTemplates(unittest.TestCase):
    def setUp(self) -> None:
        self.templates = [
            tpl("gym", task_name="Gym", time_window="morning", is_mandatory=True, priority=4),
            tpl("read", task_name="Reading", description="Novel before bed", time_window="evening"),
            fixed("standup", "09:30", 15, task_name="Standup", is_mandatory=True, priority=5),
            tpl("bills", task_name="pay bills", priority=4),
        ]

    def ids(self, templates):
        return [t.id for t in templates]

    def test_query_matches_name_and_description(self) -> None:
        self.assertEqual(self.ids(filter_templates(self.templates, query="  NOVEL ")), ["read"])
        self.assertEqual(self.ids(filter_templates(self.templates, query="gym")), ["gym"])
        self.assertTrue(matches_query(self.templates[0], ""))

    def test_mandatory_filter(self) -> None:
        self.assertEqual(self.ids(filter_templates(self.templates, mandatory="mandatory")), ["gym", "standup"])
        self.assertEqual(self.ids(filter_templates(self.templates, mandatory="skippable")), ["read", "bills"])
        self.assertEqual(len(filter_templates(self.templates, mandatory="all")), 4)

    def test_time_window_filter_keeps_fixed(self) -> None:
        result = filter_templates(self.templates, time_windows=["evening"])
        self.assertEqual(self.ids(result), ["read", "standup"])

    def test_filters_combine(self) -> None:
        result = filter_templates(self.templates, query="g", mandatory="mandatory", time_windows=["morning"])
        self.assertEqual(self.ids(result), ["gym"])


class TestSortTemplates(unittest.TestCase):
    def test_sort_by_name_is_case_insensitive(self) -> None:
        templates = [tpl("b", task_name="beta"), tpl("a", task_name="Alpha"), tpl("c", task_name="charlie")]
        self.assertEqual([t.id for t in sort_templates(templates, "name")], ["a", "b", "c"])

    def test_sort_by_priority_then_name(self) -> None:
        templates = [
            tpl("x", task_name="Zed", priority=5),
            tpl("y", task_name="Apple", priority=2),
            tpl("z", task_name="Mango", priority=5),
        ]
        self.assertEqual([t.id for t in sort_templates(templates, "priority")], ["z", "x", "y"])

    def test_unknown_mode(self) -> None:
        with self.assertRaises(ValueError):
            sort_templates([], "duration")


if __name__ == "__main__":
    unittest.main()
