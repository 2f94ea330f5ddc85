"""Template library filtering and sorting."""

from typing import Iterable, List, Optional

from ..models.task import TaskTemplate

SORT_MODES = ("name", "priority")
MANDATORY_FILTERS = ("all", "mandatory", "skippable")


def normalize(value: Optional[str]) -> str:
    return (value or "").lower().strip()


def matches_query(template: TaskTemplate, query: Optional[str]) -> bool:
    """Case-insensitive substring match on name and description."""
    needle = normalize(query)
    if not needle:
        return True
    haystack = f"{normalize(template.task_name)}\n{normalize(template.description)}"
    return needle in haystack


def filter_by_mandatory(template: TaskTemplate, mode: Optional[str]) -> bool:
    if not mode or mode == "all":
        return True
    if mode == "mandatory":
        return template.is_mandatory
    return not template.is_mandatory


def filter_by_time_windows(template: TaskTemplate, windows: Optional[Iterable[str]]) -> bool:
    # Fixed-time tasks have no window to filter on
    wanted = set(windows or ())
    if not wanted or template.is_fixed:
        return True
    return (template.time_window or "anytime") in wanted


def filter_templates(
    templates: Iterable[TaskTemplate],
    query: Optional[str] = None,
    mandatory: str = "all",
    time_windows: Optional[Iterable[str]] = None,
) -> List[TaskTemplate]:
    windows = set(time_windows or ())
    return [
        t for t in templates
        if matches_query(t, query) and filter_by_mandatory(t, mandatory) and filter_by_time_windows(t, windows)
    ]


def sort_templates(templates: Iterable[TaskTemplate], mode: str = "name") -> List[TaskTemplate]:
    """Sort by name, or by priority (high first) then name; stable on input order."""
    if mode not in SORT_MODES:
        raise ValueError(f"Unknown sort mode: {mode}")

    def sort_key(item):
        index, template = item
        name_key = normalize(template.task_name)
        if mode == "name":
            return (name_key, index)
        return (-template.priority, name_key, index)

    return [t for _, t in sorted(enumerate(templates), key=sort_key)]
