"""Template prerequisite resolution."""

from typing import Dict, Iterable, Optional

from ..models.schedule import DependencyInfo
from ..models.task import TaskTemplate

OK = "ok"
DISABLED = "disabled"
MISSING = "missing"
CYCLE = "cycle"


def build_by_id(templates: Iterable[TaskTemplate]) -> Dict[str, TaskTemplate]:
    """Lookup table for templates by id."""
    return {t.id: t for t in templates}


def get_dependency_status(
    template: TaskTemplate,
    by_id: Dict[str, TaskTemplate],
) -> Optional[DependencyInfo]:
    """Compute the prerequisite status for a single template.

    - No ``depends_on``: None.
    - Depends on itself, or on a template that depends back on it: cycle.
    - Unknown id: missing.
    - Known but inactive: disabled.
    - Otherwise ok.

    Only one- and two-node cycles are detected; longer chains resolve by
    their immediate neighbour.
    """
    dep_id = template.depends_on
    if not dep_id:
        return None
    if dep_id == template.id:
        return DependencyInfo(CYCLE, dep_id, template.task_name)

    dep = by_id.get(dep_id)
    if dep is None:
        return DependencyInfo(MISSING, dep_id)
    if dep.depends_on == template.id:
        return DependencyInfo(CYCLE, dep_id, dep.task_name)
    if not dep.is_active:
        return DependencyInfo(DISABLED, dep_id, dep.task_name)
    return DependencyInfo(OK, dep_id, dep.task_name)


class DependencyResolver:
    """Resolves prerequisite status against a fixed template set."""

    def __init__(self, templates: Iterable[TaskTemplate]):
        self.by_id = build_by_id(templates)

    def resolve(self, template: TaskTemplate) -> Optional[DependencyInfo]:
        return get_dependency_status(template, self.by_id)

    def resolve_all(self) -> Dict[str, Optional[DependencyInfo]]:
        return {tid: self.resolve(t) for tid, t in self.by_id.items()}

    def is_blocked(self, template: TaskTemplate) -> bool:
        """True when the template has a prerequisite that is not ok."""
        info = self.resolve(template)
        return info is not None and info.status != OK
