"""Priority-first placement policy."""

from typing import List

from ..models.task import TaskTemplate
from .base import PlacementPolicy


class PriorityPolicy(PlacementPolicy):
    """Priority first, then mandatory before skippable, then longer first."""

    def order_tasks(self, templates: List[TaskTemplate]) -> List[TaskTemplate]:
        """Order by priority desc, mandatory, duration desc, then input order."""
        tie_break = self.config.get('tie_break', {})
        mandatory_first = tie_break.get('mandatory_first', True)
        longer_first = tie_break.get('longer_first', True)

        def sort_key(item):
            index, template = item

            # Primary: priority (higher first, so negate)
            priority_key = -template.priority

            # Secondary: mandatory before skippable
            mandatory_key = 0 if (template.is_mandatory or not mandatory_first) else 1

            # Tertiary: duration (longer first, so negate)
            duration_key = -template.duration_minutes if longer_first else 0

            # Stable on template order
            return (priority_key, mandatory_key, duration_key, index)

        return [t for _, t in sorted(enumerate(templates), key=sort_key)]

    def get_policy_name(self) -> str:
        """Return policy name."""
        return "PRIORITY"
