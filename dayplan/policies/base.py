"""Base placement policy interface."""

from abc import ABC, abstractmethod
from typing import List

from ..models.task import TaskTemplate


class PlacementPolicy(ABC):
    """Abstract base class for flexible-task placement policies."""

    def __init__(self, config: dict):
        """Initialize policy with configuration."""
        self.config = config

    @abstractmethod
    def order_tasks(self, templates: List[TaskTemplate]) -> List[TaskTemplate]:
        """Order flexible tasks; earlier tasks get first pick of the free gaps."""
        pass

    @abstractmethod
    def get_policy_name(self) -> str:
        """Return the name of this policy."""
        pass
