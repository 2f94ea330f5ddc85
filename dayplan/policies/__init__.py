"""Placement policy implementations."""

from .base import PlacementPolicy
from .priority import PriorityPolicy

__all__ = ['PlacementPolicy', 'PriorityPolicy']
