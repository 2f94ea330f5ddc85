"""Loading template and instance documents for the CLI."""

from typing import List, Optional, Tuple

from ..models.task import DailyOverride, TaskInstance, TaskTemplate
from .config import read_document


def load_day_file(
    path: str,
) -> Tuple[List[TaskTemplate], List[TaskInstance], Optional[DailyOverride]]:
    """Load ``templates``, ``instances`` and an optional ``daily_override``.

    The document is a mapping; a bare list is read as a list of templates.
    """
    data = read_document(path) or {}
    if isinstance(data, list):
        data = {'templates': data}
    if not isinstance(data, dict):
        raise ValueError(f"Expected a mapping or list in {path}")

    templates = [TaskTemplate.from_dict(t) for t in data.get('templates') or []]
    instances = [TaskInstance.from_dict(i) for i in data.get('instances') or []]

    override = None
    raw = data.get('daily_override')
    if raw:
        override = DailyOverride(wake_time=raw.get('wake_time'), sleep_time=raw.get('sleep_time'))

    return templates, instances, override
