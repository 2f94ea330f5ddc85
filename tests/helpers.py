"""Shared builders for tests."""

from dayplan.models.task import Settings, TaskTemplate


def tpl(id: str, **kwargs) -> TaskTemplate:
    """A flexible, active, 30-minute template unless told otherwise."""
    values = {
        "task_name": id.title(),
        "duration_minutes": 30,
        "scheduling_type": "flexible",
        "time_window": "anytime",
        "priority": 3,
    }
    values.update(kwargs)
    return TaskTemplate(id=id, **values)


def fixed(id: str, time: str, duration: int = 60, **kwargs) -> TaskTemplate:
    return tpl(id, scheduling_type="fixed", default_time=time, duration_minutes=duration, **kwargs)


def base_settings(**kwargs) -> Settings:
    values = {"desired_sleep_duration": 7.5, "default_wake_time": "06:00", "default_sleep_time": "23:00"}
    values.update(kwargs)
    return Settings(**values)
