"""Task template, instance and settings data models."""

from dataclasses import asdict, dataclass
from datetime import date
from typing import Any, Dict, Optional

from ..utils.datetime_utils import format_date, parse_date
from .recurrence import RecurrenceRule, rule_from_dict, rule_to_dict

FIXED = "fixed"
FLEXIBLE = "flexible"

TIME_WINDOWS = ("morning", "afternoon", "evening", "anytime")

PENDING = "pending"
COMPLETED = "completed"
SKIPPED = "skipped"
POSTPONED = "postponed"
INSTANCE_STATUSES = (PENDING, COMPLETED, SKIPPED, POSTPONED)


@dataclass
class TaskTemplate:
    """A reusable task definition, possibly recurring."""

    id: str
    task_name: str
    duration_minutes: int
    scheduling_type: str = FLEXIBLE
    description: str = ""
    is_mandatory: bool = False
    priority: int = 3
    is_active: bool = True
    default_time: Optional[str] = None
    time_window: str = "anytime"
    min_duration_minutes: Optional[int] = None
    depends_on: Optional[str] = None
    recurrence_rule: Optional[RecurrenceRule] = None
    created_on: Optional[date] = None

    @property
    def is_fixed(self) -> bool:
        return self.scheduling_type == FIXED

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TaskTemplate":
        """Build a template from a plain mapping (YAML/JSON document)."""
        rule = data.get("recurrence_rule")
        if isinstance(rule, dict):
            rule = rule_from_dict(rule)
        created_on = data.get("created_on")
        return cls(
            id=str(data["id"]),
            task_name=data.get("task_name", str(data["id"])),
            duration_minutes=int(data.get("duration_minutes", 0)),
            scheduling_type=data.get("scheduling_type", FLEXIBLE),
            description=data.get("description") or "",
            is_mandatory=bool(data.get("is_mandatory", False)),
            priority=int(data.get("priority", 3)),
            is_active=data.get("is_active", True) is not False,
            default_time=data.get("default_time"),
            time_window=data.get("time_window") or "anytime",
            min_duration_minutes=data.get("min_duration_minutes"),
            depends_on=data.get("depends_on"),
            recurrence_rule=rule,
            created_on=parse_date(created_on) if created_on else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Plain mapping accepted by :meth:`from_dict`; unset fields omitted."""
        data = {k: v for k, v in asdict(self).items() if v is not None}
        data["recurrence_rule"] = rule_to_dict(self.recurrence_rule)
        if self.created_on:
            data["created_on"] = format_date(self.created_on)
        return data


@dataclass
class TaskInstance:
    """A date-specific record of a template's occurrence."""

    id: str
    template_id: str
    date: str
    status: str = PENDING
    modified_start_time: Optional[str] = None
    completed_at: Optional[int] = None
    skipped_reason: Optional[str] = None
    note: Optional[str] = None

    @property
    def releases_slot(self) -> bool:
        """Skipped and postponed occurrences give their time back to the day."""
        return self.status in (SKIPPED, POSTPONED)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TaskInstance":
        status = data.get("status", PENDING)
        if status not in INSTANCE_STATUSES:
            raise ValueError(f"Unknown instance status {status!r} for {data.get('template_id')}")
        return cls(
            id=str(data.get("id") or f"{data['template_id']}@{data['date']}"),
            template_id=str(data["template_id"]),
            date=str(data["date"]),
            status=status,
            modified_start_time=data.get("modified_start_time"),
            completed_at=data.get("completed_at"),
            skipped_reason=data.get("skipped_reason"),
            note=data.get("note"),
        )


@dataclass
class Settings:
    """User sleep settings; times are ``HH:MM``."""

    desired_sleep_duration: float = 8.0
    default_wake_time: str = "06:00"
    default_sleep_time: str = "23:00"

    @classmethod
    def from_config(cls, config: dict) -> "Settings":
        section = config.get("settings", {})
        return cls(
            desired_sleep_duration=section.get("desired_sleep_duration", 8.0),
            default_wake_time=section.get("default_wake_time", "06:00"),
            default_sleep_time=section.get("default_sleep_time", "23:00"),
        )


@dataclass
class DailyOverride:
    """Per-date replacement for the wake and/or sleep time."""

    wake_time: Optional[str] = None
    sleep_time: Optional[str] = None
