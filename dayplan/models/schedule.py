"""Schedule, interval and timeline data models."""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class Interval:
    """Half-open ``[start, end)`` span in minutes from midnight."""

    start: int
    end: int


@dataclass(frozen=True)
class Gap:
    """A free interval within the day window."""

    start: int
    end: int
    duration: int


@dataclass(frozen=True)
class TimelineBlock:
    start: int
    end: int
    id: Optional[str] = None


@dataclass(frozen=True)
class LaneAssignment:
    lane_index: Optional[int]
    hidden: bool


@dataclass(frozen=True)
class DependencyInfo:
    """Prerequisite status of a template against the current template set."""

    status: str  # 'ok' | 'disabled' | 'missing' | 'cycle'
    depends_on_id: str
    depends_on_name: Optional[str] = None


@dataclass
class ScheduleBlock:
    """A placed occurrence of a template."""

    template_id: str
    start_time: str
    end_time: str
    status: str = "pending"
    compressed: bool = False


@dataclass
class SleepSchedule:
    wake_time: str
    sleep_time: str
    duration: float


@dataclass
class SchedulingDecision:
    """Records a single placement decision."""

    template_id: str
    start_time: Optional[str]
    end_time: Optional[str]
    reason: str
    constraint_applied: Optional[str] = None


@dataclass
class ScheduleResult:
    """Complete, self-contained result of scheduling one date."""

    success: bool
    date: str
    sleep_schedule: SleepSchedule
    schedule: List[ScheduleBlock] = field(default_factory=list)
    total_tasks: int = 0
    scheduled_tasks: int = 0
    message: Optional[str] = None
    error: Optional[str] = None
    advisories: List[str] = field(default_factory=list)
    decisions: List[SchedulingDecision] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to dictionary for JSON export."""
        return asdict(self)

    def to_human_readable(self) -> str:
        """Generate human-readable log format."""
        lines = [
            f"=== Schedule for {self.date} ===",
            f"Day window: {self.sleep_schedule.wake_time} - {self.sleep_schedule.sleep_time}",
            f"Tasks: {self.scheduled_tasks}/{self.total_tasks} scheduled",
        ]

        if not self.success:
            lines.append(f"FAILED: {self.error}")
            if self.message:
                lines.append(f"  {self.message}")

        lines.extend(["", "Schedule:"])
        for block in self.schedule:
            flags = []
            if block.status != "pending":
                flags.append(block.status)
            if block.compressed:
                flags.append("compressed")
            suffix = f" ({', '.join(flags)})" if flags else ""
            lines.append(f"  {block.start_time}-{block.end_time}  {block.template_id}{suffix}")

        if self.decisions:
            lines.extend(["", "Decisions:"])
            for decision in self.decisions:
                when = f"{decision.start_time}-{decision.end_time}" if decision.start_time else "-"
                lines.append(f"  {decision.template_id} -> {when}")
                lines.append(f"    Reason: {decision.reason}")
                if decision.constraint_applied:
                    lines.append(f"    Constraint: {decision.constraint_applied}")

        if self.advisories:
            lines.extend(["", "Advisories:"])
            for advisory in self.advisories:
                lines.append(f"  {advisory}")

        lines.append("=" * 50)

        return "\n".join(lines)
