"""DTOs for the notification gate and the sweepers."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ReserveResult:
    """Outcome of a dedup reservation; already=True means do not send."""

    already: bool


@dataclass(frozen=True)
class SweepResult:
    """Summary of one sweeper pass."""

    examined: int = 0
    processed: list[str] = field(default_factory=list)
    skipped: int = 0
    failed: int = 0
    notifications_sent: int = 0
