"""Timer bookkeeping for the runtime."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TimerEvent:
    """Event produced when a timer reaches its deadline."""

    timer_id: str


class Scheduler:
    """Keeps named timers and reports the ones that have fired.

    Times are plain seconds on a monotonic scale chosen by the caller,
    for example values from :func:`time.monotonic`.
    """

    def __init__(self) -> None:
        self._deadlines: dict[str, float] = {}

    def set_timer(self, timer_id: str, duration: float, now: float) -> None:
        """Set (or reset) a timer to fire ``duration`` seconds after ``now``."""
        self._deadlines[timer_id] = now + duration

    def cancel_timer(self, timer_id: str) -> None:
        """Remove a timer; unknown ids are ignored."""
        self._deadlines.pop(timer_id, None)

    def fired_timers(self, now: float) -> list[TimerEvent]:
        """Remove and return events for every timer due at or before ``now``."""
        due = [timer_id for timer_id, fires_at in self._deadlines.items() if fires_at <= now]
        for timer_id in due:
            del self._deadlines[timer_id]
        return [TimerEvent(timer_id) for timer_id in due]

    def next_deadline(self) -> float | None:
        """Earliest pending deadline, or ``None`` when no timer is set."""
        return min(self._deadlines.values(), default=None)

    def has_timers(self) -> bool:
        """Whether any timer is pending."""
        return bool(self._deadlines)