"""Focus timer state machine.

Holds mode and countdown for the pomodoro timer. State lives only for the
life of the process and is never persisted. set_mode() and reset() are
deliberately separate: switching modes leaves the clock alone until the
caller resets it. Mode chaining (focus -> break) is also left to the caller;
suggest_next_mode() only answers what would come next.
"""

from __future__ import annotations

from typing import Callable

from core.models import TIMER_MODES, PomodoroConfig, TimerState
from core.workspace import Clock, SystemClock


CompletionListener = Callable[[str, "FocusTimer"], None]


class FocusTimer:
    def __init__(self, config: PomodoroConfig | None = None, clock: Clock | None = None) -> None:
        self.config = config or PomodoroConfig()
        self.clock = clock or SystemClock()
        duration = self.duration_for("focus")
        self.state = TimerState(
            mode="focus",
            time_remaining=duration,
            total_duration=duration,
            sessions_day=self.clock.today_str(),
        )
        self._listeners: list[CompletionListener] = []

    # ── Reads ─────────────────────────────────────────────────

    @property
    def mode(self) -> str:
        return self.state.mode

    @property
    def is_running(self) -> bool:
        return self.state.is_running

    @property
    def time_remaining(self) -> int:
        return self.state.time_remaining

    @property
    def completed_focus_sessions_today(self) -> int:
        """Focus sessions finished on the clock's current day."""
        if self.state.sessions_day != self.clock.today_str():
            return 0
        return self.state.completed_focus_sessions_today

    def duration_for(self, mode: str) -> int:
        """Configured length of *mode* in seconds."""
        return self.config.duration_seconds(mode)

    @property
    def progress(self) -> float:
        """Fraction of the current countdown already elapsed (0.0-1.0)."""
        total = self.state.total_duration
        if total <= 0:
            return 0.0
        return (total - self.state.time_remaining) / total

    @property
    def display(self) -> str:
        minutes, seconds = divmod(max(0, self.state.time_remaining), 60)
        return f"{minutes:02d}:{seconds:02d}"

    def suggest_next_mode(self) -> str:
        """The mode a pomodoro cycle would move to after the current one."""
        if self.state.mode != "focus":
            return "focus"
        done = self.completed_focus_sessions_today
        if done > 0 and done % self.config.long_break_interval == 0:
            return "long_break"
        return "short_break"

    # ── Transitions ───────────────────────────────────────────

    def set_mode(self, mode: str) -> None:
        """Switch mode without touching the countdown."""
        if mode not in TIMER_MODES:
            raise ValueError(f"Unknown timer mode: {mode!r}")
        self.state.mode = mode

    def reset(self, duration: int | None = None) -> None:
        """Stop and rewind to *duration* seconds (default: the current mode's length)."""
        if duration is None:
            duration = self.duration_for(self.state.mode)
        duration = max(0, int(duration))
        self.state.time_remaining = duration
        self.state.total_duration = duration
        self.state.is_running = False

    def switch_mode(self, mode: str) -> None:
        """set_mode followed by reset to that mode's configured length."""
        self.set_mode(mode)
        self.reset(self.duration_for(mode))

    def start(self) -> bool:
        if self.state.time_remaining <= 0:
            return False
        self._roll_day()
        self.state.is_running = True
        return True

    def pause(self) -> None:
        self.state.is_running = False

    def toggle(self) -> bool:
        if self.state.is_running:
            self.pause()
            return False
        return self.start()

    def set_current_task(self, task_id: str | None) -> None:
        self.state.current_task_id = task_id

    def add_completion_listener(self, listener: CompletionListener) -> None:
        self._listeners.append(listener)

    def tick(self) -> bool:
        """Advance one second. Returns True if this tick finished the countdown.

        A tick on a stopped or finished timer does nothing.
        """
        state = self.state
        if not state.is_running or state.time_remaining <= 0:
            return False
        state.time_remaining -= 1
        if state.time_remaining > 0:
            return False

        state.is_running = False
        finished = state.mode
        if finished == "focus":
            self._roll_day()
            state.completed_focus_sessions_today += 1
        for listener in list(self._listeners):
            listener(finished, self)
        return True

    def _roll_day(self) -> None:
        today = self.clock.today_str()
        if self.state.sessions_day != today:
            self.state.sessions_day = today
            self.state.completed_focus_sessions_today = 0
