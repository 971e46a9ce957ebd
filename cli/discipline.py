#!/usr/bin/env python3
"""Discipline TUI: today's board, habits, level and focus timer, powered by Textual."""

from __future__ import annotations

import logging
import os

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import DataTable, Footer, Header, Label, Static

from core import Engine, TimerDriver, build_dashboard, level_progress, level_title, workspace_root


MODE_LABELS = {"focus": "Focus", "short_break": "Short break", "long_break": "Long break"}

QUADRANT_LABELS = {
    "urgent-important": "Do",
    "not-urgent-important": "Plan",
    "urgent-not-important": "Delegate",
    "not-urgent-not-important": "Drop",
}

CSS = """
Screen {
    background: $surface;
}

#main-layout {
    height: 1fr;
}

#left-pane {
    width: 2fr;
    min-width: 40;
    border-right: tall $primary-background-darken-2;
    padding: 0 1;
}

#right-pane {
    width: 1fr;
    min-width: 30;
    padding: 0 1;
}

.section-title {
    text-style: bold;
    color: $accent;
    margin: 1 0 0 0;
}

#timer {
    height: 5;
    content-align: center middle;
    text-style: bold;
    border: round $primary;
}

#timer.running {
    border: round $success;
}

#level {
    padding: 0 1;
}
"""


class DisciplineApp(App):
    """Today's quadrant board with a focus timer alongside."""

    TITLE = "Discipline"
    CSS = CSS

    BINDINGS = [
        Binding("space", "toggle_timer", "Start/Pause"),
        Binding("r", "reset_timer", "Reset"),
        Binding("1", "mode('focus')", "Focus"),
        Binding("2", "mode('short_break')", "Short"),
        Binding("3", "mode('long_break')", "Long"),
        Binding("f", "focus_task", "Focus task"),
        Binding("d", "complete_task", "Done"),
        Binding("u", "reopen_task", "Undo"),
        Binding("h", "complete_habit", "Habit done"),
        Binding("q", "quit_app", "Quit"),
    ]

    def __init__(self, engine: Engine) -> None:
        super().__init__()
        self.engine = engine
        self.driver = TimerDriver(engine.timer, on_tick=self._on_tick)

    def compose(self) -> ComposeResult:
        yield Header()
        yield Horizontal(
            Vertical(
                Label("Today", classes="section-title"),
                DataTable(id="board", cursor_type="row"),
                id="left-pane",
            ),
            Vertical(
                Label("Focus timer", classes="section-title"),
                Static(id="timer"),
                Label("Level", classes="section-title"),
                Static(id="level"),
                Label("Habits", classes="section-title"),
                DataTable(id="habits", cursor_type="row"),
                id="right-pane",
            ),
            id="main-layout",
        )
        yield Footer()

    def on_mount(self) -> None:
        self.query_one("#board", DataTable).add_columns("Quadrant", "Task", "Status", "Pomodoros", "Points")
        self.query_one("#habits", DataTable).add_columns("Habit", "Streak", "Best", "Today")
        self._refresh_all()
        self.set_interval(60, self._check_new_day)

    def on_unmount(self) -> None:
        self.driver.stop()
        self.engine.close()

    # ── Rendering ──────────────────────────────────────────────

    def _refresh_all(self) -> None:
        view = build_dashboard(self.engine)
        self.sub_title = f"{view['date']}  ·  {view['tasks']['done']}/{view['tasks']['total']} done"

        board = self.query_one("#board", DataTable)
        board.clear()
        for task in self.engine.tasks.today_tasks():
            board.add_row(
                QUADRANT_LABELS[task.quadrant],
                task.title,
                task.status.replace("_", " "),
                f"{task.completed_pomodoros}/{task.estimated_pomodoros}",
                f"+{task.points_reward}" if task.points_reward else "",
                key=task.id,
            )

        habits = self.query_one("#habits", DataTable)
        habits.clear()
        for h in view["habits"]:
            habits.add_row(
                f"{h['icon']} {h['name']}".strip(),
                str(h["currentStreak"]),
                str(h["longestStreak"]),
                "✓" if h["doneToday"] else "",
                key=h["id"],
            )

        level = self.engine.level
        self.query_one("#level", Static).update(
            f"Lv.{level.level} {level_title(level.level)}  ({level_progress(level)}%)\n"
            f"{level.points_to_next_level} pts to next level\n"
            f"Spendable: {self.engine.points.current_points}  ·  Lifetime: {level.total_points}"
        )
        self._refresh_timer()

    def _refresh_timer(self) -> None:
        timer = self.engine.timer
        task = self.engine.tasks.get_task(timer.state.current_task_id) if timer.state.current_task_id else None
        lines = [
            f"{MODE_LABELS[timer.mode]}  {timer.display}",
            f"{round(timer.progress * 100)}%  ·  {timer.completed_focus_sessions_today} sessions today",
        ]
        if task is not None:
            lines.append(task.title)
        widget = self.query_one("#timer", Static)
        widget.update("\n".join(lines))
        widget.set_class(timer.is_running, "running")

    def _on_tick(self, timer) -> None:
        # A tick that ends a session may have logged a pomodoro on the board.
        if not timer.is_running or timer.progress == 0:
            self._refresh_all()
        else:
            self._refresh_timer()

    def _check_new_day(self) -> None:
        if self.engine.rollover_if_new_day() is not None:
            self._refresh_all()

    def _selected_row(self, table_id: str) -> str | None:
        table = self.query_one(table_id, DataTable)
        if table.row_count == 0:
            return None
        row_key, _ = table.coordinate_to_cell_key(table.cursor_coordinate)
        return row_key.value

    def _selected_task_id(self) -> str | None:
        return self._selected_row("#board")

    # ── Actions ────────────────────────────────────────────────

    def action_toggle_timer(self) -> None:
        if self.engine.timer.is_running:
            self.driver.pause()
        else:
            self.driver.start()
        self._refresh_timer()

    def action_reset_timer(self) -> None:
        self.driver.stop()
        self.engine.timer.reset()
        self._refresh_timer()

    def action_mode(self, mode: str) -> None:
        self.driver.stop()
        self.engine.timer.switch_mode(mode)
        self._refresh_timer()

    def action_focus_task(self) -> None:
        task_id = self._selected_task_id()
        if task_id is None:
            return
        self.driver.stop()
        self.engine.focus_on(task_id)
        self._refresh_timer()

    def action_complete_task(self) -> None:
        task_id = self._selected_task_id()
        if task_id is not None:
            self.engine.complete_task(task_id)
            self._refresh_all()

    def action_reopen_task(self) -> None:
        task_id = self._selected_task_id()
        if task_id is not None:
            self.engine.reopen_task(task_id)
            self._refresh_all()

    def action_complete_habit(self) -> None:
        habit_id = self._selected_row("#habits")
        if habit_id is not None:
            self.engine.complete_habit(habit_id)
            self._refresh_all()

    def action_quit_app(self) -> None:
        self.exit()


# ── Entry point ────────────────────────────────────────────────


def main() -> None:
    root = workspace_root()
    root.mkdir(parents=True, exist_ok=True)
    # The terminal belongs to the TUI, so logs go to a file in the data root.
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=getattr(logging, os.environ.get("DISCIPLINE_LOG_LEVEL", "WARNING").upper(), logging.WARNING),
        filename=str(root / "discipline.log"),
    )
    engine = Engine(root=root, hooks_enabled=True)
    engine.rollover_day()
    DisciplineApp(engine).run()


if __name__ == "__main__":
    main()
