"""Data root, clock, and path helpers for the discipline engine."""

from __future__ import annotations

import os
from datetime import date, datetime, timedelta
from pathlib import Path
from zoneinfo import ZoneInfo


def workspace_root() -> Path:
    """Get the data root directory (holds config.yaml, hooks.yaml and data/)."""
    return Path(
        os.environ.get("DISCIPLINE_ROOT", str(Path.home() / ".discipline"))
    ).expanduser().resolve()


# ── Clock ─────────────────────────────────────────────────────


class Clock:
    """Source of local time. Every "today" in the engine comes from here."""

    def now(self) -> datetime:
        raise NotImplementedError

    def today(self) -> date:
        return self.now().date()

    def today_str(self) -> str:
        return self.today().isoformat()

    def timestamp(self) -> str:
        return self.now().isoformat(timespec="milliseconds")


class SystemClock(Clock):
    def __init__(self, tz: ZoneInfo | None = None) -> None:
        self.tz = tz or ZoneInfo("UTC")

    def now(self) -> datetime:
        return datetime.now(self.tz)


class FixedClock(Clock):
    """Frozen clock for tests; move it with advance() or set()."""

    def __init__(self, now: datetime) -> None:
        self._now = now

    def now(self) -> datetime:
        return self._now

    def set(self, now: datetime) -> None:
        self._now = now

    def advance(self, **kwargs: float) -> datetime:
        self._now = self._now + timedelta(**kwargs)
        return self._now


# ── Path helpers ──────────────────────────────────────────────

def config_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "config.yaml"


def hooks_config_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "hooks.yaml"


def data_dir(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "data"
