"""Self-discipline engine core library: stores, rules, and persistence.

Public API re-exports for convenient imports:
    from core import Engine, calculate_level, FixedClock, ...
"""

# Workspace, paths & clock
from core.workspace import (
    workspace_root,
    config_path,
    hooks_config_path,
    data_dir,
    Clock,
    SystemClock,
    FixedClock,
)

# File I/O
from core.fileio import (
    read_text,
    read_yaml,
    write_text_atomic,
    write_yaml_atomic,
)

# Configuration
from core.config import load_config, save_config, update_pomodoro_config

# Persistence
from core.storage import (
    StorageBackend,
    MemoryBackend,
    JsonFileBackend,
    WriteBehindBackend,
    DurableStore,
    PersistentStore,
    persists,
)

# Leveling & points
from core.leveling import LEVEL_THRESHOLDS, calculate_level, level_title, level_progress
from core.points import PointsLedger

# Tasks & habits
from core.tasks import TaskStore, validate_task
from core.habits import HabitStore
from core.streaks import StreakResult, is_scheduled, recompute_streak

# Focus timer
from core.timer import FocusTimer
from core.ticker import TimerDriver

# Hooks, engine & views
from core.hooks import run_hooks, load_hooks_config
from core.engine import Engine
from core.dashboard import build_dashboard

# Models
from core.models import (
    QUADRANTS,
    TASK_STATUSES,
    TIMER_MODES,
    Task,
    Habit,
    HabitLog,
    Reward,
    Punishment,
    PointsTransaction,
    UserLevel,
    TimerState,
    PomodoroConfig,
    AppConfig,
)
