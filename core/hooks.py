"""Shell-command hooks fired on engine events.

Configured via hooks.yaml in the data root:

    on_task_complete:
      - notify-send "Task done"
      - command: ./log-points.sh
        timeout: 5

Hook points:
- on_task_complete, on_habit_complete
- on_focus_complete
- on_level_up
- on_reward_redeem

Each command gets the event context as JSON on stdin. Failures are captured
in the result list and never raised.
"""

from __future__ import annotations

import json
import logging
import subprocess
from pathlib import Path
from typing import Any

import yaml

from core.fileio import read_yaml
from core.workspace import hooks_config_path, workspace_root

logger = logging.getLogger(__name__)


VALID_HOOK_POINTS = {
    "on_task_complete",
    "on_habit_complete",
    "on_focus_complete",
    "on_level_up",
    "on_reward_redeem",
}

DEFAULT_TIMEOUT = 30


def load_hooks_config(root: Path | None = None) -> dict[str, Any]:
    """Load hooks configuration from hooks.yaml."""
    if root is None:
        root = workspace_root()
    path = hooks_config_path(root)
    if not path.exists():
        return {}
    try:
        return read_yaml(path)
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Ignoring unreadable hooks config %s: %s", path, e)
        return {}


def _parse_hook(hook: Any) -> tuple[str, float] | None:
    """A hooks.yaml entry as (command, timeout), or None if unusable."""
    if isinstance(hook, str):
        return (hook, DEFAULT_TIMEOUT) if hook else None
    if isinstance(hook, dict) and hook.get("command"):
        return str(hook["command"]), hook.get("timeout", DEFAULT_TIMEOUT)
    return None


def _run_command(command: str, timeout: float, payload: str, root: Path) -> dict[str, Any]:
    try:
        proc = subprocess.run(
            command,
            shell=True,
            input=payload,
            capture_output=True,
            text=True,
            timeout=timeout,
            cwd=str(root),
        )
    except subprocess.TimeoutExpired:
        logger.warning("Hook %r timed out after %ss", command, timeout)
        return {"exit_code": -1, "error": f"Hook timed out after {timeout}s"}
    except Exception as e:
        logger.warning("Hook %r failed: %s", command, e)
        return {"exit_code": -1, "error": str(e)}
    if proc.returncode != 0:
        logger.warning("Hook %r exited with %d", command, proc.returncode)
    return {
        "exit_code": proc.returncode,
        "stdout": proc.stdout[:4096],
        "stderr": proc.stderr[:4096],
    }


def run_hooks(
    hook_point: str,
    context: dict[str, Any],
    root: Path | None = None,
) -> list[dict[str, Any]]:
    """Run every command registered for *hook_point*, in order.

    The context (plus an "event" key) is sent to each command as JSON on
    stdin. Returns one result dict per command.
    """
    if hook_point not in VALID_HOOK_POINTS:
        return []
    if root is None:
        root = workspace_root()

    hooks = load_hooks_config(root).get(hook_point)
    if not isinstance(hooks, list):
        return []

    payload = json.dumps({"event": hook_point, **context}, ensure_ascii=False)
    results = []
    for hook in hooks:
        parsed = _parse_hook(hook)
        if parsed is None:
            continue
        command, timeout = parsed
        result: dict[str, Any] = {"command": command, "hook_point": hook_point}
        result.update(_run_command(command, timeout, payload, root))
        results.append(result)
    return results
