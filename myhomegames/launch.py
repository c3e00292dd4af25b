# myhomegames/launch.py
from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path
from typing import Dict, List, Optional, Union

from .api_utils import BadRequestError, ForbiddenError
from .models import LaunchResult
from .storage import MetadataLayout
from .utils import is_windows, is_within, normalize_exec_tag

logger = logging.getLogger(__name__)

SCRIPT_NAMES = {"sh": "script.sh", "bat": "script.bat"}

# ──────────────────────────────────────────────────────────────────────────────
# Command resolution
# ──────────────────────────────────────────────────────────────────────────────

def script_path(layout: MetadataLayout, game_id: str, tag: str) -> Path:
    return layout.content_file("games", game_id, SCRIPT_NAMES[tag])


def resolve_argv(game: Dict, layout: MetadataLayout) -> List[str]:
    """
    Build the argv for a game entry.

    - ``command`` "sh"/"bat" (leading dot allowed) points at the uploaded script
      in the game's content directory.
    - Anything else is taken as the executable path itself.
    - ``args`` (list of strings) is appended verbatim.
    """
    command = game.get("command")
    if not isinstance(command, str) or not command.strip():
        raise BadRequestError(
            "Launch failed",
            payload={"detail": "Command is missing or invalid. Please check the game configuration."},
        )

    tag = normalize_exec_tag(command)
    if tag in SCRIPT_NAMES:
        executable = str(script_path(layout, str(game["id"]), tag))
    else:
        executable = command.strip()

    args = game.get("args") or []
    if not isinstance(args, list):
        raise BadRequestError("Launch failed", payload={"detail": "args must be a list of strings."})
    return [executable] + [str(a) for a in args]


def check_allowed_dir(game: Dict, executable: str) -> None:
    allowed = game.get("allowed_dir")
    if not allowed:
        return
    if not is_within(executable, allowed):
        raise ForbiddenError("Command outside allowed directory")


# ──────────────────────────────────────────────────────────────────────────────
# Spawning
# ──────────────────────────────────────────────────────────────────────────────

class LaunchOutcome:
    """Holds the single result of one launch; later resolutions are ignored."""

    PENDING = "pending"
    RESOLVED = "resolved"

    def __init__(self) -> None:
        self.state = self.PENDING
        self._result: Optional[LaunchResult] = None

    def resolve(self, result: LaunchResult) -> bool:
        if self.state != self.PENDING:
            return False
        self._result = result
        self.state = self.RESOLVED
        return True

    @property
    def result(self) -> LaunchResult:
        if self._result is None:
            raise RuntimeError("launch outcome not resolved yet")
        return self._result


def _detach_kwargs() -> Dict:
    if is_windows():
        flags = getattr(subprocess, "DETACHED_PROCESS", 0) | getattr(subprocess, "CREATE_NEW_PROCESS_GROUP", 0)
        return {"creationflags": flags}
    return {"start_new_session": True}


def spawn_detached(argv: List[str], cwd: Optional[Union[str, Path]] = None) -> LaunchResult:
    """
    Start ``argv`` directly (no shell), in its own session, with standard
    streams discarded. We only report whether the OS accepted the spawn; the
    child is never waited on.
    """
    outcome = LaunchOutcome()
    try:
        p = subprocess.Popen(
            argv,
            cwd=str(cwd) if cwd else None,
            shell=False,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            close_fds=True,
            **_detach_kwargs(),
        )
    except FileNotFoundError:
        logger.error("Failed to spawn process: %s not found", argv[0])
        outcome.resolve(LaunchResult(
            ok=False, status=500,
            detail=f"Command not found: {argv[0]}. Please check if the executable exists.",
        ))
    except (OSError, ValueError) as e:
        logger.error("Failed to spawn process %s: %s", argv[0], e)
        outcome.resolve(LaunchResult(ok=False, status=500, detail=str(e) or "Unknown error occurred"))
    else:
        outcome.resolve(LaunchResult(ok=True, status=200, pid=getattr(p, "pid", None)))
    return outcome.result


# ──────────────────────────────────────────────────────────────────────────────
# Public API
# ──────────────────────────────────────────────────────────────────────────────

def launch_game(game: Dict, layout: MetadataLayout) -> LaunchResult:
    """Resolve, sandbox-check and spawn a game's command.

    Validation problems raise APIError subclasses; spawn failures come back
    as a non-ok LaunchResult.
    """
    argv = resolve_argv(game, layout)
    check_allowed_dir(game, argv[0])

    executable = Path(argv[0])
    cwd = executable.parent if executable.is_absolute() and executable.parent.is_dir() else None
    logger.info("Launching game %s: %s", game.get("id"), argv[0])
    return spawn_detached(argv, cwd=cwd)


def make_executable(path: Path) -> None:
    if is_windows():
        return
    os.chmod(path, 0o755)
