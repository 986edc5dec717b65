"""Executes composed start/stop commands.

The TeamCity scripts return once the process has been spawned; waiting for the
server or agent to become ready is left to the user.
"""

from __future__ import annotations

import logging
import os
import platform
import subprocess
from typing import Dict, Optional

from common.logging_utils import Timer, extra_context, is_debug_enabled
from constants import Platforms
from launch.commands import ExecSpec

logger = logging.getLogger(__name__)


class LaunchError(RuntimeError):
    """Raised when a start/stop script cannot be executed."""


def current_platform() -> str:
    """Platform identifier for this process, used by the CLI only."""
    if platform.system().lower().startswith("windows"):
        return Platforms.WINDOWS.value
    return Platforms.UNIX.value


def run_command(spec: ExecSpec, base_env: Optional[Dict[str, str]] = None) -> int:
    """Run ``spec`` and return its exit code.

    Args:
        spec: The command to run.
        base_env: Environment to extend; defaults to ``os.environ``.

    Raises:
        LaunchError: If the executable does not exist or cannot be run.
    """
    if not os.path.isfile(spec.executable):
        raise LaunchError(f"Executable not found: {spec.executable}")

    env = dict(os.environ if base_env is None else base_env)
    env.update(spec.env)
    if is_debug_enabled(logger):
        logger.debug(
            "Running command",
            extra=extra_context(
                event="process_start",
                component="runner",
                action=" ".join(spec.args),
                target=spec.executable,
            ),
        )
    with Timer() as t:
        try:
            result = subprocess.run(spec.command_line, env=env, check=False)
        except OSError as exc:
            raise LaunchError(f"Failed to run {spec.executable}: {exc}") from exc
    if result.returncode != 0:
        logger.error("%s exited with code %d", spec.executable, result.returncode)
    else:
        logger.info("%s %s finished in %d ms", spec.executable, " ".join(spec.args), t.duration_ms())
    return result.returncode
