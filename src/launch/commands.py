"""Start/stop command composition for an environment's server and agent.

Commands are plain data; ``launch.runner`` executes them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

from constants import Constants, Platforms
from environments.environment import TeamCityEnvironment

ACTIONS = ("start", "stop")


@dataclass
class ExecSpec:
    """A process invocation: executable, arguments and extra environment."""

    executable: str
    args: List[str] = field(default_factory=list)
    env: Dict[str, str] = field(default_factory=dict)

    @property
    def command_line(self) -> List[str]:
        return [self.executable, *self.args]


def is_windows(platform_name: str) -> bool:
    return str(platform_name).lower().startswith(Platforms.WINDOWS.value)


def script_name(base_name: str, platform_name: str) -> str:
    return base_name + (".bat" if is_windows(platform_name) else ".sh")


def _check_action(action: str) -> str:
    if action not in ACTIONS:
        raise ValueError(f"Invalid action '{action}', expected one of: {', '.join(ACTIONS)}")
    return action


def server_command(environment: TeamCityEnvironment, action: str, platform_name: str) -> ExecSpec:
    """Build the command that starts or stops the environment's server."""
    name = script_name(Constants.SERVER_SCRIPT_NAME, platform_name)
    return ExecSpec(
        executable=f"{environment.home_dir}/{Constants.SERVER_SCRIPT_DIR}/{name}",
        args=[_check_action(action)],
        env={
            Constants.ENV_JAVA_HOME: environment.java_home,
            Constants.ENV_DATA_PATH: environment.data_dir,
            Constants.ENV_SERVER_OPTS: environment.server_options,
        },
    )


def agent_command(environment: TeamCityEnvironment, action: str, platform_name: str) -> ExecSpec:
    """Build the command that starts or stops the environment's build agent."""
    name = script_name(Constants.AGENT_SCRIPT_NAME, platform_name)
    return ExecSpec(
        executable=f"{environment.home_dir}/{Constants.AGENT_SCRIPT_DIR}/{name}",
        args=[_check_action(action)],
        env={
            Constants.ENV_JAVA_HOME: environment.java_home,
            Constants.ENV_AGENT_OPTS: environment.agent_options,
        },
    )
