"""Registry of named TeamCity environments and their shared base values."""
from __future__ import annotations

import logging
import os
from typing import Callable, Dict, Iterator, List, Optional

from constants import Constants
from environments.environment import TeamCityEnvironment
from environments.overrides import OverrideResolver, PropertySource

logger = logging.getLogger(__name__)


class TeamCityEnvironments:
    """Environments declared for one invocation, plus shared base values.

    Base values resolve like environment settings, keyed by
    ``teamcity.environments.<setting>``, and default to directories below
    ``project_dir``.
    """

    def __init__(self, properties: Optional[PropertySource] = None, project_dir: Optional[str] = None):
        self.resolver = OverrideResolver(properties)
        self.project_dir = os.path.abspath(project_dir) if project_dir else os.getcwd()
        self._environments: Dict[str, TeamCityEnvironment] = {}
        self._base_download_url: Optional[str] = None
        self._base_home_dir: Optional[str] = None
        self._base_data_dir: Optional[str] = None
        self._downloads_dir: Optional[str] = None

    @property
    def properties(self) -> PropertySource:
        return self.resolver.source

    def _project_path(self, name: str) -> str:
        return os.path.join(self.project_dir, name)

    @property
    def base_download_url(self) -> str:
        return self.resolver.resolve_shared(
            "baseDownloadUrl", self._base_download_url, lambda: Constants.BASE_DOWNLOAD_URL
        )

    @base_download_url.setter
    def base_download_url(self, value: Optional[str]) -> None:
        self._base_download_url = value

    @property
    def base_home_dir(self) -> str:
        return self.resolver.resolve_shared(
            "baseHomeDir", self._base_home_dir, lambda: self._project_path(Constants.BASE_HOME_DIR_NAME)
        )

    @base_home_dir.setter
    def base_home_dir(self, value: Optional[str]) -> None:
        self._base_home_dir = value

    @property
    def base_data_dir(self) -> str:
        return self.resolver.resolve_shared(
            "baseDataDir", self._base_data_dir, lambda: self._project_path(Constants.BASE_DATA_DIR_NAME)
        )

    @base_data_dir.setter
    def base_data_dir(self, value: Optional[str]) -> None:
        self._base_data_dir = value

    @property
    def downloads_dir(self) -> str:
        return self.resolver.resolve_shared(
            "downloadsDir", self._downloads_dir, lambda: self._project_path(Constants.DOWNLOADS_DIR_NAME)
        )

    @downloads_dir.setter
    def downloads_dir(self, value: Optional[str]) -> None:
        self._downloads_dir = value

    def environment(
        self, name: str, configure: Optional[Callable[[TeamCityEnvironment], None]] = None
    ) -> TeamCityEnvironment:
        """Return the environment called ``name``, creating it on first use.

        Args:
            name: Environment name, unique within this registry.
            configure: Optional callback applied to the environment.

        Raises:
            ValueError: If name is empty.
        """
        if not isinstance(name, str) or not name.strip():
            raise ValueError("Environment name must be a non-empty string")
        env = self._environments.get(name)
        if env is None:
            env = TeamCityEnvironment(name, self)
            self._environments[name] = env
            logger.debug("Created environment '%s'", name)
        if configure is not None:
            configure(env)
        return env

    def get(self, name: str) -> TeamCityEnvironment:
        try:
            return self._environments[name]
        except KeyError:
            raise KeyError(f"Unknown environment '{name}'; declared: {', '.join(self.names()) or 'none'}") from None

    def names(self) -> List[str]:
        return list(self._environments)

    def list(self) -> List[TeamCityEnvironment]:
        return list(self._environments.values())

    def __iter__(self) -> Iterator[TeamCityEnvironment]:
        return iter(self.list())

    def __len__(self) -> int:
        return len(self._environments)

    def __contains__(self, name: object) -> bool:
        return name in self._environments
