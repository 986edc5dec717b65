"""A single named TeamCity environment used to test a plugin locally."""
from __future__ import annotations

import logging
import os
import shutil
import weakref
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional, Sequence, Union

from constants import Constants
from errors import InvalidVersionFormat, MissingDataVersionPrefix
from versioning.models import TeamCityVersion

if TYPE_CHECKING:
    from environments.registry import TeamCityEnvironments

logger = logging.getLogger(__name__)

Options = Union[str, Sequence[str]]


def _as_option_list(options: Options) -> List[str]:
    if isinstance(options, str):
        return [options]
    return [str(option) for option in options]


def _default_java_home() -> Optional[str]:
    """JAVA_HOME of this process, else the JDK that owns ``java`` on PATH."""
    java_home = os.environ.get(Constants.ENV_JAVA_HOME)
    if java_home:
        return java_home
    java = shutil.which("java")
    if java:
        return os.path.dirname(os.path.dirname(os.path.realpath(java)))
    return None


class TeamCityEnvironment:
    """Settings for one local TeamCity server and agent installation.

    Every read goes through the owning registry's OverrideResolver, so an
    override property supplied after configuration still wins, and defaults
    derived from the version follow later version changes.
    """

    def __init__(self, name: str, environments: "TeamCityEnvironments"):
        self._name = name
        self._environments = weakref.ref(environments)
        self._version = Constants.DEFAULT_VERSION
        self._download_url: Optional[str] = None
        self._home_dir: Optional[str] = None
        self._data_dir: Optional[str] = None
        self._java_home: Optional[str] = None
        self._plugins: List[str] = []
        self._server_options: List[str] = list(Constants.DEFAULT_SERVER_OPTIONS)
        self._agent_options: List[str] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def environments(self) -> "TeamCityEnvironments":
        environments = self._environments()
        if environments is None:
            raise RuntimeError(f"Environment '{self._name}' is no longer attached to a registry")
        return environments

    def _resolve(self, setting: str, own_value: Any, compute_default=None) -> Any:
        return self.environments.resolver.resolve(self._name, setting, own_value, compute_default)

    # version

    @property
    def version(self) -> str:
        """The TeamCity version of this environment. Defaults to '9.0'."""
        return self._version

    @version.setter
    def version(self, version: str) -> None:
        try:
            TeamCityVersion.version(version, allow_snapshots=True)
        except InvalidVersionFormat as exc:
            raise InvalidVersionFormat(f"Environment '{self._name}': {exc}") from exc
        logger.debug("Environment '%s' version set to %s", self._name, version)
        self._version = version

    @property
    def teamcity_version(self) -> TeamCityVersion:
        return TeamCityVersion.version(self._version, allow_snapshots=True)

    # download and install locations

    @property
    def download_url(self) -> str:
        """URL of the TeamCity distribution for this environment."""
        return self._resolve("downloadUrl", self._download_url, self._default_download_url)

    @download_url.setter
    def download_url(self, value: Optional[str]) -> None:
        self._download_url = value

    @property
    def installer_file(self) -> str:
        """Path the distribution is downloaded to."""
        return self._resolve("installerFile", None, self._default_installer_file)

    @property
    def home_dir(self) -> str:
        """Home directory of this environment's TeamCity installation."""
        return self._resolve("homeDir", self._home_dir, self._default_home_dir)

    @home_dir.setter
    def home_dir(self, value: Optional[str]) -> None:
        self._home_dir = value

    @property
    def data_dir(self) -> str:
        """Data directory of this environment's TeamCity configuration."""
        return self._resolve("dataDir", self._data_dir, self._default_data_dir)

    @data_dir.setter
    def data_dir(self, value: Optional[str]) -> None:
        self._data_dir = value

    @property
    def plugins_dir(self) -> str:
        return f"{self.data_dir}/{Constants.PLUGINS_DIR_NAME}"

    @property
    def java_home(self) -> str:
        """Java home used to start the server and agent."""
        return self._resolve("javaHome", self._java_home, _default_java_home)

    @java_home.setter
    def java_home(self, value: Optional[str]) -> None:
        self._java_home = value

    @property
    def base_home_dir(self) -> str:
        return self.environments.base_home_dir

    @property
    def base_data_dir(self) -> str:
        return self.environments.base_data_dir

    # plugins

    @property
    def plugins(self) -> List[str]:
        """Plugin archives deployed to this environment, duplicates kept."""
        return list(self._plugins)

    @plugins.setter
    def plugins(self, paths: Union[str, Iterable[str]]) -> None:
        self._plugins = []
        self.add_plugins(paths)

    def add_plugins(self, *paths: Union[str, Iterable[str]]) -> None:
        for path in paths:
            if isinstance(path, (str, os.PathLike)):
                self._plugins.append(os.fspath(path))
            else:
                self._plugins.extend(os.fspath(p) for p in path)

    # JVM options

    @property
    def server_options(self) -> str:
        """Server JVM options joined with a single space."""
        return self._resolve("serverOptions", " ".join(self._server_options))

    def set_server_options(self, options: Options) -> None:
        self._server_options = _as_option_list(options)

    def add_server_options(self, *options: str) -> None:
        self._server_options.extend(options)

    @property
    def agent_options(self) -> str:
        """Agent JVM options joined with a single space."""
        return self._resolve("agentOptions", " ".join(self._agent_options))

    def set_agent_options(self, options: Options) -> None:
        self._agent_options = _as_option_list(options)

    def add_agent_options(self, *options: str) -> None:
        self._agent_options.extend(options)

    # convention defaults

    def _default_download_url(self) -> str:
        base_url = self.environments.base_download_url.rstrip("/")
        return f"{base_url}/{Constants.PRODUCT_NAME}-{self._version}{Constants.ARCHIVE_EXTENSION}"

    def _default_installer_file(self) -> str:
        filename = self.download_url.rsplit("/", 1)[-1]
        return f"{self.environments.downloads_dir}/{filename}"

    def _default_home_dir(self) -> str:
        return f"{self.environments.base_home_dir}/{Constants.PRODUCT_NAME}-{self._version}"

    def _default_data_dir(self) -> str:
        try:
            data_version = TeamCityVersion.version(self._version, allow_snapshots=True).data_version
        except MissingDataVersionPrefix as exc:
            raise MissingDataVersionPrefix(
                f"Environment '{self._name}' setting 'dataDir': {exc}; set dataDir explicitly"
            ) from exc
        return f"{self.environments.base_data_dir}/{data_version}"

    def as_dict(self) -> Dict[str, Any]:
        """Resolve every setting, for display."""
        return {
            "name": self._name,
            "version": self.version,
            "downloadUrl": self.download_url,
            "installerFile": self.installer_file,
            "homeDir": self.home_dir,
            "dataDir": self.data_dir,
            "pluginsDir": self.plugins_dir,
            "javaHome": self.java_home,
            "plugins": self.plugins,
            "serverOptions": self.server_options,
            "agentOptions": self.agent_options,
        }

    def __repr__(self):
        return f"TeamCityEnvironment(name='{self._name}', version='{self._version}')"
