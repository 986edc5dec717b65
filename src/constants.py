"""Constants used in the project."""

import logging
import os
from enum import Enum

import yaml

from errors import ConfigurationError

logger = logging.getLogger(__name__)


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    CONFIG_ERROR = 2
    EXECUTION_ERROR = 3


class Platforms(Enum):
    """Platform identifiers used to pick start/stop scripts.

    Args:
        Enum (string): Platform identifiers.
    """

    WINDOWS = "windows"
    UNIX = "unix"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    PRODUCT_NAME = "TeamCity"
    PROPERTY_NAMESPACE = "teamcity.environments"
    SNAPSHOT = "SNAPSHOT"
    DEFAULT_VERSION = "9.0"

    BASE_DOWNLOAD_URL = "https://download.jetbrains.com/teamcity"
    BASE_HOME_DIR_NAME = "servers"
    BASE_DATA_DIR_NAME = "data"
    DOWNLOADS_DIR_NAME = "downloads"
    PLUGINS_DIR_NAME = "plugins"
    ARCHIVE_EXTENSION = ".tar.gz"
    ARCHIVE_ROOT = "TeamCity"

    DEFAULT_SERVER_OPTIONS = (
        "-Dteamcity.development.mode=true",
        "-Dteamcity.development.shadowCopyClasses=true",
        "-Dteamcity.superUser.token.saveToFile=true",
        "-Dteamcity.kotlinConfigsDsl.generateDslDocs=false",
    )
    DEFAULT_PUBLISH_CHANNELS = ("Stable",)

    SERVER_SCRIPT_DIR = "bin"
    SERVER_SCRIPT_NAME = "teamcity-server"
    AGENT_SCRIPT_DIR = "buildAgent/bin"
    AGENT_SCRIPT_NAME = "agent"
    ENV_JAVA_HOME = "JAVA_HOME"
    ENV_DATA_PATH = "TEAMCITY_DATA_PATH"
    ENV_SERVER_OPTS = "TEAMCITY_SERVER_OPTS"
    ENV_AGENT_OPTS = "TEAMCITY_AGENT_OPTS"

    LOG_FORMAT = "[%(levelname)s] %(message)s"
    ENV_LOG_LEVEL = "TCENV_LOG_LEVEL"
    ENV_CONFIG = "TCENV_CONFIG"
    CONFIG_FILE_NAMES = ("tcenv.yml", "tcenv.yaml")
    USER_CONFIG_FILE = os.path.join("~", ".config", "tcenv", "tcenv.yml")

    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    HTTP_RETRY_MAX = 3
    HTTP_RETRY_BASE_DELAY_SEC = 0.3
    DOWNLOAD_CHUNK_SIZE = 1024 * 1024


def _default_config_paths():
    """Return candidate config file locations in priority order."""
    paths = []
    env_path = os.environ.get(Constants.ENV_CONFIG)
    if env_path:
        paths.append(env_path)
    paths.extend(os.path.abspath(name) for name in Constants.CONFIG_FILE_NAMES)
    paths.append(os.path.expanduser(Constants.USER_CONFIG_FILE))
    return paths


def _load_yaml_config(path=None):
    """Load the YAML configuration document.

    Args:
        path (str, optional): Explicit config path. When given it must exist.

    Raises:
        ConfigurationError: If the explicit file is missing, or any file is
            not valid YAML or does not hold a mapping.

    Returns:
        dict: Parsed configuration, empty when no default file exists.
    """
    if path:
        if not os.path.isfile(path):
            raise ConfigurationError(f"Config file not found: {path}")
        candidates = [path]
    else:
        candidates = [p for p in _default_config_paths() if os.path.isfile(p)]
        if not candidates:
            logger.debug("No config file found in default locations")
            return {}

    config_path = candidates[0]
    try:
        with open(config_path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {config_path} must contain a mapping")
    logger.info("Loaded configuration from %s", config_path)
    return data
