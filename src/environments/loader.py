"""Build a PluginExtension from a parsed YAML configuration document.

Expected layout::

    teamcity:
      version: "2020.1"
      environments:
        baseHomeDir: /opt/teamcity
        ci:
          version: "2021.2.3"
          serverOptions: ["-Xmx2g"]
    properties:
      teamcity.environments.ci.homeDir: /tmp/ci
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from environments.environment import TeamCityEnvironment
from environments.overrides import MapPropertySource, PropertySource
from environments.registry import TeamCityEnvironments
from errors import InvalidVersionFormat
from plugin.extension import PluginExtension

logger = logging.getLogger(__name__)

_BASE_KEYS = {
    "baseDownloadUrl": "base_download_url",
    "baseHomeDir": "base_home_dir",
    "baseDataDir": "base_data_dir",
    "downloadsDir": "downloads_dir",
}

_ENVIRONMENT_VALUE_KEYS = {
    "downloadUrl": "download_url",
    "homeDir": "home_dir",
    "dataDir": "data_dir",
    "javaHome": "java_home",
    "plugins": "plugins",
}


def _mapping(value: Any, where: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValueError(f"'{where}' must be a mapping")
    return value


def _str(value: Any) -> Any:
    if value is None or isinstance(value, (list, tuple)):
        return value
    return str(value)


def _version(value: Any, where: str) -> str:
    # an unquoted 2017.10 reaches us as the float 2017.1
    if not isinstance(value, str):
        raise InvalidVersionFormat(
            f"'{where}' must be a quoted string, got {type(value).__name__} {value!r}; "
            "quote the version so YAML keeps every digit, e.g. version: \"2017.10\""
        )
    return value


def configure_environment(env: TeamCityEnvironment, settings: Mapping[str, Any]) -> TeamCityEnvironment:
    """Apply one environment's settings block."""
    for key, value in settings.items():
        if key == "version":
            env.version = _version(value, f"environments.{env.name}.version")
        elif key in _ENVIRONMENT_VALUE_KEYS:
            setattr(env, _ENVIRONMENT_VALUE_KEYS[key], _str(value))
        elif key == "serverOptions":
            env.set_server_options(_str(value))
        elif key == "agentOptions":
            env.set_agent_options(_str(value))
        else:
            raise ValueError(f"Unknown setting '{key}' for environment '{env.name}'")
    return env


def configure_environments(environments: TeamCityEnvironments, config: Mapping[str, Any]) -> TeamCityEnvironments:
    """Apply the ``environments`` block: base values and named environments."""
    for key, value in config.items():
        if key in _BASE_KEYS:
            setattr(environments, _BASE_KEYS[key], _str(value))
        elif isinstance(value, Mapping) or value is None:
            env = environments.environment(str(key))
            configure_environment(env, _mapping(value, f"environments.{key}"))
        else:
            raise ValueError(f"Unknown environments setting '{key}'")
    return environments


def load_extension(
    config: Optional[Mapping[str, Any]],
    properties: Optional[PropertySource] = None,
    project_dir: Optional[str] = None,
) -> PluginExtension:
    """Create a PluginExtension from a configuration dict.

    Properties from the document's ``properties`` section are added to
    ``properties`` without replacing keys it already holds, so values given
    on the command line win.
    """
    config = _mapping(config, "config")
    if properties is None:
        properties = MapPropertySource()
    file_properties: Dict[str, Any] = dict(_mapping(config.get("properties"), "properties"))
    if file_properties:
        if not isinstance(properties, MapPropertySource):
            raise ValueError("'properties' in the config file require a MapPropertySource")
        for key, value in file_properties.items():
            if key not in properties:
                properties.set(key, value)

    extension = PluginExtension(properties, project_dir)
    teamcity = _mapping(config.get("teamcity"), "teamcity")
    # the snapshot flag decides how the version is validated
    if "allowSnapshotVersions" in teamcity:
        extension.allow_snapshot_versions = bool(teamcity["allowSnapshotVersions"])
    for key, value in teamcity.items():
        if key == "allowSnapshotVersions":
            continue
        if key == "version":
            extension.version = _version(value, "teamcity.version")
        elif key == "defaultRepositories":
            extension.default_repositories = bool(value)
        elif key == "validateBeanDefinition":
            extension.validate_bean_definition = _str(value)
        elif key == "server":
            server = _mapping(value, "teamcity.server")
            extension.server.allow_runtime_reload = bool(server.get("allowRuntimeReload", False))
            extension.server.node_responsibilities_aware = bool(server.get("nodeResponsibilitiesAware", False))
        elif key == "agent":
            agent = _mapping(value, "teamcity.agent")
            extension.agent.use_separate_classloader = bool(agent.get("useSeparateClassloader", False))
        elif key == "publish":
            publish = _mapping(value, "teamcity.publish")
            if "channels" in publish:
                channels = publish["channels"]
                extension.publish.channels = [channels] if isinstance(channels, str) else [str(c) for c in channels]
            extension.publish.token = _str(publish.get("token"))
            extension.publish.notes = _str(publish.get("notes"))
        elif key == "environments":
            configure_environments(extension.environments, _mapping(value, "teamcity.environments"))
        else:
            raise ValueError(f"Unknown teamcity setting '{key}'")

    extension.validate_features()
    logger.debug("Loaded %d environment(s)", len(extension.environments))
    return extension
