"""Plugin-level metadata: API version, server/agent features, publishing."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union

from constants import Constants
from environments.overrides import PropertySource
from environments.registry import TeamCityEnvironments
from errors import InvalidVersionFormat
from versioning.models import VERSION_2018_2, VERSION_2020_1, VERSION_9_0, TeamCityVersion

logger = logging.getLogger(__name__)


class ValidationMode(Enum):
    """How problems found in plugin bean definition files are reported."""

    IGNORE = "ignore"
    WARN = "warn"
    FAIL = "fail"

    @classmethod
    def parse(cls, mode: Union["ValidationMode", str]) -> "ValidationMode":
        if isinstance(mode, cls):
            return mode
        try:
            return cls[str(mode).strip().upper()]
        except KeyError:
            choices = ", ".join(m.value for m in cls)
            raise ValueError(f"Invalid validation mode '{mode}', expected one of: {choices}") from None


@dataclass
class ServerPluginConfiguration:
    """Server-side plugin options that depend on the TeamCity API version."""

    allow_runtime_reload: bool = False
    node_responsibilities_aware: bool = False


@dataclass
class AgentPluginConfiguration:
    use_separate_classloader: bool = False


@dataclass
class PublishConfiguration:
    """Channels, token and notes used when publishing to the plugin repository."""

    channels: List[str] = field(default_factory=lambda: list(Constants.DEFAULT_PUBLISH_CHANNELS))
    token: Optional[str] = None
    notes: Optional[str] = None


# (attribute, minimum version, display name)
_SERVER_FEATURE_GATES = (
    ("allow_runtime_reload", VERSION_2018_2, "allowRuntimeReload"),
    ("node_responsibilities_aware", VERSION_2020_1, "nodeResponsibilitiesAware"),
)


class PluginExtension:
    """Top-level plugin configuration and the environments used to test it."""

    def __init__(self, properties: Optional[PropertySource] = None, project_dir: Optional[str] = None):
        self._version = Constants.DEFAULT_VERSION
        self.allow_snapshot_versions = False
        self.default_repositories = True
        self._validate_bean_definition = ValidationMode.WARN
        self.server = ServerPluginConfiguration()
        self.agent = AgentPluginConfiguration()
        self.publish = PublishConfiguration()
        self.environments = TeamCityEnvironments(properties, project_dir)

    @property
    def version(self) -> str:
        """The TeamCity API version the plugin builds against."""
        return self._version

    @version.setter
    def version(self, version: str) -> None:
        parsed = TeamCityVersion.version(version, self.allow_snapshot_versions)
        if parsed.less_than(VERSION_9_0):
            raise InvalidVersionFormat(f"TeamCity version {version} is not supported, minimum version is {VERSION_9_0}")
        self._version = version

    @property
    def teamcity_version(self) -> TeamCityVersion:
        return TeamCityVersion.version(self._version, allow_snapshots=True)

    @property
    def validate_bean_definition(self) -> ValidationMode:
        return self._validate_bean_definition

    @validate_bean_definition.setter
    def validate_bean_definition(self, mode: Union[ValidationMode, str]) -> None:
        self._validate_bean_definition = ValidationMode.parse(mode)

    def validate_features(self) -> List[str]:
        """Warn about enabled server features the API version does not support."""
        version = self.teamcity_version
        messages = []
        for attribute, minimum, display in _SERVER_FEATURE_GATES:
            if getattr(self.server, attribute) and version.less_than(minimum):
                message = f"{display} is not supported by TeamCity {version}, requires {minimum} or later"
                logger.warning(message)
                messages.append(message)
        return messages
