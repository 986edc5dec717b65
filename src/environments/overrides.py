"""External property overrides and the three-tier setting resolution.

Resolution order for every setting, evaluated on each read:

1. external override property ``<namespace>.<environment>.<setting>``
2. the value set on the object itself
3. the convention default computed from current state
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Tuple

from constants import Constants
from errors import UnresolvedSetting
from common.logging_utils import extra_context, is_debug_enabled

logger = logging.getLogger(__name__)


class PropertySource:
    """Lookup capability for externally supplied override properties."""

    def lookup(self, key: str) -> Optional[str]:
        raise NotImplementedError


class MapPropertySource(PropertySource):
    """In-memory property source backed by a dict.

    Values are stored as strings; later updates replace earlier ones, so the
    CLI can layer ``-P`` flags over properties read from the config file.
    """

    def __init__(self, properties: Optional[Mapping[str, Any]] = None):
        self._properties: Dict[str, str] = {}
        if properties:
            self.update(properties)

    def lookup(self, key: str) -> Optional[str]:
        return self._properties.get(key)

    def set(self, key: str, value: Any) -> None:
        self._properties[key] = str(value)

    def remove(self, key: str) -> None:
        self._properties.pop(key, None)

    def update(self, properties: Mapping[str, Any]) -> None:
        for key, value in properties.items():
            self.set(key, value)

    def __contains__(self, key: str) -> bool:
        return key in self._properties

    def __len__(self) -> int:
        return len(self._properties)


def parse_property_assignments(assignments: Iterable[str]) -> Dict[str, str]:
    """Parse ``key=value`` strings (CLI ``-P`` flags) into a dict.

    Raises:
        ValueError: If an assignment has no '=' or an empty key.
    """
    result: Dict[str, str] = {}
    for item in assignments:
        key, sep, value = item.partition("=")
        key = key.strip()
        if not sep or not key:
            raise ValueError(f"Invalid property '{item}', expected key=value")
        result[key] = value
    return result


class OverrideResolver:
    """Resolves settings against an external PropertySource."""

    def __init__(self, source: Optional[PropertySource] = None, namespace: str = Constants.PROPERTY_NAMESPACE):
        self.source = source if source is not None else MapPropertySource()
        self.namespace = namespace

    def property_name(self, environment_name: str, setting: str) -> str:
        return ".".join((self.namespace, environment_name, setting))

    def shared_property_name(self, setting: str) -> str:
        return ".".join((self.namespace, setting))

    def resolve(
        self,
        environment_name: str,
        setting: str,
        own_value: Any,
        compute_default: Optional[Callable[[], Any]] = None,
    ) -> Any:
        """Resolve an environment setting; see the module docstring for order."""
        key = self.property_name(environment_name, setting)
        value, tier = self._resolve(key, own_value, compute_default)
        if value is None:
            raise UnresolvedSetting(key, environment_name, setting)
        self._trace(key, tier)
        return value

    def resolve_shared(
        self,
        setting: str,
        own_value: Any,
        compute_default: Optional[Callable[[], Any]] = None,
    ) -> Any:
        """Resolve a registry-wide base value keyed by ``<namespace>.<setting>``."""
        key = self.shared_property_name(setting)
        value, tier = self._resolve(key, own_value, compute_default)
        if value is None:
            raise UnresolvedSetting(key)
        self._trace(key, tier)
        return value

    def _resolve(self, key, own_value, compute_default) -> Tuple[Any, str]:
        override = self.source.lookup(key)
        if override is not None:
            return override, "override"
        if own_value is not None:
            return own_value, "own"
        if compute_default is not None:
            return compute_default(), "default"
        return None, "none"

    @staticmethod
    def _trace(key: str, tier: str) -> None:
        if is_debug_enabled(logger):
            logger.debug(
                "Resolved setting",
                extra=extra_context(
                    event="resolve",
                    component="overrides",
                    action="resolve",
                    outcome=tier,
                    target=key,
                ),
            )
