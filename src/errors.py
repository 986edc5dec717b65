"""Configuration errors raised while resolving plugin and environment settings."""


class ConfigurationError(ValueError):
    """Base class for errors that abort the configuration phase."""


class InvalidVersionFormat(ConfigurationError):
    """Raised when a TeamCity version string does not match the version grammar."""


class MissingDataVersionPrefix(InvalidVersionFormat):
    """Raised when a version has no numeric major.minor prefix (e.g. 'SNAPSHOT')."""


class InvalidNumericSegment(ConfigurationError):
    """Raised when comparing a version containing a non-numeric segment.

    Values built through TeamCityVersion.version() only reach this for
    suffixed releases such as '2018.1-EAP'; treat it as a defect.
    """


class UnresolvedSetting(ConfigurationError):
    """Raised when a setting has no override, no own value and no default."""

    def __init__(self, key: str, environment: str = "", setting: str = ""):
        self.key = key
        self.environment = environment
        self.setting = setting
        if environment:
            msg = f"Setting '{setting}' of environment '{environment}' could not be resolved (property '{key}')"
        else:
            msg = f"Setting '{key}' could not be resolved"
        super().__init__(msg)
