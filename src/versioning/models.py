"""TeamCity version model: parsing, ordering and data-version derivation."""

import re
from typing import List

from constants import Constants
from errors import InvalidNumericSegment, InvalidVersionFormat, MissingDataVersionPrefix

RELEASE_VERSION_PATTERN = re.compile(r"^(\d+)(\.\d+)+")
SNAPSHOT_VERSION_PATTERN = re.compile(r"^(\d+)(\.\d+)+-SNAPSHOT")
DATA_VERSION_PATTERN = re.compile(r"^(\d+\.\d+)")
_SEGMENT_SEPARATORS = re.compile(r"[.-]")
_NUMERIC_SEGMENT = re.compile(r"\d+")

INVALID_RELEASE_MESSAGE = "'{}' is not a valid TeamCity version string (examples: '9.0', '10.0.5', '2018.1')"
INVALID_SNAPSHOT_MESSAGE = (
    "'{}' is not a valid TeamCity version string (examples: '10.0-SNAPSHOT', '2021.1', '2021.2.1-SNAPSHOT')"
)

SNAPSHOT = Constants.SNAPSHOT


class TeamCityVersion:
    """A TeamCity release or snapshot version.

    Equality and hashing use the original string. Ordering is numeric per
    segment, so '10.0' and '10.00' order equal but are not ==.
    """

    __slots__ = ("_version",)

    def __init__(self, version: str):
        self._version = version

    @classmethod
    def version(cls, version: str, allow_snapshots: bool = False) -> "TeamCityVersion":
        """Parse and validate a version string.

        Args:
            version: Version text, e.g. '2020.1.3' or '2021.2-SNAPSHOT'.
            allow_snapshots: Accept '<release>-SNAPSHOT' versions.

        Raises:
            InvalidVersionFormat: If the string matches neither grammar.
        """
        if not isinstance(version, str):
            raise InvalidVersionFormat(INVALID_RELEASE_MESSAGE.format(version))
        if version != SNAPSHOT:
            release = RELEASE_VERSION_PATTERN.match(version)
            if allow_snapshots:
                if not SNAPSHOT_VERSION_PATTERN.match(version) and not release:
                    raise InvalidVersionFormat(INVALID_SNAPSHOT_MESSAGE.format(version))
            elif not release:
                raise InvalidVersionFormat(INVALID_RELEASE_MESSAGE.format(version))
        return cls(version)

    @property
    def segments(self) -> List[str]:
        parts = _SEGMENT_SEPARATORS.split(self._version)
        while parts and parts[-1] == "":
            parts.pop()
        return parts

    @property
    def data_version(self) -> str:
        """The major.minor prefix selecting the data directory layout."""
        match = DATA_VERSION_PATTERN.match(self._version)
        if match:
            return match.group(1)
        raise MissingDataVersionPrefix(f"'{self._version}' has no major.minor data version")

    def compare_to(self, other: "TeamCityVersion") -> int:
        """Return -1, 0 or 1.

        The bare 'SNAPSHOT' is newest. When no segment differs the version
        with more segments is greater, so '2021.1-SNAPSHOT' > '2021.1'.
        """
        mine, theirs = self._version, other._version
        if mine == SNAPSHOT and theirs != SNAPSHOT:
            return 1
        if theirs == SNAPSHOT and mine != SNAPSHOT:
            return -1
        if mine == theirs:
            return 0

        parts = self.segments
        other_parts = other.segments
        for part, other_part in zip(parts, other_parts):
            if part == SNAPSHOT or other_part == SNAPSHOT:
                continue
            left = _to_int(part, mine)
            right = _to_int(other_part, theirs)
            if left > right:
                return 1
            if right > left:
                return -1
        if len(parts) == len(other_parts):
            return 0
        return 1 if len(parts) > len(other_parts) else -1

    def less_than(self, other: "TeamCityVersion") -> bool:
        return self.compare_to(other) < 0

    def equal_or_greater_than(self, other: "TeamCityVersion") -> bool:
        return self.compare_to(other) >= 0

    def __lt__(self, other):
        if not isinstance(other, TeamCityVersion):
            return NotImplemented
        return self.compare_to(other) < 0

    def __le__(self, other):
        if not isinstance(other, TeamCityVersion):
            return NotImplemented
        return self.compare_to(other) <= 0

    def __gt__(self, other):
        if not isinstance(other, TeamCityVersion):
            return NotImplemented
        return self.compare_to(other) > 0

    def __ge__(self, other):
        if not isinstance(other, TeamCityVersion):
            return NotImplemented
        return self.compare_to(other) >= 0

    def __eq__(self, other):
        if not isinstance(other, TeamCityVersion):
            return NotImplemented
        return self._version == other._version

    def __hash__(self):
        return hash(self._version)

    def __str__(self):
        return self._version

    def __repr__(self):
        return f"TeamCityVersion('{self._version}')"


def _to_int(segment: str, version: str) -> int:
    if not _NUMERIC_SEGMENT.fullmatch(segment):
        raise InvalidNumericSegment(f"Segment '{segment}' of version '{version}' is not numeric")
    return int(segment)


VERSION_9_0 = TeamCityVersion.version("9.0")
VERSION_2018_2 = TeamCityVersion.version("2018.2")
VERSION_2020_1 = TeamCityVersion.version("2020.1")
