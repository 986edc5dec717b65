"""Tests for TeamCity version parsing and ordering."""

import pytest

from errors import InvalidNumericSegment, InvalidVersionFormat, MissingDataVersionPrefix
from versioning.models import (
    VERSION_2018_2,
    VERSION_2020_1,
    VERSION_9_0,
    TeamCityVersion,
)


def v(text, allow_snapshots=False):
    return TeamCityVersion.version(text, allow_snapshots)


RELEASE_SWEEP = [
    major + rest + suffix
    for major in ("0", "9", "10", "2018", "2024")
    for rest in (".0", ".1", ".10", ".2.1", ".0.0.7")
    for suffix in ("", "-SNAPSHOT", " EAP", "-beta", "x")
]


class TestParseRelease:
    """Release grammar: at least major.minor, prefix match."""

    @pytest.mark.parametrize("text", ["9.0", "10.0.5", "2018.1", "2020.1.3", "2018.1 EAP", "2021.2-beta"])
    def test_valid_release_strings_are_preserved(self, text):
        assert str(v(text)) == text

    @pytest.mark.parametrize("text", ["", "9", "a.b", "v10.0", ".1", "10.", "-SNAPSHOT", "snapshot"])
    def test_invalid_release_strings(self, text):
        with pytest.raises(InvalidVersionFormat):
            v(text)

    def test_error_message_echoes_input_and_release_examples(self):
        with pytest.raises(InvalidVersionFormat) as exc:
            v("nine")
        message = str(exc.value)
        assert "'nine'" in message
        assert "'10.0.5'" in message
        assert "SNAPSHOT" not in message

    def test_snapshot_sentinel_accepted_in_both_modes(self):
        assert str(v("SNAPSHOT")) == "SNAPSHOT"
        assert str(v("SNAPSHOT", True)) == "SNAPSHOT"

    @pytest.mark.parametrize("text", RELEASE_SWEEP)
    def test_generated_release_strings(self, text):
        version = v(text)
        assert str(version) == text
        assert version == v(text)
        assert version.compare_to(v(text)) == 0
        assert str(v(text, True)) == text

    @pytest.mark.parametrize("text", [prefix + text for text in RELEASE_SWEEP[::5] for prefix in ("v", ".", "-")])
    def test_generated_strings_without_leading_digits(self, text):
        with pytest.raises(InvalidVersionFormat):
            v(text)
        with pytest.raises(InvalidVersionFormat):
            v(text, True)

    def test_release_snapshot_tolerated_by_prefix_match(self):
        # '-SNAPSHOT' is an arbitrary suffix for the release grammar
        assert str(v("2021.1-SNAPSHOT")) == "2021.1-SNAPSHOT"

    def test_non_string_rejected(self):
        with pytest.raises(InvalidVersionFormat):
            TeamCityVersion.version(2020.1)


class TestParseSnapshot:
    """Snapshot mode accepts snapshot and release strings."""

    @pytest.mark.parametrize("text", ["10.0-SNAPSHOT", "2021.2.1-SNAPSHOT", "2021.1"])
    def test_valid(self, text):
        assert str(v(text, True)) == text

    def test_invalid_message_uses_snapshot_examples(self):
        with pytest.raises(InvalidVersionFormat) as exc:
            v("latest", True)
        message = str(exc.value)
        assert "'latest'" in message
        assert "'2021.2.1-SNAPSHOT'" in message


class TestOrdering:
    """compare_to and the derived operators."""

    def test_documented_chain(self):
        chain = [v("9.0"), v("10.0.5"), v("2018.1"), v("2018.2"), v("SNAPSHOT")]
        for lower, higher in zip(chain, chain[1:]):
            assert lower.compare_to(higher) == -1
            assert higher.compare_to(lower) == 1
            assert lower < higher
            assert higher > lower
        assert sorted(reversed(chain)) == chain

    def test_identical_strings_compare_equal(self):
        assert v("10.0").compare_to(v("10.0")) == 0
        assert v("SNAPSHOT").compare_to(v("SNAPSHOT")) == 0

    def test_leading_zeros_order_equal_but_are_not_equal(self):
        ten, ten_padded = v("10.0"), v("10.00")
        assert ten.compare_to(ten_padded) == 0
        assert ten != ten_padded

    def test_equality_and_hash_on_original_string(self):
        assert v("2020.1") == v("2020.1")
        assert len({v("2020.1"), v("2020.1"), v("2020.1.0")}) == 2

    def test_more_segments_wins(self):
        assert v("2021.1").compare_to(v("2021.1.1")) == -1
        assert v("2021.1.1").compare_to(v("2021.1")) == 1

    def test_longer_snapshot_is_greater_than_release(self):
        assert v("2021.1-SNAPSHOT", True) > v("2021.1")

    def test_snapshot_segments_are_skipped(self):
        assert v("2021.1-SNAPSHOT", True).compare_to(v("2021.2", True)) == -1
        assert v("2021.1-SNAPSHOT", True).compare_to(v("2021.1.1")) == 0

    def test_numeric_not_lexical(self):
        assert v("9.0") < v("10.0")
        assert v("2018.10") > v("2018.9")

    def test_less_than_and_equal_or_greater_than(self):
        assert v("2018.1").less_than(VERSION_2018_2)
        assert VERSION_2020_1.equal_or_greater_than(VERSION_2018_2)
        assert VERSION_9_0.equal_or_greater_than(v("9.0"))
        assert not VERSION_9_0.less_than(VERSION_9_0)

    def test_non_numeric_segment_raises(self):
        with pytest.raises(InvalidNumericSegment):
            v("2018.1-EAP").compare_to(v("2018.1.1"))

    def test_comparison_with_other_types_not_supported(self):
        assert v("9.0") != "9.0"
        with pytest.raises(TypeError):
            v("9.0") < "10.0"


class TestDataVersion:
    """major.minor prefix extraction."""

    @pytest.mark.parametrize("text,expected", [
        ("2020.1.3", "2020.1"),
        ("9.0", "9.0"),
        ("2021.2-SNAPSHOT", "2021.2"),
    ])
    def test_prefix(self, text, expected):
        assert v(text, True).data_version == expected

    def test_snapshot_sentinel_has_no_data_version(self):
        with pytest.raises(MissingDataVersionPrefix):
            v("SNAPSHOT").data_version

    def test_missing_prefix_is_a_version_format_error(self):
        assert issubclass(MissingDataVersionPrefix, InvalidVersionFormat)


class TestMilestones:
    """Named minimum-version gates."""

    def test_milestones_are_release_versions(self):
        for milestone in (VERSION_9_0, VERSION_2018_2, VERSION_2020_1):
            assert TeamCityVersion.version(str(milestone), False) == milestone

    def test_milestones_are_ordered(self):
        assert VERSION_9_0 < VERSION_2018_2 < VERSION_2020_1
