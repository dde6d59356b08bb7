from datetime import datetime, timezone

import pytest

from falcoguard.versions import (
    SemVer,
    Version,
    VersionError,
    choose_highest_version,
    choose_highest_version_lower_than_current,
    choose_lowest_version_higher_than_current,
    get_auto_update_version,
    get_force_update_version,
    sort_versions_with_classification,
)

NOW = datetime(2024, 6, 1, tzinfo=timezone.utc)
EXPIRED = datetime(1, 1, 1, tzinfo=timezone.utc)


def test_semver_parse_pads_segments():
    assert str(SemVer.parse("v1.2")) == "1.2.0"
    assert str(SemVer.parse("0.0.0")) == "0.0.0"


def test_semver_prerelease_is_lower_than_release():
    assert SemVer.parse("1.0.0-rc1") < SemVer.parse("1.0.0")
    assert SemVer.parse("1.0.0+build") == SemVer.parse("1.0.0")
    assert SemVer.parse("1.10.0") > SemVer.parse("1.9.3")


@pytest.mark.parametrize("text", ["", "broken", "garba.ge"])
def test_semver_rejects_malformed(text):
    with pytest.raises(VersionError):
        SemVer.parse(text)


def test_choose_highest_version():
    versions = {
        "0.0.0": Version("0.0.0", "test"),
        "1.2.3": Version("1.2.3", "test"),
    }
    assert choose_highest_version(versions, "test", NOW) == "1.2.3"

    with pytest.raises(VersionError):
        choose_highest_version({}, "test", NOW)

    with pytest.raises(VersionError):
        choose_highest_version({"broken": Version("broken", "test")}, "test", NOW)


def test_choose_lowest_version_higher_than_current():
    versions = {
        "1.2.3": Version("1.2.3", "test"),
        "0.0.0": Version("0.0.0", "test"),
        "1.0.0": Version("1.0.0", "test"),
    }
    assert choose_lowest_version_higher_than_current("0.0.0", versions, ["test"], NOW) == "1.0.0"
    assert choose_lowest_version_higher_than_current("0.0.0", versions, ["test"], NOW) == "1.0.0"

    with pytest.raises(VersionError):
        choose_lowest_version_higher_than_current("1.2.3", versions, ["test"], NOW)

    with pytest.raises(VersionError):
        choose_lowest_version_higher_than_current("", versions, ["test"], NOW)

    with pytest.raises(VersionError):
        choose_lowest_version_higher_than_current("0.0.0", {}, ["test"], NOW)

    with pytest.raises(VersionError):
        choose_lowest_version_higher_than_current(
            "0.0.0", {"broken": Version("broken", "test")}, ["test"], NOW
        )


def test_sort_versions_with_classification():
    versions = {
        "0.0.0": Version("0.0.0", "test"),
        "1.1.1": Version("1.1.1", "test", EXPIRED),
    }
    assert sort_versions_with_classification(versions, ["wrong"], NOW) == []
    result = sort_versions_with_classification(versions, ["test"], NOW)
    assert [str(v) for v in result] == ["0.0.0"]


def test_sort_versions_is_ascending():
    versions = {
        "2.0.0": Version("2.0.0", "supported"),
        "0.1.0": Version("0.1.0", "supported"),
        "1.0.0": Version("1.0.0", "deprecated"),
    }
    result = sort_versions_with_classification(versions, ["supported", "deprecated"], NOW)
    assert [str(v) for v in result] == ["0.1.0", "1.0.0", "2.0.0"]


def test_naive_expiration_date_is_treated_as_utc():
    versions = {"1.0.0": Version("1.0.0", "supported", datetime(2000, 1, 1))}
    assert sort_versions_with_classification(versions, ["supported"], NOW) == []


def test_get_auto_update_version():
    versions = {
        "1.2.3": Version("1.2.3", "deprecated", EXPIRED),
        "0.0.0": Version("0.0.0", "supported"),
        "1.0.0": Version("1.0.0", "supported"),
        "3.2.3": Version("3.2.3", "deprecated"),
    }
    assert get_auto_update_version(versions, NOW) == "1.0.0"


def test_get_force_update_version_higher_version_present():
    versions = {
        "1.2.3": Version("1.2.3", "deprecated", EXPIRED),
        "0.0.0": Version("0.0.0", "supported"),
        "1.0.0": Version("1.0.0", "supported"),
        "3.2.3": Version("3.2.3", "supported"),
    }
    assert get_force_update_version("0.0.0", versions, NOW) == "1.0.0"


def test_get_force_update_version_no_higher_version_present():
    versions = {
        "1.2.3": Version("1.2.3", "deprecated", EXPIRED),
        "0.0.0": Version("0.0.0", "supported"),
        "1.0.0": Version("1.0.0", "deprecated", EXPIRED),
    }
    assert get_force_update_version("1.0.0", versions, NOW) == "0.0.0"


def test_get_force_update_version_no_version_found():
    versions = {
        "1.2.3": Version("1.2.3", "deprecated", EXPIRED),
        "0.0.0": Version("0.0.0", "deprecated", EXPIRED),
        "1.0.0": Version("1.0.0", "deprecated", EXPIRED),
    }
    with pytest.raises(VersionError, match="force update expired version 1.0.0"):
        get_force_update_version("1.0.0", versions, NOW)


def test_choose_highest_version_lower_than_current():
    with pytest.raises(VersionError):
        choose_highest_version_lower_than_current("0.0.0", {}, NOW)

    with pytest.raises(VersionError):
        choose_highest_version_lower_than_current(
            "0.0.0", {"garba.ge": Version("garba.ge", "supported")}, NOW
        )

    with pytest.raises(VersionError):
        choose_highest_version_lower_than_current(
            "garba.ge", {"0.0.0": Version("0.0.0", "supported")}, NOW
        )

    versions = {
        "1.2.3": Version("1.2.3", "supported"),
        "0.0.0": Version("0.0.0", "supported"),
        "1.0.0": Version("1.0.0", "supported"),
    }
    assert choose_highest_version_lower_than_current("1.1.1", versions, NOW) == "1.0.0"


def test_choose_highest_version_lower_than_current_all_higher_returns_lowest():
    versions = {
        "2.0.0": Version("2.0.0", "supported"),
        "3.0.0": Version("3.0.0", "supported"),
    }
    assert choose_highest_version_lower_than_current("1.0.0", versions, NOW) == "2.0.0"