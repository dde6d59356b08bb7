"""Version records of a Falco profile and the rules for choosing among them."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Mapping, Optional

_INT64_MAX = 2**63 - 1

_VERSION_PATTERN = re.compile(
    r"^\s*v?([0-9]+(\.[0-9]+)*?)"
    r"(-([0-9]+[0-9A-Za-z\-~]*(\.[0-9A-Za-z\-~]+)*)|(-?([A-Za-z\-~]+[0-9A-Za-z\-~]*(\.[0-9A-Za-z\-~]+)*)))?"
    r"(\+([0-9A-Za-z\-~]+(\.[0-9A-Za-z\-~]+)*))?"
    r"?\s*$"
)


class VersionError(ValueError):
    """Raised when a version cannot be parsed or no suitable version exists."""


@dataclass(frozen=True)
class Version:
    """A component version offered by a Falco profile."""

    version: str
    classification: str
    expiration_date: Optional[datetime] = None


def _compare_part(own: str, other: str) -> int:
    if own == other:
        return 0
    own_numeric = own.isdigit()
    other_numeric = other.isdigit()
    if own == "":
        return -1 if other_numeric else 1
    if other == "":
        return 1 if own_numeric else -1
    if own_numeric and not other_numeric:
        return -1
    if not own_numeric and other_numeric:
        return 1
    if not own_numeric and not other_numeric and own > other:
        return 1
    if own_numeric and other_numeric and int(own) > int(other):
        return 1
    return -1


def _compare_prereleases(own: str, other: str) -> int:
    if own == other:
        return 0
    own_parts = own.split(".")
    other_parts = other.split(".")
    for position in range(max(len(own_parts), len(other_parts))):
        left = own_parts[position] if position < len(own_parts) else ""
        right = other_parts[position] if position < len(other_parts) else ""
        result = _compare_part(left, right)
        if result:
            return result
    return 0


@dataclass(frozen=True, eq=False)
class SemVer:
    """A parsed version with numeric segments, prerelease and build metadata."""

    segments: tuple[int, ...]
    prerelease: str = ""
    metadata: str = ""
    original: str = ""

    @classmethod
    def parse(cls, text: str) -> SemVer:
        """Parse a version string; segments are padded to at least three."""
        match = _VERSION_PATTERN.match(text)
        if match is None:
            raise VersionError(f"malformed version: {text}")
        segments = []
        for part in match.group(1).split("."):
            value = int(part)
            if value > _INT64_MAX:
                raise VersionError(f"error parsing version: {text}")
            segments.append(value)
        segments.extend([0] * (3 - len(segments)))
        prerelease = match.group(7) or match.group(4) or ""
        return cls(tuple(segments), prerelease, match.group(10) or "", text)

    def __str__(self) -> str:
        text = ".".join(str(segment) for segment in self.segments)
        if self.prerelease:
            text += f"-{self.prerelease}"
        if self.metadata:
            text += f"+{self.metadata}"
        return text

    def compare(self, other: SemVer) -> int:
        """Return -1, 0 or 1 as this version is lower, equal or higher."""
        if str(self) == str(other):
            return 0
        if self.segments == other.segments:
            if not self.prerelease and not other.prerelease:
                return 0
            if not self.prerelease:
                return 1
            if not other.prerelease:
                return -1
            return _compare_prereleases(self.prerelease, other.prerelease)
        width = max(len(self.segments), len(other.segments))
        own = self.segments + (0,) * (width - len(self.segments))
        theirs = other.segments + (0,) * (width - len(other.segments))
        if own == theirs:
            return 0
        return -1 if own < theirs else 1

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self.compare(other) == 0

    def __lt__(self, other: SemVer) -> bool:
        return self.compare(other) < 0

    def __le__(self, other: SemVer) -> bool:
        return self.compare(other) <= 0

    def __gt__(self, other: SemVer) -> bool:
        return self.compare(other) > 0

    def __ge__(self, other: SemVer) -> bool:
        return self.compare(other) >= 0


def _aware(moment: datetime) -> datetime:
    return moment if moment.tzinfo is not None else moment.replace(tzinfo=timezone.utc)


def _resolve_now(now: Optional[datetime]) -> datetime:
    return datetime.now(timezone.utc) if now is None else _aware(now)


def _parse_current(version: str) -> SemVer:
    try:
        return SemVer.parse(version)
    except VersionError as exc:
        raise VersionError(f"could not parse current version {version}") from exc


def sort_versions_with_classification(
    versions: Mapping[str, Version],
    classifications: Iterable[str],
    now: Optional[datetime] = None,
) -> list[SemVer]:
    """Return the non-expired versions of the given classifications in ascending order."""
    moment = _resolve_now(now)
    wanted = set(classifications)
    selected: list[SemVer] = []
    for entry in versions.values():
        if entry.classification not in wanted:
            continue
        if entry.expiration_date is not None and _aware(entry.expiration_date) < moment:
            continue
        try:
            selected.append(SemVer.parse(entry.version))
        except VersionError as exc:
            raise VersionError(f"could not parse version: {exc}") from exc
    return sorted(selected)


def choose_highest_version(
    versions: Mapping[str, Version], classification: str, now: Optional[datetime] = None
) -> str:
    """Return the highest non-expired version of the classification."""
    ordered = sort_versions_with_classification(versions, [classification], now)
    if not ordered:
        raise VersionError(f"no version with classification {classification} was found")
    return str(ordered[-1])


def choose_lowest_version_higher_than_current(
    version: str,
    versions: Mapping[str, Version],
    classifications: Iterable[str],
    now: Optional[datetime] = None,
) -> str:
    """Return the lowest non-expired version above the current one."""
    classifications = list(classifications)
    ordered = sort_versions_with_classification(versions, classifications, now)
    if not ordered:
        raise VersionError(f"no version with classification {classifications} was found")
    current = _parse_current(version)
    for candidate in ordered:
        if candidate > current:
            return str(candidate)
    raise VersionError("no higher version than current version found")


def choose_highest_version_lower_than_current(
    version: str, versions: Mapping[str, Version], now: Optional[datetime] = None
) -> str:
    """Return the highest supported or deprecated version not above the current one.

    When every candidate is above the current version the lowest one is returned.
    """
    ordered = sort_versions_with_classification(versions, ["supported", "deprecated"], now)
    if not ordered:
        raise VersionError("no non-expired version was found")
    current = _parse_current(version)
    incumbent = ordered[0]
    for candidate in ordered[1:]:
        if candidate > current:
            return str(incumbent)
        incumbent = candidate
    return str(incumbent)


def get_auto_update_version(versions: Mapping[str, Version], now: Optional[datetime] = None) -> str:
    """Return the version an auto-updating shoot moves to."""
    return choose_highest_version(versions, "supported", now)


def get_force_update_version(
    version: str, versions: Mapping[str, Version], now: Optional[datetime] = None
) -> str:
    """Return the version a shoot running an expired version is moved to."""
    try:
        return choose_lowest_version_higher_than_current(
            version, versions, ["deprecated", "supported"], now
        )
    except VersionError:
        pass
    try:
        return choose_highest_version_lower_than_current(version, versions, now)
    except VersionError as exc:
        raise VersionError(
            f"no version was found to force update expired version {version}"
        ) from exc