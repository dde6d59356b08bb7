"""The FalcoProfile resource listing available Falco component versions and images."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

GROUP_NAME = "falco.gardener.cloud"
VERSION = "v1alpha1"
API_VERSION = f"{GROUP_NAME}/{VERSION}"
KIND = "FalcoProfile"


def _join(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key


def _mapping(value: Any, path: str) -> dict:
    if not isinstance(value, dict):
        raise ValueError(f"{path or 'document'}: expected an object, got {type(value).__name__}")
    return value


def _string(data: dict, key: str, path: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"{_join(path, key)}: expected a string, got {type(value).__name__}")
    return value


def _optional_string(data: dict, key: str, path: str) -> Optional[str]:
    if data.get(key) is None:
        return None
    return _string(data, key, path)


def _items(data: dict, key: str, path: str) -> list[tuple[dict, str]]:
    value = data.get(key)
    if value is None:
        return []
    key_path = _join(path, key)
    if not isinstance(value, list):
        raise ValueError(f"{key_path}: expected a list")
    return [
        (_mapping(item, f"{key_path}[{position}]"), f"{key_path}[{position}]")
        for position, item in enumerate(value)
    ]


@dataclass
class FalcoVersion:
    """A Falco release and the rules release that goes with it."""

    version: str = ""
    classification: str = ""
    expiration_date: Optional[str] = None
    rules_version: str = ""

    @classmethod
    def _from_dict(cls, data: dict, path: str) -> FalcoVersion:
        return cls(
            version=_string(data, "version", path),
            classification=_string(data, "classification", path),
            expiration_date=_optional_string(data, "expirationDate", path),
            rules_version=_string(data, "rulesVersion", path),
        )

    def _to_dict(self) -> dict:
        out: dict[str, Any] = {"classification": self.classification}
        if self.expiration_date is not None:
            out["expirationDate"] = self.expiration_date
        out["version"] = self.version
        out["rulesVersion"] = self.rules_version
        return out


@dataclass
class FalcosidekickVersion:
    """A Falcosidekick release."""

    version: str = ""
    classification: str = ""
    expiration_date: Optional[str] = None

    @classmethod
    def _from_dict(cls, data: dict, path: str) -> FalcosidekickVersion:
        return cls(
            version=_string(data, "version", path),
            classification=_string(data, "classification", path),
            expiration_date=_optional_string(data, "expirationDate", path),
        )

    def _to_dict(self) -> dict:
        out: dict[str, Any] = {"classification": self.classification}
        if self.expiration_date is not None:
            out["expirationDate"] = self.expiration_date
        out["version"] = self.version
        return out


@dataclass
class FalcoctlVersion(FalcosidekickVersion):
    """A falcoctl release."""


@dataclass
class ImageSpec:
    """Where the image of one component version for one architecture lives."""

    version: str = ""
    architecture: str = ""
    repository: str = ""
    tag: str = ""

    @classmethod
    def _from_dict(cls, data: dict, path: str) -> ImageSpec:
        return cls(
            version=_string(data, "version", path),
            architecture=_string(data, "architecture", path),
            repository=_string(data, "repository", path),
            tag=_string(data, "tag", path),
        )

    def _to_dict(self) -> dict:
        return {
            "version": self.version,
            "architecture": self.architecture,
            "repository": self.repository,
            "tag": self.tag,
        }


@dataclass
class Versions:
    """Versions offered for each component."""

    falco: list[FalcoVersion] = field(default_factory=list)
    falcosidekick: list[FalcosidekickVersion] = field(default_factory=list)
    falcoctl: list[FalcoctlVersion] = field(default_factory=list)

    @classmethod
    def _from_dict(cls, data: dict, path: str) -> Versions:
        return cls(
            falco=[FalcoVersion._from_dict(item, p) for item, p in _items(data, "falco", path)],
            falcosidekick=[
                FalcosidekickVersion._from_dict(item, p) for item, p in _items(data, "falcosidekick", path)
            ],
            falcoctl=[FalcoctlVersion._from_dict(item, p) for item, p in _items(data, "falcoctl", path)],
        )

    def _to_dict(self) -> dict:
        return {
            "falco": [v._to_dict() for v in self.falco],
            "falcosidekick": [v._to_dict() for v in self.falcosidekick],
            "falcoctl": [v._to_dict() for v in self.falcoctl],
        }


@dataclass
class Images:
    """Images for each component."""

    falco: list[ImageSpec] = field(default_factory=list)
    falcosidekick: list[ImageSpec] = field(default_factory=list)
    falcoctl: list[ImageSpec] = field(default_factory=list)

    @classmethod
    def _from_dict(cls, data: dict, path: str) -> Images:
        return cls(
            falco=[ImageSpec._from_dict(item, p) for item, p in _items(data, "falco", path)],
            falcosidekick=[ImageSpec._from_dict(item, p) for item, p in _items(data, "falcosidekick", path)],
            falcoctl=[ImageSpec._from_dict(item, p) for item, p in _items(data, "falcoctl", path)],
        )

    def _to_dict(self) -> dict:
        return {
            "falco": [i._to_dict() for i in self.falco],
            "falcosidekick": [i._to_dict() for i in self.falcosidekick],
            "falcoctl": [i._to_dict() for i in self.falcoctl],
        }


@dataclass
class Spec:
    """Versions and images of a profile."""

    versions: Versions = field(default_factory=Versions)
    images: Images = field(default_factory=Images)

    @classmethod
    def _from_dict(cls, data: dict, path: str) -> Spec:
        versions = data.get("versions")
        images = data.get("images")
        return cls(
            versions=Versions() if versions is None
            else Versions._from_dict(_mapping(versions, _join(path, "versions")), _join(path, "versions")),
            images=Images() if images is None
            else Images._from_dict(_mapping(images, _join(path, "images")), _join(path, "images")),
        )

    def _to_dict(self) -> dict:
        return {"versions": self.versions._to_dict(), "images": self.images._to_dict()}


@dataclass
class FalcoProfile:
    """A FalcoProfile resource."""

    metadata: dict[str, Any] = field(default_factory=dict)
    spec: Spec = field(default_factory=Spec)

    @property
    def name(self) -> str:
        return self.metadata.get("name", "")

    @classmethod
    def from_dict(cls, data: Any) -> FalcoProfile:
        """Build a profile from its JSON object form; raises ValueError on malformed input."""
        obj = _mapping(data, "")
        metadata = obj.get("metadata")
        spec = obj.get("spec")
        return cls(
            metadata={} if metadata is None else dict(_mapping(metadata, "metadata")),
            spec=Spec() if spec is None else Spec._from_dict(_mapping(spec, "spec"), "spec"),
        )

    def to_dict(self) -> dict:
        """Return the versioned JSON object form."""
        return {
            "kind": KIND,
            "apiVersion": API_VERSION,
            "metadata": dict(self.metadata),
            "spec": self.spec._to_dict(),
        }