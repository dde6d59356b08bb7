"""The FalcoServiceConfig provider configuration and its wire format."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Optional

import yaml

GROUP_NAME = "falco.extensions.gardener.cloud"
VERSION = "v1alpha1"
API_VERSION = f"{GROUP_NAME}/{VERSION}"
KIND = "FalcoServiceConfig"


class DecodeError(ValueError):
    """Raised when a provider configuration cannot be decoded."""


def _join(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key


def _mapping(value: Any, path: str) -> dict:
    if not isinstance(value, dict):
        where = path or "document"
        raise DecodeError(f"{where}: expected an object, got {type(value).__name__}")
    return value


def _optional_str(data: dict, key: str, path: str) -> Optional[str]:
    value = data.get(key)
    if value is None or isinstance(value, str):
        return value
    raise DecodeError(f"{_join(path, key)}: expected a string, got {type(value).__name__}")


def _optional_bool(data: dict, key: str, path: str) -> Optional[bool]:
    value = data.get(key)
    if value is None or isinstance(value, bool):
        return value
    raise DecodeError(f"{_join(path, key)}: expected a boolean, got {type(value).__name__}")


def _optional_str_list(data: dict, key: str, path: str) -> Optional[list[str]]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise DecodeError(f"{_join(path, key)}: expected a list of strings")
    return list(value)


def _optional_object(data: dict, key: str, path: str) -> Optional[dict]:
    value = data.get(key)
    if value is None:
        return None
    return _mapping(value, _join(path, key))


def _load(raw: Any) -> Any:
    if isinstance(raw, (bytes, bytearray)):
        try:
            text = bytes(raw).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError(f"provider config is not valid UTF-8: {exc}") from exc
    elif isinstance(raw, str):
        text = raw
    else:
        raise DecodeError(f"cannot decode object of type {type(raw).__name__}")
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise DecodeError(f"provider config is neither JSON nor YAML: {exc}") from exc


@dataclass
class FalcoCtlIndex:
    """An index falcoctl pulls artifacts from."""

    name: Optional[str] = None
    url: Optional[str] = None

    @classmethod
    def _from_dict(cls, data: dict, path: str) -> FalcoCtlIndex:
        return cls(
            name=_optional_str(data, "name", path),
            url=_optional_str(data, "url", path),
        )

    def _to_dict(self) -> dict:
        return {"name": self.name, "url": self.url}


@dataclass
class Follow:
    """Artifacts falcoctl keeps following, and how often."""

    refs: Optional[list[str]] = None
    every: Optional[str] = None

    @classmethod
    def _from_dict(cls, data: dict, path: str) -> Follow:
        return cls(
            refs=_optional_str_list(data, "refs", path),
            every=_optional_str(data, "every", path),
        )

    def _to_dict(self) -> dict:
        return {"refs": self.refs, "every": self.every}


@dataclass
class Install:
    """Artifacts falcoctl installs at start-up."""

    refs: Optional[list[str]] = None
    resolve_deps: Optional[bool] = None

    @classmethod
    def _from_dict(cls, data: dict, path: str) -> Install:
        return cls(
            refs=_optional_str_list(data, "refs", path),
            resolve_deps=_optional_bool(data, "resolveDeps", path),
        )

    def _to_dict(self) -> dict:
        return {"refs": self.refs, "resolveDeps": self.resolve_deps}


@dataclass
class FalcoCtl:
    """Configuration of falcoctl."""

    indexes: Optional[list[FalcoCtlIndex]] = None
    allowed_types: Optional[list[str]] = None
    install: Optional[Install] = None
    follow: Optional[Follow] = None

    @classmethod
    def _from_dict(cls, data: dict, path: str) -> FalcoCtl:
        raw_indexes = data.get("indexes")
        indexes = None
        if raw_indexes is not None:
            key_path = _join(path, "indexes")
            if not isinstance(raw_indexes, list):
                raise DecodeError(f"{key_path}: expected a list")
            indexes = [
                FalcoCtlIndex._from_dict(_mapping(item, f"{key_path}[{position}]"), f"{key_path}[{position}]")
                for position, item in enumerate(raw_indexes)
            ]
        install = _optional_object(data, "install", path)
        follow = _optional_object(data, "follow", path)
        return cls(
            indexes=indexes,
            allowed_types=_optional_str_list(data, "allowedTypes", path),
            install=None if install is None else Install._from_dict(install, _join(path, "install")),
            follow=None if follow is None else Follow._from_dict(follow, _join(path, "follow")),
        )

    def _to_dict(self) -> dict:
        out: dict[str, Any] = {
            "indexes": None if self.indexes is None else [index._to_dict() for index in self.indexes],
            "allowedTypes": self.allowed_types,
        }
        if self.install is not None:
            out["install"] = self.install._to_dict()
        if self.follow is not None:
            out["follow"] = self.follow._to_dict()
        return out


@dataclass
class Gardener:
    """Rule selection for Gardener managed Falco."""

    use_falco_rules: Optional[bool] = None
    use_falco_incubating_rules: Optional[bool] = None
    use_falco_sandbox_rules: Optional[bool] = None
    custom_rules: Optional[list[str]] = None

    @classmethod
    def _from_dict(cls, data: dict, path: str) -> Gardener:
        return cls(
            use_falco_rules=_optional_bool(data, "useFalcoRules", path),
            use_falco_incubating_rules=_optional_bool(data, "useFalcoIncubatingRules", path),
            use_falco_sandbox_rules=_optional_bool(data, "useFalcoSandboxRules", path),
            custom_rules=_optional_str_list(data, "customRules", path),
        )

    def _to_dict(self) -> dict:
        out: dict[str, Any] = {}
        if self.use_falco_rules is not None:
            out["useFalcoRules"] = self.use_falco_rules
        if self.use_falco_incubating_rules is not None:
            out["useFalcoIncubatingRules"] = self.use_falco_incubating_rules
        if self.use_falco_sandbox_rules is not None:
            out["useFalcoSandboxRules"] = self.use_falco_sandbox_rules
        if self.custom_rules:
            out["customRules"] = self.custom_rules
        return out


@dataclass
class Webhook:
    """A custom webhook Falco events are forwarded to."""

    enabled: Optional[bool] = None
    address: Optional[str] = None
    custom_headers: Optional[str] = None
    checkcerts: Optional[bool] = None

    @classmethod
    def _from_dict(cls, data: dict, path: str) -> Webhook:
        return cls(
            enabled=_optional_bool(data, "enabled", path),
            address=_optional_str(data, "address", path),
            custom_headers=_optional_str(data, "customHeaders", path),
            checkcerts=_optional_bool(data, "checkcerts", path),
        )

    def _to_dict(self) -> dict:
        fields = (
            ("enabled", self.enabled),
            ("address", self.address),
            ("customHeaders", self.custom_headers),
            ("checkcerts", self.checkcerts),
        )
        return {key: value for key, value in fields if value is not None}


@dataclass
class FalcoServiceConfig:
    """Falco configuration of one shoot cluster."""

    falco_version: Optional[str] = None
    auto_update: Optional[bool] = None
    resources: Optional[str] = None
    falco_ctl: Optional[FalcoCtl] = None
    gardener: Optional[Gardener] = None
    custom_webhook: Optional[Webhook] = None

    @classmethod
    def from_dict(cls, data: Any) -> FalcoServiceConfig:
        """Build a config from its JSON object form; kind and apiVersion are not checked."""
        obj = _mapping(data, "")
        falco_ctl = _optional_object(obj, "falcoCtl", "")
        gardener = _optional_object(obj, "gardener", "")
        webhook = _optional_object(obj, "webhook", "")
        return cls(
            falco_version=_optional_str(obj, "falcoVersion", ""),
            auto_update=_optional_bool(obj, "autoUpdate", ""),
            resources=_optional_str(obj, "resources", ""),
            falco_ctl=None if falco_ctl is None else FalcoCtl._from_dict(falco_ctl, "falcoCtl"),
            gardener=None if gardener is None else Gardener._from_dict(gardener, "gardener"),
            custom_webhook=None if webhook is None else Webhook._from_dict(webhook, "webhook"),
        )

    def to_dict(self) -> dict:
        """Return the versioned JSON object form, unset fields left out."""
        out: dict[str, Any] = {"kind": KIND, "apiVersion": API_VERSION}
        if self.falco_version is not None:
            out["falcoVersion"] = self.falco_version
        if self.auto_update is not None:
            out["autoUpdate"] = self.auto_update
        if self.resources is not None:
            out["resources"] = self.resources
        if self.falco_ctl is not None:
            out["falcoCtl"] = self.falco_ctl._to_dict()
        if self.gardener is not None:
            out["gardener"] = self.gardener._to_dict()
        if self.custom_webhook is not None:
            out["webhook"] = self.custom_webhook._to_dict()
        return out

    @classmethod
    def decode(cls, raw: Any) -> FalcoServiceConfig:
        """Decode a JSON or YAML document that must carry this kind and apiVersion."""
        obj = _mapping(_load(raw), "")
        kind = obj.get("kind")
        api_version = obj.get("apiVersion")
        if not kind:
            raise DecodeError("object 'Kind' is missing")
        if not api_version:
            raise DecodeError("object 'apiVersion' is missing")
        if kind != KIND or api_version != API_VERSION:
            raise DecodeError(f"no kind {kind!r} is registered for version {api_version!r}")
        return cls.from_dict(obj)

    def encode(self) -> bytes:
        """Encode as compact JSON followed by a newline."""
        return json.dumps(self.to_dict(), separators=(",", ":")).encode("utf-8") + b"\n"