"""Controller configuration file and the options that load it."""

from __future__ import annotations

import argparse
import re
from dataclasses import dataclass, field
from datetime import timedelta
from fractions import Fraction
from pathlib import Path
from typing import Any, Optional

import yaml

GROUP_NAME = "falco.extensions.config.gardener.cloud"
VERSION = "v1alpha1"
API_VERSION = f"{GROUP_NAME}/{VERSION}"
KIND = "Configuration"

_UNIT_NANOSECONDS = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,
    "μs": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}
_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")


class ConfigError(ValueError):
    """Raised when the configuration cannot be loaded or decoded."""


def _parse_duration(text: Any, path: str) -> timedelta:
    """Parse a duration such as "1h30m" or "720h" into a timedelta."""
    if not isinstance(text, str):
        raise ConfigError(f"{path}: expected a duration string, got {type(text).__name__}")
    body = text
    sign = 1
    if body[:1] in "+-" and body:
        sign = -1 if body[0] == "-" else 1
        body = body[1:]
    if body == "0":
        return timedelta(0)
    if not body:
        raise ConfigError(f"{path}: invalid duration {text!r}")
    total = Fraction(0)
    position = 0
    for match in _DURATION_PART.finditer(body):
        if match.start() != position:
            raise ConfigError(f"{path}: invalid duration {text!r}")
        total += Fraction(match.group(1)) * _UNIT_NANOSECONDS[match.group(2)]
        position = match.end()
    if position != len(body):
        raise ConfigError(f"{path}: invalid duration {text!r}")
    nanoseconds = int(total) * sign
    return timedelta(microseconds=nanoseconds // 1000 if nanoseconds >= 0 else -((-nanoseconds) // 1000))


def _mapping(value: Any, path: str) -> dict:
    if not isinstance(value, dict):
        raise ConfigError(f"{path or 'document'}: expected an object, got {type(value).__name__}")
    return value


@dataclass
class FalcoSettings:
    """Falco settings of the extension."""

    priority_class_name: Optional[str] = None
    certificate_lifetime: Optional[timedelta] = None
    certificate_renew_after: Optional[timedelta] = None

    @classmethod
    def _from_dict(cls, data: dict) -> FalcoSettings:
        priority = data.get("priorityClassName")
        if priority is not None and not isinstance(priority, str):
            raise ConfigError("falco.priorityClassName: expected a string")
        lifetime = data.get("certificateLifetime")
        renew = data.get("certificateRenewAfter")
        return cls(
            priority_class_name=priority,
            certificate_lifetime=None if lifetime is None
            else _parse_duration(lifetime, "falco.certificateLifetime"),
            certificate_renew_after=None if renew is None
            else _parse_duration(renew, "falco.certificateRenewAfter"),
        )


@dataclass
class Configuration:
    """Configuration of the Falco extension controller."""

    falco: Optional[FalcoSettings] = None
    health_check_config: Optional[dict] = None

    @classmethod
    def from_dict(cls, data: Any) -> Configuration:
        """Build a configuration from its object form; kind and apiVersion are not checked."""
        obj = _mapping(data, "")
        falco = obj.get("falco")
        health = obj.get("healthCheckConfig")
        return cls(
            falco=None if falco is None else FalcoSettings._from_dict(_mapping(falco, "falco")),
            health_check_config=None if health is None else dict(_mapping(health, "healthCheckConfig")),
        )

    @classmethod
    def decode(cls, raw: Any) -> Configuration:
        """Decode a YAML or JSON document that must carry this kind and apiVersion."""
        if isinstance(raw, (bytes, bytearray)):
            try:
                raw = bytes(raw).decode("utf-8")
            except UnicodeDecodeError as exc:
                raise ConfigError(f"configuration is not valid UTF-8: {exc}") from exc
        if not isinstance(raw, str):
            raise ConfigError(f"cannot decode object of type {type(raw).__name__}")
        try:
            loaded = yaml.safe_load(raw)
        except yaml.YAMLError as exc:
            raise ConfigError(f"configuration is not valid YAML: {exc}") from exc
        obj = _mapping(loaded, "")
        kind = obj.get("kind")
        api_version = obj.get("apiVersion")
        if not kind:
            raise ConfigError("object 'Kind' is missing")
        if not api_version:
            raise ConfigError("object 'apiVersion' is missing")
        if kind != KIND or api_version != API_VERSION:
            raise ConfigError(f"no kind {kind!r} is registered for version {api_version!r}")
        return cls.from_dict(obj)


class _BindToOptions(argparse.Action):
    def __init__(self, option_strings, dest, options: FalcoOptions, **kwargs):
        super().__init__(option_strings, dest, **kwargs)
        self._options = options

    def __call__(self, parser, namespace, values, option_string=None):
        self._options.config_location = values
        setattr(namespace, self.dest, values)


@dataclass
class FalcoOptions:
    """Command line options locating the controller configuration file."""

    config_location: str = ""
    _config: Optional[Configuration] = field(default=None, init=False, repr=False)

    def complete(self) -> None:
        """Read and decode the configuration file."""
        if not self.config_location:
            raise ConfigError("config location is not set")
        data = Path(self.config_location).read_bytes()
        self._config = Configuration.decode(data)

    def completed(self) -> Optional[Configuration]:
        """Return the loaded configuration; None until complete() has succeeded."""
        return self._config

    def add_flags(self, parser: argparse.ArgumentParser) -> None:
        """Register --config-file on the parser, bound to these options."""
        parser.add_argument(
            "--config-file",
            dest="config_file",
            default="",
            metavar="PATH",
            action=_BindToOptions,
            options=self,
            help="path to the controller manager configuration file",
        )