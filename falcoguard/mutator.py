"""Admission mutator that fills in defaults of the Falco provider configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Mapping, Optional, Union

from .constants import EXTENSION_TYPE
from .service import DecodeError, FalcoCtl, FalcoServiceConfig, Gardener, Webhook
from .shoot import Extension, Shoot
from .versions import Version, choose_highest_version

MUTATOR_NAME = "mutator"
MUTATOR_PATH = "/webhooks/mutate"
OBJECT_SELECTOR_LABELS = {"extensions.extensions.gardener.cloud/shoot-falco-service": "true"}

VersionSource = Union[Mapping[str, Version], Callable[[], Mapping[str, Version]]]


def set_custom_webhook(config: FalcoServiceConfig) -> None:
    """Default to a disabled custom webhook."""
    if config.custom_webhook is None:
        config.custom_webhook = Webhook(enabled=False)


def set_falco_ctl(config: FalcoServiceConfig) -> None:
    """Default to an empty falcoctl configuration."""
    if config.falco_ctl is None:
        config.falco_ctl = FalcoCtl()


def set_gardener_rules(config: FalcoServiceConfig) -> None:
    """Default to the standard Falco rules only and no custom rules."""
    if config.gardener is None:
        config.gardener = Gardener()
    gardener = config.gardener
    if gardener.use_falco_rules is None:
        gardener.use_falco_rules = True
    if gardener.use_falco_incubating_rules is None:
        gardener.use_falco_incubating_rules = False
    if gardener.use_falco_sandbox_rules is None:
        gardener.use_falco_sandbox_rules = False
    if gardener.custom_rules is None:
        gardener.custom_rules = []


def set_resources(config: FalcoServiceConfig) -> None:
    """Default resources to "gardener"."""
    if config.resources is None:
        config.resources = "gardener"


def set_auto_update(config: FalcoServiceConfig) -> None:
    """Default to automatic updates."""
    if config.auto_update is None:
        config.auto_update = True


def set_falco_version(config: FalcoServiceConfig, versions: Mapping[str, Version]) -> None:
    """Default to the highest supported Falco version; raises VersionError if there is none."""
    if config.falco_version is not None:
        return
    config.falco_version = choose_highest_version(versions, "supported")


@dataclass
class ShootMutator:
    """Fills in defaults of the Falco provider configuration of shoots."""

    falco_versions: VersionSource = field(default_factory=dict)

    def _versions(self) -> Mapping[str, Version]:
        source = self.falco_versions
        return source() if callable(source) else source

    def mutate(self, shoot: Shoot) -> None:
        """Complete the Falco provider configuration of the shoot in place."""
        if not isinstance(shoot, Shoot):
            raise TypeError(f"wrong object type {type(shoot).__name__}")
        if self.is_disabled(shoot):
            return
        config = self.extract_falco_config(shoot)
        if config is None:
            return
        set_falco_version(config, self._versions())
        set_auto_update(config)
        set_resources(config)
        set_falco_ctl(config)
        set_gardener_rules(config)
        set_custom_webhook(config)
        self.update_falco_config(shoot, config)

    def is_disabled(self, shoot: Shoot) -> bool:
        """True if the shoot is being deleted or the extension is absent or disabled."""
        if shoot.deletion_timestamp is not None:
            return True
        extension = shoot.find_extension(EXTENSION_TYPE)
        if extension is None:
            return True
        return bool(extension.disabled)

    def extract_falco_config(self, shoot: Shoot) -> Optional[FalcoServiceConfig]:
        """Decode the provider configuration of the extension, or None if there is none."""
        extension = shoot.find_extension(EXTENSION_TYPE)
        if extension is None or extension.provider_config is None:
            return None
        try:
            return FalcoServiceConfig.decode(extension.provider_config)
        except DecodeError as exc:
            raise DecodeError(f"failed to decode {extension.type} provider config: {exc}") from exc

    def update_falco_config(self, shoot: Shoot, config: FalcoServiceConfig) -> None:
        """Store the encoded config on the extension, adding the extension if missing."""
        raw = config.encode()
        extension = shoot.find_extension(EXTENSION_TYPE)
        if extension is None:
            extension = Extension(type=EXTENSION_TYPE)
            shoot.extensions.append(extension)
        extension.provider_config = raw