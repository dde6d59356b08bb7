"""Admission validator for the Falco provider configuration of shoots."""

from __future__ import annotations

import copy
import logging
import os
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Iterable, Mapping, Optional, Union

from .constants import ALWAYS_ENABLED_PROJECTS, EXTENSION_TYPE, PROJECT_ENABLE_ANNOTATION
from .service import DecodeError, FalcoServiceConfig
from .shoot import Extension, Shoot
from .versions import Version

VALIDATOR_NAME = "validator"
VALIDATOR_PATH = "/webhooks/validate"
OBJECT_SELECTOR_LABELS = {"extensions.extensions.gardener.cloud/shoot-falco-service": "true"}
RESTRICTED_USAGE_ENV = "RESTRICTED_USAGE"

VersionSource = Union[Mapping[str, Version], Callable[[], Mapping[str, Version]]]

_log = logging.getLogger(__name__)

_TRUE_WORDS = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE_WORDS = {"0", "f", "F", "FALSE", "false", "False"}


class ValidationError(ValueError):
    """Raised when a shoot's Falco configuration is rejected."""

    def __init__(self, message: str, errors: Iterable[ValidationError] = ()):
        super().__init__(message)
        self.errors = list(errors)

    @classmethod
    def join(cls, errors: Iterable[ValidationError]) -> ValidationError:
        collected = list(errors)
        return cls("\n".join(str(error) for error in collected), collected)


def _parse_bool(text: str) -> bool:
    if text in _TRUE_WORDS:
        return True
    if text in _FALSE_WORDS:
        return False
    raise ValueError(f"invalid boolean: {text!r}")


def _aware(moment: datetime) -> datetime:
    return moment if moment.tzinfo is not None else moment.replace(tzinfo=timezone.utc)


class EventType(str, Enum):
    """Kinds of watch events on projects."""

    ADDED = "ADDED"
    MODIFIED = "MODIFIED"
    DELETED = "DELETED"


@dataclass
class Project:
    """A project and the namespace its shoots live in."""

    name: str = ""
    namespace: Optional[str] = None
    annotations: dict[str, str] = field(default_factory=dict)

    @classmethod
    def _from_dict(cls, data: Any) -> Project:
        if not isinstance(data, dict):
            raise ValueError("event object of wrong type")
        metadata = data.get("metadata") or {}
        spec = data.get("spec") or {}
        if not isinstance(metadata, dict) or not isinstance(spec, dict):
            raise ValueError("cannot convert from unstructured: metadata and spec must be objects")
        name = metadata.get("name") or ""
        annotations = metadata.get("annotations") or {}
        namespace = spec.get("namespace")
        if not isinstance(name, str):
            raise ValueError("cannot convert from unstructured: metadata.name must be a string")
        if not isinstance(annotations, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in annotations.items()
        ):
            raise ValueError("cannot convert from unstructured: annotations must map strings to strings")
        if namespace is not None and not isinstance(namespace, str):
            raise ValueError("cannot convert from unstructured: spec.namespace must be a string")
        return cls(name=name, namespace=namespace, annotations=dict(annotations))


class Projects:
    """Thread-safe cache of projects, keyed by their namespace."""

    def __init__(self) -> None:
        self._projects: dict[str, Project] = {}
        self._lock = threading.Lock()

    def update(self, project: Project) -> None:
        """Add or replace a project."""
        if not project.namespace:
            raise ValueError(f"project {project.name!r} has no namespace")
        with self._lock:
            self._projects[project.namespace] = project
        _log.info("project updated: name=%s", project.name)

    def delete(self, namespace: str) -> None:
        """Forget the project of a namespace."""
        with self._lock:
            self._projects.pop(namespace, None)
        _log.info("project deleted: namespace=%s", namespace)

    def get_project(self, namespace: str) -> Optional[Project]:
        """Return a copy of the project of the namespace, or None."""
        with self._lock:
            project = self._projects.get(namespace)
            return None if project is None else copy.deepcopy(project)

    def handle_event(self, event_type: str, obj: Any) -> None:
        """Apply a watch event; unknown event types are ignored."""
        try:
            kind = EventType(event_type)
        except ValueError:
            return
        project = Project._from_dict(obj)
        if kind is EventType.DELETED:
            if not project.namespace:
                raise ValueError(f"project {project.name!r} has no namespace")
            self.delete(project.namespace)
        else:
            self.update(project)


def verify_project_eligibility(projects: Projects, namespace: str) -> bool:
    """True if the project of the namespace may use the Falco extension."""
    project = projects.get_project(namespace)
    if project is None:
        return False
    if project.name in ALWAYS_ENABLED_PROJECTS:
        return True
    value = project.annotations.get(PROJECT_ENABLE_ANNOTATION)
    if value is None:
        return False
    try:
        return _parse_bool(value)
    except ValueError:
        return False


def verify_falco_ctl(config: FalcoServiceConfig) -> None:
    """Require a falcoctl section."""
    if config.falco_ctl is None:
        raise ValidationError("falcoCtl is not set")


def verify_gardener_set(config: FalcoServiceConfig) -> None:
    """Require the Gardener section with all rule switches set."""
    gardener = config.gardener
    if gardener is None:
        raise ValidationError("gardener managing configuration not set")
    if (
        gardener.use_falco_rules is None
        or gardener.use_falco_incubating_rules is None
        or gardener.use_falco_sandbox_rules is None
    ):
        raise ValidationError("gardener rules not set")


def verify_webhook(config: FalcoServiceConfig) -> None:
    """Require a webhook that is explicitly enabled with an address, or disabled."""
    webhook = config.custom_webhook
    if webhook is None:
        raise ValidationError("webhook is nil")
    if webhook.enabled is None:
        raise ValidationError("webhook needs to be either enabled or disbaled")
    if webhook.enabled and webhook.address is None:
        raise ValidationError("webhook is enabled but without address")


def verify_resources(config: FalcoServiceConfig) -> None:
    """Require resources to be "gardener" or "falcoctl"."""
    if config.resources is None:
        raise ValidationError("resource is not defined")
    if config.resources not in ("gardener", "falcoctl"):
        raise ValidationError("resource needs to be either gardener or falcoctl")


def verify_falco_version(
    config: FalcoServiceConfig,
    versions: Mapping[str, Version],
    now: Optional[datetime] = None,
) -> None:
    """Require a known Falco version that is not an expired deprecated one."""
    chosen = config.falco_version
    if chosen is None:
        raise ValidationError("falcoVersion is nil")
    moment = datetime.now(timezone.utc) if now is None else _aware(now)
    for entry in versions.values():
        if entry.version != chosen:
            continue
        if (
            entry.classification == "deprecated"
            and entry.expiration_date is not None
            and _aware(entry.expiration_date) < moment
        ):
            raise ValidationError("chosen version is marked as deprecated")
        return
    raise ValidationError("version not found in possible versions")


@dataclass
class ShootValidator:
    """Validates the Falco provider configuration of shoots."""

    falco_versions: VersionSource = field(default_factory=dict)
    projects: Projects = field(default_factory=Projects)
    restricted_usage: Optional[bool] = None

    def _versions(self) -> Mapping[str, Version]:
        source = self.falco_versions
        return source() if callable(source) else source

    def _restricted(self) -> bool:
        if self.restricted_usage is not None:
            return self.restricted_usage
        try:
            return _parse_bool(os.environ.get(RESTRICTED_USAGE_ENV, ""))
        except ValueError:
            return False

    def validate(self, new: Shoot, old: Optional[Shoot] = None) -> None:
        """Raise ValidationError if the new shoot's Falco configuration is not acceptable."""
        if not isinstance(new, Shoot):
            raise TypeError(f"wrong object type {type(new).__name__}")
        old_shoot = old if isinstance(old, Shoot) else None
        if self.is_disabled(new):
            return
        config = self.extract_falco_config(new)

        if self._restricted():
            try:
                old_config = self.extract_falco_config(old_shoot)
            except (ValidationError, DecodeError):
                old_config = None
            if old_config is None and not verify_project_eligibility(self.projects, new.namespace):
                raise ValidationError("project is not eligible for Falco extension")

        checks = (
            lambda: verify_falco_version(config, self._versions()),
            lambda: verify_resources(config),
            lambda: verify_falco_ctl(config),
            lambda: verify_gardener_set(config),
            lambda: verify_webhook(config),
        )
        errors: list[ValidationError] = []
        for check in checks:
            try:
                check()
            except ValidationError as exc:
                errors.append(exc)
        if errors:
            raise ValidationError.join(errors)

    def is_disabled(self, shoot: Shoot) -> bool:
        """True if the extension is absent or explicitly disabled."""
        extension = shoot.find_extension(EXTENSION_TYPE)
        if extension is None:
            return True
        return bool(extension.disabled)

    def extract_falco_config(self, shoot: Optional[Shoot]) -> FalcoServiceConfig:
        """Decode the provider configuration of the extension; raise if there is none."""
        if shoot is None:
            raise ValidationError("shoot pointer was nil")
        extension: Optional[Extension] = shoot.find_extension(EXTENSION_TYPE)
        if extension is not None and extension.provider_config is not None:
            try:
                return FalcoServiceConfig.decode(extension.provider_config)
            except DecodeError as exc:
                raise DecodeError(f"failed to decode {extension.type} provider config: {exc}") from exc
        raise ValidationError("no FalcoConfig found in extensions")