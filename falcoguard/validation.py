"""Field level validation of a FalcoServiceConfig."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from .service import FalcoServiceConfig

_VALID_RESOURCES = ("gardener", "falcoctl")


@dataclass(frozen=True)
class FieldError:
    """An invalid value found at a field path."""

    field: str
    bad_value: Any
    detail: str

    def __str__(self) -> str:
        value = json.dumps(self.bad_value) if isinstance(self.bad_value, str) else repr(self.bad_value)
        return f"{self.field}: Invalid value: {value}: {self.detail}"


def validate_falco_service_config(config: FalcoServiceConfig) -> list[FieldError]:
    """Return every field error of the config; an empty list means valid.

    Every Falco version is accepted here; whether a version is known is
    checked against the Falco profile by the admission validator.
    """
    errors: list[FieldError] = []
    if config.resources not in _VALID_RESOURCES:
        errors.append(FieldError("resources", "", 'resources must be set to "gardener" or "falcoctl"'))
        return errors
    if config.resources == "gardener" and config.gardener is not None:
        for position, rule in enumerate(config.gardener.custom_rules or []):
            if rule == "":
                errors.append(FieldError(f"gardener.ruleRefs[{position}]", "", "Rule reference is empty"))
    return errors