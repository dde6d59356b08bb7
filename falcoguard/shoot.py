"""The parts of a shoot cluster resource the admission webhooks look at."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from .constants import EXTENSION_TYPE


@dataclass
class Extension:
    """An extension entry of a shoot spec."""

    type: str
    disabled: Optional[bool] = None
    provider_config: Optional[bytes] = None


@dataclass
class Shoot:
    """A shoot cluster with its extensions."""

    name: str = ""
    namespace: str = ""
    extensions: list[Extension] = field(default_factory=list)
    deletion_timestamp: Optional[datetime] = None
    annotations: dict[str, str] = field(default_factory=dict)

    def find_extension(self, extension_type: str = EXTENSION_TYPE) -> Optional[Extension]:
        """Return the first extension of the given type, or None."""
        return next((ext for ext in self.extensions if ext.type == extension_type), None)