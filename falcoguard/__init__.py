"""Admission, configuration, image-vector and version-selection logic for a Falco cluster extension."""

__version__ = "0.1.0"