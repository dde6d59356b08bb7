"""Image vectors: reading, and merging that keeps several versions per image name."""

from __future__ import annotations

import hashlib
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional

import yaml

OVERRIDE_ENV = "IMAGEVECTOR_OVERWRITE"


@dataclass
class ImageSource:
    """One image of an image vector."""

    name: str
    repository: Optional[str] = None
    tag: Optional[str] = None
    version: Optional[str] = None
    runtime_version: Optional[str] = None
    target_version: Optional[str] = None
    architectures: Optional[list[str]] = None

    @classmethod
    def _from_dict(cls, data: Any, path: str) -> ImageSource:
        if not isinstance(data, dict):
            raise ValueError(f"{path}: expected an object")

        def text(key: str) -> Optional[str]:
            value = data.get(key)
            if value is None or isinstance(value, str):
                return value
            raise ValueError(f"{path}.{key}: expected a string")

        name = text("name")
        if not name:
            raise ValueError(f"{path}.name: must not be empty")
        repository = text("repository")
        if not repository:
            raise ValueError(f"{path}.repository: must not be empty")
        archs = data.get("architectures")
        if archs is not None and (
            not isinstance(archs, list) or not all(isinstance(a, str) for a in archs)
        ):
            raise ValueError(f"{path}.architectures: expected a list of strings")
        return cls(
            name=name,
            repository=repository,
            tag=text("tag"),
            version=text("version"),
            runtime_version=text("runtimeVersion"),
            target_version=text("targetVersion"),
            architectures=None if archs is None else list(archs),
        )


def read_image_vector(data: Any) -> list[ImageSource]:
    """Parse an image vector YAML document with a top-level 'images' list."""
    if isinstance(data, (bytes, bytearray)):
        data = bytes(data).decode("utf-8")
    try:
        loaded = yaml.safe_load(data)
    except yaml.YAMLError as exc:
        raise ValueError(f"image vector is not valid YAML: {exc}") from exc
    if loaded is None:
        return []
    if not isinstance(loaded, dict):
        raise ValueError("image vector: expected an object")
    images = loaded.get("images")
    if images is None:
        return []
    if not isinstance(images, list):
        raise ValueError("images: expected a list")
    return [ImageSource._from_dict(item, f"images[{i}]") for i, item in enumerate(images)]


def read_image_vector_file(path: str | os.PathLike) -> list[ImageSource]:
    """Read and parse an image vector file."""
    return read_image_vector(Path(path).read_bytes())


def _key(source: ImageSource) -> tuple:
    if source.architectures is None:
        archs = bytes(32)
    else:
        archs = hashlib.sha256("".join(source.architectures).encode("utf-8")).digest()
    return (
        source.name,
        source.version or "",
        source.runtime_version or "",
        source.target_version or "",
        archs,
    )


def merge_image_sources(old: ImageSource, override: ImageSource) -> ImageSource:
    """Merge an override into an existing image, filling unset fields from the old one."""
    tag = override.tag if override.tag is not None else old.tag
    version = override.version if override.version is not None else old.version
    if version is None and tag is not None:
        version = old.tag
    return ImageSource(
        name=override.name,
        repository=override.repository,
        tag=tag,
        version=version,
        runtime_version=override.runtime_version
        if override.runtime_version is not None else old.runtime_version,
        target_version=override.target_version
        if override.target_version is not None else old.target_version,
        architectures=override.architectures
        if override.architectures is not None else old.architectures,
    )


def merge(*args: Iterable[ImageSource]) -> list[ImageSource]:
    """Merge image vectors; later vectors override images with the same key."""
    out: list[ImageSource] = []
    positions: dict[tuple, int] = {}
    for vector in args:
        for image in vector:
            key = _key(image)
            if key in positions:
                out[positions[key]] = merge_image_sources(out[positions[key]], image)
            else:
                positions[key] = len(out)
                out.append(image)
    return out


def with_env_override(
    vector: list[ImageSource], environ: Optional[Mapping[str, str]] = None
) -> list[ImageSource]:
    """Merge the file named by IMAGEVECTOR_OVERWRITE over the vector, if set."""
    env = os.environ if environ is None else environ
    override_path = env.get(OVERRIDE_ENV, "")
    if not override_path:
        return vector
    return merge(vector, read_image_vector_file(override_path))