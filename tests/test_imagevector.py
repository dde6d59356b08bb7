import pytest

from falcoguard.imagevector import (
    OVERRIDE_ENV,
    ImageSource,
    merge,
    merge_image_sources,
    read_image_vector,
    read_image_vector_file,
    with_env_override,
)

DOC = """\
images:
- name: falco
  repository: registry.example.com/falco
  tag: "0.38.0"
  version: "0.38.0"
- name: falco
  repository: registry.example.com/falco
  tag: "0.38.1"
  version: "0.38.1"
  architectures: [amd64, arm64]
"""


def test_read_image_vector():
    images = read_image_vector(DOC)
    assert [i.version for i in images] == ["0.38.0", "0.38.1"]
    assert images[1].architectures == ["amd64", "arm64"]
    assert images[0].architectures is None


def test_read_requires_name():
    with pytest.raises(ValueError, match="name"):
        read_image_vector("images:\n- repository: registry.example.com/x\n")


def test_read_empty_document():
    assert read_image_vector("") == []


def test_merge_keeps_distinct_versions():
    images = read_image_vector(DOC)
    merged = merge(images)
    assert merged == images


def test_merge_overrides_same_key():
    base = [ImageSource(name="falco", repository="old/repo", tag="t1", version="1.0.0")]
    over = [ImageSource(name="falco", repository="new/repo", version="1.0.0")]
    merged = merge(base, over)
    assert len(merged) == 1
    assert merged[0].repository == "new/repo"
    assert merged[0].tag == "t1"


def test_merge_appends_new_keys_in_order():
    a = ImageSource(name="falco", repository="r", version="1")
    b = ImageSource(name="falcosidekick", repository="r", version="1")
    merged = merge([a], [b])
    assert [i.name for i in merged] == ["falco", "falcosidekick"]


def test_architectures_distinguish_keys():
    a = ImageSource(name="falco", repository="r", version="1")
    b = ImageSource(name="falco", repository="r", version="1", architectures=[])
    assert len(merge([a], [b])) == 2


def test_merge_image_sources_version_from_old_tag():
    old = ImageSource(name="falco", repository="r", tag="old-tag")
    override = ImageSource(name="falco", repository="r2", tag="new-tag")
    result = merge_image_sources(old, override)
    assert result.tag == "new-tag"
    assert result.version == "old-tag"
    assert result.repository == "r2"


def test_merge_image_sources_override_wins():
    old = ImageSource(name="falco", repository="r", tag="a", version="1", runtime_version=">= 1.0")
    override = ImageSource(name="falco", repository="r", tag="b", version="2")
    result = merge_image_sources(old, override)
    assert (result.tag, result.version, result.runtime_version) == ("b", "2", ">= 1.0")


def test_with_env_override_unset():
    images = read_image_vector(DOC)
    assert with_env_override(images, {}) is images


def test_with_env_override_file(tmp_path):
    path = tmp_path / "override.yaml"
    path.write_text(
        "images:\n- name: falco\n  repository: mirror.example.com/falco\n  version: \"0.38.0\"\n"
    )
    images = read_image_vector(DOC)
    result = with_env_override(images, {OVERRIDE_ENV: str(path)})
    assert len(result) == 2
    assert result[0].repository == "mirror.example.com/falco"
    assert result[0].tag == "0.38.0"
    assert read_image_vector_file(path)[0].name == "falco"


def test_with_env_override_missing_file(tmp_path):
    with pytest.raises(OSError):
        with_env_override([], {OVERRIDE_ENV: str(tmp_path / "nope.yaml")})