import pytest

from falcoguard.falcoprofile import (
    API_VERSION,
    KIND,
    FalcoctlVersion,
    FalcoProfile,
    FalcosidekickVersion,
    FalcoVersion,
    Images,
    ImageSpec,
    Spec,
    Versions,
)


def _sample():
    return {
        "apiVersion": "falco.gardener.cloud/v1alpha1",
        "kind": "FalcoProfile",
        "metadata": {"name": "falco"},
        "spec": {
            "versions": {
                "falco": [
                    {
                        "classification": "supported",
                        "version": "0.38.0",
                        "rulesVersion": "3.1.0",
                    },
                    {
                        "classification": "deprecated",
                        "expirationDate": "2025-01-01T00:00:00Z",
                        "version": "0.37.1",
                        "rulesVersion": "3.0.1",
                    },
                ],
                "falcosidekick": [{"classification": "supported", "version": "2.29.0"}],
                "falcoctl": [{"classification": "supported", "version": "0.8.0"}],
            },
            "images": {
                "falco": [
                    {
                        "version": "0.38.0",
                        "architecture": "amd64",
                        "repository": "registry.example.com/falco",
                        "tag": "0.38.0",
                    }
                ],
                "falcosidekick": [],
                "falcoctl": [],
            },
        },
    }


def test_from_dict_reads_versions_and_images():
    profile = FalcoProfile.from_dict(_sample())
    assert profile.name == "falco"
    assert profile.spec.versions.falco[0] == FalcoVersion(
        version="0.38.0", classification="supported", rules_version="3.1.0"
    )
    assert profile.spec.versions.falco[1].expiration_date == "2025-01-01T00:00:00Z"
    assert profile.spec.versions.falcosidekick == [FalcosidekickVersion(version="2.29.0", classification="supported")]
    assert profile.spec.versions.falcoctl == [FalcoctlVersion(version="0.8.0", classification="supported")]
    assert profile.spec.images.falco[0].repository == "registry.example.com/falco"


def test_to_dict_reproduces_source_document():
    sample = _sample()
    assert FalcoProfile.from_dict(sample).to_dict() == sample


def test_round_trip_from_objects():
    profile = FalcoProfile(
        metadata={"name": "p"},
        spec=Spec(
            versions=Versions(falco=[FalcoVersion(version="1.0.0", classification="preview", rules_version="1")]),
            images=Images(falcoctl=[ImageSpec(version="0.1.0", architecture="arm64", repository="r", tag="t")]),
        ),
    )
    assert FalcoProfile.from_dict(profile.to_dict()) == profile


def test_type_meta_in_output():
    out = FalcoProfile().to_dict()
    assert out["apiVersion"] == API_VERSION
    assert out["kind"] == KIND
    assert API_VERSION == "falco.gardener.cloud/v1alpha1"


def test_expiration_date_omitted_when_unset():
    out = FalcoProfile(spec=Spec(versions=Versions(falco=[FalcoVersion(version="1.0.0")]))).to_dict()
    assert "expirationDate" not in out["spec"]["versions"]["falco"][0]


def test_missing_sections_default_to_empty():
    profile = FalcoProfile.from_dict({"spec": {"versions": {"falco": [{"version": "1.0.0"}]}}})
    assert profile.spec.versions.falco[0].classification == ""
    assert profile.spec.versions.falcosidekick == []
    assert profile.spec.images == Images()
    assert profile.name == ""


@pytest.mark.parametrize(
    "document",
    [
        [],
        {"metadata": "x"},
        {"spec": {"versions": {"falco": {"version": "1"}}}},
        {"spec": {"versions": {"falco": [{"version": 1}]}}},
        {"spec": {"images": {"falco": ["img"]}}},
    ],
)
def test_malformed_documents_raise(document):
    with pytest.raises(ValueError):
        FalcoProfile.from_dict(document)