import pytest

from falcoguard.service import FalcoServiceConfig, Gardener
from falcoguard.validation import FieldError, validate_falco_service_config


def test_valid_gardener_config():
    config = FalcoServiceConfig(
        falco_version="0.38.0", resources="gardener", gardener=Gardener(custom_rules=["rules-a"])
    )
    assert validate_falco_service_config(config) == []


@pytest.mark.parametrize("resources", [None, "gardenerr"])
def test_bad_resources(resources):
    config = FalcoServiceConfig(falco_version="0.38.0", resources=resources, gardener=Gardener(custom_rules=[""]))
    errors = validate_falco_service_config(config)
    assert len(errors) == 1
    assert errors[0].field == "resources"
    assert errors[0].detail == 'resources must be set to "gardener" or "falcoctl"'


def test_empty_rule_reference():
    config = FalcoServiceConfig(
        falco_version="0.38.0", resources="gardener", gardener=Gardener(custom_rules=["ok", "", "ok2"])
    )
    errors = validate_falco_service_config(config)
    assert [e.field for e in errors] == ["gardener.ruleRefs[1]"]
    assert errors[0].detail == "Rule reference is empty"


def test_falcoctl_ignores_rules():
    config = FalcoServiceConfig(
        falco_version="0.38.0", resources="falcoctl", gardener=Gardener(custom_rules=[""])
    )
    assert validate_falco_service_config(config) == []


def test_field_error_message():
    error = FieldError("resources", "", "must be set")
    assert str(error) == 'resources: Invalid value: "": must be set'