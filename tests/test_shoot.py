from datetime import datetime

from falcoguard.constants import EXTENSION_TYPE
from falcoguard.shoot import Extension, Shoot


def test_find_extension_returns_the_entry_itself():
    ext = Extension(type=EXTENSION_TYPE, disabled=False)
    shoot = Shoot(extensions=[Extension(type="other"), ext])
    found = shoot.find_extension()
    assert found is ext
    found.disabled = True
    assert shoot.extensions[1].disabled is True


def test_find_extension_returns_first_match():
    first = Extension(type=EXTENSION_TYPE, provider_config=b"a")
    second = Extension(type=EXTENSION_TYPE, provider_config=b"b")
    shoot = Shoot(extensions=[first, second])
    assert shoot.find_extension() is first


def test_find_extension_missing():
    assert Shoot().find_extension() is None
    assert Shoot(extensions=[Extension(type="other")]).find_extension() is None


def test_find_extension_by_explicit_type():
    other = Extension(type="other")
    shoot = Shoot(extensions=[Extension(type=EXTENSION_TYPE), other])
    assert shoot.find_extension("other") is other


def test_default_extension_type_matches_service_name():
    shoot = Shoot(
        name="s",
        namespace="garden-dev",
        extensions=[Extension(type="shoot-falco-service")],
        deletion_timestamp=datetime(2024, 1, 1),
    )
    assert shoot.find_extension().type == EXTENSION_TYPE