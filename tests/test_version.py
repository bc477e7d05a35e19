import pytest

from nginxctl.runtime.version import NGINX_COMPATIBLE, CompatibilityRange, match_version


def test_match_version_accepts_compatible_openresty():
    verdict = match_version("nginx version: openresty/1.25.3.1\n")

    assert verdict.compatible is True
    assert verdict.version == "1.25.3.1"


def test_match_version_rejects_version_outside_range():
    verdict = match_version("nginx version: openresty/1.21.4.3\n")

    assert verdict.compatible is False
    assert verdict.version == "1.21.4.3"


def test_match_version_requires_openresty_signature():
    verdict = match_version("nginx version: nginx/1.25.3\n")

    assert verdict.compatible is False
    assert verdict.version is None
    assert verdict.describe() == "not found"


def test_match_version_handles_empty_output():
    assert match_version("").compatible is False
    assert match_version(None).compatible is False


@pytest.mark.parametrize("banner", [
    "nginx version: openresty/1..25",
    "nginx version: openresty/1.25.3.1.",
    "nginx version: openresty/.",
])
def test_match_version_malformed_version_is_incompatible(banner):
    verdict = match_version(banner)

    assert verdict.compatible is False


def test_match_version_signature_may_span_lines():
    output = "nginx version: openresty\nbuilt by gcc\nopenresty/1.25.3.1\n"

    assert match_version(output).version is not None


def test_compatibility_range_with_operators():
    compatible = CompatibilityRange([">=1.21.4.1,<1.26"])

    assert compatible.matches("1.21.4.1")
    assert compatible.matches("1.25.3.2")
    assert not compatible.matches("1.19.9.1")
    assert not compatible.matches("1.27.1.1")
    assert "1.19.9.1" not in compatible
    assert str(compatible) == ">=1.21.4.1,<1.26"


def test_compatibility_range_bare_versions_are_exact():
    compatible = CompatibilityRange(["1.25.3.1", "1.25.3.2"])

    assert compatible.matches("1.25.3.2")
    assert not compatible.matches("1.25.3.3")
    assert str(compatible) == "1.25.3.1 or 1.25.3.2"


def test_compatibility_range_is_immutable():
    with pytest.raises(AttributeError):
        NGINX_COMPATIBLE.expressions = ("==0.0.1",)


def test_compatibility_range_rejects_empty_and_invalid_expressions():
    with pytest.raises(ValueError):
        CompatibilityRange([])

    with pytest.raises(ValueError):
        CompatibilityRange(["~~1.2"])


def test_match_version_with_custom_range():
    compatible = CompatibilityRange([">=1.19"])

    assert match_version("nginx version: openresty/1.21.4.1", compatible).compatible is True


def test_two_bare_dependency_versions_are_an_inclusive_range():
    compatible = CompatibilityRange.from_dependency(["1.21.4.1", "1.25.3.1"])

    assert compatible.matches("1.21.4.1")
    assert compatible.matches("1.23.0.1")
    assert compatible.matches("1.25.3.1")
    assert not compatible.matches("1.25.3.2")
    assert not compatible.matches("1.19.9.1")
    assert str(compatible) == ">=1.21.4.1,<=1.25.3.1"


def test_single_dependency_version_is_exact():
    compatible = CompatibilityRange.from_dependency(["1.25.3.1"])

    assert compatible.matches("1.25.3.1")
    assert not compatible.matches("1.25.3.2")
    assert str(NGINX_COMPATIBLE) == "1.25.3.1"
