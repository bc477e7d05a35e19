from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable

from packaging.specifiers import InvalidSpecifier, SpecifierSet
from packaging.version import InvalidVersion, Version

from nginxctl.meta import DEPENDENCIES

NGINX_VERSION_PATTERN = re.compile(r"^nginx.*?openresty.*?([\d.]+)", re.DOTALL)


class CompatibilityRange:
    """Immutable set of accepted OpenResty versions."""

    __slots__ = ("_expressions", "_specifiers")

    def __init__(self, expressions: Iterable[str]) -> None:
        normalized = tuple(self._normalize(expr) for expr in expressions)
        if not normalized:
            raise ValueError("A compatibility range needs at least one version expression.")

        try:
            specifiers = tuple(SpecifierSet(expr) for expr in normalized)
        except InvalidSpecifier as exc:
            raise ValueError(f"Invalid version expression: {exc}") from exc

        object.__setattr__(self, "_expressions", normalized)
        object.__setattr__(self, "_specifiers", specifiers)

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError("CompatibilityRange is immutable")

    @classmethod
    def from_dependency(cls, versions: Iterable[str]) -> "CompatibilityRange":
        """
        Build a range from a dependency entry: one version is an exact match,
        two bare versions are the inclusive range between them.
        """
        versions = tuple(versions)
        if len(versions) == 2 and all(v.strip()[:1].isdigit() for v in versions):
            low, high = (v.strip() for v in versions)
            return cls([f">={low},<={high}"])
        return cls(versions)

    @staticmethod
    def _normalize(expr: str) -> str:
        expr = expr.strip()
        if expr and expr[0].isdigit():
            return f"=={expr}"
        return expr

    @property
    def expressions(self) -> tuple[str, ...]:
        return self._expressions

    def matches(self, version: str) -> bool:
        """Return True when ``version`` satisfies any of the accepted expressions."""
        try:
            parsed = Version(version)
        except InvalidVersion:
            return False
        return any(spec.contains(parsed, prereleases=True) for spec in self._specifiers)

    def __contains__(self, version: str) -> bool:
        return self.matches(version)

    def __str__(self) -> str:
        return " or ".join(expr.lstrip("=") if expr.startswith("==") else expr for expr in self._expressions)

    def __repr__(self) -> str:
        return f"CompatibilityRange({list(self._expressions)!r})"


NGINX_COMPATIBLE = CompatibilityRange.from_dependency(DEPENDENCIES["nginx"])


@dataclass(frozen=True)
class VersionMatch:
    """Verdict for one probed binary; ``version`` is None when no signature was found."""

    compatible: bool
    version: str | None = None

    def describe(self) -> str:
        return self.version if self.version is not None else "not found"


def match_version(output: str, compatible: CompatibilityRange = NGINX_COMPATIBLE) -> VersionMatch:
    """Extract the OpenResty version from ``nginx -v`` output and test it."""
    match = NGINX_VERSION_PATTERN.search(output or "")
    if match is None:
        return VersionMatch(compatible=False, version=None)

    version = match.group(1)
    return VersionMatch(compatible=compatible.matches(version), version=version)
