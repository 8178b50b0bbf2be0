"""
Semantic version parsing and ordering.

Versions show up as GitHub tag names, NuGet feed entries and cache directory
names. All of them are ordered with the same rules: numeric components first,
then the prerelease label, where a release sorts above any prerelease that
shares its numeric prefix.
"""

import re
from typing import Iterable, Optional, Tuple, Union

from paketboot.constants import SEMVER_REGEX_PATTERN
from paketboot.exceptions import VersionError

NUMERIC_COMPONENTS = 4

_Identifier = Tuple[int, Union[int, str]]


class SemVer:
    """
    An immutable, orderable semantic version.

    Attributes:
        numbers: Numeric components padded to four entries (major, minor, patch, build).
        prerelease: The prerelease label without the leading "-", or None.
        build: Build metadata after "+", or None. Never affects ordering.
        original: The text the version was parsed from.
    """

    __slots__ = ("numbers", "prerelease", "build", "original", "_key")

    SEMVER_RX = re.compile(SEMVER_REGEX_PATTERN)

    def __init__(
        self,
        numbers: Tuple[int, ...] = (0, 0, 0),
        prerelease: Optional[str] = None,
        build: Optional[str] = None,
        original: Optional[str] = None,
    ) -> None:
        padded = tuple(numbers) + (0,) * (NUMERIC_COMPONENTS - len(numbers))
        object.__setattr__(self, "numbers", padded[:NUMERIC_COMPONENTS])
        object.__setattr__(self, "prerelease", prerelease or None)
        object.__setattr__(self, "build", build or None)
        object.__setattr__(
            self, "original", original or self._format(numbers, prerelease, build)
        )
        object.__setattr__(self, "_key", self._sort_key())

    @classmethod
    def parse(cls, text: Optional[str]) -> "SemVer":
        """
        Parse a version string such as "5.219.0", "v2.0.0-beta002" or "1.0.0-rc.1+abc".

        Raises:
            VersionError: If the text is empty or not a semantic version.
        """
        if text is None or not text.strip():
            raise VersionError("Version string is empty", field="version", value=text)

        trimmed = text.strip()
        match = cls.SEMVER_RX.match(trimmed)
        if not match:
            raise VersionError(
                f"Invalid version string: {trimmed}", field="version", value=trimmed
            )

        numbers = tuple(int(part) for part in match.group("numbers").split("."))
        return cls(
            numbers,
            prerelease=match.group("prerelease"),
            build=match.group("build"),
            original=trimmed,
        )

    @property
    def major(self) -> int:
        return self.numbers[0]

    @property
    def minor(self) -> int:
        return self.numbers[1]

    @property
    def patch(self) -> int:
        return self.numbers[2]

    @property
    def is_prerelease(self) -> bool:
        return self.prerelease is not None

    @staticmethod
    def _format(
        numbers: Tuple[int, ...], prerelease: Optional[str], build: Optional[str]
    ) -> str:
        text = ".".join(str(n) for n in numbers)
        if prerelease:
            text += f"-{prerelease}"
        if build:
            text += f"+{build}"
        return text

    def _sort_key(self) -> Tuple[Tuple[int, ...], Tuple[int, Tuple[_Identifier, ...]]]:
        if self.prerelease is None:
            # A release outranks every prerelease of the same numbers
            return self.numbers, (1, ())

        identifiers = []
        for part in self.prerelease.split("."):
            if part.isdigit():
                identifiers.append((0, int(part)))
            else:
                identifiers.append((1, part))
        return self.numbers, (0, tuple(identifiers))

    def __setattr__(self, name, value):
        raise AttributeError("SemVer instances are immutable")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self._key == other._key

    def __hash__(self) -> int:
        return hash(self._key)

    def __lt__(self, other: "SemVer") -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self._key < other._key

    def __le__(self, other: "SemVer") -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self._key <= other._key

    def __gt__(self, other: "SemVer") -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self._key > other._key

    def __ge__(self, other: "SemVer") -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self._key >= other._key

    def __str__(self) -> str:
        return self.original

    def __repr__(self) -> str:
        return f"SemVer({self.original!r})"


ZERO = SemVer((0, 0, 0), original="0.0.0")


def parse_or_zero(text: Optional[str], ignore_prerelease: bool = False) -> SemVer:
    """
    Parse `text`, returning ZERO instead of raising.

    Malformed candidates and, when `ignore_prerelease` is set, prerelease
    versions are demoted to ZERO so they sort last without being removed from
    the candidate set.
    """
    try:
        version = SemVer.parse(text)
    except VersionError:
        return ZERO

    if ignore_prerelease and version.is_prerelease:
        return ZERO
    return version


def latest_of(
    candidates: Iterable[str], ignore_prerelease: bool = False
) -> Optional[str]:
    """
    Return the candidate string with the highest version.

    Ties keep the first candidate seen. Returns None for an empty input.
    """
    best: Optional[str] = None
    best_version = ZERO
    for candidate in candidates:
        version = parse_or_zero(candidate, ignore_prerelease)
        if best is None or version > best_version:
            best, best_version = candidate, version
    return best


def compare_versions(version1: str, version2: str) -> int:
    """
    Compare two version strings; malformed input compares as ZERO.

    Returns:
        int: 1 if version1 > version2, 0 if equal, -1 if version1 < version2
    """
    v1 = parse_or_zero(version1)
    v2 = parse_or_zero(version2)
    if v1 > v2:
        return 1
    elif v1 < v2:
        return -1
    return 0
