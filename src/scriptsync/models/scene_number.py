"""Industry-style scene numbers such as ``12``, ``12A`` and ``A12``."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from functools import total_ordering
from typing import Any

_PREFIXED = re.compile(r"^([A-Z]+)(\d+)([A-Z]*)$")
_SUFFIXED = re.compile(r"^(\d+)([A-Z]*)$")


def _increment_letters(letters: str) -> str:
    """Increment a letter run: "" -> "A", "A" -> "B", "Z" -> "AA", "AZ" -> "BA"."""
    if not letters:
        return "A"
    chars = list(letters)
    i = len(chars) - 1
    while i >= 0:
        if chars[i] == "Z":
            chars[i] = "A"
            i -= 1
        else:
            chars[i] = chr(ord(chars[i]) + 1)
            return "".join(chars)
    return "A" + "".join(chars)


@total_ordering
@dataclass(frozen=True)
class SceneNumber:
    """A parsed scene number.

    Scenes inserted after a numbered scene carry a letter suffix (12A),
    scenes inserted before it carry a letter prefix (A12). Ordering
    follows shooting-script convention: A12 < 12 < 12A < 12B < 12AA.
    """

    base_number: int
    suffix: str = ""
    prefix: str = ""

    @classmethod
    def parse(cls, value: str) -> SceneNumber | None:
        """Parse a scene number string, returning None when it is not one."""
        text = value.strip().upper()
        if not text:
            return None
        match = _PREFIXED.match(text)
        if match:
            return cls(int(match.group(2)), match.group(3), match.group(1))
        match = _SUFFIXED.match(text)
        if match:
            return cls(int(match.group(1)), match.group(2))
        return None

    def __str__(self) -> str:
        return f"{self.prefix}{self.base_number}{self.suffix}"

    @property
    def is_simple(self) -> bool:
        return not self.prefix and not self.suffix

    def next_after(self) -> SceneNumber:
        """Number for a scene inserted after this one (12 -> 12A, 12Z -> 12AA)."""
        return SceneNumber(self.base_number, _increment_letters(self.suffix), self.prefix)

    def next_before(self) -> SceneNumber:
        """Number for a scene inserted before this one (12 -> A12, Z12 -> AA12)."""
        return SceneNumber(self.base_number, self.suffix, _increment_letters(self.prefix))

    def _sort_key(self) -> tuple[Any, ...]:
        if self.prefix:
            return (self.base_number, 0, self.prefix)
        if not self.suffix:
            return (self.base_number, 1)
        return (self.base_number, 2, len(self.suffix), self.suffix)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, SceneNumber):
            return NotImplemented
        return self._sort_key() < other._sort_key()


def next_number_after(scene_number: str, existing_numbers: Iterable[str]) -> str:
    """Return the first free number for a scene inserted after ``scene_number``."""
    parsed = SceneNumber.parse(scene_number)
    if parsed is None:
        return scene_number + "A"
    taken = set(existing_numbers)
    candidate = parsed.next_after()
    while str(candidate) in taken:
        candidate = candidate.next_after()
    return str(candidate)


def next_number_before(scene_number: str, existing_numbers: Iterable[str]) -> str:
    """Return the first free number for a scene inserted before ``scene_number``."""
    parsed = SceneNumber.parse(scene_number)
    if parsed is None:
        return "A" + scene_number
    taken = set(existing_numbers)
    candidate = parsed.next_before()
    while str(candidate) in taken:
        candidate = candidate.next_before()
    return str(candidate)


def sorted_scene_numbers(numbers: Iterable[str]) -> list[str]:
    """Sort scene numbers in shooting order, dropping unparseable values."""
    parsed = [n for n in (SceneNumber.parse(value) for value in numbers) if n]
    return [str(n) for n in sorted(parsed)]
