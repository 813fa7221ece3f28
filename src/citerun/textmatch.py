"""Alphabet filtering and fuzzy substring matching.

Pure text operations with zero domain dependencies. All distances are
computed over the *stripped* form of a text (characters outside the
alphabet removed); callers keep the original text for display.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field

from citerun.edit_distance import DistanceFn, levenshtein

# Below this similarity the best window is no better than chance alignment
_MIN_WINDOW_SIMILARITY = 0.5


@dataclass(frozen=True, slots=True)
class Alphabet:
    """Allow-list of characters that take part in distance computation."""

    chars: frozenset[str]
    _strip_re: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.chars:
            raise ValueError("Alphabet must contain at least one character")
        if any(len(ch) != 1 for ch in self.chars):
            raise ValueError("Alphabet entries must be single characters")
        allowed = "".join(re.escape(ch) for ch in sorted(self.chars))
        object.__setattr__(self, "_strip_re", re.compile(f"[^{allowed}]"))

    @classmethod
    def from_ranges(
        cls, *ranges: tuple[str, str], extra: str = "",
    ) -> Alphabet:
        """Build an alphabet from inclusive ``(first, last)`` char ranges."""
        chars = set(extra)
        for first, last in ranges:
            if ord(first) > ord(last):
                raise ValueError(f"Empty character range {first!r}-{last!r}")
            chars.update(chr(cp) for cp in range(ord(first), ord(last) + 1))
        return cls(frozenset(chars))

    def strip(self, text: str) -> str:
        """Drop every character outside the alphabet."""
        return self._strip_re.sub("", text)

    def __contains__(self, ch: object) -> bool:
        return ch in self.chars


# Hebrew letters alef..tav (final forms included) plus space
HEBREW_ALPHABET = Alphabet.from_ranges(("א", "ת"), extra=" ")
LATIN_ALPHABET = Alphabet.from_ranges(("A", "Z"), ("a", "z"), extra=" ")

ALPHABETS: dict[str, Alphabet] = {
    "hebrew": HEBREW_ALPHABET,
    "latin": LATIN_ALPHABET,
}


def get_alphabet(name: str) -> Alphabet:
    """Return the alphabet preset registered under ``name``."""
    try:
        return ALPHABETS[name]
    except KeyError:
        known = ", ".join(sorted(ALPHABETS))
        raise ValueError(
            f"Unknown alphabet {name!r} (expected one of: {known})"
        ) from None


def best_window(
    text: str,
    candidate: str,
    *,
    distance: DistanceFn = levenshtein,
) -> tuple[int, int]:
    """Find the ``len(candidate)`` window of ``text`` closest to ``candidate``.

    Both inputs are used as given (no alphabet filtering). Ties go to the
    lowest offset.

    Returns:
        (offset, distance) of the best window. Raises ValueError when the
        candidate is longer than the text.
    """
    width = len(candidate)
    if width > len(text):
        raise ValueError("candidate is longer than text")
    best_offset = 0
    best_dist = -1
    for i in range(len(text) - width + 1):
        dist = distance(text[i:i + width], candidate)
        if best_dist < 0 or dist < best_dist:
            best_offset = i
            best_dist = dist
            if dist == 0:
                break
    return best_offset, best_dist


def fuzzy_distance(
    text: str,
    candidate: str,
    *,
    alphabet: Alphabet = HEBREW_ALPHABET,
    distance: DistanceFn = levenshtein,
) -> int:
    """Estimate how well ``candidate`` matches some window of ``text``.

    Algorithm:
    1. Strip both inputs to the alphabet.
    2. A candidate longer than the text cannot be a substring: return the
       whole-text distance.
    3. Slide a candidate-sized window over the text and keep the closest.
    4. If the best window is still at most half similar, the alignment is
       considered accidental (short candidates fit almost anywhere) and the
       whole-text distance is returned instead.

    An empty stripped candidate has no similarity ratio and always takes the
    whole-text path.
    """
    text = alphabet.strip(text)
    candidate = alphabet.strip(candidate)

    if len(candidate) > len(text) or not candidate:
        return distance(text, candidate)

    _, dist = best_window(text, candidate, distance=distance)

    similarity_ratio = 1 - dist / len(candidate)
    if similarity_ratio <= _MIN_WINDOW_SIMILARITY:
        return distance(text, candidate)
    return dist
