"""Levenshtein edit distance between two text buffers.

Two interchangeable backends return identical values:
- ``"python"`` -- the dynamic-programming engine in this module.
- ``"rapidfuzz"`` -- ``rapidfuzz.distance.Levenshtein.distance`` (C speed),
  used for full-corpus scans where the sliding-window matcher calls the
  distance function hundreds of times per segment.
"""
from __future__ import annotations

from collections.abc import Callable

from rapidfuzz.distance import Levenshtein

type DistanceFn = Callable[[str, str], int]


def levenshtein(a: str, b: str) -> int:
    """Minimum number of single-char insertions, deletions and substitutions.

    A shared suffix and prefix are trimmed before the table fill. After
    trimming, the first and last characters of both remainders differ, so a
    longer remainder of fewer than 3 characters is its own distance.
    """
    if a == b:
        return 0

    # Keep the shorter string as the inner loop
    if len(a) > len(b):
        a, b = b, a

    la = len(a)
    lb = len(b)
    while la > 0 and a[la - 1] == b[lb - 1]:
        la -= 1
        lb -= 1

    offset = 0
    while offset < la and a[offset] == b[offset]:
        offset += 1

    la -= offset
    lb -= offset
    if la == 0 or lb < 3:
        return lb

    a = a[offset:offset + la]
    b = b[offset:offset + lb]

    previous = list(range(la + 1))
    for j, cb in enumerate(b, start=1):
        current = [j]
        for i, ca in enumerate(a, start=1):
            current.append(min(
                previous[i] + 1,           # deletion
                current[i - 1] + 1,        # insertion
                previous[i - 1] + (ca != cb),
            ))
        previous = current
    return previous[la]


def _rapidfuzz_distance(a: str, b: str) -> int:
    return int(Levenshtein.distance(a, b))


DISTANCE_BACKENDS: dict[str, DistanceFn] = {
    "python": levenshtein,
    "rapidfuzz": _rapidfuzz_distance,
}


def get_distance_fn(name: str) -> DistanceFn:
    """Return the distance function registered under ``name``."""
    try:
        return DISTANCE_BACKENDS[name]
    except KeyError:
        known = ", ".join(sorted(DISTANCE_BACKENDS))
        raise ValueError(
            f"Unknown distance backend {name!r} (expected one of: {known})"
        ) from None
