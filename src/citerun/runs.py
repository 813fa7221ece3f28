"""Run grouper: chains consecutive near-duplicate citations.

The chain is greedy and order-sensitive. Citation ``i`` is compared with
``i+1, i+2, ...`` until the first pair at or above the threshold; citations
after that point are never compared with ``i``, even if they would match.
This is not transitive clustering, and ``in_row`` / ``lev_from_next`` keep
these chain semantics.
"""
from __future__ import annotations

from collections.abc import Sequence

from citerun.citation_types import Citation
from citerun.edit_distance import DistanceFn, levenshtein
from citerun.textmatch import HEBREW_ALPHABET, Alphabet

DEFAULT_RUN_THRESHOLD = 5


def group_runs(
    citations: Sequence[Citation],
    threshold: int = DEFAULT_RUN_THRESHOLD,
    *,
    alphabet: Alphabet = HEBREW_ALPHABET,
    distance: DistanceFn = levenshtein,
) -> None:
    """Annotate ``citations`` (one reference unit, document order) in place."""
    stripped = [alphabet.strip(c.text) for c in citations]
    for i, current in enumerate(citations):
        for j in range(i + 1, len(citations)):
            dist = distance(stripped[i], stripped[j])
            if j == i + 1:
                current.lev_from_next = dist
            if dist < threshold:
                current.in_row += 1
                current.is_part_of_row = True
                citations[j].is_part_of_row = True
                citations[j].in_middle_of_row = True
            else:
                break


def run_members(citations: Sequence[Citation]) -> list[Citation]:
    """Citations that belong to a run of two or more."""
    return [c for c in citations if c.is_part_of_row]
