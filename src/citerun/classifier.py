"""Citation classifier: keeps the segments that restate their reference unit."""
from __future__ import annotations

from collections.abc import Sequence

from citerun.citation_types import Citation, ReferenceUnit, Segment
from citerun.edit_distance import DistanceFn, levenshtein
from citerun.progress import ProgressCallback
from citerun.textmatch import HEBREW_ALPHABET, Alphabet, fuzzy_distance

DEFAULT_REFERENCE_THRESHOLD = 15


def classify(
    reference_unit: ReferenceUnit,
    segments: Sequence[Segment],
    threshold: int = DEFAULT_REFERENCE_THRESHOLD,
    *,
    alphabet: Alphabet = HEBREW_ALPHABET,
    distance: DistanceFn = levenshtein,
    progress: ProgressCallback | None = None,
) -> list[Citation]:
    """Return the segments whose fuzzy distance to the unit is <= threshold.

    Citations keep segment order and carry default run annotations; segments
    above the threshold are dropped. ``progress`` receives
    ``("segment", done, total)`` after each segment.
    """
    citations: list[Citation] = []
    total = len(segments)
    for done, segment in enumerate(segments, start=1):
        dist = fuzzy_distance(
            reference_unit.text, segment.text, alphabet=alphabet, distance=distance,
        )
        if dist <= threshold:
            citations.append(Citation(segment=segment, distance=dist))
        if progress is not None:
            progress("segment", done, total)
    return citations
