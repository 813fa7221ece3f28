"""Segmenter for tractate text.

Splits a normalized document into reference units (mishnayot) and the
delimiter-bounded segments of the gemara that follows each one.

2-phase approach:
    1. Find reference units: a unit starts at the document start or after an
       opening marker and runs until the first closing marker. Scanning for
       the next opening marker resumes at the unit's end, so markers quoted
       inside a unit never start a new one.
    2. Within each unit's tail, cut segments between consecutive delimiters.
       The text after the last delimiter is not a complete segment.

Standalone module -- pure computation over in-memory text.
"""
from __future__ import annotations

from citerun.citation_types import DEFAULT_MARKERS, MarkerSet, ReferenceUnit, Segment, Span


# ---------------------------------------------------------------------------
# Marker search helpers
# ---------------------------------------------------------------------------


def _find_first(doc: str, tokens: tuple[str, ...], start: int) -> tuple[int, str] | None:
    """Earliest occurrence of any token at or after ``start``.

    On equal positions the longer token wins.
    """
    best: tuple[int, str] | None = None
    for token in tokens:
        pos = doc.find(token, start)
        if pos < 0:
            continue
        if best is None or pos < best[0] or (pos == best[0] and len(token) > len(best[1])):
            best = (pos, token)
    return best


def _skip_whitespace(doc: str, pos: int) -> int:
    while pos < len(doc) and doc[pos].isspace():
        pos += 1
    return pos


def _trim_end(doc: str, start: int, end: int) -> int:
    while end > start and doc[end - 1].isspace():
        end -= 1
    return end


# ---------------------------------------------------------------------------
# Reference units
# ---------------------------------------------------------------------------


def segment_reference_units(
    doc: str,
    markers: MarkerSet = DEFAULT_MARKERS,
    *,
    implicit_leading_unit: bool = True,
) -> list[ReferenceUnit]:
    """Split ``doc`` into reference units, in document order.

    Args:
        doc: Normalized document text.
        markers: Marker vocabulary.
        implicit_leading_unit: Treat the document start as a unit boundary
            even without an opening marker. With this set, a document that
            contains no opening marker yields exactly one unit (covering the
            whole trimmed text, with an empty tail); without it such a
            document yields none.

    Returns:
        Non-overlapping units. Each unit's ``tail`` ends where the opening
        marker of the next unit begins (or at document end).
    """
    # (marker_pos, body_start) for each unit, marker_pos being where the
    # previous unit's tail stops
    starts: list[tuple[int, int]] = []
    bounds: list[tuple[int, int]] = []

    first = _skip_whitespace(doc, 0)
    leading = _find_first(doc, markers.opening, first)
    cursor: int | None
    if leading is not None and leading[0] == first:
        cursor = first
    elif implicit_leading_unit and first < len(doc):
        cursor = None
        starts.append((first, first))
    else:
        cursor = first

    while True:
        if cursor is not None:
            found = _find_first(doc, markers.opening, cursor)
            if found is None:
                break
            marker_pos, token = found
            starts.append((marker_pos, _skip_whitespace(doc, marker_pos + len(token))))

        body_start = starts[-1][1]
        closing = _find_first(doc, markers.closing, body_start)
        body_end = closing[0] if closing is not None else len(doc)
        bounds.append((body_start, _trim_end(doc, body_start, body_end)))
        cursor = body_end
        if cursor >= len(doc):
            break

    units: list[ReferenceUnit] = []
    for idx, (body_start, body_end) in enumerate(bounds):
        if body_end <= body_start:
            continue
        tail_end = starts[idx + 1][0] if idx + 1 < len(starts) else len(doc)
        units.append(ReferenceUnit(
            span=Span(body_start, body_end),
            text=doc[body_start:body_end],
            tail=Span(body_end, max(body_end, tail_end)),
        ))
    return units


# ---------------------------------------------------------------------------
# Segments
# ---------------------------------------------------------------------------


def delimiter_offsets(doc: str, start: int, end: int, delimiter: str = ":") -> list[int]:
    """Offsets of every ``delimiter`` occurrence within ``[start, end)``."""
    offsets: list[int] = []
    pos = doc.find(delimiter, start, end)
    while pos >= 0:
        offsets.append(pos)
        pos = doc.find(delimiter, pos + 1, end)
    return offsets


def segments_from_offsets(doc: str, offsets: list[int]) -> list[Segment]:
    """Cut one segment between each pair of consecutive delimiter offsets.

    The segment opens after the delimiter and one following space, and
    closes just before the next delimiter. N offsets yield N-1 segments.
    """
    segments: list[Segment] = []
    for left, right in zip(offsets, offsets[1:]):
        seg_start = left + 1
        if seg_start < right and doc[seg_start] == " ":
            seg_start += 1
        segments.append(Segment(span=Span(seg_start, right), text=doc[seg_start:right]))
    return segments


def segment_gemara(doc: str, start: int, end: int, delimiter: str = ":") -> list[Segment]:
    """Split ``doc[start:end]`` into delimiter-bounded segments."""
    return segments_from_offsets(doc, delimiter_offsets(doc, start, end, delimiter))
