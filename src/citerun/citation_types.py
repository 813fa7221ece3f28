"""Core types for citation scanning.

All span coordinates are global char offsets into the normalized document
text (never unit-relative).

Type hierarchy:
  Span          -- half-open [start, end) offset pair
  MarkerSet     -- opening/closing/delimiter vocabulary of a corpus
  Segment       -- delimiter-bounded block following a reference unit
  Citation      -- Segment that passed the reference threshold, plus run
                   annotations
  ReferenceUnit -- anchor passage with its tail span and citations
"""
from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class Span:
    """Half-open ``[start, end)`` range of char offsets."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0:
            raise ValueError(f"start must be >= 0, got {self.start}")
        if self.end < self.start:
            raise ValueError(
                f"end must be >= start, got {self.end} < {self.start}",
            )

    def __len__(self) -> int:
        return self.end - self.start

    def slice(self, text: str) -> str:
        return text[self.start:self.end]


@dataclass(frozen=True, slots=True)
class MarkerSet:
    """Marker tokens that structure a corpus section.

    ``opening`` tokens start a reference unit, ``closing`` tokens end one
    (the gemara marker, or the chapter-end formula), ``delimiter`` bounds
    segments in the text that follows.
    """

    opening: tuple[str, ...] = ("מתני׳",)
    closing: tuple[str, ...] = ("גמ׳", "הדרן עלך")
    delimiter: str = ":"

    def __post_init__(self) -> None:
        if not self.opening or any(not tok for tok in self.opening):
            raise ValueError("opening markers must be non-empty strings")
        if not self.closing or any(not tok for tok in self.closing):
            raise ValueError("closing markers must be non-empty strings")
        if len(self.delimiter) != 1:
            raise ValueError(
                f"delimiter must be a single character, got {self.delimiter!r}",
            )


DEFAULT_MARKERS = MarkerSet()


@dataclass(frozen=True, slots=True)
class Segment:
    """One delimiter-bounded block of text (a "gemara" block)."""

    span: Span
    text: str

    @property
    def start(self) -> int:
        return self.span.start

    @property
    def end(self) -> int:
        return self.span.end


@dataclass(slots=True)
class Citation:
    """A segment within threshold of its reference unit.

    Only the annotation fields are mutated after construction, and only by
    :func:`citerun.runs.group_runs`.
    """

    segment: Segment
    distance: int
    is_part_of_row: bool = False
    in_row: int = 1               # meaningful on the first member of a run
    in_middle_of_row: bool = False
    lev_from_next: int | None = None  # None: no successor

    @property
    def start(self) -> int:
        return self.segment.start

    @property
    def end(self) -> int:
        return self.segment.end

    @property
    def text(self) -> str:
        return self.segment.text

    @property
    def starts_row(self) -> bool:
        """True for the first member of a run."""
        return self.is_part_of_row and not self.in_middle_of_row


@dataclass(slots=True)
class ReferenceUnit:
    """An anchor passage (a "mishna") and the citations found after it.

    ``tail`` is the region searched for segments: from the unit's end up to
    the opening marker of the next unit, or document end.
    """

    span: Span
    text: str
    tail: Span
    citations: list[Citation] = field(default_factory=list[Citation])

    @property
    def start(self) -> int:
        return self.span.start

    @property
    def end(self) -> int:
        return self.span.end

    @property
    def has_row(self) -> bool:
        return any(c.is_part_of_row for c in self.citations)
