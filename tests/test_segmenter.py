"""Tests for citerun.segmenter module."""
from citerun.citation_types import MarkerSet, Span
from citerun.segmenter import (
    delimiter_offsets,
    segment_gemara,
    segment_reference_units,
    segments_from_offsets,
)

LATIN = MarkerSet(opening=("MISHNA",), closing=("GEMARA",))

TWO_UNITS = (
    "MISHNA alpha beta GEMARA intro: one: two: three "
    "MISHNA gamma GEMARA x: y: z"
)

HEBREW_DOC = (
    "מתני׳ השור שנגח את הפרה גמ׳ פתיחה: השור שנגח את הפרה: השור שנגח את הפרה: סוף "
    "מתני׳ המוכר את הבית גמ׳ אמר רבא: המוכר את הבית: ועוד"
)


class TestReferenceUnits:
    def test_two_units(self) -> None:
        units = segment_reference_units(TWO_UNITS, LATIN)
        assert [u.text for u in units] == ["alpha beta", "gamma"]
        assert units[0].span == Span(7, 17)
        assert units[0].text == TWO_UNITS[units[0].start:units[0].end]

    def test_tail_stops_at_next_opening_marker(self) -> None:
        units = segment_reference_units(TWO_UNITS, LATIN)
        second_marker = TWO_UNITS.index("MISHNA", 1)
        assert units[0].tail == Span(units[0].end, second_marker)
        assert units[1].tail == Span(units[1].end, len(TWO_UNITS))

    def test_units_do_not_overlap(self) -> None:
        units = segment_reference_units(TWO_UNITS, LATIN)
        assert units[0].tail.end <= units[1].start

    def test_hebrew_default_markers(self) -> None:
        units = segment_reference_units(HEBREW_DOC)
        assert [u.text for u in units] == ["השור שנגח את הפרה", "המוכר את הבית"]

    def test_chapter_end_closes_unit(self) -> None:
        doc = "מתני׳ טקסט המשנה הדרן עלך פרק ראשון: ועוד"
        units = segment_reference_units(doc)
        assert [u.text for u in units] == ["טקסט המשנה"]

    def test_quoted_opening_marker_ignored(self) -> None:
        doc = "MISHNA alpha MISHNA beta GEMARA a: b: c"
        units = segment_reference_units(doc, LATIN)
        assert len(units) == 1
        assert units[0].text == "alpha MISHNA beta"
        assert units[0].tail == Span(units[0].end, len(doc))

    def test_leading_text_is_a_unit(self) -> None:
        doc = "preface GEMARA a: b: MISHNA alpha GEMARA x: y: z"
        units = segment_reference_units(doc, LATIN)
        assert [u.text for u in units] == ["preface", "alpha"]
        assert units[0].tail == Span(7, doc.index("MISHNA"))

    def test_leading_text_skipped_without_implicit_unit(self) -> None:
        doc = "preface GEMARA a: b: MISHNA alpha GEMARA x: y: z"
        units = segment_reference_units(doc, LATIN, implicit_leading_unit=False)
        assert [u.text for u in units] == ["alpha"]

    def test_markerless_document_is_one_unit(self) -> None:
        doc = "alpha: beta: gamma"
        units = segment_reference_units(doc, LATIN)
        assert len(units) == 1
        assert units[0].text == doc
        assert units[0].tail == Span(len(doc), len(doc))

    def test_markerless_document_without_implicit_unit(self) -> None:
        assert segment_reference_units("alpha: beta", LATIN, implicit_leading_unit=False) == []

    def test_empty_document(self) -> None:
        assert segment_reference_units("", LATIN) == []
        assert segment_reference_units("   ", LATIN) == []

    def test_empty_unit_dropped(self) -> None:
        doc = "MISHNA GEMARA a: b: MISHNA alpha GEMARA x"
        units = segment_reference_units(doc, LATIN)
        assert [u.text for u in units] == ["alpha"]


class TestSegments:
    def test_delimiter_offsets(self) -> None:
        doc = "aaaaa:bbbbbb:ccccccc:dd"
        assert delimiter_offsets(doc, 0, len(doc)) == [5, 12, 20]

    def test_delimiter_offsets_range(self) -> None:
        doc = "aaaaa:bbbbbb:ccccccc:dd"
        assert delimiter_offsets(doc, 6, 20) == [12]
        assert delimiter_offsets(doc, 0, 5) == []

    def test_n_delimiters_give_n_minus_one_segments(self) -> None:
        doc = "aaaaa:bbbbbb:ccccccc:dd"
        segments = segments_from_offsets(doc, [5, 12, 20])
        assert [s.span for s in segments] == [Span(6, 12), Span(13, 20)]
        assert [s.text for s in segments] == ["bbbbbb", "ccccccc"]

    def test_space_after_delimiter_skipped(self) -> None:
        doc = "a: bb: cc:"
        segments = segment_gemara(doc, 0, len(doc))
        assert [s.span for s in segments] == [Span(3, 5), Span(7, 9)]
        assert [s.text for s in segments] == ["bb", "cc"]

    def test_adjacent_delimiters(self) -> None:
        segments = segment_gemara("a::b", 0, 4)
        assert len(segments) == 1
        assert segments[0].text == ""

    def test_fewer_than_two_delimiters(self) -> None:
        assert segment_gemara("no delimiters", 0, 13) == []
        assert segment_gemara("one: only", 0, 9) == []

    def test_custom_delimiter(self) -> None:
        doc = "x. one. two."
        assert [s.text for s in segment_gemara(doc, 0, len(doc), ".")] == ["one", "two"]

    def test_unit_tails(self) -> None:
        units = segment_reference_units(TWO_UNITS, LATIN)
        first = segment_gemara(TWO_UNITS, units[0].tail.start, units[0].tail.end)
        second = segment_gemara(TWO_UNITS, units[1].tail.start, units[1].tail.end)
        assert [s.text for s in first] == ["one", "two"]
        assert [s.text for s in second] == ["y"]
        for seg in first + second:
            assert TWO_UNITS[seg.start:seg.end] == seg.text

    def test_hebrew_tail(self) -> None:
        units = segment_reference_units(HEBREW_DOC)
        segments = segment_gemara(HEBREW_DOC, units[0].tail.start, units[0].tail.end)
        assert [s.text for s in segments] == ["השור שנגח את הפרה", "השור שנגח את הפרה"]
