"""Normalization of Sefaria tractate markup into a clean scanning buffer.

The Sefaria export is inconsistently formatted: gemara markers sometimes
lack the delimiter that closes the preceding block, chapter-end formulas
(``הדרן עלך ...``) are not terminated, and the geresh in the marker
abbreviations (``מתני׳`` / ``גמ׳``) is mixed up with a plain apostrophe. The
scanner relies on the geresh form appearing *only* in structural markers
and on every block ending with a delimiter, so these are repaired while the
markup (which tells markers apart from quotes) is still available.

Pipeline:
    1. Markup-aware repairs (missing delimiters, marker apostrophes).
    2. Tag stripping with BeautifulSoup (inline tags do not split words).
    3. Whitespace collapse and trim.
"""
from __future__ import annotations

import re

from bs4 import BeautifulSoup

GERESH = "׳"

# (pattern, replacement) applied in order on the raw markup
_MARKUP_REPAIRS: tuple[tuple[re.Pattern[str], str], ...] = (
    # Missing delimiter before a bold gemara marker
    (re.compile(r"([^:])( <big><strong>גמ)"), r"\1: \2"),
    # Unterminated chapter-end formula
    (re.compile(r"(הדרן עלך[^:]+?)<"), r"\1:<"),
    # Geresh outside bold markers is a quote, not a marker
    (re.compile(rf"(?<!<strong>)מתני{GERESH}"), "מתני'"),
    (re.compile(rf"(?<!<strong>)גמ{GERESH}"), "גמ'"),
    # Bold markers always carry the geresh
    (re.compile(r"(?<=<strong>)מתני'"), f"מתני{GERESH}"),
    (re.compile(r"(?<=<strong>)גמ'"), f"גמ{GERESH}"),
    (re.compile(r"מתני'(?=\s+<)"), f"מתני{GERESH}"),
    # Gemara marker right after a delimiter, with no apostrophe at all
    (re.compile(r"(: גמ) "), rf"\1{GERESH} "),
)

_WHITESPACE_RE = re.compile(r"\s+")


def repair_markup(markup: str) -> str:
    """Apply the markup-aware delimiter and apostrophe repairs."""
    for pattern, replacement in _MARKUP_REPAIRS:
        markup = pattern.sub(replacement, markup)
    return markup


def strip_markup(markup: str) -> str:
    """Drop tags, keeping the text of inline elements contiguous."""
    if not markup:
        return ""
    soup = BeautifulSoup(markup, "html.parser")
    return soup.get_text()


def collapse_whitespace(text: str) -> str:
    """Turn tabs/newlines into spaces, collapse runs, trim the ends."""
    return _WHITESPACE_RE.sub(" ", text).strip()


def normalize_talmud_text(markup: str) -> str:
    """Full normalization of a joined Sefaria tractate."""
    if not markup:
        return ""
    return collapse_whitespace(strip_markup(repair_markup(markup)))
