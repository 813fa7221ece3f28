"""Human-readable reports of scan results.

``render_text`` is a console report; ``render_html`` is an HTML fragment with
the class names the results page styles (``mishna-text``, ``talmud-text``,
``unlisted``, ``no-row``; ``no-row`` entries can be toggled off to show only
repeating citations).
"""
from __future__ import annotations

from collections.abc import Mapping
from html import escape

from citerun.citation_types import Citation, ReferenceUnit
from citerun.sources import UNKNOWN_HEBREW_NAME, hebrew_name


def _shorten(text: str, width: int) -> str:
    """Cut ``text`` to ``width`` chars at a word boundary."""
    if len(text) <= width:
        return text
    cut = text.rfind(" ", 0, width)
    return (text[:cut] if cut > 0 else text[:width]) + " ..."


def _title(name: str) -> str:
    heb = hebrew_name(name)
    return name if heb == UNKNOWN_HEBREW_NAME else f"{name} ({heb})"


# ---------------------------------------------------------------------------
# Plain text
# ---------------------------------------------------------------------------


def _citation_line(citation: Citation) -> str:
    if citation.in_middle_of_row:
        marker = "  |"
    elif citation.in_row > 1:
        marker = f"x{citation.in_row}"
    else:
        marker = "  -"
    lev = "" if citation.lev_from_next is None else f"  [next: {citation.lev_from_next}]"
    return f"    {marker} {citation.text}{lev}"


def render_unit_text(unit: ReferenceUnit, *, width: int = 120) -> str:
    lines = [f"  @{unit.start}: {_shorten(unit.text, width)}"]
    if not unit.citations:
        lines.append("    (no citations before the next unit)")
    lines.extend(_citation_line(c) for c in unit.citations)
    return "\n".join(lines)


def render_text(
    results: Mapping[str, list[ReferenceUnit]],
    *,
    width: int = 120,
) -> str:
    """Console report: one block per entry, one line per citation.

    ``xN`` starts a run of N citations, ``|`` continues it, ``-`` is a
    citation outside any run.
    """
    blocks: list[str] = []
    for name, units in results.items():
        run_count = sum(1 for u in units for c in u.citations if c.starts_row)
        header = f"{_title(name)}: {len(units)} units, {run_count} runs"
        body = [render_unit_text(u, width=width) for u in units]
        blocks.append("\n".join([header, *body]))
    return "\n\n".join(blocks) + "\n"


# ---------------------------------------------------------------------------
# HTML
# ---------------------------------------------------------------------------


def _citation_html(citation: Citation) -> str:
    text = escape(citation.text)
    if citation.in_middle_of_row:
        out = f'<li class="unlisted"><ul><li class="talmud-text">{text}'
    elif citation.in_row == 1:
        out = (
            '<li class="unlisted no-row">הציטטה הבאה מופיעה פעם אחת:'
            f'<ul><li class="talmud-text">{text}'
        )
    else:
        out = (
            f'<li class="unlisted">הציטטה הבאה מופיעה {citation.in_row} פעמים:'
            f'<ul><li class="talmud-text">{text}'
        )
    if citation.lev_from_next is not None:
        out += f' <span class="unlisted">(מרחק מהבא: {citation.lev_from_next})</span>'
    return out + "</li></ul></li>"


def render_unit_html(unit: ReferenceUnit) -> str:
    css = "mishna-text" if unit.has_row else "mishna-text no-row"
    parts = [f'<p class="{css}">{escape(unit.text)}</p><ul>']
    if unit.citations:
        parts.extend(_citation_html(c) for c in unit.citations)
    else:
        parts.append('<li class="unlisted no-row">אין ציטטות בין משנה זו למשנה הבאה</li>')
    parts.append("</ul>")
    return "".join(parts)


def render_html(results: Mapping[str, list[ReferenceUnit]]) -> str:
    """HTML fragment: a ``<section>`` per entry."""
    sections: list[str] = []
    for name, units in results.items():
        body = "".join(render_unit_html(u) for u in units)
        sections.append(
            f'<section class="tractate" data-name="{escape(name)}">'
            f"<h2>{escape(_title(name))}</h2>{body}</section>"
        )
    return "\n".join(sections) + "\n"
