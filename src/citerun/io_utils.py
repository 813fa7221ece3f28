"""JSON I/O and result payloads.

orjson-backed file I/O plus conversion of scan results into JSON-safe
dicts. JSON has no infinity, so a missing successor distance is written as
the documented out-of-band value ``NO_SUCCESSOR``.
"""
from __future__ import annotations

import sys
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import orjson

from citerun.citation_types import Citation, ReferenceUnit, Segment, Span

NO_SUCCESSOR = 9999

_PRETTY = orjson.OPT_INDENT_2 | orjson.OPT_SORT_KEYS


def load_json(path: Path) -> Any:
    """Load JSON from a file."""
    return orjson.loads(path.read_bytes())


def save_json(obj: Any, path: Path, *, pretty: bool = True) -> None:
    """Save an object as JSON, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    opts = _PRETTY if pretty else orjson.OPT_SORT_KEYS
    path.write_bytes(orjson.dumps(obj, option=opts))


def dump_json(obj: Any) -> None:
    """Write pretty JSON to stdout."""
    sys.stdout.buffer.write(orjson.dumps(obj, option=orjson.OPT_INDENT_2))
    sys.stdout.buffer.write(b"\n")


# ---------------------------------------------------------------------------
# Result payloads
# ---------------------------------------------------------------------------


def citation_to_dict(citation: Citation) -> dict[str, Any]:
    lev = citation.lev_from_next
    return {
        "start": citation.start,
        "end": citation.end,
        "text": citation.text,
        "distance": citation.distance,
        "is_part_of_row": citation.is_part_of_row,
        "in_row": citation.in_row,
        "in_middle_of_row": citation.in_middle_of_row,
        "lev_from_next": NO_SUCCESSOR if lev is None else lev,
    }


def unit_to_dict(unit: ReferenceUnit) -> dict[str, Any]:
    return {
        "start": unit.start,
        "end": unit.end,
        "text": unit.text,
        "tail_start": unit.tail.start,
        "tail_end": unit.tail.end,
        "citations": [citation_to_dict(c) for c in unit.citations],
    }


def units_to_payload(units: list[ReferenceUnit]) -> list[dict[str, Any]]:
    return [unit_to_dict(u) for u in units]


def results_to_payload(
    results: Mapping[str, list[ReferenceUnit]],
) -> dict[str, list[dict[str, Any]]]:
    """Payload for a corpus scan: entry name -> unit payloads."""
    return {name: units_to_payload(units) for name, units in results.items()}


def citation_from_dict(data: Mapping[str, Any]) -> Citation:
    lev = int(data["lev_from_next"])
    return Citation(
        segment=Segment(span=Span(int(data["start"]), int(data["end"])), text=str(data["text"])),
        distance=int(data.get("distance", 0)),
        is_part_of_row=bool(data["is_part_of_row"]),
        in_row=int(data["in_row"]),
        in_middle_of_row=bool(data["in_middle_of_row"]),
        lev_from_next=None if lev == NO_SUCCESSOR else lev,
    )


def unit_from_dict(data: Mapping[str, Any]) -> ReferenceUnit:
    end = int(data["end"])
    return ReferenceUnit(
        span=Span(int(data["start"]), end),
        text=str(data["text"]),
        tail=Span(int(data.get("tail_start", end)), int(data.get("tail_end", end))),
        citations=[citation_from_dict(c) for c in data.get("citations", [])],
    )


def load_results(path: Path) -> dict[str, list[ReferenceUnit]]:
    """Read back a results file written by :func:`save_json`."""
    data = load_json(path)
    if not isinstance(data, dict):
        raise ValueError(f"Invalid results payload in {path}")
    return {
        str(name): [unit_from_dict(u) for u in units]
        for name, units in data.items()
    }
