"""Scan configuration.

Every tunable of a scan lives in one frozen dataclass. Adding a knob means
adding a field here, not threading another argument through the pipeline.
Config files are JSON objects whose keys are the field names; ``markers`` is
a nested object with ``opening`` / ``closing`` lists and a ``delimiter``.
"""
from __future__ import annotations

from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

import orjson

from citerun.citation_types import DEFAULT_MARKERS, MarkerSet
from citerun.classifier import DEFAULT_REFERENCE_THRESHOLD
from citerun.edit_distance import DistanceFn, get_distance_fn
from citerun.runs import DEFAULT_RUN_THRESHOLD
from citerun.textmatch import Alphabet, get_alphabet


_INT_FIELDS = ("reference_threshold", "run_threshold")
_BOOL_FIELDS = ("include_non_repeating", "include_empty_units", "implicit_leading_unit")
_STR_FIELDS = ("distance_backend", "alphabet")


def _marker_tokens(raw: dict[str, Any], key: str, default: tuple[str, ...]) -> tuple[str, ...]:
    if key not in raw:
        return default
    value = raw[key]
    if not isinstance(value, list) or not all(isinstance(tok, str) for tok in value):
        raise ValueError(f"markers.{key} must be a list of strings, got {value!r}")
    return tuple(value)


@dataclass(frozen=True, slots=True)
class ScanConfig:
    """Thresholds, output filters and text conventions for a scan."""

    reference_threshold: int = DEFAULT_REFERENCE_THRESHOLD
    run_threshold: int = DEFAULT_RUN_THRESHOLD
    include_non_repeating: bool = False
    include_empty_units: bool = False
    implicit_leading_unit: bool = True
    distance_backend: str = "rapidfuzz"
    alphabet: str = "hebrew"
    markers: MarkerSet = DEFAULT_MARKERS

    def __post_init__(self) -> None:
        for name in _INT_FIELDS:
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool):
                raise ValueError(f"{name} must be an integer, got {value!r}")
        for name in _BOOL_FIELDS:
            value = getattr(self, name)
            if not isinstance(value, bool):
                raise ValueError(f"{name} must be true or false, got {value!r}")
        for name in _STR_FIELDS:
            value = getattr(self, name)
            if not isinstance(value, str):
                raise ValueError(f"{name} must be a string, got {value!r}")
        if not isinstance(self.markers, MarkerSet):
            raise ValueError(f"markers must be a MarkerSet, got {self.markers!r}")
        if self.reference_threshold < 0:
            raise ValueError(
                f"reference_threshold must be >= 0, got {self.reference_threshold}",
            )
        if self.run_threshold < 0:
            raise ValueError(f"run_threshold must be >= 0, got {self.run_threshold}")
        # Fail fast on unknown names
        get_distance_fn(self.distance_backend)
        get_alphabet(self.alphabet)

    @property
    def distance_fn(self) -> DistanceFn:
        return get_distance_fn(self.distance_backend)

    @property
    def alphabet_set(self) -> Alphabet:
        return get_alphabet(self.alphabet)

    def with_overrides(self, **overrides: Any) -> ScanConfig:
        """Copy with the non-None ``overrides`` applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {f.name: getattr(self, f.name) for f in fields(self)}
        out["markers"] = {
            "opening": list(self.markers.opening),
            "closing": list(self.markers.closing),
            "delimiter": self.markers.delimiter,
        }
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ScanConfig:
        """Build from a plain dict, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(unknown)}")
        kwargs = dict(data)
        raw_markers = kwargs.pop("markers", None)
        if raw_markers is not None:
            if not isinstance(raw_markers, dict):
                raise ValueError("markers must be an object")
            unknown_markers = sorted(set(raw_markers) - {"opening", "closing", "delimiter"})
            if unknown_markers:
                raise ValueError(f"Unknown marker keys: {', '.join(unknown_markers)}")
            delimiter = raw_markers.get("delimiter", DEFAULT_MARKERS.delimiter)
            if not isinstance(delimiter, str):
                raise ValueError(f"markers.delimiter must be a string, got {delimiter!r}")
            kwargs["markers"] = MarkerSet(
                opening=_marker_tokens(raw_markers, "opening", DEFAULT_MARKERS.opening),
                closing=_marker_tokens(raw_markers, "closing", DEFAULT_MARKERS.closing),
                delimiter=delimiter,
            )
        return cls(**kwargs)

    @classmethod
    def from_json(cls, path: Path) -> ScanConfig:
        """Load from a JSON config file."""
        data = orjson.loads(path.read_bytes())
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a JSON object")
        return cls.from_dict(data)
