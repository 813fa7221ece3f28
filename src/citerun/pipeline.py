"""Shared scanning pipeline for the CLI and library callers.

Per document: segmenter -> (per reference unit) classifier -> run grouper ->
output filter. :func:`scan_document` operates on an already-normalized text
buffer; :func:`scan_corpus` fetches named entries from a
:class:`~citerun.sources.DocumentSource` and scans each one, optionally in a
process pool since documents share no state.
"""
from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from multiprocessing import Pool

from citerun.citation_types import ReferenceUnit
from citerun.classifier import classify
from citerun.config import ScanConfig
from citerun.progress import ProgressCallback
from citerun.runs import group_runs, run_members
from citerun.segmenter import segment_gemara, segment_reference_units
from citerun.sources import AcquisitionError, DocumentSource

log = logging.getLogger("citerun.pipeline")


@dataclass(slots=True)
class CorpusScanResult:
    """Per-entry results of a corpus scan plus the entries that failed."""

    results: dict[str, list[ReferenceUnit]] = field(default_factory=dict[str, list[ReferenceUnit]])
    errors: dict[str, str] = field(default_factory=dict[str, str])

    @property
    def ok(self) -> bool:
        return not self.errors


def find_citations(
    text: str,
    config: ScanConfig | None = None,
    *,
    progress: ProgressCallback | None = None,
) -> list[ReferenceUnit]:
    """Segment ``text`` and annotate every unit's citations (no filtering)."""
    cfg = config or ScanConfig()
    alphabet = cfg.alphabet_set
    distance = cfg.distance_fn

    units = segment_reference_units(
        text, cfg.markers, implicit_leading_unit=cfg.implicit_leading_unit,
    )
    for done, unit in enumerate(units, start=1):
        segments = segment_gemara(
            text, unit.tail.start, unit.tail.end, cfg.markers.delimiter,
        )
        unit.citations = classify(
            unit, segments, cfg.reference_threshold,
            alphabet=alphabet, distance=distance, progress=progress,
        )
        if progress is not None:
            progress("unit", done, len(units))

    for unit in units:
        group_runs(
            unit.citations, cfg.run_threshold, alphabet=alphabet, distance=distance,
        )
    return units


def filter_units(units: list[ReferenceUnit], config: ScanConfig) -> list[ReferenceUnit]:
    """Apply the output filters of ``config``.

    Without ``include_non_repeating`` only run members are kept; without
    ``include_empty_units`` units left with no citations are dropped.
    """
    kept: list[ReferenceUnit] = []
    for unit in units:
        if not config.include_non_repeating:
            unit.citations = run_members(unit.citations)
        if unit.citations or config.include_empty_units:
            kept.append(unit)
    return kept


def scan_document(
    text: str,
    config: ScanConfig | None = None,
    *,
    progress: ProgressCallback | None = None,
) -> list[ReferenceUnit]:
    """Find repeating citations in one normalized document."""
    cfg = config or ScanConfig()
    units = find_citations(text, cfg, progress=progress)
    kept = filter_units(units, cfg)
    log.debug(
        "Scanned %d chars: %d units, %d kept", len(text), len(units), len(kept),
    )
    return kept


def _scan_worker(payload: tuple[str, str, ScanConfig]) -> tuple[str, list[ReferenceUnit]]:
    name, text, config = payload
    return name, scan_document(text, config)


def scan_corpus(
    source: DocumentSource,
    names: Sequence[str] | None = None,
    config: ScanConfig | None = None,
    *,
    progress: ProgressCallback | None = None,
    workers: int = 1,
) -> CorpusScanResult:
    """Scan named entries of ``source`` (all entries when ``names`` is None).

    Acquisition failures are recorded per entry and do not stop the scan.
    Results keep the order of ``names``. With ``workers > 1`` documents are
    scanned in a process pool and only ``"document"`` progress is reported.
    """
    cfg = config or ScanConfig()
    entries = list(names) if names is not None else source.list_documents()
    outcome = CorpusScanResult()

    texts: list[tuple[str, str]] = []
    for name in entries:
        try:
            texts.append((name, source.fetch_document(name)))
        except AcquisitionError as exc:
            log.error("Failed to acquire %s: %s", name, exc)
            outcome.errors[name] = str(exc)

    total = len(entries)
    done = len(outcome.errors)
    if workers > 1 and len(texts) > 1:
        log.info("Scanning %d documents with %d workers", len(texts), workers)
        scanned: dict[str, list[ReferenceUnit]] = {}
        payloads = [(name, text, cfg) for name, text in texts]
        with Pool(processes=workers) as pool:
            for name, units in pool.imap_unordered(_scan_worker, payloads):
                scanned[name] = units
                done += 1
                if progress is not None:
                    progress("document", done, total)
    else:
        scanned = {}
        for name, text in texts:
            log.info("Scanning %s (%d chars)", name, len(text))
            scanned[name] = scan_document(text, cfg, progress=progress)
            done += 1
            if progress is not None:
                progress("document", done, total)

    for name in entries:
        if name in scanned:
            outcome.results[name] = scanned[name]
    return outcome
