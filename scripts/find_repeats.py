#!/usr/bin/env python3
"""Find runs of repeated mishna citations in Talmud tractates.

For every mishna, finds the gemara blocks that quote it near-verbatim and
flags back-to-back repetitions of the same quote. Results are written as
JSON (entry name -> units with their citations) or as a text/HTML report.
By default only repeating citations are kept; pass ``-a`` to keep all.

Usage:
    # Scan every tractate from the Sefaria export
    python3 scripts/find_repeats.py --output lastResult.json

    # Scan two tractates, keeping non-repeating citations
    python3 scripts/find_repeats.py --tractate "Bava Batra" --tractate Makkot -a

    # Scan pre-normalized text files (<name>.txt) with a config file
    python3 scripts/find_repeats.py --source dir --corpus-dir corpus/ \
      --config scan.json --format text --output report.txt
"""
from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

from citerun.config import ScanConfig
from citerun.edit_distance import DISTANCE_BACKENDS
from citerun.io_utils import dump_json, results_to_payload, save_json
from citerun.pipeline import scan_corpus
from citerun.progress import ConsoleProgress
from citerun.render import render_html, render_text
from citerun.sources import (
    AcquisitionError,
    CachedSource,
    DirectorySource,
    DocumentSource,
    SefariaSource,
)

log = logging.getLogger("find_repeats")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Find runs of repeated mishna citations in Talmud tractates."
    )
    parser.add_argument(
        "--source",
        choices=("sefaria", "dir"),
        default="sefaria",
        help="Where to read tractates from (default: sefaria)",
    )
    parser.add_argument(
        "--corpus-dir",
        type=Path,
        default=None,
        help="Directory of <name>.txt files (required with --source dir)",
    )
    parser.add_argument(
        "--normalize",
        action="store_true",
        help="Treat --corpus-dir files as raw Sefaria markup",
    )
    parser.add_argument(
        "--tractate",
        action="append",
        default=None,
        help="Tractate to scan (repeatable; default: all available)",
    )
    parser.add_argument(
        "--config", type=Path, default=None, help="JSON scan config file",
    )
    parser.add_argument(
        "--reference-threshold",
        type=int,
        default=None,
        help="Max fuzzy distance from the mishna for a citation (default: 15)",
    )
    parser.add_argument(
        "--run-threshold",
        type=int,
        default=None,
        help="Distance below which consecutive citations form a run (default: 5)",
    )
    parser.add_argument(
        "--distance-backend",
        choices=sorted(DISTANCE_BACKENDS),
        default=None,
        help="Edit-distance implementation (default: rapidfuzz)",
    )
    parser.add_argument(
        "-a", "--all",
        action="store_true",
        help="Include citations that are not part of a run",
    )
    parser.add_argument(
        "--include-empty",
        action="store_true",
        help="Include mishnayot without citations",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Parallel worker processes (default: 1)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("lastResult.json"),
        help="Output path (default: lastResult.json); '-' for stdout",
    )
    parser.add_argument(
        "--format",
        choices=("json", "text", "html"),
        default="json",
        help="Output format (default: json)",
    )
    parser.add_argument(
        "--no-progress", action="store_true", help="Do not print progress",
    )
    parser.add_argument("--verbose", "-v", action="store_true")
    return parser


def load_config(args: argparse.Namespace) -> ScanConfig:
    """Config file (if any) with command-line flags layered on top."""
    base = ScanConfig.from_json(args.config) if args.config is not None else ScanConfig()
    return base.with_overrides(
        reference_threshold=args.reference_threshold,
        run_threshold=args.run_threshold,
        distance_backend=args.distance_backend,
        include_non_repeating=True if args.all else None,
        include_empty_units=True if args.include_empty else None,
    )


def build_source(args: argparse.Namespace) -> DocumentSource:
    if args.source == "dir":
        if args.corpus_dir is None:
            raise SystemExit("--corpus-dir is required with --source dir")
        return DirectorySource(args.corpus_dir, normalize=args.normalize)
    return CachedSource(SefariaSource())


def write_output(text: str | None, payload: object, args: argparse.Namespace) -> None:
    if str(args.output) == "-":
        if text is None:
            dump_json(payload)
        else:
            sys.stdout.write(text)
        return
    if text is None:
        save_json(payload, args.output, pretty=True)
    else:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(text, encoding="utf-8")


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )

    if args.workers < 1:
        raise SystemExit("--workers must be >= 1")
    try:
        config = load_config(args)
    except (OSError, ValueError) as exc:
        raise SystemExit(f"Invalid configuration: {exc}") from exc

    t0 = time.monotonic()
    source = build_source(args)
    progress = None if args.no_progress else ConsoleProgress()
    try:
        outcome = scan_corpus(
            source,
            args.tractate,
            config,
            progress=progress,
            workers=args.workers,
        )
    except AcquisitionError as exc:
        raise SystemExit(f"Cannot list corpus entries: {exc}") from exc

    if args.format == "json":
        write_output(None, results_to_payload(outcome.results), args)
    elif args.format == "text":
        write_output(render_text(outcome.results), None, args)
    else:
        write_output(render_html(outcome.results), None, args)

    citation_count = sum(
        len(u.citations) for units in outcome.results.values() for u in units
    )
    what = "Citations" if config.include_non_repeating else "Repeating citations"
    if str(args.output) != "-":
        print(f"{what} ({citation_count}) have been written to {args.output}", file=sys.stderr)
    if not config.include_non_repeating:
        print("To include all citations, pass -a.", file=sys.stderr)
    print(f"Search took {time.monotonic() - t0:.1f} seconds", file=sys.stderr)

    if outcome.errors:
        log.error(
            "%d of %d entries failed: %s",
            len(outcome.errors),
            len(outcome.errors) + len(outcome.results),
            ", ".join(sorted(outcome.errors)),
        )
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
