"""Progress reporting hooks for long scans.

A progress callback is observational only: it is called synchronously as
``callback(phase, current, total)`` and must not affect results. Phases, from
outermost to innermost: ``"document"``, ``"unit"``, ``"segment"``.
"""
from __future__ import annotations

import sys
import time
from collections.abc import Callable
from typing import TextIO

type ProgressCallback = Callable[[str, int, int], None]

PHASES: tuple[str, ...] = ("document", "unit", "segment")


def _percent(current: int, total: int) -> int:
    if total <= 0:
        return 100
    return (100 * current) // total


class ConsoleProgress:
    """Three-level percentage display written to stderr.

    Lines are throttled to one per ``interval_sec``; the final state (all
    phases complete) is always written. A phase that completes also
    completes the phases nested inside it, so a scan with no units or no
    segments still reaches 100%.
    """

    def __init__(
        self,
        *,
        stream: TextIO | None = None,
        interval_sec: float = 0.5,
    ) -> None:
        self._stream = stream if stream is not None else sys.stderr
        self._interval_sec = interval_sec
        self._last_report = 0.0
        self._percent: dict[str, int] = dict.fromkeys(PHASES, 0)
        self._done = False

    @property
    def percentages(self) -> dict[str, int]:
        return dict(self._percent)

    def __call__(self, phase: str, current: int, total: int) -> None:
        if phase not in self._percent:
            raise ValueError(f"Unknown progress phase {phase!r}")
        pct = _percent(current, total)
        self._percent[phase] = pct
        if pct >= 100:
            for inner in PHASES[PHASES.index(phase) + 1:]:
                self._percent[inner] = 100
        complete = all(p >= 100 for p in self._percent.values())
        if complete:
            if not self._done:
                self._print_line()
                self._done = True
            return
        self._done = False
        now = time.monotonic()
        if now - self._last_report >= self._interval_sec:
            self._print_line()
            self._last_report = now

    def _print_line(self) -> None:
        p = self._percent
        print(
            f"documents {p['document']}% | units {p['unit']}% | "
            f"segments {p['segment']}%",
            file=self._stream,
        )


class RecordingProgress:
    """Collects every progress event; useful for tests and host UIs."""

    def __init__(self) -> None:
        self.events: list[tuple[str, int, int]] = []

    def __call__(self, phase: str, current: int, total: int) -> None:
        self.events.append((phase, current, total))

    def by_phase(self, phase: str) -> list[tuple[int, int]]:
        return [(cur, tot) for ph, cur, tot in self.events if ph == phase]
