"""Document acquisition: where tractate texts come from.

Design:
- ``DocumentSource`` is the abstract interface the pipeline depends on
  (``fetch_document(name) -> str``); the scanning core never touches the
  network or the filesystem itself.
- ``SefariaSource`` downloads the Sefaria export JSON over HTTP and
  normalizes its markup; ``DirectorySource`` reads pre-normalized text files;
  ``InMemorySource`` serves a dict (tests, embedding).
- ``CachedSource`` memoizes any source for the lifetime of the instance,
  instead of a process-wide cache.
- Every acquisition failure surfaces as ``AcquisitionError``.
"""
from __future__ import annotations

import logging
import urllib.parse
import urllib.request
from abc import ABC, abstractmethod
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any

import orjson

from citerun.normalize import normalize_talmud_text

log = logging.getLogger("citerun.sources")


class AcquisitionError(RuntimeError):
    """Raised when a corpus entry cannot be fetched, read or decoded."""


# ---------------------------------------------------------------------------
# Tractate catalog (tractates present in the Sefaria export)
# ---------------------------------------------------------------------------

TALMUD_TREE: dict[str, tuple[str, ...]] = {
    "Zeraim": ("Berakhot",),
    "Moed": (
        "Shabbat", "Eruvin", "Pesachim", "Yoma", "Sukkah", "Beitzah",
        "Rosh Hashanah", "Taanit", "Megillah", "Moed Katan", "Chagigah",
    ),
    "Nashim": (
        "Yevamot", "Ketubot", "Nedarim", "Nazir", "Sotah", "Gittin", "Kiddushin",
    ),
    "Nezikin": (
        "Bava Kamma", "Bava Metzia", "Bava Batra", "Sanhedrin", "Makkot",
        "Shevuot", "Avodah Zarah", "Horayot",
    ),
    "Kodashim": (
        "Zevachim", "Menachot", "Chullin", "Bekhorot", "Arakhin", "Temurah",
        "Keritot", "Meilah", "Tamid",
    ),
    "Tahorot": ("Niddah",),
}

_HEBREW_NAMES: dict[str, str] = {
    "Avodah Zarah": "עבודה זרה",
    "Bava Batra": "בבא בתרא",
    "Bava Kamma": "בבא קמא",
    "Bava Metzia": "בבא מציאה",
    "Moed Katan": "מועד קטן",
    "Rosh Hashanah": "ראש השנה",
    "Arakhin": "ערכין",
    "Beitzah": "ביצה",
    "Berakhot": "ברכות",
    "Bekhorot": "בכורות",
    "Chagigah": "חגיגה",
    "Chullin": "חולין",
    "Eruvin": "עירובין",
    "Gittin": "גיטין",
    "Horayot": "הוריות",
    "Keritot": "כריתות",
    "Ketubot": "כתובות",
    "Kiddushin": "קידושין",
    "Makkot": "מכות",
    "Megillah": "מגילה",
    "Meilah": "מעילה",
    "Menachot": "מנחות",
    "Nazir": "נזיר",
    "Nedarim": "נדרים",
    "Niddah": "נידה",
    "Pesachim": "פסחים",
    "Sanhedrin": "סנהדרין",
    "Shabbat": "שבת",
    "Shevuot": "שבועות",
    "Sotah": "סוטה",
    "Sukkah": "סוכה",
    "Taanit": "תענית",
    "Tamid": "תמיד",
    "Temurah": "תמורה",
    "Yevamot": "יבמות",
    "Yoma": "יומא",
    "Zevachim": "זבחים",
}

UNKNOWN_HEBREW_NAME = "לא ידוע"


def hebrew_name(tractate: str) -> str:
    """Hebrew display name of a tractate."""
    return _HEBREW_NAMES.get(tractate, UNKNOWN_HEBREW_NAME)


def seder_of(tractate: str) -> str | None:
    """Order (seder) containing ``tractate``, or None if not in the catalog."""
    for seder, tractates in TALMUD_TREE.items():
        if tractate in tractates:
            return seder
    return None


def all_tractates() -> list[str]:
    return [t for tractates in TALMUD_TREE.values() for t in tractates]


# ---------------------------------------------------------------------------
# Source interface
# ---------------------------------------------------------------------------

class DocumentSource(ABC):
    """Abstract provider of normalized corpus texts."""

    @abstractmethod
    def fetch_document(self, name: str) -> str:
        """Return the normalized text of entry ``name``.

        Raises
        ------
        AcquisitionError
            If the entry is unknown or cannot be fetched.
        """

    @abstractmethod
    def list_documents(self) -> list[str]:
        """Return the names of all entries this source can serve."""


class InMemorySource(DocumentSource):
    """Serves texts from a mapping of name -> normalized text."""

    def __init__(self, documents: Mapping[str, str]) -> None:
        self._documents = dict(documents)

    def fetch_document(self, name: str) -> str:
        try:
            return self._documents[name]
        except KeyError:
            raise AcquisitionError(f"Unknown document {name!r}") from None

    def list_documents(self) -> list[str]:
        return list(self._documents)


class DirectorySource(DocumentSource):
    """Reads ``<name><suffix>`` UTF-8 files from a directory.

    Files are expected to be normalized already unless ``normalize`` is set,
    in which case their content is treated as Sefaria markup.
    """

    def __init__(
        self,
        root: Path,
        *,
        suffix: str = ".txt",
        normalize: bool = False,
    ) -> None:
        self._root = root
        self._suffix = suffix
        self._normalize = normalize

    def _path_for(self, name: str) -> Path:
        return self._root / f"{name}{self._suffix}"

    def fetch_document(self, name: str) -> str:
        path = self._path_for(name)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise AcquisitionError(f"No file for {name!r} at {path}") from None
        except (OSError, UnicodeDecodeError) as exc:
            raise AcquisitionError(f"Cannot read {path}: {exc}") from exc
        return normalize_talmud_text(text) if self._normalize else text

    def list_documents(self) -> list[str]:
        if not self._root.is_dir():
            raise AcquisitionError(f"Corpus directory not found: {self._root}")
        return sorted(
            p.name[: -len(self._suffix)]
            for p in self._root.iterdir()
            if p.is_file() and p.name.endswith(self._suffix)
        )


# ---------------------------------------------------------------------------
# Sefaria export over HTTP
# ---------------------------------------------------------------------------

def _flatten_text(node: Any) -> Iterator[str]:
    """Yield the strings of an arbitrarily nested Sefaria ``text`` array."""
    if isinstance(node, str):
        yield node
    elif isinstance(node, list):
        for child in node:
            yield from _flatten_text(child)


class SefariaSource(DocumentSource):
    """Fetches tractates from the public Sefaria export on GitHub.

    Parameters
    ----------
    base_url:
        Root of the Bavli export tree.
    edition:
        Export file name (without ``.json``) inside each ``Hebrew/`` folder.
    timeout:
        Per-request timeout in seconds.
    """

    BASE_URL = (
        "https://raw.githubusercontent.com/Sefaria/Sefaria-Export/master/json/Talmud/Bavli"
    )

    def __init__(
        self,
        *,
        base_url: str = BASE_URL,
        edition: str = "Wikisource Talmud Bavli",
        timeout: float = 60.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._edition = edition
        self._timeout = timeout

    def url_for(self, tractate: str) -> str:
        seder = seder_of(tractate)
        if seder is None:
            raise AcquisitionError(
                f"Unknown tractate {tractate!r} (not all tractates are available)"
            )
        parts = (f"Seder {seder}", tractate, "Hebrew", f"{self._edition}.json")
        return self._base_url + "/" + "/".join(urllib.parse.quote(p) for p in parts)

    def _download(self, url: str) -> bytes:
        req = urllib.request.Request(url, headers={"Accept": "application/json"})
        with urllib.request.urlopen(req, timeout=self._timeout) as resp:
            return resp.read()

    def fetch_document(self, name: str) -> str:
        url = self.url_for(name)
        log.info("Fetching tractate %s", name)
        log.debug("GET %s", url)
        try:
            raw = self._download(url)
        except OSError as exc:  # URLError, HTTPError and timeouts included
            raise AcquisitionError(f"Failed to download {name!r}: {exc}") from exc
        try:
            payload = orjson.loads(raw)
        except orjson.JSONDecodeError as exc:
            raise AcquisitionError(f"Invalid JSON for {name!r}: {exc}") from exc
        if not isinstance(payload, dict) or "text" not in payload:
            raise AcquisitionError(f"Payload for {name!r} has no 'text' field")
        markup = " ".join(_flatten_text(payload["text"]))
        return normalize_talmud_text(markup)

    def list_documents(self) -> list[str]:
        return all_tractates()


# ---------------------------------------------------------------------------
# Caching decorator
# ---------------------------------------------------------------------------

class CachedSource(DocumentSource):
    """Memoizes ``fetch_document`` of another source.

    Failures are not cached, so a later call retries the inner source.
    """

    def __init__(self, inner: DocumentSource) -> None:
        self._inner = inner
        self._cache: dict[str, str] = {}

    def fetch_document(self, name: str) -> str:
        cached = self._cache.get(name)
        if cached is not None:
            log.debug("Cache hit for %s", name)
            return cached
        text = self._inner.fetch_document(name)
        self._cache[name] = text
        return text

    def list_documents(self) -> list[str]:
        return self._inner.list_documents()

    def cached_names(self) -> list[str]:
        return list(self._cache)

    def clear(self) -> None:
        self._cache.clear()
