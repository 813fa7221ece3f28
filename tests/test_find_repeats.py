"""Tests for scripts/find_repeats.py."""
from pathlib import Path

import orjson
import pytest

from citerun.io_utils import load_json, load_results
from scripts.find_repeats import build_parser, load_config, main

DOC = (
    "מתני׳ השור שנגח את הפרה גמ׳ פתיחה: השור שנגח את הפרה: השור שנגח את הפרה: סוף "
    "מתני׳ המוכר את הבית גמ׳ אמר רבא: המוכר את הבית: ועוד"
)


@pytest.fixture
def corpus_dir(tmp_path: Path) -> Path:
    root = tmp_path / "corpus"
    root.mkdir()
    (root / "Makkot.txt").write_text(DOC, encoding="utf-8")
    return root


def _base_args(corpus_dir: Path, output: Path) -> list[str]:
    return [
        "--source", "dir",
        "--corpus-dir", str(corpus_dir),
        "--distance-backend", "python",
        "--no-progress",
        "--output", str(output),
    ]


class TestLoadConfig:
    def test_flags_override_file(self, tmp_path: Path) -> None:
        cfg_path = tmp_path / "scan.json"
        cfg_path.write_bytes(orjson.dumps({"reference_threshold": 8, "run_threshold": 2}))
        args = build_parser().parse_args(
            ["--config", str(cfg_path), "--run-threshold", "3", "-a"],
        )
        cfg = load_config(args)
        assert cfg.reference_threshold == 8
        assert cfg.run_threshold == 3
        assert cfg.include_non_repeating is True
        assert cfg.include_empty_units is False


class TestMain:
    def test_json_output(self, corpus_dir: Path, tmp_path: Path) -> None:
        out = tmp_path / "lastResult.json"
        assert main(_base_args(corpus_dir, out)) == 0
        payload = load_json(out)
        assert list(payload) == ["Makkot"]
        assert len(payload["Makkot"]) == 1
        assert payload["Makkot"][0]["citations"][0]["in_row"] == 2
        assert payload["Makkot"][0]["citations"][1]["lev_from_next"] == 9999

    def test_all_citations(self, corpus_dir: Path, tmp_path: Path) -> None:
        out = tmp_path / "all.json"
        assert main([*_base_args(corpus_dir, out), "-a"]) == 0
        results = load_results(out)
        assert [len(u.citations) for u in results["Makkot"]] == [2, 1]

    def test_text_format(self, corpus_dir: Path, tmp_path: Path) -> None:
        out = tmp_path / "report.txt"
        assert main([*_base_args(corpus_dir, out), "--format", "text"]) == 0
        assert out.read_text(encoding="utf-8").startswith("Makkot (מכות): 1 units, 1 runs")

    def test_html_format(self, corpus_dir: Path, tmp_path: Path) -> None:
        out = tmp_path / "report.html"
        assert main([*_base_args(corpus_dir, out), "--format", "html"]) == 0
        assert 'data-name="Makkot"' in out.read_text(encoding="utf-8")

    def test_stdout(self, corpus_dir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        args = _base_args(corpus_dir, Path("-"))
        assert main([*args, "--format", "text"]) == 0
        assert "Makkot (מכות)" in capsys.readouterr().out

    def test_missing_tractate(self, corpus_dir: Path, tmp_path: Path) -> None:
        out = tmp_path / "partial.json"
        args = [*_base_args(corpus_dir, out), "--tractate", "Makkot", "--tractate", "Tamid"]
        assert main(args) == 1
        assert list(load_json(out)) == ["Makkot"]

    def test_corpus_dir_required(self, tmp_path: Path) -> None:
        with pytest.raises(SystemExit):
            main(["--source", "dir", "--no-progress", "--output", str(tmp_path / "x.json")])

    def test_missing_corpus_dir(self, tmp_path: Path) -> None:
        with pytest.raises(SystemExit):
            main(_base_args(tmp_path / "nope", tmp_path / "x.json"))

    def test_invalid_workers(self, corpus_dir: Path, tmp_path: Path) -> None:
        with pytest.raises(SystemExit):
            main([*_base_args(corpus_dir, tmp_path / "x.json"), "--workers", "0"])

    def test_invalid_config(self, corpus_dir: Path, tmp_path: Path) -> None:
        cfg_path = tmp_path / "bad.json"
        cfg_path.write_bytes(b'{"threshold": 3}')
        args = [*_base_args(corpus_dir, tmp_path / "x.json"), "--config", str(cfg_path)]
        with pytest.raises(SystemExit):
            main(args)

    def test_mistyped_config(self, corpus_dir: Path, tmp_path: Path) -> None:
        cfg_path = tmp_path / "typed.json"
        cfg_path.write_bytes(b'{"reference_threshold": "8", "markers": {"opening": "MISHNA"}}')
        args = [*_base_args(corpus_dir, tmp_path / "x.json"), "--config", str(cfg_path)]
        with pytest.raises(SystemExit, match="Invalid configuration"):
            main(args)
