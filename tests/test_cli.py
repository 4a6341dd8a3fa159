from __future__ import annotations

import json

import pytest

import inlined.__main__ as cli
from inlined.aggregate import Statistic
from inlined.analysis import AnalysisResult


@pytest.fixture
def fake_results(monkeypatch):
    calls = []

    def fake_analyze_files(paths, jobs=1, **kwargs):
        calls.append((list(paths), jobs, kwargs))
        return [
            AnalysisResult("a.out", stats={"f": Statistic(3, 30), "g": Statistic(1, 50)}),
            AnalysisResult("broken.so", error="broken.so is not an ELF file"),
        ]

    monkeypatch.setattr(cli, "analyze_files", fake_analyze_files)
    return calls


def test_text_output(fake_results, capsys):
    status = cli.main(["a.out", "broken.so"])
    out = capsys.readouterr().out
    assert status == 1
    assert out.splitlines()[2:] == ["         1         50   g", "         3         30   f"]
    assert fake_results == [(["a.out", "broken.so"], 1, {"unresolved": "bucket"})]


def test_json_output(fake_results, capsys):
    cli.main(["--format", "json", "--sort", "count", "--limit", "1", "--drop-unresolved", "-j", "2", "a.out"])
    out = capsys.readouterr().out
    assert json.loads(out) == [{"Name": "f", "Count": 3, "Bytes": 30}]
    assert fake_results[0][1:] == (2, {"unresolved": "drop"})


def test_success_exit_status(monkeypatch, capsys):
    monkeypatch.setattr(cli, "analyze_files", lambda paths, **kwargs: [AnalysisResult("a.out")])
    assert cli.main(["-q", "a.out"]) == 0
    assert "Count" in capsys.readouterr().out


@pytest.mark.parametrize(
    "argv",
    [
        [],
        ["--format", "xml", "a.out"],
        ["--sort", "name", "a.out"],
        ["--limit", "-1", "a.out"],
        ["--jobs", "0", "a.out"],
        ["-v", "-q", "a.out"],
    ],
)
def test_usage_errors(argv):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(argv)
    assert excinfo.value.code == 2
