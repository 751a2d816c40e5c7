from __future__ import annotations

from pathlib import Path

import pytest

from plotgrammar.core.errors import MissingRequiredAestheticError
from plotgrammar.core.scales import scale_fill_manual
from plotgrammar.lab import cli
from plotgrammar.lab.workshop import (
    CHECKPOINTS,
    REGION_COLORS,
    Checkpoint,
    bubbles,
    get_checkpoint,
    polished,
)


def _run(argv: list[str]) -> int:
    with pytest.raises(SystemExit) as ei:
        cli.main(argv)
    return ei.value.code


@pytest.fixture(autouse=True)
def _isolated(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    # no plotgrammar.toml / pyproject.toml or env settings leak in
    monkeypatch.chdir(tmp_path)
    for key in ("PLOTGRAMMAR_DATA_PATH", "PLOTGRAMMAR_OUT_DIR", "PLOTGRAMMAR_IMAGE_FORMAT"):
        monkeypatch.delenv(key, raising=False)


def test_list_prints_every_checkpoint(capsys) -> None:
    assert _run(["list"]) == 0
    out = capsys.readouterr().out
    for cp in CHECKPOINTS:
        assert cp.name in out
    assert "(expected error)" in out


def test_unknown_command(capsys) -> None:
    assert _run(["frobnicate"]) == 2
    assert "Unknown command" in capsys.readouterr().err


def test_no_arguments_prints_help(capsys) -> None:
    cli.main([])
    assert "plotgrammar-workshop" in capsys.readouterr().out


def test_render_unknown_checkpoint(capsys) -> None:
    assert _run(["render", "--checkpoint", "nope"]) == 2
    assert "unknown checkpoint" in capsys.readouterr().err


def test_render_one_checkpoint_to_html(tmp_path: Path, capsys) -> None:
    out_dir = tmp_path / "charts"
    code = _run(["render", "--checkpoint", "bubbles", "--out-dir", str(out_dir)])
    assert code == 0
    assert (out_dir / "bubbles.html").stat().st_size > 0
    assert "[INFO] Wrote bubbles" in capsys.readouterr().out


def test_render_expected_failure_is_reported(tmp_path: Path, capsys) -> None:
    argv = ["render", "--checkpoint", "text_missing_label", "--out-dir", str(tmp_path)]
    code = _run([*argv, "--format", "json"])
    assert code == 0
    assert "as expected" in capsys.readouterr().out
    assert not (tmp_path / "text_missing_label.json").exists()


def test_render_all_as_json_from_explicit_data(tmp_path: Path) -> None:
    data = tmp_path / "gap.csv"
    data.write_text(
        "country,income_per_capita_2011,life_expectancy_2016,population_2015,four_regions\n"
        "Chile,21900,79.3,17948141,americas\n"
        "Ghana,3990,63.1,27409893,africa\n"
        "India,5390,68.6,1311050527,asia\n"
        "Spain,31700,82.9,46121699,europe\n"
    )
    out_dir = tmp_path / "out"
    code = _run(
        ["render", "--all", "--data", str(data), "--out-dir", str(out_dir), "--format", "json"]
    )
    assert code == 0
    written = sorted(p.stem for p in out_dir.glob("*.json"))
    expected = sorted(cp.name for cp in CHECKPOINTS if cp.expected_error is None)
    assert written == expected


def test_render_requires_a_selection() -> None:
    assert _run(["render"]) == 2


def test_show_data_falls_back_to_sample(capsys) -> None:
    assert _run(["show-data", "--n", "3"]) == 0
    out = capsys.readouterr().out
    assert "Afghanistan" in out
    assert "four_regions" in out


def _mislabelled(gap):
    # one label for four observed regions fails only when the chart is rendered
    return polished(gap) + scale_fill_manual(REGION_COLORS, labels=("Everywhere",))


def test_render_time_error_is_reported_and_run_continues(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys
) -> None:
    broken = Checkpoint("mislabelled", "Labels do not line up with levels.", _mislabelled)
    monkeypatch.setattr(cli, "list_checkpoints", lambda: (broken, get_checkpoint("bubbles")))
    out_dir = tmp_path / "out"
    code = _run(["render", "--all", "--out-dir", str(out_dir), "--format", "json"])
    assert code == 1
    assert "[ERROR] mislabelled" in capsys.readouterr().err
    assert not (out_dir / "mislabelled.json").exists()
    assert (out_dir / "bubbles.json").exists()


def test_expected_error_that_never_happens_fails_the_run(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys
) -> None:
    quiet = Checkpoint(
        "quiet", "Declares an error it never raises.", bubbles, MissingRequiredAestheticError
    )
    monkeypatch.setattr(cli, "get_checkpoint", lambda name: quiet)
    code = _run(["render", "--checkpoint", "quiet", "--out-dir", str(tmp_path)])
    assert code == 1
    assert "expected MissingRequiredAestheticError" in capsys.readouterr().err
    assert not (tmp_path / "quiet.html").exists()
