from __future__ import annotations

from pathlib import Path

import pytest

from plotgrammar.config import Settings
from plotgrammar.core.errors import ConfigError

_ENV_KEYS = [
    "PLOTGRAMMAR_DATA_PATH",
    "PLOTGRAMMAR_OUT_DIR",
    "PLOTGRAMMAR_CSV_SEPARATOR",
    "PLOTGRAMMAR_NULL_VALUES",
    "PLOTGRAMMAR_WIDTH",
    "PLOTGRAMMAR_HEIGHT",
    "PLOTGRAMMAR_IMAGE_FORMAT",
    "PLOTGRAMMAR_SCALE_FACTOR",
    "PLOTGRAMMAR_THEME",
    "PLOTGRAMMAR_LOG_LEVEL",
]


def _clear_env(monkeypatch) -> None:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def _write_toml(tmp: Path, name: str, content: str) -> Path:
    p = tmp / name
    p.write_text(content)
    return p


def test_settings_precedence_env_over_toml(tmp_path: Path, monkeypatch) -> None:
    _write_toml(
        tmp_path,
        "plotgrammar.toml",
        """
        [plotgrammar]
        out_dir = "out_toml"
        width = 800
        theme = "minimal"
        """.strip(),
    )
    monkeypatch.chdir(tmp_path)
    _clear_env(monkeypatch)
    monkeypatch.setenv("PLOTGRAMMAR_OUT_DIR", "out_env")
    monkeypatch.setenv("PLOTGRAMMAR_WIDTH", "1024")

    s = Settings.load()

    assert s.out_dir == "out_env"
    assert s.width == 1024  # env override
    assert s.theme == "minimal"  # TOML still applies where env is silent


def test_settings_from_toml_top_level_keys(tmp_path: Path, monkeypatch) -> None:
    _write_toml(
        tmp_path,
        "plotgrammar.toml",
        """
        data_path = "data/other.csv"
        csv_separator = "tab"
        null_values = ["NA", "-"]
        image_format = "SVG"
        scale_factor = 2
        log_level = "debug"
        """.strip(),
    )
    monkeypatch.chdir(tmp_path)
    _clear_env(monkeypatch)

    s = Settings.load()

    assert s.data_path == "data/other.csv"
    assert s.csv_separator == "\t"
    assert s.null_values == ("NA", "-")
    assert s.image_format == "svg"
    assert s.scale_factor == 2.0
    assert s.log_level == "DEBUG"


def test_settings_from_pyproject_tool_table(tmp_path: Path, monkeypatch) -> None:
    _write_toml(
        tmp_path,
        "pyproject.toml",
        """
        [project]
        name = "demo"

        [tool.plotgrammar]
        height = 300
        """.strip(),
    )
    monkeypatch.chdir(tmp_path)
    _clear_env(monkeypatch)

    assert Settings.load().height == 300


def test_settings_explicit_path(tmp_path: Path, monkeypatch) -> None:
    cfg = _write_toml(tmp_path, "custom.toml", '[plotgrammar]\ntheme = "classic"\n')
    monkeypatch.chdir(tmp_path)
    _clear_env(monkeypatch)

    assert Settings.load(cfg).theme == "classic"


def test_settings_defaults_when_no_config(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    _clear_env(monkeypatch)

    s = Settings.load()

    assert s == Settings()
    assert s.out_dir == "out"
    assert s.image_format == "html"


def test_unparseable_values_keep_previous(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    _clear_env(monkeypatch)
    monkeypatch.setenv("PLOTGRAMMAR_WIDTH", "wide")
    monkeypatch.setenv("PLOTGRAMMAR_IMAGE_FORMAT", "gif")
    monkeypatch.setenv("PLOTGRAMMAR_SCALE_FACTOR", "-1")

    s = Settings.load()

    assert s.width == Settings().width
    assert s.image_format == "html"
    assert s.scale_factor == 1.0


def test_broken_toml_is_ignored(tmp_path: Path, monkeypatch) -> None:
    _write_toml(tmp_path, "plotgrammar.toml", "this is = = not toml")
    monkeypatch.chdir(tmp_path)
    _clear_env(monkeypatch)

    assert Settings.load() == Settings()


@pytest.mark.parametrize(
    "kwargs",
    [
        {"csv_separator": ";;"},
        {"width": 0},
        {"image_format": "gif"},
        {"scale_factor": 0},
        {"log_level": "chatty"},
    ],
)
def test_validate_rejects_bad_values(kwargs: dict) -> None:
    with pytest.raises(ConfigError):
        Settings(**kwargs).validate()


def test_validate_returns_self() -> None:
    s = Settings(width=800)
    assert s.validate() is s
