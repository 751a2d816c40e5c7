import pytest

from plotgrammar.core.errors import UnknownThemeElementError
from plotgrammar.core.themes import (
    THEME_ELEMENTS,
    Theme,
    get_theme,
    list_themes,
    theme,
    theme_economist_white,
    theme_gray,
    theme_minimal,
)


@pytest.mark.parametrize("name", list_themes())
def test_presets_are_complete(name: str) -> None:
    th = get_theme(name)
    assert th.is_complete
    assert th.name == name


def test_get_theme_aliases_and_prefix() -> None:
    assert get_theme("grey") is theme_gray()
    assert get_theme("theme_minimal") is theme_minimal()
    assert get_theme("economist") is theme_economist_white()
    with pytest.raises(KeyError):
        get_theme("solarized")


def test_unknown_element_rejected() -> None:
    with pytest.raises(UnknownThemeElementError):
        theme(plot_margin=3)


@pytest.mark.parametrize(
    "elements",
    [
        {"title_weight": "heavy"},
        {"legend_position": "center"},
        {"font_size": -1},
        {"font_size": True},
        {"grid": "yes"},
        {"background": 3},
    ],
)
def test_element_values_validated(elements: dict) -> None:
    with pytest.raises(ValueError):
        Theme(elements)


def test_partial_theme_is_not_complete() -> None:
    th = theme(title_weight="BOLD", legend_position="none")
    assert not th.is_complete
    assert th.to_dict() == {"title_weight": "bold", "legend_position": "none"}
    assert th.name is None


def test_merge_later_keys_win_and_keep_name() -> None:
    merged = theme_minimal().merge(theme(title_weight="bold", grid_color="Light Gray"))
    assert merged["title_weight"] == "bold"
    assert merged["grid_color"] == "lightgray"
    assert merged["panel_background"] == "white"
    assert merged.name == "minimal"
    # the preset itself is untouched
    assert theme_minimal()["title_weight"] == "normal"


def test_preset_after_override_replaces_everything() -> None:
    merged = theme(title_weight="bold").merge(theme_economist_white())
    assert merged.to_dict() == theme_economist_white().to_dict()
    assert merged.name == "economist_white"


def test_merge_accepts_plain_mapping() -> None:
    merged = theme_gray().merge({"legend_position": "top"})
    assert merged["legend_position"] == "top"


def test_vocabulary_keys_cover_presets() -> None:
    assert set(theme_gray().to_dict()) == set(THEME_ELEMENTS)
