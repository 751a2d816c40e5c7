import pytest

from plotgrammar.core.errors import UnknownChannelError, UnknownGeomError
from plotgrammar.core.geoms import get_geom, list_geoms
from plotgrammar.core.grammar import (
    Channel,
    GeomKind,
    assert_lower_snake,
    ensure_all_enum_values_lower_snake,
    normalize_channel,
    normalize_geom,
    normalize_label_key,
)


def test_all_enum_values_are_lower_snake() -> None:
    ensure_all_enum_values_lower_snake([Channel, GeomKind])


def test_assert_lower_snake_rejects_camel_case() -> None:
    with pytest.raises(ValueError):
        assert_lower_snake("panelBackground", "theme element")


@pytest.mark.parametrize(
    "name, expected",
    [
        ("x", Channel.X),
        (" Y ", Channel.Y),
        ("colour", Channel.COLOR),
        ("Color", Channel.COLOR),
        ("lty", Channel.LINETYPE),
        ("text", Channel.LABEL),
    ],
)
def test_normalize_channel_accepts_aliases(name: str, expected: Channel) -> None:
    assert normalize_channel(name) is expected


def test_normalize_channel_unknown_lists_allowed() -> None:
    with pytest.raises(UnknownChannelError) as ei:
        normalize_channel("colr")
    msg = str(ei.value)
    assert "colr" in msg
    assert "color" in msg
    # also a ValueError for generic callers
    assert isinstance(ei.value, ValueError)


def test_normalize_geom_accepts_prefix() -> None:
    assert normalize_geom("geom_point") is GeomKind.POINT
    assert normalize_geom("Smooth") is GeomKind.SMOOTH
    with pytest.raises(UnknownGeomError):
        normalize_geom("violin")


def test_label_keys_and_channels() -> None:
    assert normalize_label_key("Title") == "title"
    assert normalize_label_key("colour") == "color"
    with pytest.raises(UnknownChannelError):
        normalize_label_key("footer")


def test_every_geom_kind_is_registered() -> None:
    kinds = {d.kind for d in list_geoms()}
    assert kinds == set(GeomKind)


def test_text_requires_label() -> None:
    desc = get_geom("text")
    assert desc.missing({Channel.X, Channel.Y}) == ["label"]
    assert desc.missing({Channel.X, Channel.Y, Channel.LABEL}) == []


def test_point_reports_missing_positions_in_channel_order() -> None:
    assert get_geom(GeomKind.POINT).missing(set()) == ["x", "y"]


def test_rug_needs_at_least_one_position() -> None:
    desc = get_geom("rug")
    assert desc.missing(set()) == ["x|y"]
    assert desc.missing({Channel.X}) == []
    assert desc.missing({Channel.Y}) == []


def test_bar_accepts_weight_but_point_does_not() -> None:
    assert get_geom("bar").accepts(Channel.WEIGHT)
    assert not get_geom("point").accepts(Channel.WEIGHT)
    assert not get_geom("point").accepts(Channel.LABEL)
