from __future__ import annotations

import logging

import polars as pl
import pytest

from plotgrammar.core.aes import aes
from plotgrammar.core.errors import (
    InvalidLimitsError,
    InvalidMappingError,
    InvalidScaleError,
    MissingRequiredAestheticError,
    PlotGrammarError,
    UnknownChannelError,
    UnknownGeomError,
    UnknownThemeElementError,
)
from plotgrammar.core.expr import log
from plotgrammar.core.grammar import Channel, GeomKind
from plotgrammar.core.scales import ContinuousScale, DiscreteScale, scale_size
from plotgrammar.core.themes import theme, theme_minimal
from plotgrammar.viz import (
    add_labels,
    add_layer,
    add_scale,
    add_theme,
    coord_cartesian,
    create_base,
    geom_point,
    geom_smooth,
    geom_text,
    labs,
    set_coordinate_limits,
    with_data,
    ylim,
)


def _base(df: pl.DataFrame):
    return create_base(df, aes(x=log("income"), y="life"))


# 1) create_base


def test_create_base_keeps_mapping_and_has_no_layers(tiny: pl.DataFrame) -> None:
    m = aes(x="income", y="life")
    spec = create_base(tiny, m)
    assert spec.mapping == m
    assert spec.layers == ()
    assert dict(spec.scales) == {}
    assert spec.data is tiny


def test_create_base_unknown_column(tiny: pl.DataFrame) -> None:
    with pytest.raises(InvalidMappingError) as ei:
        create_base(tiny, aes(x=log("gdp"), y="life"))
    assert ei.value.missing == ["gdp"]
    assert "gdp" in str(ei.value)
    assert "income" in str(ei.value)  # available columns listed


def test_create_base_requires_polars_frame() -> None:
    with pytest.raises(TypeError):
        create_base({"a": [1]}, aes(x="a"))  # type: ignore[arg-type]


def test_create_base_without_mapping(tiny: pl.DataFrame) -> None:
    assert len(create_base(tiny).mapping) == 0


# 2) add_layer


def test_point_then_text_requires_label(tiny: pl.DataFrame) -> None:
    spec = add_layer(create_base(tiny, aes(x="income", y="life")), "point")
    assert [lyr.kind for lyr in spec.layers] == [GeomKind.POINT]

    with pytest.raises(MissingRequiredAestheticError) as ei:
        add_layer(spec, "text")
    assert str(ei.value) == "geom_text requires the following missing aesthetics: label"
    assert ei.value.missing == ["label"]

    labelled = add_layer(spec, "text", aes(label="country"))
    assert [lyr.kind for lyr in labelled.layers] == [GeomKind.POINT, GeomKind.TEXT]


def test_removing_a_required_channel_fails(tiny: pl.DataFrame) -> None:
    spec = create_base(tiny, aes(x="income", y="life"))
    with pytest.raises(MissingRequiredAestheticError):
        add_layer(spec, "point", aes(x="income"), inherit_aes=False)
    with pytest.raises(MissingRequiredAestheticError):
        add_layer(create_base(tiny, aes(x="income")), "point")


def test_fixed_aesthetic_satisfies_requirement(tiny: pl.DataFrame) -> None:
    spec = create_base(tiny, aes(x="income"))
    out = add_layer(spec, "point", fixed_aesthetics={"y": 60})
    assert out.layers[0].fixed == {Channel.Y: 60}


def test_local_mapping_overrides_default(tiny: pl.DataFrame) -> None:
    spec = create_base(tiny, aes(x="income", y="life", color="region"))
    out = spec + geom_point(aes(color="country"))
    lyr = out.layers[0]
    assert lyr.mapping.labels() == {"x": "income", "y": "life", "color": "country"}
    assert lyr.local_mapping.labels() == {"color": "country"}


def test_layer_mapping_checked_against_dataset(tiny: pl.DataFrame) -> None:
    with pytest.raises(InvalidMappingError):
        _base(tiny) + geom_point(aes(size="population"))


def test_layer_local_data(tiny: pl.DataFrame) -> None:
    other = pl.DataFrame({"income": [2000.0], "life": [70.0], "country": ["Z"]})
    out = _base(tiny) + geom_text(aes(label="country"), data=other)
    assert out.layers[0].data is other
    with pytest.raises(InvalidMappingError):
        _base(tiny) + geom_point(data=pl.DataFrame({"income": [1.0]}))


def test_unknown_geom(tiny: pl.DataFrame) -> None:
    with pytest.raises(UnknownGeomError):
        add_layer(_base(tiny), "violin")


def test_fixed_none_rejected(tiny: pl.DataFrame) -> None:
    with pytest.raises(PlotGrammarError):
        _base(tiny) + geom_point(color=None)


def test_fixed_colors_normalized(tiny: pl.DataFrame) -> None:
    out = _base(tiny) + geom_point(colour="Dark Red", size=3)
    assert dict(out.layers[0].fixed) == {Channel.COLOR: "darkred", Channel.SIZE: 3}


def test_smooth_method_validated(tiny: pl.DataFrame) -> None:
    out = _base(tiny) + geom_smooth(method="linear")
    assert out.layers[0].params["method"] == "lm"
    assert (_base(tiny) + geom_smooth()).layers[0].params["method"] == "loess"
    with pytest.raises(PlotGrammarError):
        _base(tiny) + geom_smooth(method="gam")


def test_unknown_channel_and_param_are_warned(tiny: pl.DataFrame, caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="plotgrammar"):
        out = _base(tiny) + geom_point(aes(label="country"), bins=30)
    assert "bins" not in out.layers[0].params
    messages = " ".join(r.getMessage() for r in caplog.records)
    assert "ignoring unknown aesthetic 'label'" in messages
    assert "ignoring unknown parameter 'bins'" in messages


# 3) Immutability and branching


def test_add_layer_does_not_alter_base(tiny: pl.DataFrame) -> None:
    base = _base(tiny)
    before = base.describe()
    derived = base + geom_point()
    assert base.layers == ()
    assert base.describe() == before
    assert len(derived.layers) == 1


def test_branching_from_a_checkpoint(tiny: pl.DataFrame) -> None:
    base = _base(tiny) + geom_point()
    a = base + geom_smooth(method="lm")
    b = base + geom_text(aes(label="country"))
    assert [lyr.kind for lyr in a.layers] == [GeomKind.POINT, GeomKind.SMOOTH]
    assert [lyr.kind for lyr in b.layers] == [GeomKind.POINT, GeomKind.TEXT]
    assert len(base.layers) == 1
    # unchanged parts are shared
    assert a.layers[0] is base.layers[0] is b.layers[0]


def test_specs_cannot_be_mutated(tiny: pl.DataFrame) -> None:
    spec = _base(tiny)
    with pytest.raises(AttributeError):
        spec.layers = ()  # type: ignore[misc]
    with pytest.raises(TypeError):
        spec.scales[Channel.SIZE] = ContinuousScale()  # type: ignore[index]


# 4) Scales


def test_scale_last_write_wins(tiny: pl.DataFrame) -> None:
    spec = _base(tiny)
    once = add_scale(spec, "size", ContinuousScale(range=(2, 20)))
    twice = add_scale(once, "size", ContinuousScale(range=(1, 10)))
    assert twice.scales[Channel.SIZE].range == (1.0, 10.0)
    assert list(twice.scales) == [Channel.SIZE]


def test_scale_override_idempotent(tiny: pl.DataFrame) -> None:
    spec = _base(tiny) + geom_point(aes(size="pop"))
    once = spec + scale_size(range=(2, 20))
    twice = once + scale_size(range=(2, 20))
    assert once.equivalent(twice)
    assert once.fingerprint() == twice.fingerprint()


def test_scale_unknown_channel(tiny: pl.DataFrame) -> None:
    with pytest.raises(UnknownChannelError):
        add_scale(_base(tiny), "thickness", ContinuousScale())


@pytest.mark.parametrize(
    "channel, policy",
    [
        ("x", DiscreteScale()),
        ("label", DiscreteScale()),
        ("weight", ContinuousScale()),
        ("size", ContinuousScale(transform="log10")),
        ("shape", ContinuousScale()),
    ],
)
def test_scale_kind_must_fit_channel(tiny: pl.DataFrame, channel: str, policy) -> None:
    with pytest.raises(InvalidScaleError):
        add_scale(_base(tiny), channel, policy)


def test_scale_policy_type_checked(tiny: pl.DataFrame) -> None:
    with pytest.raises(TypeError):
        add_scale(_base(tiny), "size", {"range": (2, 20)})  # type: ignore[arg-type]


# 5) Theme, labels, limits


def test_theme_overrides_merge(tiny: pl.DataFrame) -> None:
    spec = add_theme(_base(tiny), theme_minimal())
    spec = add_theme(spec, {"title_weight": "bold"})
    spec = spec + theme(title_weight="normal", legend_position="none")
    assert spec.theme["title_weight"] == "normal"
    assert spec.theme["legend_position"] == "none"
    assert spec.theme["panel_background"] == "white"
    with pytest.raises(UnknownThemeElementError):
        add_theme(spec, {"margin": 3})


def test_labels_merge_and_normalize(tiny: pl.DataFrame) -> None:
    spec = add_labels(_base(tiny), {"title": "first", "x": "Income"})
    spec = spec + labs(title="second", colour="World Region", y=None)
    assert dict(spec.labels.values) == {
        "title": "second",
        "x": "Income",
        "color": "World Region",
        "y": None,
    }
    with pytest.raises(UnknownChannelError):
        spec + labs(footer="nope")


def test_coordinate_limits_merge_per_axis(tiny: pl.DataFrame) -> None:
    spec = set_coordinate_limits(_base(tiny), y_range=(45, 90))
    spec = spec + coord_cartesian(xlim=(6, 12))
    assert spec.limits.x == (6.0, 12.0)
    assert spec.limits.y == (45.0, 90.0)
    spec = spec + ylim(50, 85)
    assert spec.limits.y == (50.0, 85.0)


@pytest.mark.parametrize("bad", [(1, 1), ("a", "b"), (0, float("inf")), (1, 2, 3), 5])
def test_invalid_limits(tiny: pl.DataFrame, bad) -> None:
    with pytest.raises(InvalidLimitsError):
        set_coordinate_limits(_base(tiny), x_range=bad)


def test_adding_unknown_component_is_type_error(tiny: pl.DataFrame) -> None:
    with pytest.raises(TypeError):
        _base(tiny) + 3  # type: ignore[operator]


# 6) Data rebinding and inspection


def test_with_data_validates_and_rebinds(tiny: pl.DataFrame) -> None:
    spec = _base(tiny) + geom_point(aes(color="region"))
    newer = tiny.with_columns(pl.col("life") + 1)
    rebound = with_data(spec, newer)
    assert rebound.data is newer
    assert spec.data is tiny
    with pytest.raises(InvalidMappingError):
        with_data(spec, tiny.drop("region"))


def test_validate_against_other_data(tiny: pl.DataFrame) -> None:
    spec = _base(tiny) + geom_point()
    spec.validate()
    with pytest.raises(InvalidMappingError):
        spec.validate(tiny.drop("income"))


def test_describe_is_json_ready_and_fingerprint_stable(tiny: pl.DataFrame) -> None:
    def build():
        return (
            _base(tiny)
            + geom_point(aes(size="pop", color="region"), alpha=0.7)
            + geom_text(aes(label="country"), nudge_y=0.5)
            + scale_size(range=(2, 20))
            + labs(title="t")
        )

    d = build().describe()
    assert d["data"] == {"columns": tiny.columns, "rows": 4}
    assert d["mapping"] == {"x": "log(income)", "y": "life"}
    assert [lyr["geom"] for lyr in d["layers"]] == ["point", "text"]
    assert d["layers"][0]["fixed"] == {"alpha": 0.7}
    assert d["layers"][1]["params"] == {"nudge_x": 0.0, "nudge_y": 0.5}
    assert d["scales"]["size"]["range"] == [2.0, 20.0]
    assert build().fingerprint() == build().fingerprint()
    assert build().fingerprint() != (build() + labs(title="u")).fingerprint()


def test_method_forms_match_functions(tiny: pl.DataFrame) -> None:
    a = _base(tiny).add_layer("point").add_scale("size", ContinuousScale(range=(2, 20)))
    b = add_scale(add_layer(_base(tiny), "point"), "size", ContinuousScale(range=(2, 20)))
    assert a.equivalent(b)
