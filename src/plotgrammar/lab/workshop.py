"""
The bubble chart workshop as a sequence of named checkpoints.

The workshop recreates a well-known poster of income per person (log scale) vs.
life expectancy, with bubbles colored by world region and sized by population.
Each checkpoint is a function of the dataset returning a PlotSpec; later
checkpoints build on earlier ones with `+`, so every intermediate step can be
rendered, compared or branched.

Checkpoints are illustrative: their exact content may change between releases.
One checkpoint (`text_missing_label`) demonstrates a failure and declares the
error it is expected to raise.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass

import polars as pl

from plotgrammar.core.aes import aes
from plotgrammar.core.errors import MissingRequiredAestheticError
from plotgrammar.core.expr import lit, log
from plotgrammar.core.scales import (
    scale_color_manual,
    scale_fill_manual,
    scale_size,
    scale_x_continuous,
)
from plotgrammar.core.themes import theme, theme_economist_white, theme_minimal
from plotgrammar.viz.layers import geom_point, geom_rug, geom_smooth, geom_text
from plotgrammar.viz.spec import PlotSpec, coord_cartesian, create_base, labs

__all__ = [
    "COUNTRY",
    "INCOME",
    "LIFE_EXPECTANCY",
    "POPULATION",
    "REGION",
    "REGION_COLORS",
    "Checkpoint",
    "CHECKPOINTS",
    "get_checkpoint",
    "list_checkpoints",
]

COUNTRY = "country"
INCOME = "income_per_capita_2011"
LIFE_EXPECTANCY = "life_expectancy_2016"
POPULATION = "population_2015"
REGION = "four_regions"

REGION_COLORS: dict[str, str] = {
    "asia": "red",
    "africa": "light blue",
    "europe": "yellow",
    "americas": "green",
}
REGION_LEVELS = ("africa", "americas", "asia", "europe")
REGION_LABELS = ("Africa", "Americas", "Asia", "Europe")

INCOME_BREAKS = (500, 1000, 2000, 4000, 8000, 16000, 32000, 64000)


@dataclass(frozen=True)
class Checkpoint:
    """
    A named workshop step.

    Attributes:
        name (str): lower_snake identifier.
        description (str): One-line explanation shown by the CLI.
        build (Callable[[pl.DataFrame], PlotSpec]): Builds the step's specification.
        expected_error (type[Exception] | None): Error the step demonstrates, if any.
    """

    name: str
    description: str
    build: Callable[[pl.DataFrame], PlotSpec]
    expected_error: type[Exception] | None = None


# --- geoms and aesthetic mapping ---------------------------------------------


def empty_base(gap: pl.DataFrame) -> PlotSpec:
    return create_base(gap, aes(x=INCOME, y=LIFE_EXPECTANCY))


def scatter(gap: pl.DataFrame) -> PlotSpec:
    return empty_base(gap) + geom_point()


def _log_base(gap: pl.DataFrame) -> PlotSpec:
    return create_base(gap, aes(x=log(INCOME), y=LIFE_EXPECTANCY))


def log_income(gap: pl.DataFrame) -> PlotSpec:
    return _log_base(gap) + geom_point()


def smooth(gap: pl.DataFrame) -> PlotSpec:
    return log_income(gap) + geom_smooth(method="lm")


def rug(gap: pl.DataFrame) -> PlotSpec:
    return log_income(gap) + geom_rug()


def text_missing_label(gap: pl.DataFrame) -> PlotSpec:
    return log_income(gap) + geom_text()


def text_labels(gap: pl.DataFrame) -> PlotSpec:
    return log_income(gap) + geom_text(aes(label=COUNTRY))


# --- mapping vs. fixed aesthetics --------------------------------------------


def constant_in_aes(gap: pl.DataFrame) -> PlotSpec:
    return _log_base(gap) + geom_point(aes(size=2, color=lit("red")))


def mapped_color(gap: pl.DataFrame) -> PlotSpec:
    return _log_base(gap) + geom_point(aes(color=REGION))


def fixed_size(gap: pl.DataFrame) -> PlotSpec:
    return _log_base(gap) + geom_point(aes(color=REGION), size=3)


def bubbles(gap: pl.DataFrame) -> PlotSpec:
    return (
        _log_base(gap)
        + geom_point(aes(size=POPULATION, color=REGION))
        + geom_text(aes(label=COUNTRY, size=POPULATION))
    )


# --- scales and themes --------------------------------------------------------


def sized(gap: pl.DataFrame) -> PlotSpec:
    return bubbles(gap) + scale_size(range=(2, 20))


def manual_colors(gap: pl.DataFrame) -> PlotSpec:
    return sized(gap) + scale_color_manual(REGION_COLORS)


def minimal(gap: pl.DataFrame) -> PlotSpec:
    return manual_colors(gap) + theme_minimal()


def economist(gap: pl.DataFrame) -> PlotSpec:
    return manual_colors(gap) + theme_economist_white()


# --- the little things ----------------------------------------------------------


def polished(gap: pl.DataFrame) -> PlotSpec:
    """Outlined bubbles filled by region; only the region legend remains."""
    return (
        _log_base(gap)
        + geom_point(aes(size=POPULATION, fill=REGION), shape=21, color="black")
        + geom_text(aes(label=COUNTRY, size=POPULATION), show_legend=False)
        + scale_size(range=(2, 20), guide="none")
        + scale_fill_manual(
            REGION_COLORS, name="World Region", levels=REGION_LEVELS, labels=REGION_LABELS
        )
        + theme_minimal()
    )


def finished(gap: pl.DataFrame) -> PlotSpec:
    """Titles, dollar-labelled income axis, fixed life expectancy range, bold title."""
    return (
        polished(gap)
        + scale_x_continuous(
            breaks=[math.log(v) for v in INCOME_BREAKS],
            labels=[f"${v:,}" for v in INCOME_BREAKS],
        )
        + coord_cartesian(ylim=(45, 90))
        + labs(
            title="Income vs. life expectancy around the world",
            subtitle="Bubble size shows population (2015)",
            caption="Source: Gapminder",
            x="Income per person (GDP/capita, PPP$ inflation-adjusted, log scale)",
            y="Life expectancy (years)",
        )
        + theme(title_weight="bold", title_size=18, axis_title_weight="bold")
    )


CHECKPOINTS: tuple[Checkpoint, ...] = (
    Checkpoint("empty_base", "Data and position mapping only: axes, no geoms.", empty_base),
    Checkpoint("scatter", "Add points: income vs. life expectancy.", scatter),
    Checkpoint("log_income", "Map x to log(income) for a log-like axis.", log_income),
    Checkpoint("smooth", "Add a linear regression line (inherits x and y).", smooth),
    Checkpoint("rug", "Add marginal rug ticks.", rug),
    Checkpoint(
        "text_missing_label",
        "Text without a label mapping fails: label is required.",
        text_missing_label,
        expected_error=MissingRequiredAestheticError,
    ),
    Checkpoint("text_labels", "Text labels mapped to country names.", text_labels),
    Checkpoint(
        "constant_in_aes",
        "Constants inside aes() are mapped like data (a legend for 'red').",
        constant_in_aes,
    ),
    Checkpoint("mapped_color", "Color mapped to world region.", mapped_color),
    Checkpoint("fixed_size", "Mapped color plus a fixed size for every point.", fixed_size),
    Checkpoint("bubbles", "Bubbles sized by population, labels sized alike.", bubbles),
    Checkpoint("sized", "Size scale with a 2-20 mm range.", sized),
    Checkpoint("manual_colors", "Manual region colors.", manual_colors),
    Checkpoint("minimal", "Minimal theme.", minimal),
    Checkpoint("economist", "Economist-style theme.", economist),
    Checkpoint("polished", "Outlined bubbles, one region legend.", polished),
    Checkpoint("finished", "Titles, axis labels and formatted breaks.", finished),
)

_BY_NAME: dict[str, Checkpoint] = {cp.name: cp for cp in CHECKPOINTS}


def get_checkpoint(name: str) -> Checkpoint:
    """
    Look up a checkpoint by name.

    Raises:
        KeyError: If no checkpoint has that name.
    """
    try:
        return _BY_NAME[name]
    except KeyError:
        raise KeyError(f"unknown checkpoint {name!r}; available: {list(_BY_NAME)}") from None


def list_checkpoints() -> list[Checkpoint]:
    """Return checkpoints in workshop order."""
    return list(CHECKPOINTS)
