"""
Core package aggregator for plotgrammar contracts (grammar, geoms, mappings, scales, themes).

## Contracts (single source of truth)
- Grammar — channel and geom enums, normalization helpers.
- Geoms — frozen descriptors: mark, required/accepted channels, default params.
- Expressions/Aes — lazy per-record mapping expressions and immutable channel mappings.
- Scales — pydantic models for continuous, discrete and manual scale policies.
- Themes — element vocabulary, presets and key-level merging.
- Hashing — canonical JSON utilities for describe()/fingerprint().

## Notes
- Zero-IO policy: stdlib + pydantic + polars expressions only; no file/network IO.
- Naming policy: enum `.value`, theme element and preset names are lower_snake.

## Downstream usage
- plotgrammar.viz — builds PlotSpec values from these contracts and renders them with Altair.
- plotgrammar.lab — composes workshop checkpoints from `aes`, `geom_*`, `scale_*` and `theme_*`.

## Examples
```python
from plotgrammar.core.aes import aes
from plotgrammar.core.expr import log
from plotgrammar.core.geoms import get_geom

m = aes(x=log("income_per_capita_2011"), y="life_expectancy_2016")
get_geom("text").missing(m)  # ['label']
```
"""
