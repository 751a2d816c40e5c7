"""
Runtime configuration for plotgrammar.

Defines Settings, a frozen dataclass carrying the workshop's runtime configuration:
where the dataset lives, how it is parsed, where artifacts go and how charts are
sized and themed. Defaults are sourced from plotgrammar.core.constants.

Precedence
- environment (PLOTGRAMMAR_<FIELD>) > TOML > defaults.
- TOML search order: ./plotgrammar.toml (a [plotgrammar] table or top-level keys),
  then ./pyproject.toml under [tool.plotgrammar].

Notes
- Loose mappings (env/TOML) ignore values that cannot be parsed, keeping the previous
  value. Explicit construction is checked with Settings.validate().
- Import DAG: depends only on stdlib and plotgrammar.core.
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Literal

from plotgrammar.core.constants import DEFAULT_HEIGHT, DEFAULT_WIDTH
from plotgrammar.core.errors import ConfigError

__all__ = ["Settings", "ImageFormat", "IMAGE_FORMATS"]

logger = logging.getLogger(__name__)

ImageFormat = Literal["html", "json", "png", "svg"]
IMAGE_FORMATS: tuple[str, ...] = ("html", "json", "png", "svg")
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Settings:
    """
    Runtime settings for loading, rendering and saving charts.

    Attributes:
        data_path (str): Delimited-text dataset used by the workshop.
        out_dir (str): Directory where rendered artifacts are written.
        csv_separator (str): Single-character field separator.
        null_values (tuple[str, ...]): Cell values read as null.
        width (int): Chart width in px.
        height (int): Chart height in px.
        image_format (ImageFormat): Default artifact format.
        scale_factor (float): Resolution multiplier for PNG export.
        theme (str): Preset theme applied under every specification's own theme.
        log_level (str): Level for the `plotgrammar` logger.

    Examples:
        >>> from plotgrammar.config import Settings
        >>> Settings(width=800).width
        800
    """

    data_path: str = "data/gap_data_clean.csv"
    out_dir: str = "out"
    csv_separator: str = ","
    null_values: tuple[str, ...] = ("NA", "")
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    image_format: ImageFormat = "html"
    scale_factor: float = 1.0
    theme: str = "gray"
    log_level: str = "INFO"

    def validate(self) -> Settings:
        """
        Check explicit values.

        Returns:
            Settings: self, for chaining.

        Raises:
            ConfigError: On an invalid value.
        """
        if len(self.csv_separator) != 1:
            raise ConfigError(
                f"csv_separator must be a single character (got {self.csv_separator!r})"
            )
        if self.width < 1 or self.height < 1:
            raise ConfigError(f"width/height must be >= 1 (got {self.width}x{self.height})")
        if self.image_format not in IMAGE_FORMATS:
            raise ConfigError(
                f"image_format must be one of {IMAGE_FORMATS} (got {self.image_format!r})"
            )
        if not self.scale_factor > 0:
            raise ConfigError(f"scale_factor must be > 0 (got {self.scale_factor!r})")
        if self.log_level.upper() not in _LOG_LEVELS:
            raise ConfigError(f"log_level must be one of {_LOG_LEVELS} (got {self.log_level!r})")
        return self

    # Configuration loaders (env/TOML) with precedence: env > TOML > defaults.

    @classmethod
    def _apply_mapping(cls, base: Settings, cfg: dict[str, Any] | None) -> Settings:
        """Apply a loose config mapping onto Settings, returning a new instance."""
        if not isinstance(cfg, dict):
            return base

        s = base

        for key in ("data_path", "out_dir", "theme"):
            if key in cfg and isinstance(cfg[key], str) and cfg[key]:
                s = replace(s, **{key: cfg[key]})

        if "csv_separator" in cfg and isinstance(cfg["csv_separator"], str):
            sep = cfg["csv_separator"]
            if sep in ("\\t", "tab"):
                sep = "\t"
            if len(sep) == 1:
                s = replace(s, csv_separator=sep)

        if "null_values" in cfg:
            v = cfg["null_values"]
            if isinstance(v, str):
                v = v.split(",")
            if isinstance(v, (list, tuple)):
                s = replace(s, null_values=tuple(str(x) for x in v))

        for key in ("width", "height"):
            if key in cfg:
                try:
                    n = int(cfg[key])
                except (TypeError, ValueError):
                    continue
                if n >= 1:
                    s = replace(s, **{key: n})

        if "image_format" in cfg and isinstance(cfg["image_format"], str):
            fmt = cfg["image_format"].strip().lower()
            if fmt in IMAGE_FORMATS:
                s = replace(s, image_format=fmt)  # type: ignore[arg-type]

        if "scale_factor" in cfg:
            try:
                f = float(cfg["scale_factor"])
            except (TypeError, ValueError):
                f = 0.0
            if f > 0:
                s = replace(s, scale_factor=f)

        if "log_level" in cfg and isinstance(cfg["log_level"], str):
            lvl = cfg["log_level"].strip().upper()
            if lvl in _LOG_LEVELS:
                s = replace(s, log_level=lvl)

        return s

    @classmethod
    def from_env(cls, base: Settings | None = None, prefix: str = "PLOTGRAMMAR_") -> Settings:
        """
        Build Settings from environment variables.

        Precedence is env > base (if provided) > defaults.

        Recognized variables:
            - PLOTGRAMMAR_DATA_PATH
            - PLOTGRAMMAR_OUT_DIR
            - PLOTGRAMMAR_CSV_SEPARATOR ("\\t" or "tab" for tab)
            - PLOTGRAMMAR_NULL_VALUES (comma-separated)
            - PLOTGRAMMAR_WIDTH / PLOTGRAMMAR_HEIGHT
            - PLOTGRAMMAR_IMAGE_FORMAT ("html" | "json" | "png" | "svg")
            - PLOTGRAMMAR_SCALE_FACTOR
            - PLOTGRAMMAR_THEME
            - PLOTGRAMMAR_LOG_LEVEL
        """
        s = base or cls()
        mapping: dict[str, Any] = {}
        for key in (
            "data_path",
            "out_dir",
            "csv_separator",
            "null_values",
            "width",
            "height",
            "image_format",
            "scale_factor",
            "theme",
            "log_level",
        ):
            v = os.getenv(prefix + key.upper())
            if v:
                mapping[key] = v
        return cls._apply_mapping(s, mapping)

    @classmethod
    def from_toml(cls, path: str | os.PathLike[str] | None = None) -> Settings:
        """
        Build Settings from a TOML file.

        Search order when `path` is None:
            1) ./plotgrammar.toml (with either a [plotgrammar] table or direct keys)
            2) ./pyproject.toml under [tool.plotgrammar]

        Returns defaults if no file is present or the file cannot be parsed.
        """
        s = cls()

        cand: list[Path] = []
        if path is not None:
            cand.append(Path(path))
        else:
            cand.append(Path.cwd() / "plotgrammar.toml")
            cand.append(Path.cwd() / "pyproject.toml")

        cfg: dict[str, Any] | None = None
        for p in cand:
            if not p.exists():
                continue
            try:
                with p.open("rb") as fh:
                    data = tomllib.load(fh)
            except (OSError, tomllib.TOMLDecodeError) as exc:
                logger.warning("ignoring unreadable config %s: %s", p, exc)
                continue
            if p.name == "pyproject.toml":
                tool = data.get("tool", {})
                cfg = tool.get("plotgrammar") if isinstance(tool, dict) else None
            elif isinstance(data.get("plotgrammar"), dict):
                cfg = data["plotgrammar"]
            else:
                cfg = data
            if cfg:
                logger.debug("loaded settings from %s", p)
                break

        return cls._apply_mapping(s, cfg)

    @classmethod
    def load(cls, path: str | os.PathLike[str] | None = None) -> Settings:
        """
        Load Settings applying precedence: environment > TOML > defaults.

        Args:
            path: Optional explicit TOML path. If None, search defaults
                (plotgrammar.toml, pyproject.toml).

        Returns:
            Settings
        """
        s = cls.from_toml(path)
        s = cls.from_env(base=s)
        return s
