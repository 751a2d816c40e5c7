from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import polars as pl

from plotgrammar.config import IMAGE_FORMATS, Settings
from plotgrammar.core.errors import PlotGrammarError
from plotgrammar.io import load_sample, read_dataset
from plotgrammar.io.dataset import WORKSHOP_COLUMNS
from plotgrammar.log import configure_logging
from plotgrammar.viz.save import save_as

from .workshop import Checkpoint, get_checkpoint, list_checkpoints

logger = logging.getLogger(__name__)


def _load_data(path: str | None, settings: Settings) -> pl.DataFrame:
    """Read --data, else the configured data_path, else the bundled sample.

    Args:
        path: Explicit dataset path from the command line.
        settings: Supplies data_path and CSV parsing options.
    """
    if path:
        return read_dataset(path, settings=settings, required_columns=WORKSHOP_COLUMNS)
    configured = Path(settings.data_path)
    if configured.is_file():
        return read_dataset(configured, settings=settings, required_columns=WORKSHOP_COLUMNS)
    logger.info("%s not found; using the bundled sample", configured)
    return load_sample()


def _settings(config: str | None) -> Settings:
    s = Settings.load(config)
    configure_logging(s.log_level)
    return s


def _cmd_list(argv: list[str]) -> int:
    p = argparse.ArgumentParser(prog="list", description="List workshop checkpoints.")
    p.parse_args(argv)
    for cp in list_checkpoints():
        marker = " (expected error)" if cp.expected_error else ""
        print(f"{cp.name:<20} {cp.description}{marker}")
    return 0


def _render_one(cp: Checkpoint, gap: pl.DataFrame, out_dir: Path, fmt: str, s: Settings) -> bool:
    """Render a checkpoint; return False on an unexpected failure or a missing expected error."""
    try:
        spec = cp.build(gap)
        if cp.expected_error is not None:
            print(
                f"[ERROR] {cp.name}: expected {cp.expected_error.__name__} "
                "but the build succeeded",
                file=sys.stderr,
            )
            return False
        path = save_as(spec, out_dir / f"{cp.name}.{fmt}", image_format=fmt, settings=s)
    except PlotGrammarError as exc:
        if cp.expected_error is not None and isinstance(exc, cp.expected_error):
            print(f"[INFO] {cp.name}: raised {type(exc).__name__} as expected: {exc}")
            return True
        print(f"[ERROR] {cp.name}: {exc}", file=sys.stderr)
        return False
    print(f"[INFO] Wrote {cp.name} to {path}")
    return True


def _cmd_render(argv: list[str]) -> int:
    p = argparse.ArgumentParser(prog="render", description="Render workshop checkpoints.")
    which = p.add_mutually_exclusive_group(required=True)
    which.add_argument("--checkpoint", type=str, help="Checkpoint name (see `list`).")
    which.add_argument("--all", action="store_true", help="Render every checkpoint.")
    p.add_argument("--data", type=str, default=None, help="Dataset CSV (default: data_path).")
    p.add_argument("--out-dir", type=str, default=None, help="Output directory (default: out_dir).")
    p.add_argument("--format", dest="fmt", choices=IMAGE_FORMATS, default=None, help="Format.")
    p.add_argument("--config", type=str, default=None, help="Explicit TOML config path.")
    args = p.parse_args(argv)

    s = _settings(args.config)
    if args.all:
        cps = list_checkpoints()
    else:
        try:
            cps = [get_checkpoint(args.checkpoint)]
        except KeyError as exc:
            print(exc.args[0], file=sys.stderr)
            return 2

    gap = _load_data(args.data, s)
    out_dir = Path(args.out_dir or s.out_dir)
    fmt = args.fmt or s.image_format
    try:
        ok = [_render_one(cp, gap, out_dir, fmt, s) for cp in cps]
    except RuntimeError as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1
    return 0 if all(ok) else 1


def _cmd_show_data(argv: list[str]) -> int:
    p = argparse.ArgumentParser(prog="show-data", description="Show the head of the dataset.")
    p.add_argument("--data", type=str, default=None, help="Dataset CSV (default: data_path).")
    p.add_argument("--n", type=int, default=5, help="Rows to display.")
    p.add_argument("--config", type=str, default=None, help="Explicit TOML config path.")
    args = p.parse_args(argv)

    s = _settings(args.config)
    print(_load_data(args.data, s).head(args.n))
    return 0


def build_argparser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="plotgrammar-workshop", description="Grammar-of-graphics bubble chart workshop."
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("list")
    sub.add_parser("render")
    sub.add_parser("show-data")
    return p


def main(argv: list[str] | None = None) -> None:
    argv = list(sys.argv[1:] if argv is None else argv)
    if not argv:
        build_argparser().print_help()
        return
    cmd, rest = argv[0], argv[1:]
    if cmd == "list":
        code = _cmd_list(rest)
    elif cmd == "render":
        code = _cmd_render(rest)
    elif cmd == "show-data":
        code = _cmd_show_data(rest)
    else:
        print(f"Unknown command: {cmd}", file=sys.stderr)
        code = 2
    raise SystemExit(code)


if __name__ == "__main__":
    main()
