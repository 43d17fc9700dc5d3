"""CLI entrypoint: run a life-like rule on a random grid.

Supports ``--config path/to/config.json``. CLI arguments override
config-file values; config-file values override built-in defaults.
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

import matplotlib
import numpy as np

from dynamic_grids.config.constants import DEFAULT_BLOCK_SIZE, DEFAULT_FPS, DEFAULT_TSTOP
from dynamic_grids.config.types import DisplayStyle, Reduction, SimConfig
from dynamic_grids.domain.overflow import Overflow
from dynamic_grids.domain.rules import Life
from dynamic_grids.domain.ruleset import Ruleset
from dynamic_grids.io.paths import frames_path
from dynamic_grids.outputs.array import ArrayOutput
from dynamic_grids.outputs.base import Output
from dynamic_grids.outputs.parquet import ParquetOutput
from dynamic_grids.outputs.repl import REPLOutput
from dynamic_grids.simulation.engine import sim
from dynamic_grids.viz.render import savegif

logger = logging.getLogger(__name__)

OUTPUT_KINDS = ("array", "repl", "parquet", "gif")


def _parse_size(raw_size: str) -> tuple[int, int]:
    """Parse a grid size formatted as `WxH`; returns ``(height, width)``."""
    tokens = raw_size.lower().split("x")
    if len(tokens) != 2:
        raise ValueError("size must use WxH format")
    try:
        width, height = int(tokens[0]), int(tokens[1])
    except ValueError as exc:
        raise ValueError("size must use integer WxH values") from exc
    if width < 1 or height < 1:
        raise ValueError("size must be >= 1x1")
    return height, width


def _parse_counts(raw_values: str, label: str) -> tuple[int, ...]:
    """Parse comma-delimited non-negative neighbour counts; empty means none."""
    values: list[int] = []
    for part in (part.strip() for part in raw_values.split(",")):
        if not part:
            continue
        try:
            value = int(part)
        except ValueError as exc:
            raise ValueError(f"{label} must contain integers") from exc
        if value < 0:
            raise ValueError(f"{label} values must be >= 0")
        values.append(value)
    return tuple(values)


def _parse_enum(raw: str, enum_type: type, label: str):
    try:
        return enum_type(raw)
    except ValueError as exc:
        valid = ", ".join(member.value for member in enum_type)
        raise ValueError(f"{label} must be one of {valid}") from exc


def _coerce_bool(raw: object, key: str) -> bool:
    """Read a flag from JSON ``true``/``false`` or a yes/no style string."""
    if isinstance(raw, bool):
        return raw
    text = raw.strip().lower() if isinstance(raw, str) else None
    if text in {"1", "true", "yes", "on"}:
        return True
    if text in {"0", "false", "no", "off"}:
        return False
    raise ValueError(f"{key}: expected true or false, got {raw!r}")


def _coerce_int(raw: object, key: str) -> int:
    """Read a whole number; ``2.0`` is accepted, ``2.5`` and booleans are not."""
    if isinstance(raw, float) and raw.is_integer():
        return int(raw)
    if isinstance(raw, (int, str)) and not isinstance(raw, bool):
        return int(raw)
    raise ValueError(f"{key}: expected a whole number, got {raw!r}")


def _coerce_float(raw: object, key: str) -> float:
    if isinstance(raw, (int, float, str)) and not isinstance(raw, bool):
        return float(raw)
    raise ValueError(f"{key}: expected a number, got {raw!r}")


def _coerce_str(raw: object, key: str) -> str:
    """Read text; a JSON list such as ``[2, 3]`` becomes ``"2,3"``."""
    if isinstance(raw, list):
        return ",".join(_coerce_str(item, key) for item in raw)
    if isinstance(raw, (str, Path, int, float)) and not isinstance(raw, bool):
        return str(raw)
    raise ValueError(f"{key}: expected text, got {raw!r}")


def _get_val(cli_val: object, key: str, file_cfg: dict[str, object], default: object) -> object:
    """Command-line value if given, else the config file's, else ``default``."""
    if cli_val is not None:
        return cli_val
    return file_cfg.get(key, default)


def _get_optional_int(
    cli_val: int | None, key: str, file_cfg: dict[str, object]
) -> int | None:
    raw = _get_val(cli_val, key, file_cfg, None)
    return None if raw is None else _coerce_int(raw, key)


def _build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(description="Run a life-like cellular automaton")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="JSON config file (CLI args override file values)",
    )
    parser.add_argument("--size", type=str, default=None, help="grid size as WxH")
    parser.add_argument("--density", type=float, default=None)
    parser.add_argument("--birth", type=str, default=None, help="e.g. 3 or 3,6")
    parser.add_argument("--survive", type=str, default=None, help="e.g. 2,3")
    parser.add_argument(
        "--overflow", type=str, choices=[o.value for o in Overflow], default=None
    )
    parser.add_argument("--tstop", type=int, default=None)
    parser.add_argument("--fps", type=float, default=None)
    parser.add_argument("--replicates", type=int, default=None)
    parser.add_argument(
        "--reduction", type=str, choices=[r.value for r in Reduction], default=None
    )
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--sparse", action=argparse.BooleanOptionalAction, default=None)
    parser.add_argument("--block-size", type=int, default=None)
    parser.add_argument("--output", type=str, choices=OUTPUT_KINDS, default=None)
    parser.add_argument(
        "--style", type=str, choices=[s.value for s in DisplayStyle], default=None
    )
    parser.add_argument(
        "--out", type=Path, default=None, help="output directory or file for parquet/gif"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for a single simulation run."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    file_cfg: dict[str, object] = {}
    if args.config is not None:
        try:
            file_cfg = json.loads(Path(args.config).read_text())
        except FileNotFoundError:
            parser.error(f"Config file not found: {args.config}")
        except json.JSONDecodeError as exc:
            parser.error(f"Config file is not valid JSON: {args.config}: {exc}")

    try:
        shape = _parse_size(_coerce_str(_get_val(args.size, "size", file_cfg, "64x64"), "size"))
        density = _coerce_float(_get_val(args.density, "density", file_cfg, 0.3), "density")
        birth = _parse_counts(
            _coerce_str(_get_val(args.birth, "birth", file_cfg, "3"), "birth"), "birth"
        )
        survive = _parse_counts(
            _coerce_str(_get_val(args.survive, "survive", file_cfg, "2,3"), "survive"), "survive"
        )
        overflow = _parse_enum(
            _coerce_str(_get_val(args.overflow, "overflow", file_cfg, "remove"), "overflow"),
            Overflow,
            "overflow",
        )
        tstop = _coerce_int(_get_val(args.tstop, "tstop", file_cfg, DEFAULT_TSTOP), "tstop")
        fps = _coerce_float(_get_val(args.fps, "fps", file_cfg, DEFAULT_FPS), "fps")
        nreplicates = _get_optional_int(args.replicates, "replicates", file_cfg)
        reduction = _parse_enum(
            _coerce_str(_get_val(args.reduction, "reduction", file_cfg, "mean"), "reduction"),
            Reduction,
            "reduction",
        )
        seed = _get_optional_int(args.seed, "seed", file_cfg)
        sparse = _coerce_bool(_get_val(args.sparse, "sparse", file_cfg, True), "sparse")
        block_size = _coerce_int(
            _get_val(args.block_size, "block_size", file_cfg, DEFAULT_BLOCK_SIZE), "block_size"
        )
        output_kind = _coerce_str(_get_val(args.output, "output", file_cfg, "array"), "output")
        style = _parse_enum(
            _coerce_str(_get_val(args.style, "style", file_cfg, "block"), "style"),
            DisplayStyle,
            "style",
        )
        out_raw = _get_val(args.out, "out", file_cfg, None)
        if output_kind not in OUTPUT_KINDS:
            raise ValueError(f"output must be one of {', '.join(OUTPUT_KINDS)}")
        if not 0.0 <= density <= 1.0:
            raise ValueError("density must be in [0, 1]")
        config = SimConfig(block_size=block_size, sparse=sparse, seed=seed, reduction=reduction)
        ruleset = Ruleset.of(Life(b=birth, s=survive), overflow=overflow)
    except ValueError as exc:
        parser.error(str(exc))

    init = np.random.default_rng(seed).random(shape) < density
    out_path: Path | None = None
    output: Output
    if output_kind == "repl":
        output = REPLOutput(tstop=tstop, fps=fps, style=style)
    elif output_kind == "parquet":
        out_dir = Path(_coerce_str(out_raw, "out")) if out_raw is not None else Path("data")
        out_path = out_dir if out_dir.suffix == ".parquet" else frames_path(out_dir)
        output = ParquetOutput(out_path, tstop=tstop, fps=fps)
    else:
        output = ArrayOutput(tstop=tstop, fps=fps)

    logger.info("grid %s, density %.2f, %s", shape, density, ruleset.rules[0])
    sim(output, ruleset, init, nreplicates=nreplicates, config=config)
    if isinstance(output, ParquetOutput):
        output.close()
    if output_kind == "gif":
        target = Path(_coerce_str(out_raw, "out")) if out_raw is not None else Path("life.gif")
        matplotlib.use("Agg")
        out_path = savegif(target, output)

    summary = {
        "output": output_kind,
        "shape": list(shape),
        "t": output.clock,
        "population": float(np.sum(output.last_frame)),
        "path": str(out_path) if out_path is not None else None,
    }
    print(json.dumps(summary, ensure_ascii=False, indent=2))


if __name__ == "__main__":
    main()
