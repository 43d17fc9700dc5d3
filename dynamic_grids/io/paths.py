"""Path helpers for frame files and exported images."""

from __future__ import annotations

from pathlib import Path


def resolve_within_base(path: Path, base_dir: Path) -> Path:
    """Resolve an export target, keeping it inside *base_dir*.

    Relative paths are taken relative to *base_dir*; absolute ones must
    already point into it. Raises :exc:`ValueError` otherwise.
    """
    base = base_dir.resolve()
    target = (base / path).resolve()
    if not target.is_relative_to(base):
        raise ValueError(f"export path {path} escapes base_dir {base_dir}")
    return target


def frames_path(out_dir: Path, name: str = "frames") -> Path:
    """Return path to a frame Parquet file within an output directory."""
    return Path(out_dir) / f"{name}.parquet"
