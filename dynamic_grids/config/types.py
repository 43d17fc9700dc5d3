"""Configuration dataclasses and enums for simulation runs.

The frozen dataclasses here parameterise the engine (block size, sparse
skipping, replicate seeding and reduction) and are validated on
construction so configuration errors surface before any step executes.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from dynamic_grids.config.constants import DEFAULT_BLOCK_SIZE, MAX_REPLICATES

__all__ = [
    "DisplayStyle",
    "MAX_REPLICATES",
    "Reduction",
    "SimConfig",
]


class Reduction(Enum):
    """Per-cell aggregation applied to replicate frames after each step."""

    MEAN = "mean"
    MEDIAN = "median"
    MAX = "max"
    MIN = "min"


class DisplayStyle(Enum):
    """Character set used by the terminal renderer."""

    BLOCK = "block"
    BRAILLE = "braille"


@dataclass(frozen=True)
class SimConfig:
    """Engine knobs shared by ``sim`` and ``resume``.

    ``sparse`` enables inactive-block skipping; it only takes effect when
    every rule in the ruleset is stationary. ``seed`` seeds the random
    streams of all replicates through one ``SeedSequence``.
    """

    block_size: int = DEFAULT_BLOCK_SIZE
    sparse: bool = True
    seed: int | None = None
    reduction: Reduction = Reduction.MEAN

    def __post_init__(self) -> None:
        if self.block_size < 1:
            raise ValueError("block_size must be >= 1")
        if self.seed is not None and self.seed < 0:
            raise ValueError("seed must be >= 0")
        if not isinstance(self.reduction, Reduction):
            raise ValueError("reduction must be a Reduction member")
