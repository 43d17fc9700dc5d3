"""Generalized cellular-automaton engine.

Rules of several capability classes run over padded, double-buffered
grids of any rank, with optional inactive-block skipping, concurrent
replicates and pluggable output sinks.
"""

from dynamic_grids.config import DisplayStyle, Reduction, SimConfig
from dynamic_grids.domain import (
    CellRule,
    Chain,
    CustomNeighborhood,
    LayeredCustomNeighborhood,
    Life,
    NeighborhoodRule,
    PartialNeighborhoodRule,
    PartialRule,
    RadialNeighborhood,
    RemoveOverflow,
    Rule,
    Ruleset,
    WrapOverflow,
)
from dynamic_grids.outputs import ArrayOutput, ParquetOutput, REPLOutput
from dynamic_grids.simulation import resume, sim

__all__ = [
    "ArrayOutput",
    "CellRule",
    "Chain",
    "CustomNeighborhood",
    "DisplayStyle",
    "LayeredCustomNeighborhood",
    "Life",
    "NeighborhoodRule",
    "ParquetOutput",
    "PartialNeighborhoodRule",
    "PartialRule",
    "REPLOutput",
    "RadialNeighborhood",
    "Reduction",
    "RemoveOverflow",
    "Rule",
    "Ruleset",
    "SimConfig",
    "WrapOverflow",
    "resume",
    "sim",
]
