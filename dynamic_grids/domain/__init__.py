"""Domain layer: neighborhoods, rules, overflow policies, and rulesets."""

from dynamic_grids.domain.neighborhoods import (
    CustomNeighborhood,
    LayeredCustomNeighborhood,
    Neighborhood,
    RadialNeighborhood,
    hoodsize,
)
from dynamic_grids.domain.overflow import (
    Overflow,
    RemoveOverflow,
    WrapOverflow,
    handle_overflow,
    inbounds,
)
from dynamic_grids.domain.rules import (
    CellRule,
    Chain,
    Life,
    NeighborhoodRule,
    PartialNeighborhoodRule,
    PartialRule,
    Rule,
    RuleKind,
    is_fusable,
    radius,
)
from dynamic_grids.domain.ruleset import Ruleset

__all__ = [
    "CellRule",
    "Chain",
    "CustomNeighborhood",
    "LayeredCustomNeighborhood",
    "Life",
    "Neighborhood",
    "NeighborhoodRule",
    "Overflow",
    "PartialNeighborhoodRule",
    "PartialRule",
    "RadialNeighborhood",
    "RemoveOverflow",
    "Rule",
    "RuleKind",
    "Ruleset",
    "WrapOverflow",
    "handle_overflow",
    "hoodsize",
    "inbounds",
    "is_fusable",
    "radius",
]
