"""Rule variants and the life-like example rule.

Rules form a closed set of capability classes tagged by ``RuleKind``. The
sequencer dispatches on the tag and enforces each variant's contract:

- ``CellRule`` sees only the current cell and returns its new value.
- ``NeighborhoodRule`` also receives a read-only window of radius
  ``radius`` and returns the new centre value.
- ``PartialRule`` writes destination cells itself, after the engine has
  copied the source into the destination.
- ``PartialNeighborhoodRule`` is a partial rule whose writes stay within
  ``radius`` of the visited cell.
- ``Chain`` fuses cell rules (optionally led by one neighborhood rule)
  into a single pass with no intermediate writes.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum
from typing import TYPE_CHECKING, Any

import numpy as np

from dynamic_grids.domain.neighborhoods import Neighborhood, RadialNeighborhood

if TYPE_CHECKING:
    from dynamic_grids.simulation.grid import SimData
    from dynamic_grids.simulation.maprule import RuleContext


class RuleKind(Enum):
    """Capability class of a rule."""

    CELL = "cell"
    NEIGHBORHOOD = "neighborhood"
    PARTIAL = "partial"
    PARTIAL_NEIGHBORHOOD = "partial_neighborhood"
    CHAIN = "chain"


class Rule:
    """Base of every rule variant. Subclass one of the variants below."""

    kind: RuleKind

    assumes_inbounds: bool = False
    """Reads neighbours without checking the in-bounds flag."""

    @property
    def stationary(self) -> bool:
        """Output depends only on nearby cell values, not on the clock,
        random draws or a whole-grid ``precalc`` value.

        Rules that override ``precalc`` are not stationary. Subclasses may set
        a class attribute to override this.
        """
        return type(self).precalc is Rule.precalc

    @property
    def radius(self) -> int:
        return 0

    def precalc(self, data: SimData) -> Any:
        """Compute a value once per step, exposed to ``apply`` as ``data.precalc``."""
        return None


class CellRule(Rule):
    """A rule that reads and writes only the current cell."""

    kind = RuleKind.CELL

    def apply(self, data: RuleContext, state: Any, index: tuple[int, ...]) -> Any:
        raise NotImplementedError


def _resolve_neighborhood(neighborhood: Neighborhood | None, radius: int | None) -> Neighborhood:
    if neighborhood is None and radius is None:
        raise ValueError("neighborhood rules need a neighborhood or a radius")
    if radius is not None and radius < 0:
        raise ValueError("radius must be >= 0")
    if neighborhood is None:
        return RadialNeighborhood(radius)
    if radius is not None and radius != neighborhood.radius:
        raise ValueError(
            f"radius {radius} does not match neighborhood radius {neighborhood.radius}"
        )
    return neighborhood


class NeighborhoodRule(Rule):
    """A rule that reads a window around the current cell and returns the
    new value of that cell. It never writes the destination itself."""

    kind = RuleKind.NEIGHBORHOOD

    def __init__(self, neighborhood: Neighborhood | None = None, radius: int | None = None) -> None:
        self.neighborhood = _resolve_neighborhood(neighborhood, radius)

    @property
    def radius(self) -> int:
        return self.neighborhood.radius

    def apply(
        self, data: RuleContext, state: Any, index: tuple[int, ...], window: np.ndarray
    ) -> Any:
        raise NotImplementedError


class PartialRule(Rule):
    """A rule that writes whichever destination cells it chooses.

    The destination holds a copy of the source when the pass starts. Writes
    go through ``data.set`` and ``data.add``, which apply the overflow
    policy to the target coordinate.
    """

    kind = RuleKind.PARTIAL

    def apply(self, data: RuleContext, state: Any, index: tuple[int, ...]) -> None:
        raise NotImplementedError


class PartialNeighborhoodRule(PartialRule):
    """A partial rule whose reads and writes stay within ``radius``."""

    kind = RuleKind.PARTIAL_NEIGHBORHOOD

    def __init__(self, neighborhood: Neighborhood | None = None, radius: int | None = None) -> None:
        self.neighborhood = _resolve_neighborhood(neighborhood, radius)

    @property
    def radius(self) -> int:
        return self.neighborhood.radius


def is_fusable(rules: Iterable[Rule]) -> bool:
    """Whether ``rules`` can run as one fused per-cell pass."""
    kinds = [rule.kind for rule in rules]
    if not kinds:
        return False
    if kinds[0] is RuleKind.NEIGHBORHOOD:
        kinds = kinds[1:]
    return all(kind is RuleKind.CELL for kind in kinds)


class Chain(Rule):
    """Rules applied one after another to each cell in a single pass.

    Only cell rules, optionally preceded by one neighborhood rule, can be
    chained; the output of each member is the ``state`` of the next and only
    the final value is written.
    """

    kind = RuleKind.CHAIN

    def __init__(self, *rules: Rule) -> None:
        if len(rules) == 1 and not isinstance(rules[0], Rule):
            rules = tuple(rules[0])
        if not rules:
            raise ValueError("Chain needs at least one rule")
        for rule in rules:
            if not isinstance(rule, Rule):
                raise ValueError(f"Chain members must be rules, got {type(rule).__name__}")
        if not is_fusable(rules):
            kinds = ", ".join(rule.kind.value for rule in rules)
            raise ValueError(
                "Chain accepts cell rules, optionally led by one neighborhood rule; "
                f"got ({kinds})"
            )
        self.rules: tuple[Rule, ...] = tuple(rules)

    @property
    def radius(self) -> int:
        return self.rules[0].radius

    def precalc(self, data: SimData) -> tuple[Any, ...]:
        return tuple(rule.precalc(data) for rule in self.rules)

    @property
    def stationary(self) -> bool:
        return all(rule.stationary for rule in self.rules)

    @property
    def assumes_inbounds(self) -> bool:  # type: ignore[override]
        return any(rule.assumes_inbounds for rule in self.rules)

    def __len__(self) -> int:
        return len(self.rules)

    def __iter__(self):
        return iter(self.rules)


def radius(rule: Rule) -> int:
    """Return the radius of a rule, zero for rules without a neighborhood."""
    return rule.radius


class Life(NeighborhoodRule):
    """Game-of-life style rule.

    An empty cell becomes alive when its live-neighbour count is in ``b``;
    a live cell survives when the count is in ``s``. Returns a bool.
    """

    def __init__(
        self,
        neighborhood: Neighborhood | None = None,
        b: Iterable[int] = (3,),
        s: Iterable[int] = (2, 3),
    ) -> None:
        super().__init__(neighborhood if neighborhood is not None else RadialNeighborhood(1))
        self.b = frozenset(int(n) for n in b)
        self.s = frozenset(int(n) for n in s)
        for label, counts in (("b", self.b), ("s", self.s)):
            if any(n < 0 for n in counts):
                raise ValueError(f"{label} values must be >= 0")

    def apply(
        self, data: RuleContext, state: Any, index: tuple[int, ...], window: np.ndarray
    ) -> bool:
        count = int(self.neighborhood.neighbors(window))
        return count in (self.s if state else self.b)

    def __repr__(self) -> str:
        return f"Life(b={sorted(self.b)}, s={sorted(self.s)}, radius={self.radius})"
