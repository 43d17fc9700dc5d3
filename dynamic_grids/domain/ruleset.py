"""Ruleset: an ordered, immutable sequence of rules plus an overflow policy."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

import numpy as np

from dynamic_grids.domain.overflow import Overflow, RemoveOverflow
from dynamic_grids.domain.rules import Chain, Rule, RuleKind


@dataclass(frozen=True, eq=False)
class Ruleset:
    """Rules run in order every step, with an optional default init array.

    ``rules`` is frozen into a tuple and ``init`` into a read-only copy, so
    neither can change while a simulation runs.
    """

    rules: tuple[Rule, ...]
    overflow: Overflow = RemoveOverflow
    init: np.ndarray | None = None

    def __post_init__(self) -> None:
        rules = (self.rules,) if isinstance(self.rules, Rule) else tuple(self.rules)
        if not rules:
            raise ValueError("Ruleset needs at least one rule")
        for rule in rules:
            if not isinstance(rule, Rule):
                raise ValueError(f"Ruleset members must be rules, got {type(rule).__name__}")
        if not isinstance(self.overflow, Overflow):
            raise ValueError("overflow must be WrapOverflow or RemoveOverflow")
        object.__setattr__(self, "rules", rules)
        if self.init is not None:
            init = np.array(self.init, copy=True)
            init.flags.writeable = False
            object.__setattr__(self, "init", init)

    @classmethod
    def of(
        cls, *rules: Rule, overflow: Overflow = RemoveOverflow, init: np.ndarray | None = None
    ) -> Ruleset:
        """Build a ruleset from positional rules."""
        return cls(rules=rules, overflow=overflow, init=init)

    def maxradius(self) -> int:
        """Largest radius of any rule; the padding width of the grids."""
        return max(rule.radius for rule in self.rules)

    def reach(self) -> int:
        """Farthest a single step can carry a change: the sum of rule radii."""
        return sum(rule.radius for rule in self.rules)

    def ruletypes(self) -> tuple[RuleKind, ...]:
        """Return the capability class of each rule, in order."""
        return tuple(rule.kind for rule in self.rules)

    def is_stationary(self) -> bool:
        return all(rule.stationary for rule in self.rules)

    def ndims(self) -> set[int]:
        """Grid ranks declared by the rules' custom neighborhoods."""
        declared: set[int] = set()
        for rule in _flatten(self.rules):
            hood = getattr(rule, "neighborhood", None)
            if hood is not None and hood.ndims is not None:
                declared.add(hood.ndims)
        return declared

    def __iter__(self):
        return iter(self.rules)

    def __len__(self) -> int:
        return len(self.rules)


def _flatten(rules: Iterable[Rule]) -> list[Rule]:
    flat: list[Rule] = []
    for rule in rules:
        if isinstance(rule, Chain):
            flat.extend(rule.rules)
        else:
            flat.append(rule)
    return flat
