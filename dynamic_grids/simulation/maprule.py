"""Apply one rule across the grid according to its capability class.

Each variant gets a ``RuleContext`` exposing only what its contract
allows: cell and neighborhood rules cannot see the grids at all (the
neighborhood window is passed to ``apply`` directly), partial rules get a
read-only source and write through ``set``/``add``. Writes from
cell-like rules land on their own cell only, so no two cells ever write
the same destination element.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import numpy as np

from dynamic_grids.domain.overflow import inbounds
from dynamic_grids.domain.rules import Chain, Rule, RuleKind
from dynamic_grids.simulation.grid import SimData


def _readonly(arr: np.ndarray) -> np.ndarray:
    view = arr.view()
    view.flags.writeable = False
    return view


class RuleContext:
    """Per-pass view of the simulation handed to a rule's ``apply``."""

    def __init__(self, data: SimData, rule: Rule, precalc: Any = None) -> None:
        partial = rule.kind in (RuleKind.PARTIAL, RuleKind.PARTIAL_NEIGHBORHOOD)
        self.t = data.t
        self.rng = data.rng
        self.shape = data.shape
        self.overflow = data.overflow
        self.padding = data.radius
        self.precalc = precalc
        self.source: np.ndarray | None = _readonly(data.source) if partial else None
        self.dest: np.ndarray | None = data.dest if partial else None
        self.center: tuple[int, ...] | None = None
        self._footprint = rule.radius if rule.kind is RuleKind.PARTIAL_NEIGHBORHOOD else None

    def inbounds(self, index: tuple[int, ...]) -> tuple[tuple[int, ...], bool]:
        return inbounds(index, self.shape, self.overflow)

    def _resolve(self, index: tuple[int, ...]) -> tuple[int, ...] | None:
        if self._footprint is not None and self.center is not None:
            distance = max(abs(i - c) for i, c in zip(index, self.center, strict=True))
            if distance > self._footprint:
                raise ValueError(
                    f"cell {index} is outside the radius-{self._footprint} footprint "
                    f"of {self.center}"
                )
        resolved, in_grid = self.inbounds(index)
        if not in_grid:
            return None
        return tuple(i + self.padding for i in resolved)

    def get(self, index: tuple[int, ...]) -> Any:
        """Read a source cell by logical index; overflowing cells read as zero
        under ``REMOVE``."""
        if self.source is None:
            raise ValueError("only partial rules may read other cells")
        physical = self._resolve(index)
        if physical is None:
            return self.source.dtype.type(0)
        return self.source[physical]

    def set(self, index: tuple[int, ...], value: Any) -> bool:
        """Write a destination cell. Returns ``False`` if the write was dropped."""
        physical = self._writable(index)
        if physical is None:
            return False
        self.dest[physical] = value  # type: ignore[index]
        return True

    def add(self, index: tuple[int, ...], value: Any) -> bool:
        """Add to a destination cell. Returns ``False`` if the write was dropped."""
        physical = self._writable(index)
        if physical is None:
            return False
        self.dest[physical] += value  # type: ignore[index]
        return True

    def _writable(self, index: tuple[int, ...]) -> tuple[int, ...] | None:
        if self.dest is None:
            raise ValueError("only partial rules may write the destination")
        return self._resolve(index)


def _window(source: np.ndarray, physical: tuple[int, ...], radius: int) -> np.ndarray:
    return source[tuple(slice(p - radius, p + radius + 1) for p in physical)]


def _map_cell(data: SimData, rule: Rule, precalc: Any) -> None:
    ctx = RuleContext(data, rule, precalc)
    source, dest, pad = data.source, data.dest, data.radius
    for index in data.active_indices():
        physical = tuple(i + pad for i in index)
        dest[physical] = rule.apply(ctx, source[physical], index)


def _map_neighborhood(data: SimData, rule: Rule, precalc: Any) -> None:
    ctx = RuleContext(data, rule, precalc)
    source, dest, pad = _readonly(data.source), data.dest, data.radius
    hood_radius = rule.radius
    for index in data.active_indices():
        physical = tuple(i + pad for i in index)
        window = _window(source, physical, hood_radius)
        dest[physical] = rule.apply(ctx, source[physical], index, window)


def _map_chain(data: SimData, chain: Chain, precalc: Any) -> None:
    members = chain.rules
    precalcs = precalc if precalc is not None else (None,) * len(members)
    contexts = [RuleContext(data, rule, pc) for rule, pc in zip(members, precalcs, strict=True)]
    lead: Rule | None = None
    if members[0].kind is RuleKind.NEIGHBORHOOD:
        lead, lead_ctx = members[0], contexts[0]
        members, contexts = members[1:], contexts[1:]
    cell_steps = list(zip(members, contexts, strict=True))
    source, dest, pad = _readonly(data.source), data.dest, data.radius
    for index in data.active_indices():
        physical = tuple(i + pad for i in index)
        state = source[physical]
        if lead is not None:
            state = lead.apply(lead_ctx, state, index, _window(source, physical, lead.radius))
        for rule, ctx in cell_steps:
            state = rule.apply(ctx, state, index)
        dest[physical] = state


def _map_partial(data: SimData, rule: Rule, precalc: Any) -> None:
    np.copyto(data.dest, data.source)
    ctx = RuleContext(data, rule, precalc)
    source, pad = data.source, data.radius
    for index in data.active_indices():
        ctx.center = index
        rule.apply(ctx, source[tuple(i + pad for i in index)], index)
    ctx.center = None


_MAPPERS: dict[RuleKind, Callable[[SimData, Any, Any], None]] = {
    RuleKind.CELL: _map_cell,
    RuleKind.NEIGHBORHOOD: _map_neighborhood,
    RuleKind.CHAIN: _map_chain,
    RuleKind.PARTIAL: _map_partial,
    RuleKind.PARTIAL_NEIGHBORHOOD: _map_partial,
}


def maprule(data: SimData, rule: Rule, precalc: Any = None) -> None:
    """Apply ``rule`` to every active cell, writing into ``data.dest``.

    Cells in skipped blocks keep their source value, so skipping never
    changes the result.
    """
    mapper = _MAPPERS[rule.kind]
    if rule.kind in (RuleKind.CELL, RuleKind.NEIGHBORHOOD, RuleKind.CHAIN) and not (
        data.all_active()
    ):
        np.copyto(data.dest, data.source)
    mapper(data, rule, precalc)
