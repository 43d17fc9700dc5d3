"""Run every rule of a ruleset once per step, swapping buffers between rules.

After each rule the padding of the freshly written grid is refreshed, the
cells it changed are folded into a step-wide change mask, and the buffers
swap so the next rule reads what this one wrote. At the end of the step
the change mask drives the activity bitmap for the next step.
"""

from __future__ import annotations

import logging

import numpy as np

from dynamic_grids.domain.overflow import handle_overflow
from dynamic_grids.domain.rules import Rule, RuleKind
from dynamic_grids.domain.ruleset import Ruleset
from dynamic_grids.simulation.grid import SimData, block_expand, block_reduce, dilate
from dynamic_grids.simulation.maprule import maprule

logger = logging.getLogger(__name__)


def _footprint(data: SimData, rule: Rule) -> np.ndarray | None:
    """Blocks a partial rule may have written, or ``None`` for other rules.

    Partial writes are not tracked cell by cell: a ``PartialRule`` may touch
    the whole grid, a ``PartialNeighborhoodRule`` anything within its radius
    of a visited block.
    """
    if rule.kind is RuleKind.PARTIAL:
        return np.ones_like(data.status)
    if rule.kind is RuleKind.PARTIAL_NEIGHBORHOOD:
        visited = block_expand(data.status, data.block_size, data.shape)
        return block_reduce(dilate(visited, rule.radius, data.overflow), data.block_size)
    return None


def updatestatus(data: SimData, footprints: list[np.ndarray]) -> None:
    """Recompute the activity bitmap from this step's changes.

    A block stays active when a cell within ``data.reach`` of it changed, or
    when a partial rule's footprint covers it.
    """
    touched = dilate(data.changed, data.reach, data.overflow)
    status = block_reduce(touched, data.block_size)
    for footprint in footprints:
        status |= footprint
    data.status[...] = status


def sequencerules(data: SimData, ruleset: Ruleset) -> SimData:
    """Apply every rule in order for one step.

    Returns ``data`` with the step's result in ``data.source``.
    """
    data.changed[...] = False
    footprints: list[np.ndarray] = []
    interior = data.interior
    for rule in ruleset.rules:
        precalc = rule.precalc(data)
        maprule(data, rule, precalc)
        handle_overflow(data.dest, data.radius, data.overflow)
        if data.sparse:
            data.changed |= data.dest[interior] != data.source[interior]
            footprint = _footprint(data, rule)
            if footprint is not None:
                footprints.append(footprint)
        data.swap()
    if data.sparse:
        updatestatus(data, footprints)
        logger.debug(
            "t=%d: %d of %d blocks active", data.t, int(data.status.sum()), data.status.size
        )
    return data
