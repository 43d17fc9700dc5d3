"""Tests for per-variant rule application and the rule context."""

from __future__ import annotations

import numpy as np
import pytest

from dynamic_grids.domain.overflow import RemoveOverflow, WrapOverflow
from dynamic_grids.domain.rules import (
    CellRule,
    Chain,
    NeighborhoodRule,
    PartialNeighborhoodRule,
    PartialRule,
)
from dynamic_grids.domain.ruleset import Ruleset
from dynamic_grids.simulation.grid import simdata
from dynamic_grids.simulation.maprule import RuleContext, maprule


class AddOne(CellRule):
    def apply(self, data, state, index):
        return state + 1


class Triple(CellRule):
    def apply(self, data, state, index):
        return state * 3


class HoodSum(NeighborhoodRule):
    def apply(self, data, state, index, window):
        return self.neighborhood.neighbors(window)


class ShiftRight(PartialRule):
    """Moves every non-zero cell one column right."""

    def apply(self, data, state, index):
        if state:
            data.set(index, 0)
            data.add((index[0], index[1] + 1), state)


class Reacher(PartialNeighborhoodRule):
    def apply(self, data, state, index):
        if state:
            data.set((index[0], index[1] + 2), 1)


def _result(data):
    data.swap()
    return data.frame()


class TestCellAndNeighborhood:
    def test_cell_rule_maps_every_cell(self) -> None:
        data = simdata(Ruleset.of(AddOne()), np.arange(4).reshape(2, 2))
        maprule(data, AddOne())
        assert _result(data).tolist() == [[1, 2], [3, 4]]

    def test_neighborhood_rule_reads_window(self) -> None:
        init = np.ones((3, 3), dtype=int)
        rule = HoodSum(radius=1)
        data = simdata(Ruleset.of(rule), init)
        maprule(data, rule)
        assert _result(data).tolist() == [[3, 5, 3], [5, 8, 5], [3, 5, 3]]

    def test_neighborhood_rule_under_wrap(self) -> None:
        rule = HoodSum(radius=1)
        data = simdata(Ruleset.of(rule, overflow=WrapOverflow), np.ones((3, 3), dtype=int))
        maprule(data, rule)
        assert (_result(data) == 8).all()

    def test_window_is_read_only(self) -> None:
        class Vandal(NeighborhoodRule):
            def apply(self, data, state, index, window):
                window[0, 0] = 9
                return state

        rule = Vandal(radius=1)
        data = simdata(Ruleset.of(rule), np.zeros((3, 3), dtype=int))
        with pytest.raises(ValueError):
            maprule(data, rule)

    def test_cell_rules_cannot_touch_buffers(self) -> None:
        class Snoop(CellRule):
            def apply(self, data, state, index):
                return data.get((0, 0))

        rule = Snoop()
        data = simdata(Ruleset.of(rule), np.zeros((2, 2)))
        assert RuleContext(data, rule).source is None
        with pytest.raises(ValueError, match="only partial rules"):
            maprule(data, rule)

    def test_precalc_reaches_apply(self) -> None:
        class Offset(CellRule):
            def apply(self, data, state, index):
                return state + data.precalc

        rule = Offset()
        data = simdata(Ruleset.of(rule), np.zeros((2, 2), dtype=int))
        maprule(data, rule, precalc=7)
        assert (_result(data) == 7).all()

    def test_context_exposes_clock_and_rng(self) -> None:
        rng = np.random.default_rng(0)
        data = simdata(Ruleset.of(AddOne()), np.zeros(3), rng=rng, t=4)
        ctx = RuleContext(data, AddOne())
        assert ctx.t == 4
        assert ctx.rng is rng
        assert ctx.shape == (3,)


class TestChain:
    def test_chain_of_one_equals_rule(self) -> None:
        init = np.arange(6).reshape(2, 3)
        alone = simdata(Ruleset.of(AddOne()), init)
        maprule(alone, AddOne())
        chained = simdata(Ruleset.of(Chain(AddOne())), init)
        maprule(chained, Chain(AddOne()))
        assert np.array_equal(_result(alone), _result(chained))

    def test_chain_matches_sequential_passes(self) -> None:
        init = np.arange(9).reshape(3, 3)
        sequential = simdata(Ruleset.of(AddOne(), Triple()), init)
        maprule(sequential, AddOne())
        sequential.swap()
        maprule(sequential, Triple())
        fused = simdata(Ruleset.of(Chain(AddOne(), Triple())), init)
        maprule(fused, Chain(AddOne(), Triple()))
        assert np.array_equal(_result(sequential), _result(fused))
        assert fused.frame()[0, 0] == 3

    def test_neighborhood_led_chain(self) -> None:
        chain = Chain(HoodSum(radius=1), AddOne())
        data = simdata(Ruleset.of(chain), np.ones((3, 3), dtype=int))
        maprule(data, chain, precalc=(None, None))
        assert _result(data)[1, 1] == 9


class TestPartial:
    def test_dest_prefilled_and_writes_land(self) -> None:
        init = np.zeros((2, 4), dtype=int)
        init[0, 0] = 5
        init[1, 2] = 1
        data = simdata(Ruleset.of(ShiftRight()), init)
        maprule(data, ShiftRight())
        assert _result(data).tolist() == [[0, 5, 0, 0], [0, 0, 0, 1]]

    def test_remove_drops_writes_off_the_grid(self) -> None:
        init = np.zeros((1, 3), dtype=int)
        init[0, 2] = 4
        data = simdata(Ruleset.of(ShiftRight(), overflow=RemoveOverflow), init)
        maprule(data, ShiftRight())
        assert _result(data).tolist() == [[0, 0, 0]]

    def test_wrap_moves_writes_across_the_edge(self) -> None:
        init = np.zeros((1, 3), dtype=int)
        init[0, 2] = 4
        data = simdata(Ruleset.of(ShiftRight(), overflow=WrapOverflow), init)
        maprule(data, ShiftRight())
        assert _result(data).tolist() == [[4, 0, 0]]

    def test_source_is_read_only(self) -> None:
        rule = ShiftRight()
        data = simdata(Ruleset.of(rule), np.zeros((2, 2)))
        ctx = RuleContext(data, rule)
        assert ctx.source is not None and not ctx.source.flags.writeable
        assert ctx.dest is data.dest

    def test_get_reads_zero_outside_under_remove(self) -> None:
        rule = ShiftRight()
        data = simdata(Ruleset.of(rule), np.ones((2, 2), dtype=int))
        ctx = RuleContext(data, rule)
        assert ctx.get((-1, 0)) == 0
        assert ctx.get((1, 1)) == 1

    def test_set_and_add_report_dropped_writes(self) -> None:
        rule = ShiftRight()
        data = simdata(Ruleset.of(rule), np.zeros((2, 2), dtype=int))
        ctx = RuleContext(data, rule)
        assert ctx.set((0, 0), 1) is True
        assert ctx.add((5, 5), 1) is False

    def test_partial_neighborhood_write_outside_footprint(self) -> None:
        rule = Reacher(radius=1)
        init = np.zeros((3, 5), dtype=int)
        init[1, 0] = 1
        data = simdata(Ruleset.of(rule), init)
        with pytest.raises(ValueError, match="footprint"):
            maprule(data, rule)

    def test_partial_neighborhood_write_inside_footprint(self) -> None:
        rule = Reacher(radius=2)
        init = np.zeros((3, 5), dtype=int)
        init[1, 0] = 1
        data = simdata(Ruleset.of(rule), init)
        maprule(data, rule)
        assert _result(data)[1, 2] == 1


def test_skipped_blocks_keep_source_values() -> None:
    init = np.arange(16).reshape(4, 4)
    data = simdata(Ruleset.of(AddOne()), init, block_size=2, sparse=True)
    data.status[...] = False
    data.status[0, 0] = True
    maprule(data, AddOne())
    frame = _result(data)
    assert frame[0, 0] == 1
    assert frame[3, 3] == 15
