"""Tests for padded double-buffered grid state and block helpers."""

from __future__ import annotations

import numpy as np
import pytest

from dynamic_grids.domain.neighborhoods import CustomNeighborhood
from dynamic_grids.domain.overflow import RemoveOverflow, WrapOverflow
from dynamic_grids.domain.rules import CellRule, Life, NeighborhoodRule
from dynamic_grids.domain.ruleset import Ruleset
from dynamic_grids.simulation.grid import (
    addpadding,
    block_expand,
    block_reduce,
    block_shape,
    dilate,
    simdata,
)


class Keep(CellRule):
    def apply(self, data, state, index):
        return state


class Wide(NeighborhoodRule):
    def apply(self, data, state, index, window):
        return state


class TestSimdata:
    def test_padding_equals_maxradius(self) -> None:
        init = np.zeros((4, 5), dtype=int)
        data = simdata(Ruleset.of(Keep(), Wide(radius=2)), init)
        assert data.radius == 2
        assert data.source.shape == (8, 9)
        assert data.dest.shape == data.source.shape
        assert data.shape == (4, 5)

    def test_padding_grows_with_radius(self) -> None:
        init = np.zeros((4, 4))
        small = simdata(Ruleset.of(Wide(radius=1)), init)
        large = simdata(Ruleset.of(Wide(radius=3)), init)
        assert small.source.shape == (6, 6)
        assert large.source.shape == (10, 10)

    def test_cell_only_ruleset_has_no_padding(self) -> None:
        data = simdata(Ruleset.of(Keep()), np.arange(6).reshape(2, 3))
        assert data.radius == 0
        assert data.source.shape == (2, 3)

    def test_logical_index_maps_past_padding(self) -> None:
        init = np.arange(9).reshape(3, 3)
        data = simdata(Ruleset.of(Life()), init)
        assert data.to_physical((0, 0)) == (1, 1)
        assert data.to_logical((1, 1)) == (0, 0)
        assert data.source[data.to_physical((2, 1))] == init[2, 1]

    def test_wrap_padding_filled_on_build(self) -> None:
        init = np.arange(1, 10).reshape(3, 3)
        data = simdata(Ruleset.of(Life(), overflow=WrapOverflow), init)
        assert data.source[0, 1] == 7

    def test_remove_padding_is_zero(self) -> None:
        init = np.ones((3, 3), dtype=int)
        data = simdata(Ruleset.of(Life(), overflow=RemoveOverflow), init)
        assert data.source.sum() == 9

    def test_status_starts_all_active(self) -> None:
        data = simdata(Ruleset.of(Life()), np.zeros((10, 7)), block_size=4)
        assert data.status.shape == (3, 2)
        assert data.status.all()

    def test_sparse_requires_stationary_rules(self) -> None:
        class Noisy(Keep):
            stationary = False

        init = np.zeros((3, 3))
        assert simdata(Ruleset.of(Keep()), init, sparse=True).sparse
        assert not simdata(Ruleset.of(Noisy()), init, sparse=True).sparse

    def test_rejects_rank_mismatch(self) -> None:
        rule = Wide(CustomNeighborhood(((0, 0, 1),)))
        with pytest.raises(ValueError, match="dimensions"):
            simdata(Ruleset.of(rule), np.zeros((4, 4)))

    def test_rejects_scalar_and_empty_init(self) -> None:
        with pytest.raises(ValueError, match="at least one dimension"):
            simdata(Ruleset.of(Keep()), np.array(1))
        with pytest.raises(ValueError, match="empty dimension"):
            simdata(Ruleset.of(Keep()), np.zeros((0, 3)))


class TestSimData:
    def test_swap_twice_is_identity(self) -> None:
        data = simdata(Ruleset.of(Life()), np.zeros((3, 3)))
        source, dest = data.source, data.dest
        data.swap()
        assert data.source is dest and data.dest is source
        data.swap()
        assert data.source is source and data.dest is dest

    def test_frame_is_read_only_unpadded_copy(self) -> None:
        init = np.arange(9).reshape(3, 3)
        data = simdata(Ruleset.of(Life()), init)
        frame = data.frame()
        assert np.array_equal(frame, init)
        assert not frame.flags.writeable
        data.source[1, 1] = 100
        assert frame[0, 0] == 0

    def test_load_resets_state(self) -> None:
        data = simdata(Ruleset.of(Life()), np.zeros((3, 3), dtype=int), block_size=2)
        data.status[...] = False
        data.load(np.ones((3, 3), dtype=int), t=5)
        assert data.t == 5
        assert data.status.all()
        assert np.array_equal(data.frame(), np.ones((3, 3)))
        assert np.array_equal(data.dest, data.source)

    def test_load_rejects_wrong_shape(self) -> None:
        data = simdata(Ruleset.of(Life()), np.zeros((3, 3)))
        with pytest.raises(ValueError, match="does not match"):
            data.load(np.zeros((4, 4)))

    def test_active_indices_skip_inactive_blocks(self) -> None:
        data = simdata(Ruleset.of(Keep()), np.zeros((4, 4)), block_size=2, sparse=True)
        data.status[...] = False
        data.status[1, 0] = True
        assert sorted(data.active_indices()) == [(2, 0), (2, 1), (3, 0), (3, 1)]

    def test_active_indices_cover_grid_when_not_sparse(self) -> None:
        data = simdata(Ruleset.of(Keep()), np.zeros((2, 3)), sparse=False)
        data.status[...] = False
        assert len(list(data.active_indices())) == 6


def test_addpadding_zero_fills() -> None:
    padded = addpadding(np.ones((2, 2)), 1)
    assert padded.shape == (4, 4)
    assert padded.sum() == 4


class TestBlocks:
    def test_block_shape_rounds_up(self) -> None:
        assert block_shape((10, 16, 1), 4) == (3, 4, 1)

    def test_block_reduce_any(self) -> None:
        mask = np.zeros((5, 5), dtype=bool)
        mask[4, 0] = True
        assert block_reduce(mask, 2).tolist() == [
            [False, False, False],
            [False, False, False],
            [True, False, False],
        ]

    def test_block_expand_trims_to_shape(self) -> None:
        status = np.array([[True, False], [False, False]])
        cells = block_expand(status, 3, (4, 5))
        assert cells.shape == (4, 5)
        assert cells[:3, :3].all()
        assert cells.sum() == 9

    def test_dilate_stops_at_edges_under_remove(self) -> None:
        mask = np.zeros(6, dtype=bool)
        mask[0] = True
        assert dilate(mask, 2, RemoveOverflow).tolist() == [
            True, True, True, False, False, False,
        ]

    def test_dilate_wraps_under_wrap(self) -> None:
        mask = np.zeros(6, dtype=bool)
        mask[0] = True
        assert dilate(mask, 1, WrapOverflow).tolist() == [
            True, True, False, False, False, True,
        ]

    def test_dilate_is_chebyshev_in_2d(self) -> None:
        mask = np.zeros((5, 5), dtype=bool)
        mask[2, 2] = True
        grown = dilate(mask, 1, RemoveOverflow)
        assert grown.sum() == 9
        assert grown[1:4, 1:4].all()

    def test_dilate_zero_reach_copies(self) -> None:
        mask = np.array([True, False])
        grown = dilate(mask, 0, RemoveOverflow)
        assert grown.tolist() == [True, False]
        assert grown is not mask
