"""Concurrent stepping of independent replicates with a per-step reduction.

Every replicate owns its buffers, bitmap and random stream. One task per
replicate is submitted each step and all of them are joined before the
frames are reduced, so no replicate starts step ``t + 1`` early.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor, wait

import numpy as np

from dynamic_grids.config.constants import MAX_REPLICATES
from dynamic_grids.config.types import Reduction
from dynamic_grids.domain.ruleset import Ruleset
from dynamic_grids.simulation.grid import SimData
from dynamic_grids.simulation.sequencer import sequencerules

logger = logging.getLogger(__name__)

_REDUCERS = {
    Reduction.MEAN: np.mean,
    Reduction.MEDIAN: np.median,
    Reduction.MAX: np.max,
    Reduction.MIN: np.min,
}


def reduce_frames(
    frames: Sequence[np.ndarray], reduction: Reduction = Reduction.MEAN
) -> np.ndarray:
    """Combine replicate frames cell by cell into one read-only frame."""
    if not frames:
        raise ValueError("frames must not be empty")
    stacked = np.stack(frames)
    if stacked.dtype == np.bool_:
        stacked = stacked.astype(np.uint8)
    combined = np.asarray(_REDUCERS[reduction](stacked, axis=0))
    combined.flags.writeable = False
    return combined


def spawn_generators(n: int, seed: int | None = None) -> list[np.random.Generator]:
    """Independent random streams for ``n`` replicates from one seed."""
    return [np.random.default_rng(child) for child in np.random.SeedSequence(seed).spawn(n)]


class ReplicateScheduler:
    """Fixed pool of worker threads, one per replicate."""

    def __init__(self, nreplicates: int, reduction: Reduction = Reduction.MEAN) -> None:
        if not 1 <= nreplicates <= MAX_REPLICATES:
            raise ValueError(f"nreplicates must be in [1, {MAX_REPLICATES}]")
        self.nreplicates = nreplicates
        self.reduction = reduction
        self._pool = ThreadPoolExecutor(
            max_workers=nreplicates, thread_name_prefix="replicate"
        )

    def step(self, datas: Sequence[SimData], ruleset: Ruleset) -> np.ndarray:
        """Advance every replicate one step and return the reduced frame."""
        if len(datas) != self.nreplicates:
            raise ValueError(f"expected {self.nreplicates} replicates, got {len(datas)}")
        futures = [self._pool.submit(sequencerules, data, ruleset) for data in datas]
        wait(futures)
        for future in futures:
            # Re-raises the first replicate failure in the calling thread.
            future.result()
        return reduce_frames([data.frame() for data in datas], self.reduction)

    def shutdown(self) -> None:
        self._pool.shutdown(wait=True)

    def __enter__(self) -> ReplicateScheduler:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()
