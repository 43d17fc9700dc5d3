"""Simulation loop: start a run, step it to ``tstop``, resume it later.

Frame ``t=0`` is the initial array. Each step ``t`` runs the whole
ruleset once and hands the resulting read-only frame to the output. With
replicates, every replicate is stepped concurrently and the output
receives their per-cell reduction instead.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np

from dynamic_grids.config.constants import DEFAULT_TADD, MAX_REPLICATES
from dynamic_grids.config.types import SimConfig
from dynamic_grids.domain.overflow import Overflow
from dynamic_grids.domain.ruleset import Ruleset
from dynamic_grids.outputs.base import Output
from dynamic_grids.simulation.grid import SimData, simdata
from dynamic_grids.simulation.replicates import (
    ReplicateScheduler,
    reduce_frames,
    spawn_generators,
)
from dynamic_grids.simulation.sequencer import sequencerules

logger = logging.getLogger(__name__)


def _check_overflow(ruleset: Ruleset) -> None:
    if ruleset.overflow is not Overflow.REMOVE:
        return
    flagged = [rule for rule in ruleset.rules if rule.assumes_inbounds]
    if flagged:
        names = ", ".join(type(rule).__name__ for rule in flagged)
        raise ValueError(
            f"{names} read neighbours without checking bounds; "
            "use WrapOverflow or make the rule bounds-aware"
        )


def _set_fps(output: Output, fps: float | None) -> None:
    if fps is None:
        return
    if fps <= 0:
        raise ValueError("fps must be > 0")
    output.fps = fps


def _reuse(data: SimData, ruleset: Ruleset, init: np.ndarray, t: int) -> SimData:
    if data.radius != ruleset.maxradius() or data.overflow is not ruleset.overflow:
        raise ValueError("precomputed data was built for a different ruleset")
    data.load(init, t)
    return data


def _prepare(
    ruleset: Ruleset,
    init: np.ndarray,
    config: SimConfig,
    nreplicates: int | None,
    data: SimData | Sequence[SimData] | None,
    t: int,
) -> SimData | list[SimData]:
    """Build fresh grid state or reset precomputed state to ``init``."""
    if nreplicates is None:
        if data is None:
            return simdata(
                ruleset,
                init,
                block_size=config.block_size,
                sparse=config.sparse,
                rng=np.random.default_rng(config.seed),
                t=t,
            )
        if not isinstance(data, SimData):
            raise ValueError("pass nreplicates when reusing replicate data")
        return _reuse(data, ruleset, init, t)

    if not 1 <= nreplicates <= MAX_REPLICATES:
        raise ValueError(f"nreplicates must be in [1, {MAX_REPLICATES}]")
    if data is None:
        return [
            simdata(
                ruleset,
                init,
                block_size=config.block_size,
                sparse=config.sparse,
                rng=rng,
                t=t,
            )
            for rng in spawn_generators(nreplicates, config.seed)
        ]
    if isinstance(data, SimData) or len(data) != nreplicates:
        raise ValueError(f"expected {nreplicates} precomputed replicates")
    return [_reuse(d, ruleset, init, t) for d in data]


def simloop(
    output: Output,
    ruleset: Ruleset,
    data: SimData | Sequence[SimData],
    tstart: int,
    tstop: int,
    scheduler: ReplicateScheduler | None = None,
) -> int:
    """Step from ``tstart + 1`` through ``tstop``, storing one frame per step.

    The output's run flag is checked before every step. Returns the clock
    value of the last stored frame.
    """
    if scheduler is None and not isinstance(data, SimData):
        raise ValueError("stepping replicates needs a ReplicateScheduler")
    t_done = tstart
    for t in range(tstart + 1, tstop + 1):
        if not output.is_running():
            logger.info("run stopped at t=%d", t_done)
            break
        if isinstance(data, SimData):
            data.t = t
            sequencerules(data, ruleset)
            frame = data.frame()
        else:
            for replicate in data:
                replicate.t = t
            frame = scheduler.step(data, ruleset)
        output.store_frame(frame, t)
        t_done = t
    return t_done


def _run(
    output: Output,
    ruleset: Ruleset,
    data: SimData | list[SimData],
    config: SimConfig,
    tstart: int,
    tstop: int,
) -> SimData | list[SimData]:
    scheduler = None
    if isinstance(data, list):
        scheduler = ReplicateScheduler(len(data), config.reduction)
    output.start()
    logger.info(
        "running %d rule(s) from t=%d to t=%d%s",
        len(ruleset),
        tstart,
        tstop,
        f" over {len(data)} replicates" if scheduler is not None else "",
    )
    try:
        t_done = simloop(output, ruleset, data, tstart, tstop, scheduler)
    finally:
        if scheduler is not None:
            scheduler.shutdown()
        output.finalize()
    logger.info("run finished at t=%d", t_done)
    return data


def sim(
    output: Output,
    ruleset: Ruleset,
    init: np.ndarray | None = None,
    *,
    tstop: int | None = None,
    fps: float | None = None,
    nreplicates: int | None = None,
    data: SimData | Sequence[SimData] | None = None,
    config: SimConfig | None = None,
) -> SimData | list[SimData]:
    """Run ``ruleset`` from ``init`` (or ``ruleset.init``), writing frames to
    ``output``.

    ``tstop`` defaults to ``output.tstop``. Pass precomputed ``data`` from an
    earlier run to reuse its buffers. Returns the final grid state, one per
    replicate when ``nreplicates`` is given.
    """
    config = config if config is not None else SimConfig()
    if init is None:
        init = ruleset.init
    if init is None:
        raise ValueError("no init array: pass init or construct the Ruleset with one")
    init = np.asarray(init)
    if tstop is None:
        tstop = output.tstop
    if tstop < 0:
        raise ValueError(f"tstop {tstop} is before the start time 0")
    _set_fps(output, fps)
    _check_overflow(ruleset)
    state = _prepare(ruleset, init, config, nreplicates, data, t=0)
    output.tstop = tstop
    if nreplicates is not None:
        first = reduce_frames([init] * nreplicates, config.reduction)
    else:
        first = init.copy()
        first.flags.writeable = False
    output.init_frames(first, 0)
    return _run(output, ruleset, state, config, 0, tstop)


def resume(
    output: Output,
    ruleset: Ruleset,
    tadd: int = DEFAULT_TADD,
    *,
    init: np.ndarray | None = None,
    fps: float | None = None,
    nreplicates: int | None = None,
    data: SimData | Sequence[SimData] | None = None,
    config: SimConfig | None = None,
) -> SimData | list[SimData]:
    """Continue a run for ``tadd`` more steps from the output's last frame.

    The output keeps its earlier frames; its ``tstop`` grows by ``tadd``.
    """
    if init is not None:
        raise ValueError("resume continues from the output's last frame; do not pass init")
    if not output.has_frames:
        raise ValueError("output holds no frames to resume from; run sim first")
    if tadd < 0:
        raise ValueError("tadd must be >= 0")
    config = config if config is not None else SimConfig()
    tstart = output.clock
    _set_fps(output, fps)
    _check_overflow(ruleset)
    state = _prepare(ruleset, output.last_frame, config, nreplicates, data, t=tstart)
    output.tstop = tstart + tadd
    return _run(output, ruleset, state, config, tstart, output.tstop)
