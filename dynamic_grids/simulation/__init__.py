"""Grid state, rule application, sequencing, replicates and the run loop."""

from dynamic_grids.simulation.engine import resume, sim, simloop
from dynamic_grids.simulation.grid import SimData, simdata
from dynamic_grids.simulation.maprule import RuleContext, maprule
from dynamic_grids.simulation.replicates import ReplicateScheduler, reduce_frames
from dynamic_grids.simulation.sequencer import sequencerules, updatestatus

__all__ = [
    "ReplicateScheduler",
    "RuleContext",
    "SimData",
    "maprule",
    "reduce_frames",
    "resume",
    "sequencerules",
    "sim",
    "simdata",
    "simloop",
    "updatestatus",
]
