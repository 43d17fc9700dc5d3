"""Frame processors and animated-image export."""

from dynamic_grids.viz.processors import ColorProcessor, FrameProcessor, Greyscale, frametoimage
from dynamic_grids.viz.render import savegif

__all__ = ["ColorProcessor", "FrameProcessor", "Greyscale", "frametoimage", "savegif"]
