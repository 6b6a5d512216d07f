"""Parameter block registry and its bridge to flat-vector solvers."""

from extrinsic_cal.core.parameter_blocks import BlockKey, MovingCamera, MovingTarget, ParameterBlocks
from extrinsic_cal.core.parameter_vector import ParameterVector

__all__ = [
    "BlockKey",
    "MovingCamera",
    "MovingTarget",
    "ParameterBlocks",
    "ParameterVector",
]
