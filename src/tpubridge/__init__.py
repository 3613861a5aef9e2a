"""
Tpubridge - offload quantized matvecs to a cycle-accurate accelerator model.

This package tiles a group-quantized matrix-vector product to the
accelerator's parallel width, exchanges each tile with an external simulator
through a hex text file protocol, and dequantizes the integer results into a
float output vector.
"""

from .config import BridgeConfig, SimulatorKind
from .errors import (
    ArtifactError,
    BridgeError,
    ScaleIndexError,
    SimulationError,
    SimulationTimeout,
)
from .matmul import accumulate_tile, matmul_hw
from .protocol import FileChannel, LoopbackChannel, SimulationChannel
from .quant import QuantizedTensor, dequantize, quantize, reference_matvec
from .tiling import Tile, tile_schedule

__version__ = "0.1.0"
__all__ = [
    "BridgeConfig",
    "SimulatorKind",
    "BridgeError",
    "ArtifactError",
    "SimulationError",
    "SimulationTimeout",
    "ScaleIndexError",
    "QuantizedTensor",
    "quantize",
    "dequantize",
    "reference_matvec",
    "Tile",
    "tile_schedule",
    "SimulationChannel",
    "FileChannel",
    "LoopbackChannel",
    "accumulate_tile",
    "matmul_hw",
    "__version__",
]
