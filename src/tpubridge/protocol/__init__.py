"""
File protocol between the bridge and the accelerator simulator.

This module contains:
- encoder: config, weight-tile and vector-tile artifacts (plus debug dump)
- decoder: results artifact parsing
- channel: SimulationChannel interface with file and loopback implementations
"""

from .artifact import open_artifact, remove_artifact
from .channel import FileChannel, LoopbackChannel, SimulationChannel
from .decoder import parse_results, read_results
from .encoder import (
    write_full_matrices,
    write_sim_config,
    write_vector_tile,
    write_weight_tile,
)

__all__ = [
    "open_artifact",
    "remove_artifact",
    "SimulationChannel",
    "FileChannel",
    "LoopbackChannel",
    "parse_results",
    "read_results",
    "write_sim_config",
    "write_weight_tile",
    "write_vector_tile",
    "write_full_matrices",
]
