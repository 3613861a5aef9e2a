"""
Tpubridge Configuration Module

This module defines the configuration dataclass for the hardware offload bridge.
All hardware parameters, simulator settings and artifact names are specified
here and propagate through the protocol layer and the orchestrator.

Note: The hardware width (hw_array_size) MUST match the parameter the
simulated accelerator was built with. The accumulation depth is not fixed
here; it is written to the config artifact before every matmul call.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class SimulatorKind(Enum):
    """
    External simulator flavours the bridge knows how to launch.

    - VCS: native-compiled simulator binary (``./simv``)
    - IVERILOG: interpreted simulation of a compiled design (``vvp tpu_sim``)

    Example:
        >>> config = BridgeConfig(simulator=SimulatorKind.VCS)
        >>> config.command
        ['./simv']
    """

    VCS = "vcs"
    IVERILOG = "iverilog"


SIMULATOR_COMMANDS = {
    SimulatorKind.VCS: ["./simv"],
    SimulatorKind.IVERILOG: ["vvp", "tpu_sim"],
}


@dataclass
class BridgeConfig:
    """
    Configuration for the hardware offload bridge.

    Parameters are organized by subsystem: the accelerator's fixed shape,
    how the external simulator is launched, and the names of the protocol
    artifacts exchanged with it.

    Example:
        >>> config = BridgeConfig(hw_array_size=16, work_dir="/tmp/sim")
        >>> config.artifact(config.results_file)
        PosixPath('/tmp/sim/memory_dump.txt')
    """

    # =========================================================================
    # Accelerator Dimensions
    # =========================================================================
    hw_array_size: int = 8
    """Number of parallel lanes (rows computed per simulator invocation)."""

    max_accum_depth: int = 32
    """Nominal accumulation depth of the hardware; deeper configs are warned."""

    # =========================================================================
    # Data Types (bit widths)
    # =========================================================================
    input_bits: int = 8
    """Bit width of quantized activations."""

    weight_bits: int = 8
    """Bit width of quantized weights."""

    acc_bits: int = 32
    """Bit width of each lane's accumulator (result words are this wide)."""

    # =========================================================================
    # Simulator Invocation
    # =========================================================================
    simulator: SimulatorKind = SimulatorKind.IVERILOG
    """Which prebuilt simulator to launch when no explicit command is given."""

    simulator_command: list[str] | None = None
    """Explicit argv overriding the simulator preset."""

    timeout: float | None = 600.0
    """Seconds to wait for one simulator run (None blocks indefinitely)."""

    work_dir: str | Path = "."
    """Directory holding the protocol artifacts; the simulator runs here."""

    env: dict[str, str] | None = None
    """Environment for the simulator process (None inherits ours)."""

    # =========================================================================
    # Protocol Artifacts
    # =========================================================================
    config_file: str = "sim_config.txt"
    """Accumulation depth, one decimal line."""

    weights_file: str = "weights.txt"
    """Weight tile, one hex byte per line."""

    vector_file: str = "vector.txt"
    """Vector tile, one hex byte per line."""

    results_file: str = "memory_dump.txt"
    """Simulator output, one hex int32 per lane."""

    full_weights_file: str = "full_weights.txt"
    """Debug dump of the whole weight matrix."""

    full_vector_file: str = "full_vector.txt"
    """Debug dump of the whole input vector."""

    comment_marker: str = "//"
    """Prefix of comment lines in the results artifact."""

    # =========================================================================
    # Behavior
    # =========================================================================
    strict_scale_index: bool = False
    """Raise instead of skipping when a scale index falls out of range."""

    dump_full_matrices: bool = False
    """Write the full-matrix debug dump once per matmul call."""

    # =========================================================================
    # Computed Properties
    # =========================================================================
    @property
    def command(self) -> list[str]:
        """Resolved simulator argv."""
        if self.simulator_command is not None:
            return list(self.simulator_command)
        return list(SIMULATOR_COMMANDS[self.simulator])

    def artifact(self, name: str) -> Path:
        """Path of an artifact inside the work directory."""
        return Path(self.work_dir) / name

    def __post_init__(self):
        """Validate configuration parameters."""
        assert self.hw_array_size > 0, "hw_array_size must be positive"
        assert self.max_accum_depth > 0, "max_accum_depth must be positive"
        assert self.input_bits > 0, "input_bits must be positive"
        assert self.weight_bits > 0, "weight_bits must be positive"
        assert self.acc_bits >= self.input_bits + self.weight_bits, (
            "acc_bits should be >= input_bits + weight_bits to avoid overflow"
        )
        assert self.timeout is None or self.timeout > 0, "timeout must be positive"
        assert self.comment_marker, "comment_marker must not be empty"


# Pre-defined configurations
DEFAULT_CONFIG = BridgeConfig()
"""Default configuration (Icarus Verilog runtime)."""
