"""
SimulationChannel - the communication path between bridge and simulator.

The orchestrator talks to the accelerator only through this interface:

    configure(depth)              once per matmul call
    encode_tile(x, w, n, d, tile) write the tile's operands
    invoke()                      run the simulator to completion
    decode_result()               lanes int32 result words

Two implementations are provided:

- FileChannel: the fixed-name artifact files in a work directory and an
  external simulator process (the production path).
- LoopbackChannel: the same protocol text kept in memory and handed to a
  Python model, so the whole pipeline runs without a filesystem.

Because artifact names are fixed, at most one call may use a given work
directory (or channel) at a time.
"""

import io
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from functools import partial

import numpy as np

from ..config import DEFAULT_CONFIG, BridgeConfig
from ..errors import ArtifactError
from ..invoker import SimulationResult, SimulatorInvoker
from ..quant import QuantizedTensor
from ..tiling import Tile
from .artifact import open_artifact, remove_artifact
from .decoder import parse_results, read_results
from .encoder import (
    write_full_matrices,
    write_sim_config,
    write_vector_tile,
    write_weight_tile,
)

logger = logging.getLogger(__name__)


class SimulationChannel(ABC):
    """Abstract bridge <-> simulator channel."""

    def __init__(self, config: BridgeConfig = DEFAULT_CONFIG):
        self.config = config

    @property
    def lanes(self) -> int:
        """Hardware width; every result buffer has this many values."""
        return self.config.hw_array_size

    @abstractmethod
    def configure(self, accum_depth: int) -> None:
        """Publish the accumulation depth for the coming tiles."""

    @abstractmethod
    def encode_tile(
        self, x: QuantizedTensor, w: QuantizedTensor, n: int, d: int, tile: Tile
    ) -> None:
        """Write the operands of one tile."""

    @abstractmethod
    def invoke(self) -> SimulationResult:
        """Run the simulator on the last encoded tile."""

    @abstractmethod
    def decode_result(self) -> np.ndarray:
        """Result words of the last invocation."""

    def dump_matrices(self, x: QuantizedTensor, w: QuantizedTensor, n: int, d: int) -> None:
        """Optional full-operand debug dump."""


class FileChannel(SimulationChannel):
    """
    Artifact files plus an external simulator process.

    Parameters:
        config: Artifact names, work directory and simulator command
        invoker: Custom SimulatorInvoker (default built from config)
    """

    def __init__(
        self,
        config: BridgeConfig = DEFAULT_CONFIG,
        invoker: SimulatorInvoker | None = None,
    ):
        super().__init__(config)
        self.invoker = invoker or SimulatorInvoker(
            config.command,
            cwd=config.work_dir,
            timeout=config.timeout,
            env=config.env,
        )

    def configure(self, accum_depth: int) -> None:
        cfg = self.config
        with open_artifact(cfg.artifact(cfg.config_file), "w") as f:
            write_sim_config(f, accum_depth, cfg.max_accum_depth)

    def encode_tile(self, x, w, n, d, tile):
        cfg = self.config
        # Results of the previous tile must not outlive a run that writes none
        remove_artifact(cfg.artifact(cfg.results_file))
        with open_artifact(cfg.artifact(cfg.weights_file), "w") as f:
            write_weight_tile(
                f, w, n, d, tile.row_base, tile.col_base, tile.lanes, tile.depth
            )
        with open_artifact(cfg.artifact(cfg.vector_file), "w") as f:
            write_vector_tile(f, x, n, tile.col_base, tile.depth)

    def invoke(self) -> SimulationResult:
        return self.invoker.run()

    def decode_result(self) -> np.ndarray:
        cfg = self.config
        return read_results(
            cfg.artifact(cfg.results_file), self.lanes, cfg.comment_marker, cfg.acc_bits
        )

    def dump_matrices(self, x, w, n, d):
        cfg = self.config
        try:
            with (
                open_artifact(cfg.artifact(cfg.full_weights_file), "w") as fw,
                open_artifact(cfg.artifact(cfg.full_vector_file), "w") as fv,
            ):
                write_full_matrices(fw, fv, x, w, n, d)
        except ArtifactError as exc:
            # Diagnostic only; the offload itself does not depend on it
            logger.error("skipping full-matrix dump: %s", exc)


ProtocolModel = Callable[[str, str, str], str]
"""(config_text, weights_text, vector_text) -> results_text"""


class LoopbackChannel(SimulationChannel):
    """
    In-memory channel backed by a Python model of the simulator.

    The artifacts are produced and parsed with the same encoders and decoder
    as the file channel; only the storage and the simulator differ.

    Parameters:
        model: Protocol model; defaults to the tile_sim golden model
        config: Hardware width and protocol settings
    """

    def __init__(
        self,
        model: ProtocolModel | None = None,
        config: BridgeConfig = DEFAULT_CONFIG,
    ):
        super().__init__(config)
        if model is None:
            from ..hw.tile_sim import run_protocol

            model = partial(
                run_protocol,
                lanes=config.hw_array_size,
                comment_marker=config.comment_marker,
            )
        self.model = model
        self.config_text = ""
        self.weights_text = ""
        self.vector_text = ""
        self.results_text: str | None = None
        self.full_weights_text = ""
        self.full_vector_text = ""
        self.invocations = 0

    def configure(self, accum_depth: int) -> None:
        buf = io.StringIO()
        write_sim_config(buf, accum_depth, self.config.max_accum_depth)
        self.config_text = buf.getvalue()

    def encode_tile(self, x, w, n, d, tile):
        wbuf, vbuf = io.StringIO(), io.StringIO()
        write_weight_tile(
            wbuf, w, n, d, tile.row_base, tile.col_base, tile.lanes, tile.depth
        )
        write_vector_tile(vbuf, x, n, tile.col_base, tile.depth)
        self.weights_text = wbuf.getvalue()
        self.vector_text = vbuf.getvalue()
        self.results_text = None

    def invoke(self) -> SimulationResult:
        self.results_text = self.model(self.config_text, self.weights_text, self.vector_text)
        self.invocations += 1
        return SimulationResult(command=["<loopback>"], returncode=0)

    def decode_result(self) -> np.ndarray:
        if self.results_text is None:
            raise ArtifactError("<loopback results>", "r", "no results produced")
        return parse_results(
            self.results_text.splitlines(keepends=True),
            self.lanes,
            self.config.comment_marker,
            self.config.acc_bits,
        )

    def dump_matrices(self, x, w, n, d):
        wbuf, vbuf = io.StringIO(), io.StringIO()
        write_full_matrices(wbuf, vbuf, x, w, n, d)
        self.full_weights_text = wbuf.getvalue()
        self.full_vector_text = vbuf.getvalue()
