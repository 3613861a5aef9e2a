"""
Hardware-offloaded quantized matvec: ``xout = W @ x``.

matmul_hw tiles a d x n int8 weight matrix into blocks of ``hw_array_size``
rows by ``gs`` columns, where gs is the quantization group size and also the
accumulation depth the accelerator is configured with. For each tile the
simulator returns one unscaled int32 partial dot product per row; since the
tile spans exactly one scale group, each partial product is dequantized with a
single (weight scale, activation scale) pair and accumulated in float32:

    acc[i] += result[i] * w.s[(row*n + col_base) // gs] * x.s[col_base // gs]

Per-row accumulators live for one row block and are committed to the caller's
output vector after the last column block.

Usage:
    >>> xout = np.zeros(d, dtype=np.float32)
    >>> matmul_hw(xout, x, w, n, d, gs, channel=LoopbackChannel())
"""

import logging

import numpy as np

from .config import DEFAULT_CONFIG, BridgeConfig
from .errors import ScaleIndexError
from .protocol.channel import FileChannel, SimulationChannel
from .quant import QuantizedTensor
from .tiling import Tile, col_blocks, count_tiles, tile_schedule

logger = logging.getLogger(__name__)


def accumulate_tile(
    acc: np.ndarray,
    results: np.ndarray,
    tile: Tile,
    w_scales: np.ndarray,
    x_scales: np.ndarray,
    n: int,
    d: int,
    gs: int,
    strict: bool = False,
) -> None:
    """
    Dequantize one tile's integer results into the row accumulators.

    Lanes whose row lies past d are padding and are ignored. A scale index
    outside its sequence skips that lane's contribution, or raises
    ScaleIndexError when ``strict`` is set.

    Args:
        acc: float32 accumulators of the current row block (one per lane)
        results: int32 result words of the tile
        tile: The tile the results belong to
        w_scales: Weight scale factors
        x_scales: Activation scale factors
        n: Matrix columns
        d: Matrix rows
        gs: Group size
        strict: Raise on out-of-range scale indices
    """
    col_base = tile.col_base
    x_idx = col_base // gs

    for i in range(tile.valid_rows(d)):
        row = tile.row_base + i
        w_idx = (row * n + col_base) // gs
        if w_idx >= len(w_scales) or x_idx >= len(x_scales):
            if strict:
                if w_idx >= len(w_scales):
                    raise ScaleIndexError("weight", w_idx, len(w_scales), row, col_base)
                raise ScaleIndexError("activation", x_idx, len(x_scales), row, col_base)
            logger.debug(
                "skipping row %d column block %d: scale index out of range", row, col_base
            )
            continue

        acc[i] += np.float32(results[i]) * w_scales[w_idx] * x_scales[x_idx]


def matmul_hw(
    xout,
    x: QuantizedTensor,
    w: QuantizedTensor,
    n: int,
    d: int,
    gs: int,
    *,
    channel: SimulationChannel | None = None,
    config: BridgeConfig | None = None,
):
    """
    Compute ``xout[:d] = W @ x`` on the offload accelerator.

    Args:
        xout: Caller-owned float output (at least d entries); only xout[:d]
            is written
        x: Quantized input vector (n values)
        w: Quantized weight matrix (d x n, row-major)
        n: Input dimension (columns of W)
        d: Output dimension (rows of W)
        gs: Quantization group size, used as the accumulation depth
        channel: Simulation channel; a FileChannel over ``config`` by default
        config: Bridge configuration (defaults to the channel's, else DEFAULT_CONFIG)

    Returns:
        xout

    Raises:
        ArtifactError: a protocol artifact could not be written or read
        SimulationError: the simulator failed or timed out
        ScaleIndexError: strict scale checking found an out-of-range index
    """
    if n <= 0 or d <= 0 or gs <= 0:
        raise ValueError(f"n, d and gs must be positive (n={n}, d={d}, gs={gs})")
    if len(xout) < d:
        raise ValueError(f"output holds {len(xout)} values, need {d}")

    if channel is None:
        channel = FileChannel(config or DEFAULT_CONFIG)
    cfg = config or channel.config
    lanes = channel.lanes

    logger.info(
        "offload matmul: W %d x %d, x %d, group size %d, %d tiles",
        d,
        n,
        n,
        gs,
        count_tiles(n, d, gs, lanes),
    )

    # The hardware reads its accumulation depth before every call
    channel.configure(gs)

    if cfg.dump_full_matrices:
        channel.dump_matrices(x, w, n, d)

    xout[:d] = np.zeros(d, dtype=np.float32)

    last_col_base = col_blocks(n, gs)[-1]
    acc = np.zeros(lanes, dtype=np.float32)

    for tile in tile_schedule(n, d, gs, lanes):
        if tile.col_base == 0:
            acc = np.zeros(lanes, dtype=np.float32)

        channel.encode_tile(x, w, n, d, tile)
        channel.invoke()
        results = channel.decode_result()
        logger.debug(
            "tile rows %d..%d cols %d..%d: %s",
            tile.row_base,
            tile.row_base + tile.valid_rows(d) - 1,
            tile.col_base,
            tile.col_base + tile.valid_cols(n) - 1,
            results.tolist(),
        )
        accumulate_tile(
            acc, results, tile, w.s, x.s, n, d, gs, strict=cfg.strict_scale_index
        )

        # Row block complete
        if tile.col_base == last_col_base:
            valid = tile.valid_rows(d)
            xout[tile.row_base : tile.row_base + valid] = acc[:valid]

    return xout
