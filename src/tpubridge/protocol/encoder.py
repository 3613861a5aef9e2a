"""
Encoders for the bridge -> simulator artifacts.

Artifacts:
    config:  one decimal line, the accumulation depth for this call
    weights: lanes x depth lines of two-digit hex bytes, row-major
             (outer loop over tile rows, inner over tile columns)
    vector:  depth lines of two-digit hex bytes

Every position outside the d x n matrix (or past n in the vector) is written
as ``00`` without touching the tensor. Codes are int8; the byte written is
their unsigned reinterpretation (``-1`` -> ``ff``).

The encoders write to any text stream, so the same code produces the files
read by an external simulator and the in-memory buffers of a loopback channel.
"""

import logging
from typing import TextIO

from ..quant import QuantizedTensor
from ..util.hexio import format_hex_byte

logger = logging.getLogger(__name__)

ZERO_BYTE = "00"


def write_sim_config(stream: TextIO, accum_depth: int, max_accum_depth: int | None = None):
    """
    Write the accumulation depth the simulator must configure itself with.

    Args:
        stream: Text stream for the config artifact
        accum_depth: Multiply-accumulate steps per invocation (= group size)
        max_accum_depth: Nominal hardware depth; exceeding it is only warned
    """
    if accum_depth <= 0:
        raise ValueError(f"accumulation depth must be positive, got {accum_depth}")
    if max_accum_depth is not None and accum_depth > max_accum_depth:
        logger.warning(
            "accumulation depth %d exceeds the hardware's nominal depth %d",
            accum_depth,
            max_accum_depth,
        )
    stream.write(f"{int(accum_depth)}\n")


def write_weight_tile(
    stream: TextIO,
    w: QuantizedTensor,
    n: int,
    d: int,
    row_base: int,
    col_base: int,
    lanes: int,
    depth: int,
):
    """
    Write one lanes x depth weight tile starting at (row_base, col_base).

    Positions with ``row >= d`` or ``col >= n`` are zero-padded.
    """
    q = w.q
    lines = []
    for i in range(lanes):
        row = row_base + i
        for j in range(depth):
            col = col_base + j
            if row < d and col < n:
                lines.append(format_hex_byte(q[row * n + col]))
            else:
                lines.append(ZERO_BYTE)
    stream.write("\n".join(lines) + "\n")


def write_vector_tile(
    stream: TextIO,
    x: QuantizedTensor,
    n: int,
    col_base: int,
    depth: int,
):
    """Write ``x[col_base:col_base+depth]``, zero-padded past n."""
    q = x.q
    lines = []
    for j in range(depth):
        idx = col_base + j
        lines.append(format_hex_byte(q[idx]) if idx < n else ZERO_BYTE)
    stream.write("\n".join(lines) + "\n")


def write_full_matrices(
    weights_stream: TextIO,
    vector_stream: TextIO,
    x: QuantizedTensor,
    w: QuantizedTensor,
    n: int,
    d: int,
):
    """
    Debug dump of the whole operands in signed decimal.

    The weight dump has one line per matrix row with every value followed by
    a space; the vector dump has one value per line.
    """
    for row in range(d):
        values = w.q[row * n : row * n + n]
        weights_stream.write("".join(f"{int(v)} " for v in values) + "\n")
    for v in x.q[:n]:
        vector_stream.write(f"{int(v)}\n")
