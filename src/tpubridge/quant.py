"""
Group-wise quantized tensors.

A QuantizedTensor pairs int8 codes with one float32 scale per contiguous
group of ``group_size`` codes. Matrices are stored flattened row-major, so a
weight element (row, col) of a d x n matrix uses scale ``(row*n + col) // gs``
and an input element col uses ``col // gs``.

Besides the container this module offers the symmetric group quantizer used
to build test and demo tensors, and the float reference matvec the offloaded
result is checked against.
"""

from dataclasses import dataclass

import numpy as np


@dataclass
class QuantizedTensor:
    """
    Int8 codes plus per-group float32 scale factors.

    Example:
        >>> qt = QuantizedTensor(q=[1, -2, 3, -4], s=[0.5, 0.25])
        >>> qt.q.dtype, qt.s.dtype
        (dtype('int8'), dtype('float32'))
    """

    q: np.ndarray
    """Quantized values (int8)."""

    s: np.ndarray
    """Scale factors, one per group (float32)."""

    def __post_init__(self):
        self.q = np.asarray(self.q, dtype=np.int8).reshape(-1)
        self.s = np.asarray(self.s, dtype=np.float32).reshape(-1)

    def __len__(self) -> int:
        return len(self.q)

    def num_groups(self, group_size: int) -> int:
        """Number of scale groups the codes span."""
        return -(-len(self.q) // group_size)


def quantize(values, group_size: int) -> QuantizedTensor:
    """
    Symmetric int8 quantization with one scale per group.

    Each group is scaled so its largest magnitude maps to 127. An all-zero
    group gets scale 1.0. A trailing partial group is quantized on its own.

    Args:
        values: Float values (any shape; flattened row-major)
        group_size: Number of consecutive values sharing a scale

    Returns:
        QuantizedTensor with ``ceil(len(values) / group_size)`` scales
    """
    if group_size <= 0:
        raise ValueError("group_size must be positive")

    flat = np.asarray(values, dtype=np.float32).reshape(-1)
    num_groups = -(-len(flat) // group_size)
    padded = np.zeros(num_groups * group_size, dtype=np.float32)
    padded[: len(flat)] = flat
    groups = padded.reshape(num_groups, group_size)

    wmax = np.max(np.abs(groups), axis=1)
    scales = np.where(wmax > 0, wmax / 127.0, 1.0).astype(np.float32)
    q = np.clip(np.round(groups / scales[:, np.newaxis]), -127, 127).astype(np.int8)

    return QuantizedTensor(q=q.reshape(-1)[: len(flat)], s=scales)


def dequantize(qt: QuantizedTensor, group_size: int) -> np.ndarray:
    """Float32 reconstruction of every code with its group's scale."""
    idx = np.arange(len(qt.q)) // group_size
    return qt.q.astype(np.float32) * qt.s[idx]


def reference_matvec(
    x: QuantizedTensor,
    w: QuantizedTensor,
    n: int,
    d: int,
    group_size: int,
) -> np.ndarray:
    """
    Float reference of ``xout = W @ x`` on dequantized operands.

    Computes ``sum_j dequant(w[row, j]) * dequant(x[j])`` for every row in
    float64 and returns float32, the value the tiled offload must reproduce.
    """
    w_f = dequantize(w, group_size)[: d * n].astype(np.float64)
    x_f = dequantize(x, group_size)[:n].astype(np.float64)
    return (w_f.reshape(d, n) @ x_f).astype(np.float32)


def reference_int_tile(
    weights: np.ndarray,
    vector: np.ndarray,
    lanes: int,
    depth: int,
) -> np.ndarray:
    """
    Integer dot products of one tile, as the accelerator computes them.

    Args:
        weights: ``lanes * depth`` int8 codes, row-major
        vector: ``depth`` int8 codes

    Returns:
        ``lanes`` int32 values, wrapping on overflow like the hardware
    """
    w = np.asarray(weights, dtype=np.int64).reshape(lanes, depth)
    v = np.asarray(vector, dtype=np.int64).reshape(depth)
    acc = w @ v
    return ((acc + (1 << 31)) % (1 << 32) - (1 << 31)).astype(np.int32)
