"""
Tiling of a d x n matrix-vector product onto the accelerator.

The accelerator computes ``lanes`` dot products of depth ``depth`` per
invocation. A matvec is cut into row blocks of ``lanes`` rows and column
blocks of ``depth`` columns; with depth equal to the quantization group size
every column block is exactly one scale group.

Example for d=16, n=16, lanes=8, depth=8 (row-block major):

    (0, 0) -> (0, 8) -> (8, 0) -> (8, 8)
"""

from collections.abc import Iterator
from dataclasses import dataclass


@dataclass(frozen=True)
class Tile:
    """One unit of offloaded work: rows [row_base, +lanes) x cols [col_base, +depth)."""

    row_base: int
    col_base: int
    lanes: int
    depth: int

    @property
    def row_end(self) -> int:
        return self.row_base + self.lanes

    @property
    def col_end(self) -> int:
        return self.col_base + self.depth

    def valid_rows(self, d: int) -> int:
        """Rows of this tile that lie inside a d-row matrix."""
        return max(0, min(self.row_end, d) - self.row_base)

    def valid_cols(self, n: int) -> int:
        """Columns of this tile that lie inside an n-column matrix."""
        return max(0, min(self.col_end, n) - self.col_base)


def row_blocks(d: int, lanes: int) -> range:
    """Start rows of each row block."""
    return range(0, d, lanes)


def col_blocks(n: int, depth: int) -> range:
    """Start columns of each column block."""
    return range(0, n, depth)


def tile_schedule(n: int, d: int, depth: int, lanes: int) -> Iterator[Tile]:
    """
    Yield every tile of a d x n matvec in row-block-major order.

    Edge tiles keep the full lanes x depth shape; positions outside the
    matrix are padded by the encoder.
    """
    for row_base in row_blocks(d, lanes):
        for col_base in col_blocks(n, depth):
            yield Tile(row_base, col_base, lanes, depth)


def count_tiles(n: int, d: int, depth: int, lanes: int) -> int:
    """Number of simulator invocations a matvec needs."""
    return len(row_blocks(d, lanes)) * len(col_blocks(n, depth))
