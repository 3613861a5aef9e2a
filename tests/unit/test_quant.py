"""
Unit tests for quantized tensors, hex helpers and the tile schedule.
"""

import numpy as np
import pytest

from tpubridge.config import BridgeConfig
from tpubridge.quant import QuantizedTensor, dequantize, quantize, reference_matvec
from tpubridge.tiling import Tile, count_tiles, tile_schedule
from tpubridge.util.hexio import (
    format_hex_byte,
    format_hex_word,
    parse_hex_byte,
    parse_hex_word,
    to_signed,
)


class TestQuantizedTensor:
    def test_dtypes(self):
        qt = QuantizedTensor(q=[1, -2, 3], s=[0.5])
        assert qt.q.dtype == np.int8
        assert qt.s.dtype == np.float32
        assert len(qt) == 3
        assert qt.num_groups(2) == 2

    def test_quantize_scales_per_group(self):
        values = np.array([1.0, -2.0, 0.5, 0.25, 0.0, 0.0, 3.0], dtype=np.float32)
        qt = quantize(values, 2)
        assert len(qt.s) == 4
        assert qt.s[0] == pytest.approx(2.0 / 127)
        assert qt.q[1] == -127
        assert qt.s[2] == 1.0  # all-zero group
        assert qt.q[6] == 127

    def test_dequantize_close_to_input(self):
        rng = np.random.default_rng(0)
        values = rng.standard_normal(64).astype(np.float32)
        qt = quantize(values, 16)
        np.testing.assert_allclose(dequantize(qt, 16), values, atol=np.max(qt.s))

    def test_reference_matvec(self):
        w = QuantizedTensor(q=[1, 2, 3, 4], s=[1.0, 0.5])
        x = QuantizedTensor(q=[2, 4], s=[0.25])
        # row 0: (1*2 + 2*4) * 1.0 * 0.25, row 1: (3*2 + 4*4) * 0.5 * 0.25
        np.testing.assert_allclose(reference_matvec(x, w, 2, 2, 2), [2.5, 2.75])

    def test_quantize_rejects_bad_group(self):
        with pytest.raises(ValueError):
            quantize([1.0], 0)


class TestHexIO:
    def test_bytes(self):
        assert format_hex_byte(-1) == "ff"
        assert format_hex_byte(10) == "0a"
        assert parse_hex_byte("80\n") == -128
        with pytest.raises(ValueError):
            parse_hex_byte("100")

    def test_words(self):
        assert format_hex_word(-2) == "fffffffe"
        assert parse_hex_word("fffffffe") == -2
        assert parse_hex_word("1ffffffff") == -1  # reduced to 32 bits
        assert parse_hex_word("// x") is None
        assert to_signed(0x7FFFFFFF) == 2**31 - 1


class TestTileSchedule:
    def test_row_block_major_order(self):
        tiles = list(tile_schedule(n=16, d=16, depth=8, lanes=8))
        assert [(t.row_base, t.col_base) for t in tiles] == [(0, 0), (0, 8), (8, 0), (8, 8)]
        assert all(t.lanes == 8 and t.depth == 8 for t in tiles)

    def test_edge_tiles_keep_full_shape(self):
        tiles = list(tile_schedule(n=12, d=11, depth=8, lanes=8))
        assert count_tiles(12, 11, 8, 8) == len(tiles) == 4
        last = tiles[-1]
        assert (last.row_base, last.col_base) == (8, 8)
        assert last.valid_rows(11) == 3
        assert last.valid_cols(12) == 4

    def test_tile_bounds(self):
        tile = Tile(row_base=8, col_base=16, lanes=8, depth=32)
        assert tile.row_end == 16
        assert tile.col_end == 48


class TestBridgeConfig:
    def test_defaults(self):
        config = BridgeConfig()
        assert config.hw_array_size == 8
        assert config.max_accum_depth == 32
        assert config.command == ["vvp", "tpu_sim"]
        assert config.comment_marker == "//"

    def test_artifact_paths(self, tmp_path):
        config = BridgeConfig(work_dir=tmp_path)
        assert config.artifact(config.results_file) == tmp_path / "memory_dump.txt"

    def test_validation(self):
        with pytest.raises(AssertionError):
            BridgeConfig(hw_array_size=0)
        with pytest.raises(AssertionError):
            BridgeConfig(acc_bits=8)
