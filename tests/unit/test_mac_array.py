"""
Unit tests for the reference accelerator (MacLane, MacArray).

These tests verify:
1. Port signature of the lanes and the array
2. Signed multiply-accumulate over several cycles
3. Clear behavior and step counting
4. Two's complement wrap-around of the accumulator
5. MacArraySimulator against the integer golden model
"""

import numpy as np
import pytest
from amaranth.sim import Simulator

from tpubridge.config import BridgeConfig
from tpubridge.hw.mac_array import MacArray, MacLane
from tpubridge.hw.sim import MacArraySimulator
from tpubridge.quant import reference_int_tile


@pytest.fixture
def config():
    """Small array for fast simulation."""
    return BridgeConfig(hw_array_size=4)


class TestMacLane:
    def test_instantiation(self, config):
        lane = MacLane(config)
        assert lane.config.acc_bits == 32
        for port in ("in_w", "in_x", "in_valid", "in_clear", "out_acc"):
            assert hasattr(lane, port)

    def test_signed_accumulate(self, config):
        lane = MacLane(config)
        results = []

        async def testbench(ctx):
            ctx.set(lane.in_clear, 1)
            await ctx.tick()
            ctx.set(lane.in_clear, 0)

            # 3*4 + (-5)*6 + (-7)*(-8) = 12 - 30 + 56 = 38
            for w, x in [(3, 4), (-5, 6), (-7, -8)]:
                ctx.set(lane.in_w, w)
                ctx.set(lane.in_x, x)
                ctx.set(lane.in_valid, 1)
                await ctx.tick()
            ctx.set(lane.in_valid, 0)
            results.append(ctx.get(lane.out_acc))

            # Idle cycles hold the value
            await ctx.tick()
            results.append(ctx.get(lane.out_acc))

            ctx.set(lane.in_clear, 1)
            await ctx.tick()
            results.append(ctx.get(lane.out_acc))

        sim = Simulator(lane)
        sim.add_clock(1e-6)
        sim.add_testbench(testbench)
        sim.run()

        assert results == [38, 38, 0]

    def test_wraps_at_acc_bits(self):
        lane = MacLane(BridgeConfig(hw_array_size=1, acc_bits=16))
        results = []

        async def testbench(ctx):
            # 3 * (-128 * -128) = 49152 wraps to 49152 - 65536 in 16 bits
            for _ in range(3):
                ctx.set(lane.in_w, -128)
                ctx.set(lane.in_x, -128)
                ctx.set(lane.in_valid, 1)
                await ctx.tick()
            results.append(ctx.get(lane.out_acc))

        sim = Simulator(lane)
        sim.add_clock(1e-6)
        sim.add_testbench(testbench)
        sim.run()

        assert results == [49152 - 65536]


class TestMacArray:
    def test_has_per_lane_ports(self, config):
        array = MacArray(config)
        for i in range(config.hw_array_size):
            assert hasattr(array, f"in_w_{i}")
            assert hasattr(array, f"out_acc_{i}")
        assert hasattr(array, "in_x")
        assert hasattr(array, "out_count")

    def test_broadcast_and_count(self, config):
        array = MacArray(config)
        observed = {}

        async def testbench(ctx):
            ctx.set(array.in_clear, 1)
            await ctx.tick()
            ctx.set(array.in_clear, 0)

            for step in range(5):
                ctx.set(array.in_x, step + 1)
                for i in range(4):
                    ctx.set(getattr(array, f"in_w_{i}"), i - 2)
                ctx.set(array.in_valid, 1)
                await ctx.tick()
            ctx.set(array.in_valid, 0)

            observed["count"] = ctx.get(array.out_count)
            observed["acc"] = [ctx.get(getattr(array, f"out_acc_{i}")) for i in range(4)]

        sim = Simulator(array)
        sim.add_clock(1e-6)
        sim.add_testbench(testbench)
        sim.run()

        assert observed["count"] == 5
        # Lane i accumulates (i - 2) * (1 + 2 + 3 + 4 + 5)
        assert observed["acc"] == [(i - 2) * 15 for i in range(4)]


class TestMacArraySimulator:
    def test_small_tile(self):
        sim = MacArraySimulator(BridgeConfig(hw_array_size=2))
        assert sim.run_tile([1, 2, 3, 4], [5, 6], depth=2).tolist() == [17, 39]

    @pytest.mark.parametrize("depth", [1, 8, 32])
    def test_matches_golden_model(self, config, depth):
        rng = np.random.default_rng(depth)
        weights = rng.integers(-128, 128, config.hw_array_size * depth).astype(np.int8)
        vector = rng.integers(-128, 128, depth).astype(np.int8)

        results = MacArraySimulator(config).run_tile(weights, vector, depth)

        expected = reference_int_tile(weights, vector, config.hw_array_size, depth)
        np.testing.assert_array_equal(results, expected)
        assert results.dtype == np.int32
