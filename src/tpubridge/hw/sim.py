"""
Cycle-level execution of one tile on the MacArray model.

MacArraySimulator drives the Amaranth description through the Amaranth
simulator: one clear cycle, then ``depth`` cycles streaming one vector
element and one weight column per cycle. The lane accumulators after the
last cycle are the tile's result words.
"""

import numpy as np
from amaranth.sim import Simulator

from ..config import DEFAULT_CONFIG, BridgeConfig
from .mac_array import MacArray


class MacArraySimulator:
    """
    Runs tiles on a freshly elaborated MacArray.

    Example:
        >>> sim = MacArraySimulator(BridgeConfig(hw_array_size=2))
        >>> sim.run_tile([1, 2, 3, 4], [5, 6], depth=2)
        array([17, 39], dtype=int32)
    """

    def __init__(self, config: BridgeConfig = DEFAULT_CONFIG):
        self.config = config
        self.lanes = config.hw_array_size
        self.cycles = 0

    def run_tile(self, weights, vector, depth: int) -> np.ndarray:
        """
        Compute one tile.

        Args:
            weights: ``lanes * depth`` int8 codes, row-major
            vector: ``depth`` int8 codes
            depth: Accumulation depth (cycles of valid input)

        Returns:
            int32 array with one accumulator value per lane
        """
        lanes = self.lanes
        w = np.asarray(weights, dtype=np.int8).reshape(lanes, depth)
        v = np.asarray(vector, dtype=np.int8).reshape(depth)

        dut = MacArray(self.config)
        results = []
        counts = []

        async def testbench(ctx):
            ctx.set(dut.in_clear, 1)
            await ctx.tick()
            ctx.set(dut.in_clear, 0)

            for k in range(depth):
                ctx.set(dut.in_x, int(v[k]))
                for i in range(lanes):
                    ctx.set(getattr(dut, f"in_w_{i}"), int(w[i, k]))
                ctx.set(dut.in_valid, 1)
                await ctx.tick()

            ctx.set(dut.in_valid, 0)
            counts.append(ctx.get(dut.out_count))
            for i in range(lanes):
                results.append(ctx.get(getattr(dut, f"out_acc_{i}")))

        sim = Simulator(dut)
        sim.add_clock(1e-6)
        sim.add_testbench(testbench)
        sim.run()

        self.cycles += depth + 1
        assert counts[0] == depth, f"MacArray accumulated {counts[0]} of {depth} steps"
        return np.array(results, dtype=np.int32)
