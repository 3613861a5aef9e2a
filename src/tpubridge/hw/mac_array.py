"""
MacArray - reference model of the offload accelerator.

The accelerator is a row of ``hw_array_size`` multiply-accumulate lanes.
Every cycle with ``in_valid`` high, the shared activation ``in_x`` is
multiplied with each lane's weight ``in_w_i`` and added to that lane's
accumulator:

                    in_x (broadcast)
           ┌───────────┼───────────┐
           v           v           v
    in_w_0 [MacLane 0] [MacLane 1] ... [MacLane N-1]
           |           |               |
        out_acc_0   out_acc_1       out_acc_N-1

After ``depth`` valid cycles each lane holds the int32 dot product of its
weight row with the vector slice; ``in_clear`` zeroes all lanes.
"""

from amaranth import Module, Signal, signed
from amaranth.lib.wiring import Component, In, Out

from ..config import BridgeConfig


class MacLane(Component):
    """
    One multiply-accumulate lane.

    Ports:
        in_w: Signed weight operand
        in_x: Signed activation operand
        in_valid: Accumulate in_w * in_x this cycle
        in_clear: Reset the accumulator to zero (wins over in_valid)
        out_acc: Current accumulator value (wraps at acc_bits)

    Parameters:
        config: BridgeConfig with operand and accumulator widths
    """

    def __init__(self, config: BridgeConfig):
        self.config = config

        super().__init__(
            {
                "in_w": In(signed(config.weight_bits)),
                "in_x": In(signed(config.input_bits)),
                "in_valid": In(1),
                "in_clear": In(1),
                "out_acc": Out(signed(config.acc_bits)),
            }
        )

    def elaborate(self, _platform):
        m = Module()
        cfg = self.config

        acc = Signal(signed(cfg.acc_bits), name="acc")

        # Product width = input_bits + weight_bits
        product = Signal(signed(cfg.input_bits + cfg.weight_bits), name="product")
        m.d.comb += product.eq(self.in_w * self.in_x)

        with m.If(self.in_clear):
            m.d.sync += acc.eq(0)
        with m.Elif(self.in_valid):
            # Truncation back to acc_bits gives two's complement wrap-around
            m.d.sync += acc.eq(acc + product)

        m.d.comb += self.out_acc.eq(acc)

        return m


class MacArray(Component):
    """
    A row of MacLanes sharing one broadcast activation.

    Ports:
        in_w_0..N: Per-lane weight operands
        in_x: Activation operand (broadcast to every lane)
        in_valid: Accumulate this cycle
        in_clear: Zero every lane
        out_acc_0..N: Per-lane accumulators
        out_count: MAC steps accumulated since the last clear

    Parameters:
        config: BridgeConfig with hw_array_size and data widths
    """

    def __init__(self, config: BridgeConfig):
        self.config = config
        self.lanes = config.hw_array_size
        self.count_bits = max(16, config.max_accum_depth.bit_length() + 1)

        ports = {}
        for i in range(self.lanes):
            ports[f"in_w_{i}"] = In(signed(config.weight_bits))
        ports["in_x"] = In(signed(config.input_bits))
        ports["in_valid"] = In(1)
        ports["in_clear"] = In(1)
        for i in range(self.lanes):
            ports[f"out_acc_{i}"] = Out(signed(config.acc_bits))
        ports["out_count"] = Out(self.count_bits)

        super().__init__(ports)

    def elaborate(self, _platform):
        m = Module()
        cfg = self.config

        lanes = [MacLane(cfg) for _ in range(self.lanes)]
        for i, lane in enumerate(lanes):
            m.submodules[f"lane_{i}"] = lane
            m.d.comb += [
                lane.in_w.eq(getattr(self, f"in_w_{i}")),
                lane.in_x.eq(self.in_x),
                lane.in_valid.eq(self.in_valid),
                lane.in_clear.eq(self.in_clear),
                getattr(self, f"out_acc_{i}").eq(lane.out_acc),
            ]

        count = Signal(self.count_bits, name="count")
        with m.If(self.in_clear):
            m.d.sync += count.eq(0)
        with m.Elif(self.in_valid):
            m.d.sync += count.eq(count + 1)
        m.d.comb += self.out_count.eq(count)

        return m
