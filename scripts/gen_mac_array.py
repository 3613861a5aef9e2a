#!/usr/bin/env python3
"""Generate MacArray Verilog from tpubridge."""

import argparse
import sys
from pathlib import Path

# Add src to path if running from scripts/
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))

from amaranth.back import verilog  # noqa: E402

from tpubridge.config import BridgeConfig  # noqa: E402
from tpubridge.hw.mac_array import MacArray  # noqa: E402


def main():
    parser = argparse.ArgumentParser(description="Generate MacArray Verilog")
    parser.add_argument("--lanes", type=int, default=8, help="Array lanes (default: 8)")
    parser.add_argument(
        "--max-depth", type=int, default=32, help="Maximum accumulation depth (default: 32)"
    )
    args = parser.parse_args()

    gen_dir = project_root / "gen"
    gen_dir.mkdir(exist_ok=True)

    config = BridgeConfig(hw_array_size=args.lanes, max_accum_depth=args.max_depth)
    array = MacArray(config)

    output_path = gen_dir / "mac_array.v"
    with open(output_path, "w") as f:
        f.write(verilog.convert(array, name="MacArray"))

    print(f"Generated {output_path}")


if __name__ == "__main__":
    main()
