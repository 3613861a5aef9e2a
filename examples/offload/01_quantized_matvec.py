#!/usr/bin/env python3
"""
Quantized Matvec Offload Demo.

This example quantizes a random weight matrix and input vector, offloads
the product xout = W @ x to the accelerator model tile by tile, and checks
the result against the host reference. It shows:

1. Quantization
   - Symmetric int8 quantization with one float32 scale per group

2. Tiling
   - The matrix is cut into hw_array_size x group_size tiles
   - Tiles are visited row block by row block

3. Offload
   - loopback: artifacts kept in memory, tile_sim model in-process
   - file:     artifacts written to a work directory, tile_sim launched
               as a separate simulator process for every tile

4. Verification
   - Compare against reference_matvec on the same quantized operands

Usage:
    python 01_quantized_matvec.py [--d D] [--n N] [--gs GS] [--channel {loopback,file}]
"""

import argparse
import logging
import os
import sys
import tempfile
from functools import partial
from pathlib import Path

import numpy as np

# Add src to path for imports
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root / "src"))

from tpubridge import (  # noqa: E402
    BridgeConfig,
    FileChannel,
    LoopbackChannel,
    matmul_hw,
    quantize,
    reference_matvec,
)
from tpubridge.hw.tile_sim import MODELS, run_protocol  # noqa: E402
from tpubridge.tiling import count_tiles  # noqa: E402


def tile_sim_config(work_dir: str, model: str) -> BridgeConfig:
    """Config that launches tile_sim as the external simulator."""
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(
        p for p in (str(project_root / "src"), env.get("PYTHONPATH")) if p
    )
    return BridgeConfig(
        simulator_command=[
            sys.executable, "-m", "tpubridge.hw.tile_sim", "--lanes", "8", "--model", model
        ],
        work_dir=work_dir,
        env=env,
        timeout=60.0,
    )


def run_demo(d: int, n: int, gs: int, channel_kind: str, model: str, seed: int) -> bool:
    rng = np.random.default_rng(seed)
    w = quantize(rng.standard_normal(d * n).astype(np.float32), gs)
    x = quantize(rng.standard_normal(n).astype(np.float32), gs)

    print(f"Problem: d={d} n={n} gs={gs}")
    print(f"Tiles:   {count_tiles(n, d, gs, 8)} ({channel_kind}, {model} model)")

    xout = np.zeros(d, dtype=np.float32)
    if channel_kind == "loopback":
        channel = LoopbackChannel(partial(run_protocol, lanes=8, model=model))
        matmul_hw(xout, x, w, n, d, gs, channel=channel)
    else:
        with tempfile.TemporaryDirectory() as work_dir:
            matmul_hw(xout, x, w, n, d, gs, channel=FileChannel(tile_sim_config(work_dir, model)))

    expected = reference_matvec(x, w, n, d, gs)
    max_err = float(np.max(np.abs(xout - expected)))
    print(f"Max abs error vs reference: {max_err:.3e}")

    ok = np.allclose(xout, expected, rtol=1e-5, atol=1e-5)
    print("PASS" if ok else "FAIL")
    return ok


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Quantized Matvec Offload Demo",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--d", type=int, default=20, help="Output rows (default: 20)")
    parser.add_argument("--n", type=int, default=48, help="Input columns (default: 48)")
    parser.add_argument("--gs", type=int, default=16, help="Group size (default: 16)")
    parser.add_argument(
        "--channel",
        choices=["loopback", "file"],
        default="loopback",
        help="Simulation channel (default: loopback)",
    )
    parser.add_argument(
        "--model", choices=MODELS, default="golden", help="tile_sim model (default: golden)"
    )
    parser.add_argument("--seed", type=int, default=0, help="Random seed")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    success = run_demo(args.d, args.n, args.gs, args.channel, args.model, args.seed)
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
