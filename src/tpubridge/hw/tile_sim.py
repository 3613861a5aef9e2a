"""
tile_sim - a protocol-speaking stand-in for the external accelerator simulator.

Reads the artifacts the bridge writes (accumulation depth, weight tile, vector
tile), computes the tile and writes the results artifact, exactly like the
RTL simulator would. Two models are available:

- golden:   numpy int32 dot products
- amaranth: cycle-level simulation of the MacArray description

Usage:
    python -m tpubridge.hw.tile_sim --dir sim_run --lanes 8 --model amaranth

Exit status is 0 on success and 1 when an input artifact is missing or
malformed, so the bridge's invoker sees failures the same way it would from
``vvp`` or ``simv``.
"""

import argparse
import logging
import sys
from pathlib import Path

import numpy as np

from ..config import BridgeConfig
from ..quant import reference_int_tile
from ..util.hexio import format_hex_word, parse_hex_byte

logger = logging.getLogger(__name__)

MODELS = ("golden", "amaranth")


def parse_config_text(text: str) -> int:
    """Accumulation depth from the config artifact."""
    for line in text.splitlines():
        if line.strip():
            depth = int(line.strip())
            if depth <= 0:
                raise ValueError(f"accumulation depth must be positive, got {depth}")
            return depth
    raise ValueError("config artifact is empty")


def parse_byte_text(text: str, count: int, what: str) -> np.ndarray:
    """Exactly ``count`` hex bytes from a tile artifact."""
    values = [parse_hex_byte(line) for line in text.splitlines() if line.strip()]
    if len(values) < count:
        raise ValueError(f"{what} artifact has {len(values)} bytes, expected {count}")
    return np.array(values[:count], dtype=np.int8)


def compute_tile(
    weights: np.ndarray,
    vector: np.ndarray,
    depth: int,
    lanes: int,
    model: str = "golden",
) -> np.ndarray:
    """Integer result words of one tile using the selected model."""
    if model == "golden":
        return reference_int_tile(weights, vector, lanes, depth)
    if model == "amaranth":
        from .sim import MacArraySimulator

        return MacArraySimulator(BridgeConfig(hw_array_size=lanes)).run_tile(
            weights, vector, depth
        )
    raise ValueError(f"unknown model {model!r}; expected one of {MODELS}")


def format_results(results, bits: int = 32, comment_marker: str = "//") -> str:
    """Results artifact text: a comment header then one hex word per lane."""
    lines = [f"{comment_marker} tile_sim results: {len(results)} lanes"]
    lines.extend(format_hex_word(int(v), bits) for v in results)
    return "\n".join(lines) + "\n"


def run_protocol(
    config_text: str,
    weights_text: str,
    vector_text: str,
    lanes: int = 8,
    model: str = "golden",
    comment_marker: str = "//",
) -> str:
    """
    Run one tile from artifact texts to result artifact text.

    Raises:
        ValueError: if an artifact is malformed.
    """
    depth = parse_config_text(config_text)
    weights = parse_byte_text(weights_text, lanes * depth, "weight")
    vector = parse_byte_text(vector_text, depth, "vector")
    return format_results(
        compute_tile(weights, vector, depth, lanes, model), comment_marker=comment_marker
    )


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Compute one offloaded tile from protocol artifacts"
    )
    parser.add_argument("--dir", type=Path, default=Path("."), help="Artifact directory")
    parser.add_argument("--lanes", type=int, default=8, help="Hardware width (default: 8)")
    parser.add_argument(
        "--model", choices=MODELS, default="golden", help="Tile model (default: golden)"
    )
    parser.add_argument("--config", default="sim_config.txt", help="Config artifact name")
    parser.add_argument("--weights", default="weights.txt", help="Weight tile artifact name")
    parser.add_argument("--vector", default="vector.txt", help="Vector tile artifact name")
    parser.add_argument("--results", default="memory_dump.txt", help="Results artifact name")
    parser.add_argument(
        "--comment-marker", default="//", help="Results comment prefix (default: //)"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )

    try:
        config_text = (args.dir / args.config).read_text()
        weights_text = (args.dir / args.weights).read_text()
        vector_text = (args.dir / args.vector).read_text()
        results_text = run_protocol(
            config_text,
            weights_text,
            vector_text,
            args.lanes,
            args.model,
            args.comment_marker,
        )
        (args.dir / args.results).write_text(results_text)
    except (OSError, ValueError) as exc:
        logger.error("tile_sim failed: %s", exc)
        return 1

    logger.debug("wrote %s", args.dir / args.results)
    return 0


if __name__ == "__main__":
    sys.exit(main())
