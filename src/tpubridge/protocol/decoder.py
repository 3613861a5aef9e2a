"""
Decoder for the simulator -> bridge results artifact.

The results artifact holds one hexadecimal signed 32-bit word per lane,
possibly interleaved with comment lines (starting with ``//`` in column 0)
and blank lines. Parsing rules:

- comment and whitespace-only lines are skipped
- any other line is parsed like C ``%x``; a line that does not start with a
  hex number is warned about and skipped without consuming a lane
- reading stops after ``lanes`` values
- a short artifact is warned about and the missing lanes are zero
"""

import logging
from collections.abc import Iterable
from pathlib import Path

import numpy as np

from ..util.hexio import parse_hex_word
from .artifact import open_artifact

logger = logging.getLogger(__name__)

_BLANK = " \t\n\r"


def parse_results(
    lines: Iterable[str],
    lanes: int,
    comment_marker: str = "//",
    bits: int = 32,
) -> np.ndarray:
    """
    Parse result lines into a buffer of exactly ``lanes`` int32 values.

    Args:
        lines: Lines of the results artifact (file object, list, ...)
        lanes: Hardware width; size of the returned buffer
        comment_marker: Prefix identifying comment lines
        bits: Width of each result word

    Returns:
        numpy int32 array of shape (lanes,)
    """
    results = np.zeros(lanes, dtype=np.int32)
    filled = 0

    for lineno, line in enumerate(lines, start=1):
        if filled >= lanes:
            break
        if line.startswith(comment_marker):
            continue
        if not line.strip(_BLANK):
            continue

        value = parse_hex_word(line, bits)
        if value is None:
            logger.warning("cannot parse result line %d: %r", lineno, line.rstrip("\r\n"))
            continue
        results[filled] = value
        filled += 1

    if filled < lanes:
        logger.warning(
            "only %d of %d results read; remaining lanes set to 0", filled, lanes
        )

    return results


def read_results(
    path: str | Path,
    lanes: int,
    comment_marker: str = "//",
    bits: int = 32,
) -> np.ndarray:
    """
    Read and parse a results artifact.

    Raises:
        ArtifactError: if the artifact cannot be opened.
    """
    with open_artifact(path, "r") as f:
        return parse_results(f, lanes, comment_marker, bits)
