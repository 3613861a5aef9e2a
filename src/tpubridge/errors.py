"""
Exceptions raised by the offload bridge.

Every condition that makes a matmul result unusable is fatal and raised as a
BridgeError subclass naming the artifact or process at fault. Soft conditions
(unparseable result lines, short result artifacts) are only logged.
"""


class BridgeError(Exception):
    """Base class for unrecoverable offload failures."""


class ArtifactError(BridgeError):
    """A protocol artifact could not be created, opened, read or removed.

    ``mode`` is the open mode, or ``"d"`` for a failed removal.
    """

    def __init__(self, path, mode: str, reason: str = ""):
        self.path = path
        self.mode = mode
        if mode == "d":
            message = f"cannot remove artifact {path}"
        else:
            action = "writing" if "w" in mode else "reading"
            message = f"cannot open artifact {path} for {action}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class SimulationError(BridgeError):
    """The external simulator failed; no result of the current call is usable."""

    def __init__(self, message: str, command=None, result=None):
        self.command = command
        self.result = result
        super().__init__(message)


class SimulationTimeout(SimulationError):
    """The external simulator did not finish within the configured timeout."""

    def __init__(self, command, timeout: float):
        self.timeout = timeout
        super().__init__(
            f"simulator {' '.join(command)} did not finish within {timeout}s",
            command=command,
        )


class ScaleIndexError(BridgeError, IndexError):
    """A dequantization scale index fell outside its scale sequence."""

    def __init__(self, which: str, index: int, length: int, row: int, col: int):
        self.which = which
        self.index = index
        self.length = length
        super().__init__(
            f"{which} scale index {index} out of range [0, {length}) "
            f"for row {row}, column block {col}"
        )
