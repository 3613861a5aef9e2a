"""
SimulatorInvoker - launches the external accelerator simulator.

One blocking process runs per tile. Exit status 0 is the only success signal;
anything else aborts the whole offload. There is no retry.

The command is an argv list run without a shell. Output is captured and the
run is bounded by an optional timeout.
"""

import logging
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path

from .errors import SimulationError, SimulationTimeout

logger = logging.getLogger(__name__)


@dataclass
class SimulationResult:
    """Outcome of one simulator run."""

    command: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""
    elapsed: float = 0.0

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class SimulatorInvoker:
    """
    Runs a simulator command to completion.

    Parameters:
        command: argv of the simulator (e.g. ``["vvp", "tpu_sim"]``)
        cwd: Directory the simulator runs in (where the artifacts live)
        timeout: Seconds before the run is killed; None waits forever
        env: Process environment; None inherits the caller's
    """

    def __init__(
        self,
        command: list[str],
        cwd: str | Path | None = None,
        timeout: float | None = None,
        env: dict[str, str] | None = None,
    ):
        if not command:
            raise ValueError("simulator command must not be empty")
        self.command = list(command)
        self.cwd = cwd
        self.timeout = timeout
        self.env = env
        self.runs = 0

    def run(self) -> SimulationResult:
        """
        Launch the simulator and wait for it.

        Returns:
            SimulationResult of a successful (exit status 0) run

        Raises:
            SimulationTimeout: the run exceeded ``timeout``
            SimulationError: the command could not be started or exited non-zero
        """
        start = time.monotonic()
        try:
            proc = subprocess.run(
                self.command,
                cwd=self.cwd,
                env=self.env,
                timeout=self.timeout,
                capture_output=True,
                text=True,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            raise SimulationTimeout(self.command, self.timeout) from exc
        except OSError as exc:
            raise SimulationError(
                f"cannot launch simulator {' '.join(self.command)}: {exc}",
                command=self.command,
            ) from exc

        self.runs += 1
        result = SimulationResult(
            command=self.command,
            returncode=proc.returncode,
            stdout=proc.stdout or "",
            stderr=proc.stderr or "",
            elapsed=time.monotonic() - start,
        )
        if result.stdout:
            logger.debug("simulator stdout:\n%s", result.stdout.rstrip())
        if result.stderr:
            logger.debug("simulator stderr:\n%s", result.stderr.rstrip())

        if not result.ok:
            raise SimulationError(
                f"simulation failed: {' '.join(self.command)} exited with "
                f"status {result.returncode}",
                command=self.command,
                result=result,
            )
        return result
