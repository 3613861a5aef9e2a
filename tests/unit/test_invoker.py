"""
Unit tests for SimulatorInvoker.

These tests launch small Python processes in place of the RTL simulator to
verify exit status handling, output capture, working directory and timeout.
"""

import sys

import pytest

from tpubridge.config import BridgeConfig, SimulatorKind
from tpubridge.errors import SimulationError, SimulationTimeout
from tpubridge.invoker import SimulatorInvoker


def python(code: str) -> list[str]:
    return [sys.executable, "-c", code]


class TestSimulatorInvoker:
    def test_success_returns_structured_result(self):
        invoker = SimulatorInvoker(python("print('sim done')"), timeout=30)
        result = invoker.run()
        assert result.ok
        assert result.returncode == 0
        assert "sim done" in result.stdout
        assert result.elapsed >= 0
        assert invoker.runs == 1

    def test_nonzero_exit_is_fatal(self):
        invoker = SimulatorInvoker(
            python("import sys; sys.stderr.write('assertion failed'); sys.exit(3)"),
            timeout=30,
        )
        with pytest.raises(SimulationError) as excinfo:
            invoker.run()
        err = excinfo.value
        assert err.result is not None
        assert err.result.returncode == 3
        assert "assertion failed" in err.result.stderr
        assert "status 3" in str(err)

    def test_missing_executable(self, tmp_path):
        invoker = SimulatorInvoker([str(tmp_path / "no_such_simv")])
        with pytest.raises(SimulationError) as excinfo:
            invoker.run()
        assert excinfo.value.result is None

    def test_timeout(self):
        invoker = SimulatorInvoker(python("import time; time.sleep(30)"), timeout=0.5)
        with pytest.raises(SimulationTimeout) as excinfo:
            invoker.run()
        assert excinfo.value.timeout == 0.5
        assert isinstance(excinfo.value, SimulationError)

    def test_runs_in_work_dir(self, tmp_path):
        invoker = SimulatorInvoker(
            python("open('touched.txt', 'w').write('x')"), cwd=tmp_path, timeout=30
        )
        invoker.run()
        assert (tmp_path / "touched.txt").read_text() == "x"

    def test_empty_command_rejected(self):
        with pytest.raises(ValueError):
            SimulatorInvoker([])


class TestSimulatorSelection:
    def test_default_is_vvp(self):
        assert BridgeConfig().command == ["vvp", "tpu_sim"]

    def test_vcs_binary(self):
        assert BridgeConfig(simulator=SimulatorKind.VCS).command == ["./simv"]

    def test_explicit_command_wins(self):
        config = BridgeConfig(simulator=SimulatorKind.VCS, simulator_command=["my_sim", "-q"])
        assert config.command == ["my_sim", "-q"]
