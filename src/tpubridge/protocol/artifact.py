"""
Opening protocol artifacts.

All artifact I/O goes through open_artifact so that an OS-level failure is
reported as a fatal ArtifactError naming the file.
"""

from contextlib import contextmanager
from pathlib import Path

from ..errors import ArtifactError


@contextmanager
def open_artifact(path: str | Path, mode: str = "r"):
    """
    Open an artifact as text, translating OSError into ArtifactError.

    Only the open itself is guarded; errors raised by the caller inside the
    ``with`` block propagate unchanged.
    """
    try:
        f = open(path, mode, encoding="ascii", errors="replace", newline=None)
    except OSError as exc:
        raise ArtifactError(path, mode, exc.strerror or str(exc)) from exc
    with f:
        yield f


def remove_artifact(path: str | Path) -> None:
    """Delete an artifact if present; a failed removal is an ArtifactError."""
    try:
        Path(path).unlink(missing_ok=True)
    except OSError as exc:
        raise ArtifactError(path, "d", exc.strerror or str(exc)) from exc
