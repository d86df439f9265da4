"""
TypeScript to JavaScript transpilation for Burner Sync.

The transpiler itself is an external tool; this module feeds it source
on stdin and reads ES2021 JavaScript back from stdout.  Any callable
taking and returning a string can stand in for the subprocess.
"""

import logging
import subprocess
from collections.abc import Callable, Sequence

logger = logging.getLogger(__name__)

DEFAULT_TRANSPILER_COMMAND: tuple[str, ...] = (
    "esbuild",
    "--loader=ts",
    "--target=es2021",
    "--log-level=error",
)


class TranspileError(Exception):
    """The transpiler rejected its input or could not be run."""


def run_transpiler(command: Sequence[str], source: str) -> str:
    """Pipe *source* through *command* and return its stdout."""
    try:
        proc = subprocess.run(
            list(command),
            input=source,
            capture_output=True,
            text=True,
            encoding="utf-8",
            check=False,
        )
    except OSError as exc:
        raise TranspileError(f"Could not run {command[0]}: {exc}") from exc

    if proc.returncode != 0:
        detail = (proc.stderr or "").strip() or f"exit status {proc.returncode}"
        raise TranspileError(detail)
    return proc.stdout


class SourceTransformer:
    """
    Turns TypeScript source into code the game can execute.

    Parameters
    ----------
    command : sequence of str, optional
        Transpiler command line; defaults to esbuild targeting ES2021.
    engine : callable, optional
        ``source -> output`` function used instead of a subprocess.
    """

    def __init__(
        self,
        command: Sequence[str] | None = None,
        engine: Callable[[str], str] | None = None,
    ):
        self.command = tuple(command or DEFAULT_TRANSPILER_COMMAND)
        self._engine = engine

    def transform(self, source: str) -> str:
        """Return transpiled *source*; raises TranspileError on failure."""
        if self._engine is not None:
            return self._engine(source)
        logger.debug("Transpiling %d chars with %s", len(source), self.command[0])
        return run_transpiler(self.command, source)
