import sys

import pytest

from burner_sync.transform import (
    DEFAULT_TRANSPILER_COMMAND,
    SourceTransformer,
    TranspileError,
    run_transpiler,
)

UPPER = (sys.executable, "-c", "import sys; sys.stdout.write(sys.stdin.read().upper())")
FAIL = (sys.executable, "-c", "import sys; sys.stderr.write('bad syntax at 1:4'); sys.exit(1)")


def test_default_command_targets_es2021_typescript():
    t = SourceTransformer()
    assert t.command == DEFAULT_TRANSPILER_COMMAND
    assert "--target=es2021" in t.command
    assert "--loader=ts" in t.command


def test_engine_replaces_subprocess():
    t = SourceTransformer(engine=lambda src: src.replace(": number", ""))
    assert t.transform("let a: number = 1;") == "let a = 1;"


def test_run_transpiler_pipes_stdin_to_stdout():
    assert run_transpiler(UPPER, "let a = 1;") == "LET A = 1;"


def test_transform_uses_configured_command():
    t = SourceTransformer(command=UPPER)
    assert t.transform("export const x = 1;") == "EXPORT CONST X = 1;"


def test_nonzero_exit_raises_with_stderr():
    with pytest.raises(TranspileError, match="bad syntax at 1:4"):
        SourceTransformer(command=FAIL).transform("let = ;")


def test_missing_binary_raises():
    with pytest.raises(TranspileError, match="Could not run"):
        run_transpiler(["definitely-not-a-real-transpiler-binary"], "x")
