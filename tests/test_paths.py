import pytest

from burner_sync import paths
from burner_sync.paths import format_usage, is_syncable, map_name, rewrite_imports


@pytest.mark.parametrize(
    "relative, expected",
    [
        ("foo.ts", "foo.js"),
        ("lib/util.ts", "/lib/util.js"),
        ("/lib/util.ts", "/lib/util.js"),
        ("a/b/c.script", "/a/b/c.script"),
        ("notes.txt", "notes.txt"),
        ("hack.js", "hack.js"),
    ],
)
def test_map_name(relative, expected):
    assert map_name(relative) == expected


@pytest.mark.parametrize("relative", ["my file.ts", "dir name/a.ts", " lead.ts"])
def test_map_name_rejects_spaces(relative):
    assert map_name(relative) is None


@pytest.mark.parametrize("relative", ["foo.ts", "lib/util.ts", "x.ts.ts", "a/b.txt"])
def test_map_name_is_idempotent(relative):
    once = map_name(relative)
    assert map_name(once) == once


def test_map_name_only_rewrites_trailing_suffix():
    assert map_name("types.tsx") == "types.tsx"
    assert map_name("lib.ts/main.ts") == "/lib.ts/main.js"


def test_map_name_normalises_os_separator(monkeypatch):
    monkeypatch.setattr(paths.os, "sep", "\\")
    assert map_name("lib\\util.ts") == "/lib/util.js"


@pytest.mark.parametrize(
    "name, ok",
    [
        ("foo.js", True),
        ("/lib/a.script", True),
        ("x.ns", True),
        ("readme.txt", True),
        ("foo.ts", False),
        ("data.json", False),
        ("Makefile", False),
    ],
)
def test_is_syncable(name, ok):
    assert is_syncable(name) is ok


def test_is_syncable_custom_allow_list():
    assert is_syncable("data.json", {".json"})
    assert not is_syncable("foo.js", {".json"})


def test_rewrite_imports_both_patterns():
    code = 'import x from "@/bar.ts";\nimport { y } from "./y.ts";\n'
    assert rewrite_imports(code) == 'import x from "/bar.js";\nimport { y } from "./y.js";\n'


def test_rewrite_imports_noop_without_patterns():
    code = 'const s = "file.ts"\nconst u = \'file.ts\';\nconst t = \'@/x\';\nlog("from @/ here");\n'
    assert rewrite_imports(code) == code


def test_rewrite_imports_only_exact_terminator():
    code = 'const a = "x.ts"\nimport b from "./b.ts";'
    assert rewrite_imports(code) == 'const a = "x.ts"\nimport b from "./b.js";'


def test_rewrite_imports_is_idempotent():
    code = 'import x from "@/bar.ts";\nexport * from "./lib.ts";\n'
    once = rewrite_imports(code)
    assert rewrite_imports(once) == once


@pytest.mark.parametrize(
    "value, text",
    [(1.75, "1.75"), (2.0, "2"), (2, "2"), (1.6, "1.6"), (0.1 + 0.2, "0.30000000000000004")],
)
def test_format_usage(value, text):
    assert format_usage(value) == text
