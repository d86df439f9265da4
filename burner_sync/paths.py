"""
Name mapping and source rewriting for Burner Sync.

Translates a path under the watched home folder into the filename the
game expects, decides which files may be synced at all, and patches
import statements in transpiled output so they resolve on the remote
side.  Everything here is pure: no I/O, no state.
"""

import os

# Extensions the remote file API accepts.
ALLOWED_EXTENSIONS: frozenset[str] = frozenset({".js", ".script", ".ns", ".txt"})

SOURCE_SUFFIX = ".ts"
COMPILED_SUFFIX = ".js"

# Literal patterns rewritten by rewrite_imports().  Only the exact
# quote+semicolon terminator is touched so unrelated strings survive.
_RELATIVE_IMPORT = (f'{SOURCE_SUFFIX}";', f'{COMPILED_SUFFIX}";')
_ALIAS_IMPORT = ('from "@/', 'from "/')


def map_name(relative_path: str) -> str | None:
    """
    Return the remote filename for *relative_path*, or None if rejected.

    - names containing a space are rejected
    - OS separators become ``/``
    - nested paths get a single leading ``/``; a bare root file keeps none
    - a trailing ``.ts`` becomes ``.js``
    """
    if " " in relative_path:
        return None

    name = relative_path.replace(os.sep, "/")
    if "/" in name and not name.startswith("/"):
        name = "/" + name
    if name.endswith(SOURCE_SUFFIX):
        name = name[: -len(SOURCE_SUFFIX)] + COMPILED_SUFFIX
    return name


def is_syncable(remote_name: str, allowed=ALLOWED_EXTENSIONS) -> bool:
    """Return True if the remote name's extension is on the allow-list."""
    ext = os.path.splitext(remote_name)[1]
    return ext in allowed


def rewrite_imports(code: str) -> str:
    """Point ``.ts`` imports at ``.js`` and ``@/`` imports at the root."""
    return code.replace(*_RELATIVE_IMPORT).replace(*_ALIAS_IMPORT)


def format_usage(value: float) -> str:
    """Render a RAM figure the way the game prints numbers (``2`` not ``2.0``)."""
    number = float(value)
    if number.is_integer():
        return str(int(number))
    return repr(number)
