"""
RAM-usage header maintenance for Burner Sync.

After a successful upload the game reports how much RAM the script
costs.  That figure is recorded as a single comment line at the top of
the local source file.  Writing the file re-triggers the watcher, so
the update must be a no-op when the value has not changed; otherwise
every sync would cause another sync.
"""

import logging
import re
from pathlib import Path

from burner_sync.paths import format_usage

logger = logging.getLogger(__name__)

HEADER_PREFIX = "// Ram usage: "
_HEADER_RE = re.compile(r"// Ram usage: ([^\r\n]*)")


def header_line(ram_usage: float) -> str:
    """Return the exact comment line for *ram_usage*."""
    return f"{HEADER_PREFIX}{format_usage(ram_usage)}GB"


def apply_header(text: str, ram_usage: float) -> str:
    """Return *text* with its RAM-usage line set to *ram_usage*."""
    line = header_line(ram_usage)
    if line in text:
        return text
    if HEADER_PREFIX in text:
        return _HEADER_RE.sub(lambda _m: line, text, count=1)
    return f"{line}\n\n{text}"


def annotate(filepath: Path, ram_usage: float) -> bool:
    """
    Record *ram_usage* in the header of *filepath*.

    Returns True if the file was rewritten, False if it already carried
    the exact line.  Raises OSError on read or write failure; the write
    is a plain full-file rewrite with no recovery from a crash mid-way.
    """
    path = Path(filepath)
    # newline="" keeps CRLF files byte-identical apart from the header.
    with open(path, encoding="utf-8", newline="") as fh:
        original = fh.read()

    updated = apply_header(original, ram_usage)
    if updated == original:
        logger.debug("Header already current for %s", path)
        return False

    with open(path, "w", encoding="utf-8", newline="") as fh:
        fh.write(updated)
    logger.debug("Updated header of %s to %s", path, header_line(ram_usage))
    return True
