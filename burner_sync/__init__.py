"""Burner Sync: push TypeScript scripts to Bitburner on save.

Watches a local ``home`` folder, transpiles each saved file to
JavaScript, uploads it through the game's remote file API and writes
the reported RAM cost back into the file's header.
"""

__version__ = "1.0.0"
__app_name__ = "Burner Sync"
