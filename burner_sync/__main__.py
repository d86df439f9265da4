"""Entry point for Burner Sync.

Usage:
    python -m burner_sync [HOME]            Watch HOME (default ./home) and sync
    python -m burner_sync --push-all        Upload every file once, then watch
    python -m burner_sync --env FILE        Read HOST/PORT/TOKEN from FILE
"""

import argparse
import logging
import sys
from pathlib import Path

from burner_sync import __app_name__, __version__

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="burner-sync",
        description="Transpile and push TypeScript scripts to Bitburner on save.",
    )
    parser.add_argument("home", nargs="?", help="folder to watch (default: ./home)")
    parser.add_argument("--env", type=Path, help="credentials file (default: ./.env)")
    parser.add_argument("--config", type=Path, help="settings file (default: platform config dir)")
    parser.add_argument("--push-all", action="store_true", help="upload every file before watching")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING or ERROR")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: list[str] | None = None) -> None:
    """Parse arguments, load configuration and run until interrupted."""
    from burner_sync.config import Config, ConfigError, load_credentials
    from burner_sync.service import run_foreground, setup_logging

    args = build_parser().parse_args(argv)

    cfg = Config(args.config)
    if args.home:
        cfg.home_folder = str(Path(args.home).resolve())
    setup_logging(cfg, args.log_level)
    logger.info("%s %s starting.", __app_name__, __version__)

    try:
        creds = load_credentials(args.env)
    except ConfigError as exc:
        logger.error("%s", exc)
        sys.exit(1)

    try:
        run_foreground(cfg, creds, push_all=args.push_all)
    except FileNotFoundError as exc:
        logger.error("%s", exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
