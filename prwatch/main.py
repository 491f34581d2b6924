"""prwatch entry point.

Usage: prwatch [--config config.yaml] [--check] [--once]
"""

import argparse
import logging
import sys
from pathlib import Path

from prwatch.config import load_config
from prwatch.logging import PrwatchLogging


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(
        prog="prwatch",
        description="prwatch - trigger builds for pull requests on new commits and trusted comments",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=Path("config.yaml"),
        help="Path to YAML config file",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Only load and validate config, then exit",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Reconcile every repository once, then exit",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Entry point: validate config, run one pass, or run the daemon."""
    args = parse_args(argv)
    config_path = args.config
    if not config_path.is_file() and config_path == Path("config.yaml"):
        if Path("config.example.yaml").is_file():
            config_path = Path("config.example.yaml")
            logging.basicConfig(level=logging.INFO)
            logging.getLogger("prwatch").warning("config.yaml not found, using config.example.yaml")

    config = load_config(config_path)

    if args.check:
        print("Config OK:", ", ".join(config.trigger.repositories) or "(no repositories)")
        return 0

    from prwatch.daemon import run_daemon, run_once

    try:
        if args.once:
            PrwatchLogging(config.logging).setup()
            run_once(config)
        else:
            run_daemon(config)
    except KeyboardInterrupt:
        return 0
    except Exception as e:
        logging.getLogger("prwatch.daemon").exception("Fatal error: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
