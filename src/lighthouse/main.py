"""Command-line entrypoint for lighthouse.

Brief:
  Loads the YAML configuration (upgrading it when needed), reads cached
  filter contents, and regenerates both the YAML file and the resolver's
  Corefile, mirroring what the service does at startup.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List, Optional

from .config.store import DEFAULT_CONFIG_FILENAME, ConfigStore
from .errors import ConfigError
from .logging_config import init_logging

logger = logging.getLogger("lighthouse.main")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lighthouse",
        description="Synchronize the DNS filtering configuration and regenerate the Corefile.",
    )
    parser.add_argument(
        "-c",
        "--config",
        default=DEFAULT_CONFIG_FILENAME,
        help="YAML configuration file, relative to --base-dir unless absolute "
        "(default: %(default)s)",
    )
    parser.add_argument(
        "--base-dir",
        default=os.getcwd(),
        help="Directory holding the configuration, Corefile and data/ (default: cwd)",
    )
    parser.add_argument(
        "--log-level",
        default="info",
        help="Log level: debug, info, warn, error, crit (default: %(default)s)",
    )
    parser.add_argument("--log-file", default=None, help="Also append logs to this file")
    parser.add_argument(
        "--check",
        action="store_true",
        help="Load the configuration and print the Corefile without writing anything",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Brief: Run the CLI.

    Inputs:
      - argv: Argument list (defaults to sys.argv[1:]).

    Outputs:
      - int: 0 on success, 1 when a configuration error occurred.
    """

    args = build_parser().parse_args(argv)
    init_logging({"level": args.log_level, "file": args.log_file})

    store = ConfigStore(args.base_dir, config_filename=args.config)
    try:
        store.load()
        loaded = store.load_filter_contents()
        logger.debug("Loaded contents for %d filters", loaded)
        if args.check:
            sys.stdout.write(store.render_corefile())
            return 0
        store.write_all()
    except ConfigError as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
