"""
Command line entry point of the exporter.
"""

import argparse
import sys
from importlib import metadata
from typing import List, Optional

from . import __version__
from .config import DEFAULT_CONFIG_PATH, load_config
from .exporter import DEFAULT_LISTEN_ADDRESS, serve
from .exceptions import UnifiConfigError
from .logging import get_logger, setup_logging

logger = get_logger(__name__)

DISTRIBUTION = "unifi-sdn-exporter"


def print_version() -> None:
    """Print the exporter version and the versions of its dependencies."""
    line = "{:<10} {:<30} {}"
    print(line.format("main", DISTRIBUTION, __version__))

    try:
        requirements = metadata.requires(DISTRIBUTION) or []
    except metadata.PackageNotFoundError:
        return

    print("Dependencies:")
    for requirement in requirements:
        if "extra ==" in requirement:
            continue
        name = requirement.split(";")[0]
        for sep in "<>=!~[ ":
            name = name.split(sep)[0]
        try:
            version = metadata.version(name)
        except metadata.PackageNotFoundError:
            version = "(not installed)"
        print(line.format("dep", name, version))


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="unifi-sdn-exporter",
        description="Prometheus exporter for UniFi SDN controllers",
    )
    parser.add_argument(
        "--web.listen-address",
        dest="listen_address",
        default=DEFAULT_LISTEN_ADDRESS,
        help=f"Address on which to expose metrics and web interface (default: {DEFAULT_LISTEN_ADDRESS})",
    )
    parser.add_argument(
        "--web.config",
        dest="config",
        default=DEFAULT_CONFIG_PATH,
        help=f"Path to config.toml that contains all the targets (default: {DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument("--verbose", action="store_true", help="Increase verbosity")
    parser.add_argument(
        "-v", "--version", action="store_true", help="Show version information and exit")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    if args.version:
        print_version()
        return 0

    setup_logging(verbose=args.verbose)
    try:
        config = load_config(args.config)
    except UnifiConfigError as e:
        logger.error(str(e))
        return 1

    try:
        serve(config, args.listen_address)
    except ValueError as e:
        logger.error(str(e))
        return 1
    except KeyboardInterrupt:
        logger.info("Shutting down")
    return 0


if __name__ == "__main__":
    sys.exit(main())
