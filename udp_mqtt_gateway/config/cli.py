"""Command line options for the gateway."""

import argparse
import sys
from dataclasses import dataclass
from typing import List, Optional

from udp_mqtt_gateway.config.gateway_config import DEFAULT_CONFIG_PATH


@dataclass(frozen=True)
class CliOptions:
    verbosity: int = 0
    config_path: str = DEFAULT_CONFIG_PATH


class GatewayArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that exits with status 1 on usage errors."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"error: {message}\n")


def build_parser(prog: Optional[str] = None) -> argparse.ArgumentParser:
    parser = GatewayArgumentParser(
        prog=prog,
        description="UDP MQTT Gateway: forwards UDP datagrams unchanged to an MQTT topic",
        allow_abbrev=False,
    )
    parser.add_argument(
        "-v",
        dest="verbosity",
        action="count",
        default=0,
        help="increase output verbosity (-vv also traces every datagram)",
    )
    parser.add_argument(
        "-c",
        dest="config_path",
        metavar="FILE",
        default=DEFAULT_CONFIG_PATH,
        help=f"path to config file, given as -c=FILE (default: {DEFAULT_CONFIG_PATH})",
    )
    return parser


def parse_args(argv: Optional[List[str]] = None, prog: Optional[str] = None) -> CliOptions:
    """Parse CLI arguments. ``-h`` and usage errors exit the process."""
    args = build_parser(prog).parse_args(argv)
    return CliOptions(verbosity=args.verbosity, config_path=args.config_path)
