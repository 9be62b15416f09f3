"""Command-line interface for the Tibber exporter."""

import argparse
import logging
import sys
from typing import get_args

import uvicorn

from tibber_exporter import __version__
from tibber_exporter.config import LogLevel, parse_bind_address, read_password_file, settings
from tibber_exporter.domain.configuration import HostConfig
from tibber_exporter.entrypoints.api.main import create_app
from tibber_exporter.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

LOG_LEVELS = list(get_args(LogLevel))


def setup_parser():
    """Set up command-line argument parser, with defaults from the environment."""
    parser = argparse.ArgumentParser(description="Tibber local HTTP API to Prometheus metrics bridge")

    parser.add_argument("-t", "--tibber-host", default=settings.TIBBER_HOST, help="Hostname of the tibber bridge")
    parser.add_argument("-n", "--node", type=int, default=settings.TIBBER_NODE, help="Node ID to read")
    parser.add_argument(
        "-p",
        "--password-file",
        default=settings.TIBBER_PASSWORD_FILE,
        help="The file to read the tibber host password from",
    )
    parser.add_argument(
        "-b",
        "--bind-address",
        default=settings.BIND_ADDRESS,
        help="The bind address for the metrics server",
    )
    parser.add_argument("--log-level", default=settings.LOG_LEVEL, choices=LOG_LEVELS, help="Log level")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    return parser


def build_config(args) -> HostConfig:
    """
    Build the shared host configuration from parsed arguments.

    Raises:
        ConfigurationError: if a required value is missing or unusable
    """
    if not args.tibber_host:
        raise ConfigurationError("Missing Tibber host. Use --tibber-host or set TIBBER_HOST.")
    if not args.password_file:
        raise ConfigurationError("Missing password file. Use --password-file or set TIBBER_PASSWORD_FILE.")
    if args.node < 0:
        raise ConfigurationError(f"Invalid node ID {args.node}")

    return HostConfig(
        host=args.tibber_host,
        node_id=args.node,
        password=read_password_file(args.password_file),
        username=settings.TIBBER_USERNAME,
    )


def main(argv=None):
    """Main entry point for the CLI."""
    parser = setup_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    try:
        config = build_config(args)
        bind_host, bind_port = parse_bind_address(args.bind_address)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    logger.info(f"Exporting node {config.node_id} of {config.host} on http://{args.bind_address}/metrics")
    uvicorn.run(create_app(config), host=bind_host, port=bind_port, log_level=args.log_level.lower())


if __name__ == "__main__":
    main()
