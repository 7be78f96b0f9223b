"""
Command-line entry point: parse startup options and serve the API.

    deal-promoter --miner-id f01000 --listen-addr 0.0.0.0:8888 \
        --ipfs-gateway https://ipfs.io

Options override the matching DEAL_PROMOTER_* environment variables.
"""

import argparse
from typing import Any, Sequence

import uvicorn
from pydantic import ValidationError

from .api.main import create_app
from .config import Settings
from .logging import configure_logging, get_logger

logger = get_logger(__name__)


def parse_listen_addr(value: str) -> tuple[str, int]:
    """Split `host:port` (IPv6 hosts in brackets) into its parts."""
    host, sep, port = value.rpartition(':')
    if not sep or not host or not port.isdigit():
        raise argparse.ArgumentTypeError(f'expected HOST:PORT, got {value!r}')
    port_num = int(port)
    if not 0 < port_num < 65536:
        raise argparse.ArgumentTypeError(f'port out of range: {port_num}')
    return host.strip('[]'), port_num


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='deal-promoter',
        description='Serve POST /put/{cid}: promote IPFS content to a Filecoin storage deal',
    )
    parser.add_argument(
        '--listen-addr', '-l',
        type=parse_listen_addr,
        help='Server listen address (default: 0.0.0.0:8888)',
    )
    parser.add_argument(
        '--ipfs-gateway', '-i',
        help='IPFS gateway base URL (default: https://ipfs.io)',
    )
    parser.add_argument(
        '--miner-id', '-m',
        help='Storage provider (miner) ID to make deals with',
    )
    return parser


def settings_from_args(args: argparse.Namespace) -> Settings:
    """Build the immutable settings: CLI options first, then environment."""
    overrides: dict[str, Any] = {}
    if args.listen_addr is not None:
        overrides['LISTEN_HOST'], overrides['LISTEN_PORT'] = args.listen_addr
    if args.ipfs_gateway:
        overrides['IPFS_GATEWAY'] = args.ipfs_gateway
    if args.miner_id:
        overrides['MINER_ID'] = args.miner_id
    return Settings(**overrides)


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = settings_from_args(args)
    except ValidationError as e:
        parser.error(f'invalid configuration: {e}')

    configure_logging(json_output=settings.LOG_JSON, log_level=settings.LOG_LEVEL)
    logger.info('server.starting', host=settings.LISTEN_HOST, port=settings.LISTEN_PORT)

    uvicorn.run(
        create_app(settings),
        host=settings.LISTEN_HOST,
        port=settings.LISTEN_PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == '__main__':
    main()
