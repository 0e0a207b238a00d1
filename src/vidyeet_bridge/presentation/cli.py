"""Command-line front end over the bridge."""
import argparse
import dataclasses
import getpass
import json
import os
import sys
from pathlib import Path
from typing import Optional, Sequence, Tuple

from dotenv import load_dotenv

from vidyeet_bridge.application.client import VidyeetClient
from vidyeet_bridge.domain.exceptions import BridgeError, ConfigurationError
from vidyeet_bridge.domain.models import ProgressEvent
from vidyeet_bridge.infrastructure.config import ConfigLoader
from vidyeet_bridge.shared.logging import setup_logger, get_logger

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_BRIDGE_ERROR = 1
EXIT_CONFIG_ERROR = 2


def _emit(payload, stream=None) -> None:
    stream = stream or sys.stdout
    stream.write(json.dumps(payload, ensure_ascii=False) + "\n")
    stream.flush()


def _print_progress(event: ProgressEvent) -> None:
    fields = {k: v for k, v in dataclasses.asdict(event).items() if v is not None}
    fields["phase"] = event.phase.value
    _emit({"progress": fields}, sys.stderr)


def _credentials(args) -> Tuple[str, str]:
    token_id = args.token_id or os.getenv("VIDYEET_TOKEN_ID") or input("Token ID: ")
    token_secret = os.getenv("VIDYEET_TOKEN_SECRET") or getpass.getpass("Token Secret: ")
    return token_id, token_secret


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="vidyeet-bridge", description="Drive the vidyeet CLI in machine mode")
    parser.add_argument('--config', type=Path, help='Config YAML file')
    parser.add_argument('--cli-path', type=Path, help='Path to the vidyeet CLI executable')
    parser.add_argument('--timeout', type=float, help='Timeout in seconds for non-upload commands')
    parser.add_argument('--verbose', '-v', action='store_true', help='Verbose')

    sub = parser.add_subparsers(dest='command', required=True)
    sub.add_parser('status', help='Show authentication state')
    login = sub.add_parser('login', help='Store API credentials')
    login.add_argument('--token-id', help='Token ID (default: VIDYEET_TOKEN_ID or prompt)')
    sub.add_parser('logout', help='Remove stored credentials')
    sub.add_parser('list', help='List uploaded assets')
    delete = sub.add_parser('delete', help='Delete an asset')
    delete.add_argument('asset_id')
    upload = sub.add_parser('upload', help='Upload a video file')
    upload.add_argument('file', type=Path)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main CLI entry point."""
    load_dotenv()
    args = build_parser().parse_args(argv)

    try:
        config = ConfigLoader(config_path=args.config).load(overrides={
            'cli_path': args.cli_path,
            'default_timeout': args.timeout,
            'log_level': 'DEBUG' if args.verbose else None,
        })
    except ConfigurationError as e:
        _emit({"kind": "configuration", "message": str(e)}, sys.stderr)
        return EXIT_CONFIG_ERROR

    setup_logger(level=config.log_level, log_file=config.log_file)
    client = VidyeetClient(config=config)

    try:
        if args.command == 'status':
            result = client.status()
        elif args.command == 'login':
            result = client.login(*_credentials(args))
        elif args.command == 'logout':
            result = client.logout()
        elif args.command == 'list':
            result = client.list()
        elif args.command == 'delete':
            result = client.delete(args.asset_id)
        else:
            result = client.upload(args.file, on_progress=_print_progress)
    except BridgeError as e:
        _emit({"error": e.to_dict()}, sys.stderr)
        return EXIT_BRIDGE_ERROR
    except ValueError as e:
        _emit({"kind": "invalid-argument", "message": str(e)}, sys.stderr)
        return EXIT_CONFIG_ERROR
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        return 130

    _emit(dataclasses.asdict(result))
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
