#!/usr/bin/env python3
"""Run a standalone Votifier receiver.

Loads configuration from the environment (and a .env file if present),
loads or generates the RSA key pair, registers the logging listener and
listens for votes until SIGINT/SIGTERM.

Usage:
    python scripts/run_votifier.py [options]

Options:
    --host HOST          Address to listen on (overrides VOTIFIER_HOST)
    --port PORT          Port to listen on (overrides VOTIFIER_PORT)
    --key-dir DIR        Key directory (overrides VOTIFIER_KEY_DIR)
    --debug              Log rejected votes in detail
    --dev                Console log output instead of JSON
    --show-public-key    Print the public key for vote-site setup and exit
"""

import argparse
import asyncio
import dataclasses
import signal
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

from votifier.bootstrap import configure_structlog, create_votifier_service
from votifier.config import VotifierConfig
from votifier.domain.errors import KeyStoreError
from votifier.infrastructure.adapters.crypto import RSAKeyStore
from votifier.infrastructure.adapters.listeners import LoggingVoteListener

# Load environment variables
load_dotenv()


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the Votifier vote receiver")
    parser.add_argument("--host", help="Address to listen on")
    parser.add_argument("--port", type=int, help="Port to listen on")
    parser.add_argument("--key-dir", dest="key_dir", help="Directory for RSA key files")
    parser.add_argument("--debug", action="store_true", help="Verbose rejected-vote logging")
    parser.add_argument("--dev", action="store_true", help="Console log output")
    parser.add_argument(
        "--show-public-key",
        action="store_true",
        help="Print the public key and exit",
    )
    return parser.parse_args()


def build_config(args: argparse.Namespace) -> VotifierConfig:
    config = VotifierConfig.from_environment()
    overrides = {}
    if args.host:
        overrides["host"] = args.host
    if args.port is not None:
        overrides["port"] = args.port
    if args.key_dir:
        overrides["key_directory"] = args.key_dir
    if args.debug:
        overrides["debug"] = True
    return dataclasses.replace(config, **overrides) if overrides else config


async def run(config: VotifierConfig) -> int:
    key_pair = RSAKeyStore(config.key_directory).load_or_generate()
    service = create_votifier_service(
        config=config,
        key_pair=key_pair,
        listeners=[LoggingVoteListener()],
    )

    result = await service.enable()
    if not result.success:
        return 1

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop.set)

    await stop.wait()
    await service.disable()
    return 0


def main() -> int:
    args = parse_args()
    try:
        config = build_config(args)
    except ValueError as e:
        print(f"ERROR: invalid configuration: {e}", file=sys.stderr)
        return 2

    configure_structlog("development" if args.dev else "production", debug=config.debug)

    if args.show_public_key:
        try:
            key_pair = RSAKeyStore(config.key_directory).load_or_generate()
        except KeyStoreError as e:
            print(f"ERROR: {e}", file=sys.stderr)
            return 1
        print(key_pair.public_key_base64())
        return 0

    try:
        return asyncio.run(run(config))
    except KeyStoreError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
