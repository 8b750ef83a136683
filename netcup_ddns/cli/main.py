#!/usr/bin/env python3
"""
netcup DDNS - Command Line Interface

Main entry point for the netcup dynamic DNS updater. Every option can also
be given through the environment (or a .env file) and an optional YAML
configuration file.
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from dotenv import load_dotenv

from ..core.dns_manager import DNSManager
from ..providers.transport import DEFAULT_API_URL

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="netcup DDNS - Updates DNS records in netcup via the API"
    )

    parser.add_argument(
        "--config",
        "-c",
        default=os.environ.get("NETCUP_DDNS_CONFIG"),
        help="Optional YAML configuration file",
    )

    parser.add_argument(
        "--customer-number",
        "-n",
        default=os.environ.get("CUSTOMER_NUMBER"),
        help="The customer number which identifies your netcup account",
    )

    parser.add_argument(
        "--api-key",
        "-k",
        default=os.environ.get("API_KEY"),
        help="The API key generated by netcup in the CCP",
    )

    parser.add_argument(
        "--api-password",
        "-p",
        default=os.environ.get("API_PASSWORD"),
        help="The API password generated by netcup in the CCP",
    )

    parser.add_argument(
        "--api-url",
        "-u",
        default=os.environ.get("API_URL"),
        help=f"The URL of the netcup API (default: {DEFAULT_API_URL})",
    )

    parser.add_argument(
        "--ttl",
        "-t",
        type=int,
        default=_env_int("TTL"),
        help="Reduce the zone TTL to this many seconds when it is above 300",
    )

    parser.add_argument(
        "domains",
        nargs="*",
        help='Domain entries like "example.com: @, www" (env DOMAINS, ";" separated)',
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be changed without making changes",
    )

    parser.add_argument(
        "--output-file",
        "-o",
        help="File to save dry run output (only used with --dry-run)",
    )

    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose logging"
    )

    return parser


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    load_dotenv()
    args = build_parser().parse_args(argv)

    if args.output_file and not args.dry_run:
        print("Error: --output-file can only be used with --dry-run")
        sys.exit(1)

    if args.config and not Path(args.config).exists():
        print(f"Error: Configuration file '{args.config}' not found")
        sys.exit(1)

    config = merge_config(load_config(args.config) if args.config else {}, args)
    if args.verbose:
        config.setdefault("logging", {})["level"] = "DEBUG"
    config_logger(config)

    missing = [
        name
        for name in ("customer_number", "api_key", "api_password", "domains")
        if not config.get(name)
    ]
    if missing:
        print(f"Error: missing configuration: {', '.join(missing)}")
        sys.exit(1)

    try:
        dns_manager = DNSManager(config)
        success = dns_manager.run(
            dry_run=args.dry_run,
            output_file=args.output_file if args.dry_run else None,
        )
    except Exception as e:
        print(f"Error: {e}")
        if args.verbose:
            import traceback

            traceback.print_exc()
        sys.exit(1)

    if success:
        print("DNS update completed successfully")
        sys.exit(0)
    else:
        print("DNS update failed")
        sys.exit(1)


def load_config(config_path: str) -> Dict:
    """Load configuration from YAML file."""
    try:
        with open(config_path, "r") as f:
            config = yaml.safe_load(f) or {}
        logger.info(f"Configuration loaded from {config_path}")
        return config
    except yaml.YAMLError as e:
        print(f"Error parsing config file: {e}")
        sys.exit(1)


def merge_config(config: Dict, args: argparse.Namespace) -> Dict:
    """Overlay command line and environment values on the file configuration."""
    merged = dict(config)

    for key in ("customer_number", "api_key", "api_password", "api_url", "ttl"):
        value = getattr(args, key)
        if value is not None:
            merged[key] = value

    if args.domains:
        merged["domains"] = args.domains
    elif os.environ.get("DOMAINS"):
        merged["domains"] = os.environ["DOMAINS"]

    merged.setdefault("api_url", DEFAULT_API_URL)
    return merged


def config_logger(config: Dict):
    """Configure logging."""
    logging_config = config.get("logging", None)
    if logging_config:
        log_level = logging_config.get("level", "INFO")
        log_file = logging_config.get("file")

        handlers = [logging.StreamHandler(sys.stdout)]
        if log_file:
            handlers.insert(0, logging.FileHandler(log_file))

        logging.basicConfig(
            level=log_level,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            handlers=handlers,
        )
        return

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def _env_int(name: str) -> Optional[int]:
    value = os.environ.get(name)
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        print(f"Error: {name} must be a number, got '{value}'")
        sys.exit(1)


if __name__ == "__main__":
    main()
