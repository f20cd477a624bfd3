#!/usr/bin/env python3
"""CLI entry point for the Terrifi import generator."""

import argparse
import logging
import sys
from pathlib import Path

import yaml

from .assembler import assemble_batch
from .client import ControllerClient, ControllerError
from .config import ClientConfig, get_log_level, load_config, load_live_dump
from .mappers import get_mapper, load_mappers
from .models import LiveObject, TypeMapper
from .rendering import create_jinja_environment, write_blocks

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None, resource_types: list[str]) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="terrifi-gen",
        description="Generate Terraform import blocks and resource definitions from live UniFi data.",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging on stderr")
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate = subparsers.add_parser(
        "generate-imports",
        help="Generate import {} + resource {} blocks for every object of one type",
    )
    generate.add_argument("resource_type", choices=resource_types, help="Terraform resource type")
    generate.add_argument(
        "--input",
        type=Path,
        help="Read objects from a JSON/YAML dump instead of the controller",
    )
    generate.add_argument("--site", help="Site to read objects from (default: UNIFI_SITE or 'default')")

    subparsers.add_parser("check-connection", help="Verify that the UNIFI_* environment variables work")
    subparsers.add_parser("list-types", help="List supported resource types")

    return parser.parse_args(argv)


def setup_logging(verbose: bool) -> None:
    """Send log records to stderr so stdout carries only HCL."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else get_log_level(),
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def read_live_objects(args: argparse.Namespace, mapper: TypeMapper, client_config: ClientConfig) -> list[LiveObject]:
    """Load the objects to generate blocks for, from a dump file or the controller."""
    site = args.site or client_config.site

    if args.input:
        logger.info(f"Reading {mapper.resource_type} objects from {args.input}")
        dump = load_live_dump(args.input, site)
        return [LiveObject.from_api(raw, dump_site) for dump_site, raws in dump.items() for raw in raws]

    client = ControllerClient(client_config)
    client.connect()
    return client.list_live_objects(mapper.api_kind, site)


def generate_imports(args: argparse.Namespace, mappers: dict[str, TypeMapper]) -> int:
    """Run the generate-imports subcommand."""
    mapper = get_mapper(mappers, args.resource_type)
    client_config = ClientConfig.from_env()

    try:
        objects = read_live_objects(args, mapper, client_config)
    except ControllerError as e:
        print(f"Error: listing {mapper.resource_type} resources: {e}", file=sys.stderr)
        return 1
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    # Import IDs are relative to the site the provider is configured for
    blocks = assemble_batch(objects, mapper, client_config.site)

    if not blocks:
        print(f"No {mapper.resource_type} resources found.", file=sys.stderr)
        return 0

    try:
        write_blocks(sys.stdout, blocks, create_jinja_environment())
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


def check_connection() -> int:
    """Run the check-connection subcommand."""
    client_config = ClientConfig.from_env()

    try:
        client = ControllerClient(client_config)
        client.connect()
    except (ValueError, ControllerError) as e:
        print(f"Error: connection failed: {e}", file=sys.stderr)
        return 1

    try:
        sites = client.list_sites()
    except ControllerError as e:
        print(f"Error: connected but could not list sites: {e}", file=sys.stderr)
        return 1

    print(f"Connection successful ({client_config.api_url})")
    print(f"Auth: {client_config.auth_method}")
    print(f"Sites: {', '.join(sites)}")
    return 0


def list_types(mappers: dict[str, TypeMapper]) -> int:
    """Run the list-types subcommand."""
    width = max((len(name) for name in mappers), default=0)
    for name in sorted(mappers):
        print(f"{name:<{width}}  {mappers[name].description}")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the generator."""
    # Resource types come from config.yaml, so load it before parsing
    config = load_config()
    mappers = load_mappers(config)

    args = parse_args(argv, sorted(mappers))
    setup_logging(args.verbose)

    if args.command == "generate-imports":
        return generate_imports(args, mappers)
    elif args.command == "check-connection":
        return check_connection()
    else:
        return list_types(mappers)


if __name__ == "__main__":
    sys.exit(main())
