"""Command line interface for the Firestore to Supabase sync."""

import argparse
import logging
import os
import sys
from typing import List, Optional

from dotenv import load_dotenv

from .config import SyncSettings
from .errors import ConfigurationError
from .extractors import BaseExtractor, FirestoreExtractor, JSONExportExtractor
from .loaders import BaseLoader, DryRunLoader, SupabaseLoader
from .models.mapping import MappingRegistry
from .models.run import SyncMode
from .orchestrator import SyncOrchestrator
from .services.mapping_registry import load_registry
from .services.report import render_banner, render_summary, save_report

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERRORS = 1
EXIT_CONFIG = 2


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="firesync",
        description="Sync Firebase Firestore collections into Supabase tables"
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Run sync
    run_parser = subparsers.add_parser("run", help="Sync collections to Supabase")
    run_parser.add_argument("--dry-run", action="store_true",
                            help="Read everything, write nothing")
    run_parser.add_argument("--force", action="store_true",
                            help="Overwrite existing rows on id conflict")
    run_parser.add_argument("--collection", help="Sync a single collection")
    run_parser.add_argument("--mapping", help="Path to a collection mapping JSON file")
    run_parser.add_argument("--source-file",
                            help="Read from a Firestore JSON export instead of Firestore")
    run_parser.add_argument("--report", help="Write the run report as JSON to this path")
    run_parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")

    # List mappings
    list_parser = subparsers.add_parser("list", help="List the collection mappings")
    list_parser.add_argument("--mapping", help="Path to a collection mapping JSON file")

    # Validate mapping
    validate_parser = subparsers.add_parser("validate", help="Validate a mapping file")
    validate_parser.add_argument("--mapping", required=True, help="Path to mapping file")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Set up logging
    log_level = logging.DEBUG if getattr(args, "verbose", False) else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    load_dotenv()

    try:
        if args.command == "run":
            return run_sync(args)
        elif args.command == "list":
            return run_list(args)
        elif args.command == "validate":
            return run_validation(args)
        else:
            parser.print_help()
            return EXIT_CONFIG
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CONFIG


def build_extractor(args: argparse.Namespace, settings: SyncSettings) -> BaseExtractor:
    """Build the source reader for a run."""
    if args.source_file:
        if not os.path.isfile(args.source_file):
            raise ConfigurationError(f"Source file not found: {args.source_file}")
        logger.info(f"Reading from export {args.source_file}")
        return JSONExportExtractor(args.source_file)
    return FirestoreExtractor.from_service_account(settings.firebase_credentials)


def build_loader(settings: SyncSettings) -> BaseLoader:
    """Build the destination writer for a run."""
    if not settings.has_destination:
        return DryRunLoader(batch_size=settings.batch_size)
    return SupabaseLoader(
        base_url=settings.supabase_url,
        service_key=settings.supabase_service_key,
        batch_size=settings.batch_size,
        timeout=settings.timeout,
    )


def run_sync(args: argparse.Namespace) -> int:
    """Run a sync and print its summary."""
    mode = SyncMode.from_flags(dry_run=args.dry_run, force=args.force)

    # Reject bad input before connecting to anything
    registry = load_registry(args.mapping)
    registry.select(args.collection)
    settings = SyncSettings.from_env(dry_run=mode == SyncMode.DRY_RUN)

    extractor = build_extractor(args, settings)
    loader = build_loader(settings)

    banner = [
        "FIREBASE -> SUPABASE SYNC",
        f"Source: {extractor.name}",
        f"Mode: {mode.label}",
    ]
    if args.collection:
        banner.append(f"Collection: {args.collection}")
    print(render_banner(banner))

    orchestrator = SyncOrchestrator(extractor, loader, registry)
    run = orchestrator.run(mode=mode, collection=args.collection)

    print()
    print(render_summary(run))

    if args.report:
        save_report(run, args.report)
        print(f"\nReport saved to {args.report}")

    return run.exit_code


def run_list(args: argparse.Namespace) -> int:
    """Print the collection mappings."""
    registry = load_registry(args.mapping)
    _print_registry(registry)
    return EXIT_OK


def run_validation(args: argparse.Namespace) -> int:
    """Validate a mapping file."""
    print("\n=== Validating Mapping ===")

    try:
        registry = load_registry(args.mapping)
    except ConfigurationError as e:
        print(f"\n{e}")
        return EXIT_ERRORS

    print(f"\nMapping is valid! ({len(registry)} collections)")
    return EXIT_OK


def _print_registry(registry: MappingRegistry) -> None:
    print(f"\n=== {len(registry)} Collections ===")
    for entry in registry:
        line = f"  {entry.collection} -> {entry.table}"
        if entry.conflict_field != "id":
            line += f" (on conflict: {entry.conflict_field})"
        print(line)
        for sub in entry.subcollections:
            print(f"      └─ {sub.name} -> {sub.table} (via {sub.foreign_key})")


if __name__ == "__main__":
    sys.exit(main())
