#!/usr/bin/env python3
"""
Example: sync a Firestore JSON export with a custom collection mapping

This script shows how to drive the sync from Python instead of the CLI:
a custom registry (with a non-id conflict key), an offline export as the
source and Supabase as the destination.

Usage:
    # Dry run (nothing is written)
    python run_sync.py export.json --dry-run

    # Full sync (needs SUPABASE_URL and SUPABASE_SERVICE_KEY)
    python run_sync.py export.json

    # Overwrite existing rows
    python run_sync.py export.json --force
"""

import argparse
import logging
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from dotenv import load_dotenv

from firesync.config import SyncSettings
from firesync.extractors import JSONExportExtractor
from firesync.loaders import DryRunLoader, SupabaseLoader
from firesync.models.mapping import (
    CollectionMapping,
    MappingRegistry,
    SubcollectionMapping,
)
from firesync.models.run import SyncMode
from firesync.orchestrator import SyncOrchestrator
from firesync.services.report import render_summary, save_report

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(),
        logging.FileHandler('sync.log')
    ]
)
logger = logging.getLogger(__name__)


def create_registry() -> MappingRegistry:
    """Create the collection mapping programmatically."""
    return MappingRegistry([
        CollectionMapping(
            collection="users",
            table="profiles",
            description="App users, one row per auth account",
        ),
        CollectionMapping(
            collection="forum",
            table="forum_threads",
            subcollections=(
                SubcollectionMapping(
                    name="comments",
                    table="forum_comments",
                    foreign_key="threadId",
                ),
                SubcollectionMapping(
                    name="reactions",
                    table="forum_reactions",
                    foreign_key="threadId",
                ),
            ),
        ),
        # Settings rows are keyed by their name, not the document id
        CollectionMapping(
            collection="settings",
            table="app_settings",
            conflict_field="key",
        ),
    ])


def main():
    parser = argparse.ArgumentParser(description="Sync a Firestore export to Supabase")
    parser.add_argument("export", help="Path to the Firestore JSON export")
    parser.add_argument("--dry-run", action="store_true", help="Write nothing")
    parser.add_argument("--force", action="store_true", help="Overwrite existing rows")
    parser.add_argument("--save-mapping", help="Also save the mapping as JSON")
    args = parser.parse_args()

    load_dotenv()

    mode = SyncMode.from_flags(dry_run=args.dry_run, force=args.force)
    settings = SyncSettings.from_env(dry_run=args.dry_run)
    registry = create_registry()

    if args.save_mapping:
        registry.to_json_file(args.save_mapping)
        logger.info(f"Mapping saved to {args.save_mapping}")

    if settings.has_destination:
        loader = SupabaseLoader(
            settings.supabase_url,
            settings.supabase_service_key,
            batch_size=settings.batch_size,
        )
    else:
        loader = DryRunLoader()

    orchestrator = SyncOrchestrator(JSONExportExtractor(args.export), loader, registry)
    run = orchestrator.run(mode=mode)

    print(render_summary(run))
    save_report(run, f"sync_report_{run.id[:8]}.json")

    sys.exit(run.exit_code)


if __name__ == "__main__":
    main()
