#!/usr/bin/env python3
"""
profile_backup.py - Export or import the learner's trainer profile.

Writes the profile and every tracked topic's progress to one JSON document,
or applies such a document to the progress database.

Usage:
  python scripts/profile_backup.py export --output profile.json
  python scripts/profile_backup.py import --input profile.json
  python scripts/profile_backup.py show
"""

import argparse
import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from learnpath.classroom import SQLiteStorage, TrainerAggregator
from learnpath.config import load_settings

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def cmd_export(trainer: TrainerAggregator, output: Path | None) -> int:
    document = trainer.export_data()
    if output is None:
        print(document)
    else:
        output.write_text(document, encoding="utf-8")
        logger.info(f"Exported profile to {output}")
    return 0


def cmd_import(trainer: TrainerAggregator, input_path: Path) -> int:
    if not input_path.exists():
        logger.error(f"Input file not found: {input_path}")
        return 1

    if not trainer.import_data(input_path.read_text(encoding="utf-8")):
        logger.error(f"Could not import {input_path}")
        return 1

    logger.info(f"Imported profile from {input_path}")
    return 0


def cmd_show(trainer: TrainerAggregator) -> int:
    state = trainer.state
    level = trainer.get_level()
    next_level = trainer.get_next_level()

    print(f"Level {level.level}: {level.icon} {level.name}")
    print(f"Global XP: {state.global_xp}" + (f" (next level at {next_level.xp})" if next_level else ""))
    print(f"Streak: {state.streak} days (last active {state.last_date or 'never'})")
    print(f"Global badges: {', '.join(state.global_badges) or 'none'}")
    for topic_id, snapshot in sorted(state.topic_snapshots.items()):
        print(
            f"  {topic_id}: {snapshot.xp} XP, "
            f"{len(snapshot.completed_parts)}/{snapshot.total_parts} parts, "
            f"{snapshot.badge_count}/{snapshot.total_badges} badges"
        )
    return 0


def main():
    settings = load_settings()

    parser = argparse.ArgumentParser(description="Export or import the learnpath trainer profile")
    parser.add_argument("--db", type=Path, default=settings.db_path, help="Progress database path")
    subparsers = parser.add_subparsers(dest="command", required=True)

    export_parser = subparsers.add_parser("export", help="Write the profile document")
    export_parser.add_argument("--output", type=Path, default=None, help="Output file (default: stdout)")

    import_parser = subparsers.add_parser("import", help="Apply a profile document")
    import_parser.add_argument("--input", type=Path, required=True, help="Profile document to import")

    subparsers.add_parser("show", help="Print the profile summary")

    args = parser.parse_args()

    trainer = TrainerAggregator(SQLiteStorage(args.db))
    if not trainer.storage_available:
        logger.error(f"Progress database is not usable: {args.db}")
        sys.exit(1)

    if args.command == "export":
        sys.exit(cmd_export(trainer, args.output))
    elif args.command == "import":
        sys.exit(cmd_import(trainer, args.input))
    else:
        sys.exit(cmd_show(trainer))


if __name__ == "__main__":
    main()
