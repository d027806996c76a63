"""Command line entry point: ``vault-publish``.

Runs one publish sync from an Obsidian vault into a Quartz content
directory and prints the report to stdout.  Log messages go to stderr.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from . import __version__
from .config import load_config
from .config_loader import ensure_config, load_hierarchical_config
from .config_schema import build_config
from .dialogs import pick_directory
from .logger import setup_logging
from .runner import SyncRunner
from .sync.reporter import (
    format_dry_run_preview,
    format_sync_report,
    report_to_json,
)

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vault-publish",
        description="Publish the notes of an Obsidian vault marked "
        "'可发布: true' or '已发布: true' into a Quartz content directory",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Sync with directories from .env / .vault_publish/config.yml
  vault-publish

  # Explicit directories
  vault-publish --source ~/Notes --destination ~/site/quartz/content

  # Preview what would change
  vault-publish --dry-run

  # Choose the directories with the system folder dialog
  vault-publish --pick

  # Machine-readable report
  vault-publish --json

Files in the content directory that vault-publish did not create (such as
index.md) are never modified or deleted.
        """,
    )

    parser.add_argument(
        "--source",
        help="Obsidian vault directory (takes precedence over OBSIDIAN_DIR env var and config files)",
    )
    parser.add_argument(
        "--destination",
        help="Quartz content directory (takes precedence over QUARTZ_CONTENT_DIR env var and config files)",
    )
    parser.add_argument(
        "--manifest",
        help="Sync manifest file (default: .vault_publish/sync-manifest.json)",
    )
    parser.add_argument(
        "--images-dir",
        help="Name of the vault's shared images directory (default: image)",
    )
    parser.add_argument(
        "--pick",
        action="store_true",
        help="Choose the vault and content directories with a native dialog "
        "(only for those not given on the command line)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would change without writing anything",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the report as JSON",
    )
    parser.add_argument(
        "--status-file",
        help="Keep the last-run status and task log in this JSON file",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--log-file",
        help="Also write log messages to this file",
    )
    parser.add_argument(
        "--log-format",
        choices=["text", "json"],
        help="Log output format (default: text)",
    )
    parser.add_argument(
        "--init-config",
        action="store_true",
        help="Create a starter .vault_publish/config.yml and exit",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"vault-publish version {__version__}",
    )
    return parser


def _pick_missing(args: argparse.Namespace) -> None:
    """Fill ``args.source`` / ``args.destination`` from folder dialogs."""
    prompts = (
        ("source", "Choose the Obsidian vault directory"),
        ("destination", "Choose the Quartz content directory"),
    )
    for attr, prompt in prompts:
        if getattr(args, attr):
            continue
        chosen = pick_directory(prompt)
        if chosen is None:
            raise ValueError(f"No {attr} directory selected")
        logger.info("Selected %s directory: %s", attr, chosen)
        setattr(args, attr, str(chosen))


def run(argv: list[str] | None = None) -> None:
    """Entry point that handles errors gracefully and parses CLI arguments."""
    args = _build_parser().parse_args(argv)

    load_dotenv()

    if args.init_config:
        path = ensure_config()
        print(f"Config file: {path}")
        return

    try:
        unified = build_config(load_hierarchical_config())
        setup_logging(
            debug=args.debug,
            log_file=args.log_file or unified.logging.file,
            debug_format=args.log_format or unified.logging.format,
            level=unified.logging.level,
        )

        if args.pick:
            _pick_missing(args)

        config = load_config(
            source=args.source,
            destination=args.destination,
            manifest=args.manifest,
            images_dir=args.images_dir,
            debug=args.debug,
            yaml_fallbacks={
                **unified.paths.model_dump(exclude_none=True),
                "images_dir": unified.sync.images_dir,
            },
            publish_keys=unified.sync.publish_keys,
        )
    except (ValueError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    status_path = Path(args.status_file).expanduser() if args.status_file else None
    runner = SyncRunner(config, status_path=status_path)
    outcome = runner.run_sync(dry_run=args.dry_run)
    if not outcome.ok:
        print(f"Error: {outcome.error}", file=sys.stderr)
        sys.exit(1)

    report = outcome.report
    if args.json:
        print(json.dumps(report_to_json(report), indent=2, ensure_ascii=False))
    elif args.dry_run:
        print(format_dry_run_preview(report))
    else:
        print(format_sync_report(report))


if __name__ == "__main__":
    run()
