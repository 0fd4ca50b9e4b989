"""
Command-line interface for DOCX Merger.

Usage:
    docx-merger merge first.docx second.docx -o merged.docx
    docx-merger merge a.docx b.docx -o out.docx --no-page-break --compression STORE
    docx-merger info input.docx --json
    docx-merger version
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .api import describe_package, merge_documents
from .config import COMPRESSION_METHODS
from .exceptions import DocxMergerError
from .utils.logger import LOG_LEVELS
from .utils.rich_logger import failure, print_table, setup_logging, success

logger = logging.getLogger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="docx-merger",
        description="DOCX Merger - concatenate Word documents into one package",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  docx-merger merge cover.docx body.docx -o merged.docx
  docx-merger merge a.docx b.docx -o merged.docx --no-page-break
  docx-merger info document.docx --json
  docx-merger version
        """,
    )
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default="WARNING",
        help="Log level (default: WARNING)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    merge_parser = subparsers.add_parser("merge", help="Merge DOCX files in order")
    merge_parser.add_argument("inputs", nargs="+", help="Input DOCX files")
    merge_parser.add_argument("-o", "--output", required=True, help="Output DOCX file")
    merge_parser.add_argument(
        "--no-page-break",
        action="store_true",
        help="Do not insert page breaks between documents",
    )
    merge_parser.add_argument(
        "--compression",
        choices=sorted(COMPRESSION_METHODS),
        default="DEFLATE",
        help="Archive compression (default: DEFLATE)",
    )
    merge_parser.add_argument(
        "--compression-level",
        type=int,
        default=4,
        help="DEFLATE level 0-9 (default: 4)",
    )
    merge_parser.add_argument(
        "--check-crc",
        action="store_true",
        help="Verify archive checksums of the inputs",
    )
    merge_parser.add_argument(
        "--rename-colliding-relationships",
        action="store_true",
        help="Rename relationship ids of later documents that clash with earlier ones",
    )

    info_parser = subparsers.add_parser("info", help="Show merge-relevant package information")
    info_parser.add_argument("input", help="Input DOCX file")
    info_parser.add_argument("--json", action="store_true", help="Output as JSON")

    subparsers.add_parser("version", help="Show version information")

    return parser


def _missing_inputs(paths: List[str]) -> List[str]:
    return [path for path in paths if not Path(path).is_file()]


def cmd_merge(args) -> int:
    """Handle merge command."""
    missing = _missing_inputs(args.inputs)
    if missing:
        failure(f"File not found: {', '.join(missing)}")
        return 1

    merge_documents(
        [Path(path) for path in args.inputs],
        args.output,
        page_break=not args.no_page_break,
        compression=args.compression,
        compression_level=args.compression_level,
        check_crc32=args.check_crc,
        rename_colliding_relationships=args.rename_colliding_relationships,
    )
    success(f"Merged {len(args.inputs)} documents into {args.output}")
    return 0


def cmd_info(args) -> int:
    """Handle info command."""
    if _missing_inputs([args.input]):
        failure(f"File not found: {args.input}")
        return 1

    info = describe_package(Path(args.input))
    if args.json:
        print(json.dumps(info, indent=2, ensure_ascii=False))
        return 0

    print_table(
        f"{args.input}",
        [
            ("Parts", len(info["parts"])),
            ("Styles", len(info["styles"])),
            ("Abstract numbering definitions", info["numbering"]["abstract"]),
            ("Numbering instances", info["numbering"]["concrete"]),
            ("Media files", len(info["media"])),
            ("Relationships", len(info["relationships"])),
        ],
    )
    if info["relationships"]:
        print_table(
            "Relationships",
            [(rel["id"], rel["type"], rel["target"]) for rel in info["relationships"]],
            columns=("Id", "Type", "Target"),
        )
    return 0


def cmd_version(args=None) -> int:
    """Handle version command."""
    from .version import __version__

    print(f"docx-merger v{__version__}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    handlers = {
        "merge": cmd_merge,
        "info": cmd_info,
        "version": cmd_version,
    }
    handler = handlers.get(args.command)
    if handler is None:
        parser.print_help()
        return 0

    try:
        return handler(args)
    except DocxMergerError as e:
        logger.debug("Command failed", exc_info=True)
        failure(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
