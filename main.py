#!/usr/bin/env python3
"""
torrentmeta - strict bencode decoder and .torrent metainfo inspector
Main entry point for the application.
"""

import argparse
import sys
from pathlib import Path
from torrentmeta.bencode.decoder import DEFAULT_MAX_DEPTH
from torrentmeta.bencode.errors import DecodeError
from torrentmeta.torrent.metadata import MetaInfo, MultipleFileInfo
from torrentmeta.torrent.parser import parse_torrent_file
from torrentmeta.common.logging import config_logging
import logging

logger = logging.getLogger(__name__)


def format_metainfo(metadata: MetaInfo) -> str:
    common = metadata.info.common
    lines = [
        "=" * 60,
        f"Torrent: {metadata.name}",
        f"Size: {metadata.total_length / (1024*1024):.2f} MB",
        f"Pieces: {common.piece_count} x {common.piece_length / 1024:.0f} KB",
        f"Private: {'yes' if metadata.is_private else 'no'}",
        f"Info hash: {metadata.info_hash.hex() if metadata.info_hash else '-'}",
    ]
    for tracker in metadata.trackers:
        lines.append(f"Tracker: {tracker}")
    if metadata.comment:
        lines.append(f"Comment: {metadata.comment}")
    if metadata.created_by:
        lines.append(f"Created by: {metadata.created_by}")
    if isinstance(metadata.info, MultipleFileInfo):
        for f in metadata.info.files:
            lines.append(f"  {'/'.join(f.path)} ({f.length} bytes)")
    lines.append("=" * 60)
    return "\n".join(lines)


def non_negative_int(value: str) -> int:
    depth = int(value)
    if depth < 0:
        raise argparse.ArgumentTypeError(f"must not be negative: {depth}")
    return depth


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="torrentmeta - inspect .torrent metainfo with a strict bencode decoder",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s ubuntu.torrent
  %(prog)s hand-written.torrent --strip-whitespace
  %(prog)s file.torrent --reject-duplicate-keys -v
        """
    )

    parser.add_argument(
        "torrent",
        type=Path,
        help="Path to the .torrent file"
    )

    parser.add_argument(
        "--strip-whitespace",
        action="store_true",
        help="Remove spaces, tabs and newlines before decoding. This also breaks "
             "the required 'piece length' key and binary payloads, so no real "
             ".torrent file survives it; only for hand-formatted documents"
    )

    parser.add_argument(
        "--lenient",
        action="store_true",
        help="Ignore bytes after the top-level dictionary instead of rejecting them"
    )

    parser.add_argument(
        "--max-depth",
        type=non_negative_int,
        default=DEFAULT_MAX_DEPTH,
        help=f"Maximum list/dictionary nesting depth (default: {DEFAULT_MAX_DEPTH})"
    )

    parser.add_argument(
        "--reject-duplicate-keys",
        action="store_true",
        help="Treat repeated dictionary keys as an error instead of keeping the last one"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging"
    )

    parser.add_argument(
        "--log-file",
        type=Path,
        default=Path("torrentmeta.log.jsonl"),
        help="Name of the log file under data/logs/ (default: torrentmeta.log.jsonl)"
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the torrentmeta inspector."""
    args = build_parser().parse_args(argv)

    # Validate torrent file exists
    if not args.torrent.exists():
        print(f"Error: Torrent file '{args.torrent}' not found")
        return 1

    config_logging(str(args.log_file), console_level="DEBUG" if args.verbose else "WARNING")

    try:
        metadata = parse_torrent_file(
            args.torrent,
            strict=not args.lenient,
            strip=args.strip_whitespace,
            max_depth=args.max_depth,
            reject_duplicate_keys=args.reject_duplicate_keys,
        )
    except DecodeError as e:
        logger.error(f"Invalid torrent file {args.torrent}: {e}")
        print(f"\n✗ Invalid torrent file: {e}")
        return 1
    except OSError as e:
        logger.error(f"Cannot read torrent file {args.torrent}: {e}")
        print(f"\n✗ Cannot read torrent file: {e}")
        return 1

    print(format_metainfo(metadata))
    return 0


if __name__ == "__main__":
    sys.exit(main())
