"""
sdmeta command line - dump PNG text metadata to .txt sidecars.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from sdmeta import __version__
from sdmeta.batch import BatchStats, process_folder, sidecar_path
from sdmeta.errors import NotContainerFormat, Truncated
from sdmeta.files import write_text_atomic
from sdmeta.reader import PNGMetadataReader

PROMPT = "Paste or type the full path to your PNG folder:\n> "


def build_argparser() -> argparse.ArgumentParser:
    """Build command-line argument parser."""
    parser = argparse.ArgumentParser(
        prog="sdmeta",
        description="Extract Stable Diffusion parameters from PNG tEXt/zTXt chunks",
        formatter_class=argparse.RawTextHelpFormatter,
        epilog="""
EXAMPLES:
  # Write a .txt next to every PNG in a folder:
  %(prog)s ./outputs

  # Walk sub-folders too, keep sidecars that already exist:
  %(prog)s ./outputs -r --no-overwrite

  # Print one image's metadata:
  %(prog)s image.png --stdout
        """,
    )

    parser.add_argument(
        "path",
        nargs="?",
        default=None,
        help="Folder of PNG files, or a single PNG (prompted for when omitted)",
    )
    parser.add_argument(
        "-r", "--recursive",
        action="store_true",
        help="Also scan sub-folders",
    )
    parser.add_argument(
        "--no-overwrite",
        action="store_true",
        help="Keep existing .txt sidecars",
    )
    parser.add_argument(
        "--verify-crc",
        action="store_true",
        help="Skip text chunks whose CRC does not match",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Treat a PNG that ends mid-chunk as an error instead of keeping\n"
             "the fields read so far",
    )
    parser.add_argument(
        "--stdout",
        action="store_true",
        help="Single file only: print metadata instead of writing a sidecar",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log per-chunk decisions",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


def normalize_path(raw: str) -> Path:
    """Strip quotes left by copying a path from a file manager."""
    raw = raw.strip()
    if len(raw) >= 2 and raw[0] == '"' and raw[-1] == '"':
        raw = raw[1:-1]
    return Path(os.path.normpath(raw))


def _print_progress(stats: BatchStats) -> None:
    print(f"\rProcessed: {stats.processed} | Metadata found: {stats.extracted}", end="", flush=True)


def _run_file(path: Path, args: argparse.Namespace) -> int:
    try:
        doc = PNGMetadataReader.read(path, verify_crc=args.verify_crc, strict=args.strict)
    except NotContainerFormat:
        print(f"Error: not a PNG file: {path}", file=sys.stderr)
        return 1
    except Truncated as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if doc is None:
        print("No metadata found.")
        return 0

    if args.stdout:
        print(doc.render())
        return 0

    target = sidecar_path(path)
    if target.exists() and args.no_overwrite:
        print(f"Sidecar exists, not overwritten: {target}")
        return 0
    try:
        write_text_atomic(target, doc.render())
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    print(f"Metadata written to: {target}")
    return 0


def _run_folder(folder: Path, args: argparse.Namespace) -> int:
    try:
        stats = process_folder(
            folder,
            recursive=args.recursive,
            overwrite=not args.no_overwrite,
            verify_crc=args.verify_crc,
            strict=args.strict,
            on_progress=_print_progress,
        )
    except NotADirectoryError:
        print("Error: Invalid or inaccessible folder path.", file=sys.stderr)
        return 1

    print(
        f"\n\nFinished! Scanned {stats.processed} PNG files, "
        f"extracted metadata from {stats.extracted}."
    )
    if stats.duplicates:
        print(f"Identical metadata in {stats.duplicates} file(s).")
    if stats.errors:
        print(f"Errors: {stats.errors}", file=sys.stderr)
        return 2
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main program entry point."""
    parser = build_argparser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    raw = args.path
    if raw is None:
        try:
            raw = input(PROMPT)
        except EOFError:
            raw = ""
    if not raw.strip():
        print("No path provided.", file=sys.stderr)
        return 1

    path = normalize_path(raw)
    if path.is_file():
        return _run_file(path, args)
    if args.stdout:
        parser.error("--stdout only applies to a single PNG file, not a folder")
    return _run_folder(path, args)


if __name__ == "__main__":
    sys.exit(main())
