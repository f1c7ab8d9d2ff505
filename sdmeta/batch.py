"""
Folder driver - extract metadata from every PNG in a folder into sidecar files.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterator

from sdmeta.errors import NotContainerFormat, Truncated
from sdmeta.files import write_text_atomic
from sdmeta.integrity import fingerprint
from sdmeta.reader import PNGMetadataReader
from sdmeta.spec import PNG_EXTENSIONS, SIDECAR_SUFFIX

logger = logging.getLogger(__name__)


@dataclass
class BatchStats:
    processed: int = 0
    extracted: int = 0
    skipped: int = 0
    errors: int = 0
    duplicates: int = 0
    written: list[Path] = field(default_factory=list)
    _seen: set[str] = field(default_factory=set, repr=False)

    def note_fingerprint(self, fp: str) -> None:
        if fp in self._seen:
            self.duplicates += 1
        else:
            self._seen.add(fp)


def iter_png_paths(folder: Path, recursive: bool = False) -> Iterator[Path]:
    """Regular files with a .png suffix (any case), sorted by name."""
    candidates = folder.rglob("*") if recursive else folder.iterdir()
    for path in sorted(candidates, key=lambda p: str(p).lower()):
        if path.is_file() and path.suffix.lower() in PNG_EXTENSIONS:
            yield path


def sidecar_path(png_path: Path) -> Path:
    return png_path.with_suffix(SIDECAR_SUFFIX)


def process_file(
    png_path: Path,
    stats: BatchStats,
    *,
    overwrite: bool = True,
    verify_crc: bool = False,
    strict: bool = False,
) -> Path | None:
    """Extract one file into its sidecar. Returns the sidecar path when written."""
    if not PNGMetadataReader.is_png(png_path):
        logger.debug("Not a PNG, skipping: %s", png_path)
        stats.skipped += 1
        return None

    stats.processed += 1
    try:
        doc = PNGMetadataReader.read(png_path, verify_crc=verify_crc, strict=strict)
    except NotContainerFormat:
        # Replaced between the signature check and the read
        stats.skipped += 1
        return None
    except Truncated as e:
        logger.warning("Truncated PNG %s: %s", png_path, e)
        stats.errors += 1
        return None
    except OSError as e:
        logger.warning("Failed to read %s: %s", png_path, e)
        stats.errors += 1
        return None

    if doc is None:
        return None

    stats.extracted += 1
    stats.note_fingerprint(fingerprint(doc))
    if doc.truncated:
        logger.info("%s is truncated; kept %d field(s)", png_path.name, len(doc))

    target = sidecar_path(png_path)
    if target.exists() and not overwrite:
        logger.info("Sidecar exists, leaving it alone: %s", target)
        return None

    try:
        write_text_atomic(target, doc.render())
    except OSError as e:
        logger.warning("Failed to write %s: %s", target, e)
        stats.errors += 1
        return None

    stats.written.append(target)
    return target


def process_folder(
    folder: str | Path,
    *,
    recursive: bool = False,
    overwrite: bool = True,
    verify_crc: bool = False,
    strict: bool = False,
    on_progress: Callable[[BatchStats], None] | None = None,
) -> BatchStats:
    """
    Write a .txt sidecar next to every PNG in folder that carries text metadata.

    Raises NotADirectoryError if folder is missing or not a directory.
    Per-file I/O failures, and truncated files when strict is set, are
    logged and counted, never raised.
    """
    folder = Path(folder)
    if not folder.is_dir():
        raise NotADirectoryError(f"Invalid or inaccessible folder path: {folder}")

    stats = BatchStats()
    logger.info("Scanning %s%s", folder, " (recursive)" if recursive else "")

    for png_path in iter_png_paths(folder, recursive=recursive):
        process_file(png_path, stats, overwrite=overwrite, verify_crc=verify_crc, strict=strict)
        if on_progress is not None:
            on_progress(stats)

    logger.info(
        "Done: %d processed, %d with metadata, %d errors",
        stats.processed, stats.extracted, stats.errors,
    )
    return stats
