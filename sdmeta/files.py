"""
File helpers shared by the document model and the folder driver.
"""

from __future__ import annotations

import contextlib
import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


def write_text_atomic(path: str | Path, text: str) -> Path:
    """
    Atomically write text to path as UTF-8.
    Uses a temporary file and os.replace so readers never see half a file.
    """
    path = Path(path)
    tmp = path.with_suffix(path.suffix + ".tmp")
    try:
        with open(tmp, "wb") as f:
            f.write(text.encode("utf-8"))
        os.replace(tmp, path)
    except OSError:
        with contextlib.suppress(OSError):
            tmp.unlink()
        raise
    logger.debug("Wrote %d chars -> %s", len(text), path)
    return path
