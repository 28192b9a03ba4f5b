# Purpose: Cross-process safe CSV I/O for the collected output files.
# Writers take a sibling ``<file>.lock`` and replace the target atomically,
# so a reader holding the same lock never sees a half-written day of bonds.

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Optional

import pandas as pd
from filelock import FileLock, Timeout

_logger = logging.getLogger(__name__)

READ_TIMEOUT_DEFAULT: float = float(os.getenv("GILTS_FILELOCK_READ_TIMEOUT", "15"))
WRITE_TIMEOUT_DEFAULT: float = float(os.getenv("GILTS_FILELOCK_WRITE_TIMEOUT", "30"))


def _as_path(path_or_buf: Any) -> Optional[Path]:
    """Path for filesystem targets; None for buffers and file-like objects."""
    if isinstance(path_or_buf, (str, os.PathLike)):
        return Path(path_or_buf)
    return None


def lockfile_for(path: Path) -> Path:
    """``bonds.csv`` -> ``bonds.csv.lock``."""
    return path.with_suffix(path.suffix + ".lock")


def read_csv_locked(path: str | os.PathLike, *, timeout: float = READ_TIMEOUT_DEFAULT, **kwargs) -> pd.DataFrame:
    """pandas.read_csv under the file's lock. Buffers are read without locking."""
    target = _as_path(path)
    if target is None:
        return pd.read_csv(path, **kwargs)

    try:
        with FileLock(str(lockfile_for(target)), timeout=timeout):
            return pd.read_csv(str(target), **kwargs)
    except Timeout as e:
        _logger.error(f"Timeout acquiring read lock for {target}: {e}")
        raise


def to_csv_locked(
    df: pd.DataFrame,
    path_or_buf: Any,
    *,
    timeout: float = WRITE_TIMEOUT_DEFAULT,
    **kwargs,
) -> None:
    """Write *df* as CSV, creating parent directories as needed.

    Overwrites go through a temporary file in the target directory followed by
    ``os.replace``. Buffers are written directly.
    """
    target = _as_path(path_or_buf)
    if target is None:
        df.to_csv(path_or_buf, **kwargs)
        return

    target.parent.mkdir(parents=True, exist_ok=True)
    kwargs.pop("mode", None)

    try:
        with FileLock(str(lockfile_for(target)), timeout=timeout):
            tmp_fd, tmp_path = tempfile.mkstemp(dir=str(target.parent), prefix=target.name + ".tmp-")
            os.close(tmp_fd)
            try:
                df.to_csv(tmp_path, **kwargs)
                os.replace(tmp_path, str(target))
            finally:
                if os.path.exists(tmp_path):
                    os.remove(tmp_path)
    except Timeout as e:
        _logger.error(f"Timeout acquiring write lock for {target}: {e}")
        raise


__all__ = ["READ_TIMEOUT_DEFAULT", "WRITE_TIMEOUT_DEFAULT", "lockfile_for", "read_csv_locked", "to_csv_locked"]
