from __future__ import annotations

"""
Compression Infrastructure.

Streams a file through a gzip encoder on a worker thread. This is the only
asynchronous operation of the package; callers receive a Future that
resolves with the destination path or raises the underlying I/O error.
"""

import gzip
import logging
import os
import shutil
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Optional

from filekeeper.domain.errors import NotFoundError

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 64 * 1024


def compress_file(
        src_path: str,
        dest_path: str,
        executor: Optional[ThreadPoolExecutor] = None,
) -> "Future[str]":
    """
    Compress `src_path` into the gzip file `dest_path`.

    Args:
        src_path: File to compress.
        dest_path: Destination `.gz` path.
        executor: Optional shared executor. A single-use one is created otherwise.

    Returns:
        Future[str]: Resolves with `dest_path`.

    Raises:
        NotFoundError: Synchronously, if `src_path` does not exist.
    """
    if not os.path.exists(src_path):
        raise NotFoundError(f"File does not exist: {src_path}")

    if executor is not None:
        return executor.submit(_gzip_stream, src_path, dest_path)

    own = ThreadPoolExecutor(max_workers=1, thread_name_prefix="CompressionWorker")
    try:
        return own.submit(_gzip_stream, src_path, dest_path)
    finally:
        # Submitted work still runs; the worker exits once it is done
        own.shutdown(wait=False)


def _gzip_stream(src_path: str, dest_path: str) -> str:
    """Copy `src_path` into a gzip stream at `dest_path` in fixed-size chunks."""
    logger.debug(f"Compression: {src_path} -> {dest_path}")
    with open(src_path, "rb") as src, gzip.open(dest_path, "wb") as dst:
        shutil.copyfileobj(src, dst, _CHUNK_SIZE)
    logger.info(f"Compression: Wrote {dest_path}")
    return dest_path
