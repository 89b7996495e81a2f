"""Durable file writes.

Brief:
  safe_write_file() writes through a temporary file in the destination
  directory, fsyncs it and renames it over the target, so after a crash the
  target holds either the old or the new contents, never a truncated mix.
"""

from __future__ import annotations

import os
import tempfile
from typing import Union


def safe_write_file(path: str, data: Union[bytes, str], mode: int = 0o644) -> None:
    """Brief: Atomically replace path with data.

    Inputs:
      - path: Destination file path; parent directories are created.
      - data: Bytes, or text encoded as UTF-8.
      - mode: Permission bits of the written file; the resolver may run as
        another user, so files are world-readable by default.

    Outputs:
      - None.

    Raises:
      - OSError: When any step fails; the temporary file is removed.
    """

    if isinstance(data, str):
        data = data.encode("utf-8")
    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(
        dir=directory, prefix=f".{os.path.basename(path)}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp_path, mode)
        os.replace(tmp_path, path)
    finally:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
