"""Atomic file writes.

Content is written to a temporary file next to the target, flushed to disk
and moved into place with ``os.replace``. A concurrent reader of the target
sees either the complete previous content or the complete new content.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

from ._types import ConfigWriteError

DEFAULT_FILE_MODE = 0o644


def write_file_atomic(path: str | Path, data: bytes, mode: int = DEFAULT_FILE_MODE) -> None:
    """Write *data* to *path* atomically, creating parent directories.

    Only the permission bits (0o777) of *mode* are applied.

    :raises ConfigWriteError: on any I/O failure. The target is left untouched
        and the temporary file is removed.
    """
    target = Path(path).expanduser()

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=target.parent, prefix=f".{target.name}.", suffix=".tmp"
        )
    except OSError as exc:
        raise ConfigWriteError(f"Could not prepare config file {target!r}: {exc}") from exc

    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())

        # mkstemp creates the file as 0o600
        os.chmod(tmp_path, mode & 0o777)
        tmp_path.replace(target)
    except OSError as exc:
        tmp_path.unlink(missing_ok=True)
        raise ConfigWriteError(f"Could not write config file {target!r}: {exc}") from exc
