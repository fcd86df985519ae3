"""
Filesystem primitives shared by the profile, settings and backup managers.
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Union
import os
import tempfile

if os.name == "nt":  # pragma: no cover - platform specific
    import msvcrt
else:
    import fcntl


def write_atomic(path: Union[str, Path], data: bytes) -> None:
    """
    Write bytes to a file so that readers never observe a partial write.

    The data goes to a hidden temp file in the same directory, is fsynced, and is
    then moved over the target with os.replace.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    finally:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)


@contextmanager
def advisory_lock(lock_path: Union[str, Path], enabled: bool = True) -> Iterator[None]:
    """
    Hold an exclusive advisory lock on ``lock_path`` for the duration of the block.

    Other invocations that take the same lock wait; processes that ignore it are
    not stopped. With ``enabled=False`` this is a no-op.
    """
    if not enabled:
        yield
        return

    lock_path = Path(lock_path)
    lock_path.parent.mkdir(parents=True, exist_ok=True)
    with open(lock_path, "a+b") as fh:
        if os.name == "nt":  # pragma: no cover - platform specific
            fh.seek(0)
            msvcrt.locking(fh.fileno(), msvcrt.LK_LOCK, 1)
        else:
            fcntl.flock(fh.fileno(), fcntl.LOCK_EX)
        try:
            yield
        finally:
            if os.name == "nt":  # pragma: no cover - platform specific
                fh.seek(0)
                msvcrt.locking(fh.fileno(), msvcrt.LK_UNLCK, 1)
            else:
                fcntl.flock(fh.fileno(), fcntl.LOCK_UN)
