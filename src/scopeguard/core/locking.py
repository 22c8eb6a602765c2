"""Advisory file locks for JSON state shared between processes."""

from collections.abc import Iterator
from contextlib import contextmanager
import fcntl
from pathlib import Path


@contextmanager
def file_lock(file_path: Path, exclusive: bool = True) -> Iterator[None]:
    """Hold a lock on ``<file>.lock`` for the duration of the block.

    Args:
        file_path: The file being protected.
        exclusive: Exclusive lock for writes, shared lock for reads.

    Yields:
        None once the lock is held.
    """
    lock_path = file_path.with_suffix(file_path.suffix + ".lock")
    lock_path.parent.mkdir(parents=True, exist_ok=True)

    with open(lock_path, "w") as lock_file:
        lock_type = fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH
        try:
            fcntl.flock(lock_file.fileno(), lock_type)
            yield
        finally:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)
