import os
import platform
from contextlib import contextmanager

from .errors import RepositoryLocked
from .logger import get_logger

logger = get_logger("mygit.lock")


def _acquire_unix(fd, lock_file):
    import fcntl

    try:
        fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
    except BlockingIOError as exc:
        raise RepositoryLocked(f"repository is locked by another process ({lock_file})") from exc


def _release_unix(fd):
    import fcntl

    fcntl.flock(fd, fcntl.LOCK_UN)


def _acquire_windows(fd, lock_file):
    import msvcrt

    try:
        msvcrt.locking(fd, msvcrt.LK_NBLCK, 1)
    except OSError as exc:
        # 13 / 36: held by another handle
        if exc.errno in (13, 36):
            raise RepositoryLocked(f"repository is locked by another process ({lock_file})") from exc
        raise


def _release_windows(fd):
    import msvcrt

    os.lseek(fd, 0, os.SEEK_SET)
    msvcrt.locking(fd, msvcrt.LK_UNLCK, 1)


@contextmanager
def repository_lock(lock_file):
    """Hold an exclusive advisory lock on ``lock_file`` for a mutating operation.

    The lock file itself persists; the kernel drops the lock when its holder
    exits, so a crashed process never leaves the repository locked.
    """
    windows = platform.system() == "Windows"
    fd = os.open(lock_file, os.O_CREAT | os.O_RDWR)
    try:
        if windows:
            _acquire_windows(fd, lock_file)
        else:
            _acquire_unix(fd, lock_file)
        try:
            # holder pid, for diagnostics only
            os.ftruncate(fd, 0)
            os.lseek(fd, 0, os.SEEK_SET)
            os.write(fd, str(os.getpid()).encode("utf-8"))
            logger.debug("lock acquired", lock_file=lock_file)
            yield
        finally:
            if windows:
                _release_windows(fd)
            else:
                _release_unix(fd)
            logger.debug("lock released", lock_file=lock_file)
    finally:
        os.close(fd)
