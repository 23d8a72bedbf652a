import fnmatch
import os

from .errors import IndexCorrupt, UnstageablePath
from .logger import get_logger
from .objects import OID_RE

logger = get_logger("mygit.index")


def check_index_path(path):
    """Reject paths the line-oriented index and tree formats cannot hold."""
    if "\n" in path:
        raise UnstageablePath(path, "newline in file name")
    try:
        path.encode("utf-8")
    except UnicodeEncodeError:
        raise UnstageablePath(path, "file name is not valid UTF-8")


class StagingArea:
    """The ``index`` file: one ``"<blob id> <path>"`` line per staged path.

    Callers load the mapping, change it and save it back; nothing is cached
    between calls.
    """

    def __init__(self, index_file):
        self.index_file = index_file

    def load(self):
        index = {}
        try:
            with open(self.index_file, "r", encoding="utf-8", newline="") as f:
                lines = f.read().split("\n")
        except FileNotFoundError:
            return index
        for lineno, line in enumerate(lines, start=1):
            if not line:
                continue
            oid, sep, path = line.partition(" ")
            if not sep or not path or not OID_RE.match(oid):
                raise IndexCorrupt(lineno, line)
            index[path] = oid
        return index

    def save(self, index):
        tmp_file = f"{self.index_file}.tmp"
        try:
            with open(tmp_file, "w", encoding="utf-8", newline="") as f:
                for path, oid in index.items():
                    f.write(f"{oid} {path}\n")
            os.replace(tmp_file, self.index_file)
        except BaseException:
            if os.path.exists(tmp_file):
                os.unlink(tmp_file)
            raise
        logger.debug("index saved", entries=len(index))

    def stage(self, path, oid):
        check_index_path(path)
        index = self.load()
        previous = index.get(path)
        index[path] = oid
        self.save(index)
        if previous and previous != oid:
            logger.debug("staged entry replaced", path=path, old=previous, new=oid)
        return index

    def clear(self):
        self.save({})


def load_ignores(work_tree, ignore_file):
    try:
        with open(os.path.join(work_tree, ignore_file), "r", encoding="utf-8") as f:
            patterns = []
            for line in f:
                line = line.strip()
                if not line or line.startswith("#"):
                    continue
                patterns.append(line)
            return patterns
    except FileNotFoundError:
        return []


def is_ignored(path, ignores):
    norm = path.replace(os.sep, "/")
    for pattern in ignores:
        if pattern.endswith("/"):
            base = pattern.rstrip("/")
            if norm == base or norm.startswith(base + "/"):
                return True
        if fnmatch.fnmatch(norm, pattern):
            return True

    return False


def iter_tracked_files(root, ignores=()):
    """Yield ``/``-separated paths of files under ``root``, relative to it."""
    root = os.path.abspath(root)
    for dirpath, dirnames, filenames in os.walk(root):
        rel_dir = os.path.relpath(dirpath, root)
        if rel_dir == ".":
            rel_dir = ""
        dirnames[:] = sorted(
            d for d in dirnames
            if not is_ignored(os.path.join(rel_dir, d), ignores)
        )
        for filename in sorted(filenames):
            rel_path = os.path.join(rel_dir, filename) if rel_dir else filename
            if is_ignored(rel_path, ignores):
                continue
            yield rel_path.replace(os.sep, "/")
