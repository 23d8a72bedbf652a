import os
import time

from . import config
from .commits import encode_commit, read_commit, walk
from .errors import NotARepository, PathOutsideRepository, UnstageablePath
from .index import StagingArea, check_index_path, is_ignored, iter_tracked_files, load_ignores
from .lock import repository_lock
from .logger import get_logger
from .objects import ObjectStore
from .refs import Refs
from .tree import read_tree, write_tree

logger = get_logger("mygit.repository")


class Repository:
    """A working tree at ``work_tree`` with its data under ``.mygit``."""

    def __init__(self, work_tree="."):
        self.work_tree = os.path.abspath(work_tree)
        self.git_dir = os.path.join(self.work_tree, config.REPO_DIR_NAME)
        self.objects = ObjectStore(os.path.join(self.git_dir, "objects"))
        self.index = StagingArea(os.path.join(self.git_dir, "index"))
        self.refs = Refs(self.git_dir)
        self.lock_file = os.path.join(self.git_dir, "lock")

    @classmethod
    def init(cls, work_tree="."):
        """Create or reinitialize a repository. Returns ``(repo, reinitialized)``."""
        repo = cls(work_tree)
        reinitialized = os.path.isdir(repo.git_dir)
        os.makedirs(repo.objects.objects_dir, exist_ok=True)
        os.makedirs(os.path.join(repo.git_dir, "refs", "heads"), exist_ok=True)
        with repository_lock(repo.lock_file):
            repo.refs.set_symbolic_head(f"refs/heads/{config.DEFAULT_BRANCH}")
            if not os.path.exists(repo.index.index_file):
                repo.index.clear()
        logger.info("repository initialized", git_dir=repo.git_dir, reinitialized=reinitialized)
        return repo, reinitialized

    @classmethod
    def open(cls, work_tree="."):
        repo = cls(work_tree)
        if not os.path.isdir(repo.git_dir):
            raise NotARepository(f"not a mygit repository: {repo.work_tree}")
        return repo

    def relative_path(self, path):
        full_path = os.path.abspath(os.path.join(self.work_tree, path))
        rel_path = os.path.relpath(full_path, self.work_tree)
        if rel_path == os.pardir or rel_path.startswith(os.pardir + os.sep):
            raise PathOutsideRepository(f"{path} is outside repository at {self.work_tree}")
        return rel_path.replace(os.sep, "/")

    def stage(self, path):
        """Store the file at ``path`` as a blob and record it in the index.

        Returns the blob id, or None when the file does not exist.
        """
        full_path = os.path.join(self.work_tree, path)
        if not os.path.isfile(full_path):
            return None
        rel_path = self.relative_path(path)
        self._check_stageable(rel_path)
        with repository_lock(self.lock_file):
            oid = self._stage_file(rel_path)
        return oid

    def _check_stageable(self, rel_path):
        if rel_path == config.REPO_DIR_NAME or rel_path.startswith(config.REPO_DIR_NAME + "/"):
            raise UnstageablePath(rel_path, "inside the repository directory")
        check_index_path(rel_path)

    def _stage_file(self, rel_path):
        self._check_stageable(rel_path)
        with open(os.path.join(self.work_tree, rel_path), "rb") as f:
            content = f.read()
        oid = self.objects.put("blob", content)
        self.index.stage(rel_path, oid)
        return oid

    def add(self, path):
        """Stage a file, or every non-ignored file under a directory.

        Returns the list of staged relative paths; empty when nothing exists
        at ``path``.
        """
        full_path = os.path.join(self.work_tree, path)
        if os.path.isfile(full_path):
            return [self.relative_path(path)] if self.stage(path) else []
        if not os.path.isdir(full_path):
            return []

        base = self.relative_path(path)
        ignores = [f"{config.REPO_DIR_NAME}/"] + load_ignores(self.work_tree, config.IGNORE_FILE)
        staged = []
        with repository_lock(self.lock_file):
            for rel_path in iter_tracked_files(full_path):
                if base != ".":
                    rel_path = f"{base}/{rel_path}"
                if is_ignored(rel_path, ignores):
                    continue
                self._stage_file(rel_path)
                staged.append(rel_path)
        return staged

    def head(self):
        return self.refs.resolve_head()

    def commit(self, message, timestamp=None):
        """Snapshot the index as a new commit on top of HEAD.

        Returns the commit id, or None when nothing is staged.
        """
        with repository_lock(self.lock_file):
            index = self.index.load()
            if not index:
                return None
            if timestamp is None:
                timestamp = int(time.time())
            identity = config.author_identity()

            tree_oid = write_tree(self.objects, index)
            parent = self.refs.resolve_head()
            body = encode_commit(tree_oid, parent, identity, timestamp, message)
            commit_oid = self.objects.put("commit", body)

            self.refs.update_head(commit_oid)
            self.index.clear()
        logger.info("commit created", oid=commit_oid, tree=tree_oid, parent=parent, files=len(index))
        return commit_oid

    def read_commit(self, oid):
        return read_commit(self.objects.get, oid)

    def read_tree(self, oid):
        return read_tree(self.objects, oid)

    def walk(self, start):
        return walk(self.objects.get, start)

    def log(self):
        """Commits reachable from HEAD, newest first; empty before the first commit."""
        head = self.head()
        if not head:
            return iter(())
        return self.walk(head)
