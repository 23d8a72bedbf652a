import os
from collections import namedtuple

from .logger import get_logger

logger = get_logger("mygit.refs")

SYMBOLIC_PREFIX = "ref: "

# symbolic=True: value is a ref path such as "refs/heads/master"
# symbolic=False: value is a commit id (detached) or None when unset
HeadValue = namedtuple("HeadValue", ["symbolic", "value"])


class Refs:
    def __init__(self, git_dir):
        self.git_dir = git_dir
        self.head_file = os.path.join(git_dir, "HEAD")

    def _read(self, path):
        try:
            with open(path, "r", encoding="utf-8") as f:
                return f.read().strip() or None
        except FileNotFoundError:
            return None

    def read_head(self):
        content = self._read(self.head_file)
        if content and content.startswith(SYMBOLIC_PREFIX):
            return HeadValue(True, content[len(SYMBOLIC_PREFIX):].strip())
        return HeadValue(False, content)

    def set_symbolic_head(self, ref_name):
        with open(self.head_file, "w", encoding="utf-8") as f:
            f.write(f"{SYMBOLIC_PREFIX}{ref_name}\n")

    def read_ref(self, ref_name):
        return self._read(os.path.join(self.git_dir, ref_name))

    def resolve_head(self):
        """Commit id HEAD points at, or None before the first commit."""
        head = self.read_head()
        if head.symbolic:
            return self.read_ref(head.value)
        return head.value

    def current_branch(self):
        head = self.read_head()
        if head.symbolic and head.value.startswith("refs/heads/"):
            return head.value[len("refs/heads/"):]
        return None

    def update_head(self, commit_oid):
        """Move the branch HEAD names to ``commit_oid``.

        A detached HEAD is overwritten with the id directly.
        """
        head = self.read_head()
        if head.symbolic:
            path = os.path.join(self.git_dir, head.value)
            target = head.value
        else:
            path = self.head_file
            target = "HEAD"
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(f"{commit_oid}\n")
        logger.debug("ref updated", ref=target, oid=commit_oid)
