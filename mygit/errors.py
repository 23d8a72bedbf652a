class MyGitError(Exception):
    """Base class for repository errors reported to the user."""


class NotARepository(MyGitError):
    pass


class ObjectNotFound(MyGitError):
    def __init__(self, oid):
        super().__init__(f"object not found: {oid}")
        self.oid = oid


class CorruptObject(MyGitError):
    def __init__(self, oid, reason):
        super().__init__(f"corrupt object {oid}: {reason}")
        self.oid = oid
        self.reason = reason


class IndexCorrupt(MyGitError):
    def __init__(self, lineno, line):
        super().__init__(f"corrupt index at line {lineno}: {line!r}")
        self.lineno = lineno
        self.line = line


class CommitCorrupt(MyGitError):
    def __init__(self, oid, reason):
        super().__init__(f"corrupt commit {oid}: {reason}")
        self.oid = oid
        self.reason = reason


class RepositoryLocked(MyGitError):
    pass


class PathOutsideRepository(MyGitError):
    pass


class UnstageablePath(MyGitError):
    def __init__(self, path, reason):
        super().__init__(f"cannot stage {path!r}: {reason}")
        self.path = path
        self.reason = reason
