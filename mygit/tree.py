import re
from collections import namedtuple

from .errors import CorruptObject

REGULAR_FILE_MODE = "100644"

TreeEntry = namedtuple("TreeEntry", ["mode", "kind", "oid", "path"])

_ENTRY_RE = re.compile(r"^(\d{6}) (blob|tree) ([0-9a-f]{40})\t(.+)$")


def encode_tree(index):
    """Serialize a path -> blob id mapping as a flat, path-sorted tree body."""
    lines = [
        f"{REGULAR_FILE_MODE} blob {index[path]}\t{path}\n"
        for path in sorted(index)
    ]
    return "".join(lines).encode()


def write_tree(store, index):
    return store.put("tree", encode_tree(index))


def parse_tree(body, oid="?"):
    entries = []
    try:
        lines = body.decode().split("\n")
    except UnicodeDecodeError:
        raise CorruptObject(oid, "tree body is not valid UTF-8")
    if lines[-1] == "":
        lines.pop()
    for line in lines:
        match = _ENTRY_RE.match(line)
        if not match:
            raise CorruptObject(oid, f"malformed tree entry {line!r}")
        entries.append(TreeEntry(*match.groups()))
    return entries


def read_tree(store, oid):
    """Return the path -> blob id mapping stored in tree ``oid``."""
    obj_type, body = store.get(oid)
    if obj_type != "tree":
        raise CorruptObject(oid, f"expected tree, got {obj_type}")
    return {entry.path: entry.oid for entry in parse_tree(body, oid)}
