"""Commit objects: encoding, decoding and history traversal.

A commit body is a block of ``key value`` header lines, a blank line and
the message::

    tree <id>
    parent <id>            (absent on a root commit)
    author <name> <epoch>
    committer <name> <epoch>

    <message>
"""

from dataclasses import dataclass
from datetime import datetime, timezone

from . import config
from .errors import CommitCorrupt

REQUIRED_FIELDS = ("tree", "author", "committer")
KNOWN_FIELDS = ("tree", "parent", "author", "committer")


@dataclass(frozen=True)
class CommitRecord:
    oid: str
    tree: str
    parent: str | None
    author: str
    author_time: int
    committer: str
    committer_time: int
    message: str

    @property
    def date(self):
        return format_timestamp(self.author_time)


def format_timestamp(timestamp):
    moment = datetime.fromtimestamp(timestamp, tz=timezone.utc).astimezone()
    return moment.strftime(config.DATE_FORMAT)


def encode_commit(tree, parent, identity, timestamp, message):
    lines = [f"tree {tree}"]
    if parent:
        lines.append(f"parent {parent}")
    lines.append(f"author {identity} {timestamp}")
    lines.append(f"committer {identity} {timestamp}")
    lines.append("")
    lines.append(message)
    return ("\n".join(lines) + "\n").encode()


def _split_signature(oid, key, value):
    name, sep, stamp = value.rpartition(" ")
    if not sep or not name:
        raise CommitCorrupt(oid, f"{key} line has no timestamp: {value!r}")
    try:
        timestamp = int(stamp)
        # must also render as a calendar date
        format_timestamp(timestamp)
    except (ValueError, OverflowError, OSError):
        raise CommitCorrupt(oid, f"unparsable {key} timestamp {stamp!r}")
    return name, timestamp


def parse_commit(oid, body):
    try:
        text = body.decode()
    except UnicodeDecodeError:
        raise CommitCorrupt(oid, "body is not valid UTF-8")
    header, sep, message = text.partition("\n\n")
    if not sep:
        raise CommitCorrupt(oid, "missing blank line before message")

    fields = {}
    for line in header.splitlines():
        key, _, value = line.partition(" ")
        if key not in KNOWN_FIELDS:
            raise CommitCorrupt(oid, f"unknown header field {key!r}")
        if key in fields:
            raise CommitCorrupt(oid, f"repeated header field {key!r}")
        fields[key] = value

    missing = [key for key in REQUIRED_FIELDS if not fields.get(key)]
    if missing:
        raise CommitCorrupt(oid, f"missing {', '.join(missing)}")

    author, author_time = _split_signature(oid, "author", fields["author"])
    committer, committer_time = _split_signature(oid, "committer", fields["committer"])
    if message.endswith("\n"):
        message = message[:-1]

    return CommitRecord(
        oid=oid,
        tree=fields["tree"],
        parent=fields.get("parent") or None,
        author=author,
        author_time=author_time,
        committer=committer,
        committer_time=committer_time,
        message=message,
    )


def read_commit(read_object, oid):
    obj_type, body = read_object(oid)
    if obj_type != "commit":
        raise CommitCorrupt(oid, f"expected commit, got {obj_type}")
    return parse_commit(oid, body)


def walk(read_object, start):
    """Yield commits from ``start`` back to the root, newest first.

    ``read_object`` maps an id to ``(type, content)``, so the same walk
    serves the on-disk store and the server's database.
    """
    oid = start
    seen = set()
    while oid:
        if oid in seen:
            raise CommitCorrupt(oid, "parent chain loops back on itself")
        seen.add(oid)
        commit = read_commit(read_object, oid)
        yield commit
        oid = commit.parent
