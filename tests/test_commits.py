import re

import pytest

from mygit.commits import encode_commit, format_timestamp, parse_commit, read_commit, walk
from mygit.errors import CommitCorrupt, ObjectNotFound
from mygit.objects import ObjectStore

TREE = "4" * 40
PARENT = "5" * 40
IDENTITY = "Ada Lovelace <ada@example.com>"


def test_encode_root_commit():
    body = encode_commit(TREE, None, IDENTITY, 1700000000, "Initial commit")
    assert body == (
        f"tree {TREE}\n"
        f"author {IDENTITY} 1700000000\n"
        f"committer {IDENTITY} 1700000000\n"
        "\n"
        "Initial commit\n"
    ).encode()


def test_parse_round_trips_fields():
    body = encode_commit(TREE, PARENT, IDENTITY, 1700000000, "Add notes\n\nLonger body.")
    record = parse_commit("c" * 40, body)

    assert record.oid == "c" * 40
    assert record.tree == TREE
    assert record.parent == PARENT
    assert record.author == IDENTITY
    assert record.author_time == 1700000000
    assert record.committer_time == 1700000000
    assert record.message == "Add notes\n\nLonger body."


def test_date_uses_log_format():
    assert re.fullmatch(
        r"[A-Z][a-z]{2} [A-Z][a-z]{2} \d{2} \d{2}:\d{2}:\d{2} 2023 [+-]\d{4}",
        format_timestamp(1700000000),
    )


@pytest.mark.parametrize("body, reason", [
    (f"author {IDENTITY} 1\ncommitter {IDENTITY} 1\n\nmsg\n", "missing tree"),
    (f"tree {TREE}\ncommitter {IDENTITY} 1\n\nmsg\n", "missing author"),
    (f"tree {TREE}\nauthor {IDENTITY} 1\ncommitter {IDENTITY} 1\n", "missing blank line"),
    (f"tree {TREE}\nauthor {IDENTITY} yesterday\ncommitter {IDENTITY} 1\n\nmsg\n", "unparsable author timestamp"),
    (f"tree {TREE}\nauthor 1\ncommitter {IDENTITY} 1\n\nmsg\n", "no timestamp"),
    (f"tree {TREE}\nparent {PARENT}\nparent {PARENT}\nauthor {IDENTITY} 1\ncommitter {IDENTITY} 1\n\nmsg\n", "repeated"),
    (f"tree {TREE}\nencoding latin-1\nauthor {IDENTITY} 1\ncommitter {IDENTITY} 1\n\nmsg\n", "unknown header"),
])
def test_parse_rejects_malformed_bodies(body, reason):
    with pytest.raises(CommitCorrupt, match=reason):
        parse_commit("c" * 40, body.encode())


@pytest.fixture
def store(tmp_path):
    return ObjectStore(str(tmp_path / "objects"))


def _chain(store, length):
    parent = None
    oids = []
    for n in range(length):
        parent = store.put("commit", encode_commit(TREE, parent, IDENTITY, 1000 + n, f"commit {n}"))
        oids.append(parent)
    return oids


def test_walk_yields_child_to_ancestor(store):
    oids = _chain(store, 3)

    records = list(walk(store.get, oids[-1]))

    assert [r.oid for r in records] == oids[::-1]
    assert [r.message for r in records] == ["commit 2", "commit 1", "commit 0"]
    assert records[-1].parent is None


def test_walk_is_restartable(store):
    oids = _chain(store, 2)
    assert list(walk(store.get, oids[-1])) == list(walk(store.get, oids[-1]))


def test_walk_is_lazy(store):
    oids = _chain(store, 2)
    history = walk(store.get, oids[-1])
    assert next(history).oid == oids[1]


def test_walk_missing_parent(store):
    oid = store.put("commit", encode_commit(TREE, PARENT, IDENTITY, 1, "orphan"))
    history = walk(store.get, oid)
    assert next(history).oid == oid
    with pytest.raises(ObjectNotFound):
        next(history)


def test_read_commit_of_non_commit(store):
    oid = store.put("blob", b"hello")
    with pytest.raises(CommitCorrupt, match="expected commit"):
        read_commit(store.get, oid)


def test_parse_rejects_timestamp_outside_calendar():
    body = f"tree {TREE}\nauthor {IDENTITY} {10 ** 14}\ncommitter {IDENTITY} 1\n\nmsg\n"
    with pytest.raises(CommitCorrupt, match="unparsable author timestamp"):
        parse_commit("c" * 40, body.encode())
