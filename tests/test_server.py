import json

import pytest

from mygit.remote import collect_objects
from utils_app.models import GitObject, Reference, Repository

pytestmark = pytest.mark.django_db


@pytest.fixture
def pushed_repo(repo, write_file):
    write_file("readme.md", "Hello, World!\n")
    repo.stage("readme.md")
    first = repo.commit("Initial commit", timestamp=1700000000)
    write_file("notes.txt", "note\n")
    repo.stage("notes.txt")
    second = repo.commit("Add notes", timestamp=1700000100)
    return repo, first, second


def _push(client, repo_name, payload):
    return client.post(
        f"/api/git/{repo_name}/push",
        data=json.dumps(payload),
        content_type="application/json",
    )


def _payload(repo):
    return {"objects": collect_objects(repo), "head": repo.head(), "ref": "refs/heads/master"}


def test_push_endpoint_is_online(client):
    assert client.get("/api/git/demo/push").json() == {"status": "online"}


def test_push_stores_objects_and_ref(client, pushed_repo):
    repo, _, second = pushed_repo
    payload = _payload(repo)

    resp = _push(client, "demo", payload)

    assert resp.status_code == 200
    assert resp.json() == {"status": "pushed", "received": 6, "stored": 6}
    stored = Repository.objects.get(name="demo")
    assert GitObject.objects.filter(repo=stored).count() == 6
    assert Reference.objects.get(repo=stored, name="refs/heads/master").commit_oid == second


def test_push_is_deduplicated(client, pushed_repo):
    repo, _, _ = pushed_repo
    _push(client, "demo", _payload(repo))

    resp = _push(client, "demo", _payload(repo))

    assert resp.json()["stored"] == 0
    assert GitObject.objects.count() == 6


def test_push_rejects_tampered_object(client, pushed_repo):
    repo, _, _ = pushed_repo
    payload = _payload(repo)
    tampered = payload["objects"][0]
    tampered["data"] = (b"blob 5\0evil!").hex()

    resp = _push(client, "demo", payload)

    assert resp.status_code == 400
    assert resp.json()["oid"] == tampered["oid"]
    assert GitObject.objects.count() == 0
    assert not Repository.objects.filter(name="demo").exists()


def test_push_rejects_unknown_head(client, pushed_repo):
    repo, _, _ = pushed_repo
    payload = _payload(repo)
    payload["head"] = "f" * 40

    resp = _push(client, "demo", payload)

    assert resp.status_code == 400
    assert Reference.objects.count() == 0


def test_push_rejects_invalid_json(client):
    resp = client.post("/api/git/demo/push", data="{", content_type="application/json")
    assert resp.status_code == 400


def test_browse_pushed_history(client, pushed_repo):
    repo, first, second = pushed_repo
    _push(client, "demo", _payload(repo))

    listing = client.get("/api/git/")
    assert b"demo" in listing.content

    overview = client.get("/api/git/demo/")
    assert overview.status_code == 200
    assert overview.context["commit"].oid == second
    assert [e.path for e in overview.context["entries"]] == ["notes.txt"]

    commits = client.get("/api/git/demo/commits/")
    assert [c.oid for c in commits.context["commits"]] == [second, first]

    detail = client.get(f"/api/git/demo/commit/{first}/")
    assert detail.context["commit"].message == "Initial commit"

    tree = client.get(f"/api/git/demo/tree/{first}/")
    assert [e.path for e in tree.context["entries"]] == ["readme.md"]

    blob = client.get(f"/api/git/demo/blob/{first}/readme.md/")
    assert blob.context["content"] == "Hello, World!\n"


def test_browse_missing_things(client, pushed_repo):
    repo, first, _ = pushed_repo
    _push(client, "demo", _payload(repo))

    assert client.get("/api/git/nope/").status_code == 404
    assert client.get(f"/api/git/demo/commit/{'0' * 40}/").status_code == 404
    assert client.get(f"/api/git/demo/blob/{first}/notes.txt/").status_code == 404


def test_corrupt_stored_commit_is_not_found(client, pushed_repo):
    repo, _, second = pushed_repo
    _push(client, "demo", _payload(repo))
    GitObject.objects.filter(oid=second).update(data=b"commit 3\0bad")

    assert client.get(f"/api/git/demo/commit/{second}/").status_code == 404
    assert client.get("/api/git/demo/commits/").status_code == 404


@pytest.mark.parametrize("body", [
    [],
    {"objects": [1], "head": "f" * 40},
    {"objects": [{"oid": 5, "type": "blob", "data": ""}], "head": "f" * 40},
    {"objects": "nope", "head": "f" * 40},
    {"objects": []},
])
def test_push_rejects_malformed_payload(client, body):
    resp = _push(client, "demo", body)

    assert resp.status_code == 400
    assert resp.json()["status"] == "rejected"
    assert not Repository.objects.filter(name="demo").exists()
