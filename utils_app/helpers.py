from django.http import Http404

from mygit.commits import parse_commit
from mygit.errors import MyGitError, ObjectNotFound
from mygit.objects import split_preimage
from mygit.tree import parse_tree

from .models import GitObject


def load_object(obj: GitObject):
    return split_preimage(bytes(obj.data), obj.oid)


def object_reader(repo):
    """Adapt the repository's stored objects to the ``oid -> (type, body)`` reader."""
    def read_object(oid):
        obj = GitObject.objects.filter(repo=repo, oid=oid).first()
        if obj is None:
            raise ObjectNotFound(oid)
        return load_object(obj)
    return read_object


def read_commit(repo, oid):
    try:
        obj_type, body = object_reader(repo)(oid)
        if obj_type != "commit":
            raise ObjectNotFound(oid)
        return parse_commit(oid, body)
    except MyGitError as exc:
        raise Http404(str(exc))


def read_tree_entries(repo, oid):
    try:
        obj_type, body = object_reader(repo)(oid)
        if obj_type != "tree":
            raise ObjectNotFound(oid)
        return parse_tree(body, oid)
    except MyGitError as exc:
        raise Http404(str(exc))
