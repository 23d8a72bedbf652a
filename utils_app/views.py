from django.db import transaction
from django.http import JsonResponse, Http404, HttpRequest, HttpResponse
from django.views.decorators.csrf import csrf_exempt
from django.shortcuts import render, get_object_or_404

from mygit.commits import walk
from mygit.errors import MyGitError
from mygit.objects import OID_RE, identify, split_preimage

from .models import Repository, GitObject, Reference
from .helpers import load_object, object_reader, read_commit, read_tree_entries
import json


class PushRejected(Exception):
    def __init__(self, oid, reason):
        super().__init__(reason)
        self.oid = oid
        self.reason = reason


def _verify(obj):
    if not isinstance(obj, dict):
        raise PushRejected(None, "object entry is not a JSON object")
    oid = obj.get('oid')
    if not isinstance(oid, str) or not OID_RE.match(oid):
        raise PushRejected(oid, "invalid object id")
    try:
        raw = bytes.fromhex(obj['data'])
    except (KeyError, TypeError, ValueError):
        raise PushRejected(oid, "object data is not hex")
    try:
        obj_type, body = split_preimage(raw, oid)
    except MyGitError as exc:
        raise PushRejected(oid, str(exc))
    if obj_type != obj.get('type') or identify(obj_type, body) != oid:
        raise PushRejected(oid, "object does not match its id")
    return obj_type, raw


@csrf_exempt
def push_objects(request: HttpRequest, repo_name: str) -> JsonResponse:
    if request.method != 'POST':
        return JsonResponse({'status': "online"})
    try:
        data = json.loads(request.body)
    except ValueError:
        return JsonResponse({"status": "rejected", "reason": "invalid JSON"}, status=400)

    if not isinstance(data, dict):
        return JsonResponse({"status": "rejected", "reason": "payload is not a JSON object"}, status=400)
    received = data.get('objects', [])
    ref_name = data.get('ref', 'refs/heads/master')
    new_oid = data.get('head')
    if not isinstance(received, list) or not isinstance(ref_name, str) or not isinstance(new_oid, str):
        return JsonResponse({"status": "rejected", "reason": "malformed push payload"}, status=400)
    try:
        with transaction.atomic():
            repo, _ = Repository.objects.get_or_create(name=repo_name)
            stored = 0
            for obj in received:
                obj_type, raw = _verify(obj)
                _, created = GitObject.objects.get_or_create(
                    repo=repo,
                    oid=obj['oid'],
                    defaults={'kind': obj_type, 'data': raw},
                )
                stored += created
            if not GitObject.objects.filter(repo=repo, oid=new_oid or '', kind='commit').exists():
                raise PushRejected(new_oid, "head is not a known commit")
            Reference.objects.update_or_create(repo=repo, name=ref_name, defaults={'commit_oid': new_oid})
    except PushRejected as exc:
        return JsonResponse({"status": "rejected", "oid": exc.oid, "reason": exc.reason}, status=400)
    return JsonResponse({"status": "pushed", "received": len(received), "stored": stored})


def _branch_tip(repo):
    ref = Reference.objects.filter(repo=repo, name__startswith="refs/heads/").order_by("name").first()
    if ref is None:
        raise Http404("Repository has no branches")
    return ref


def repo_list(request: HttpRequest) -> HttpResponse:
    repos = Repository.objects.order_by("name")
    return render(request, "mygit/repo_list.html", {"repos": repos})


def repo_overview(request: HttpRequest, name: str) -> HttpResponse:
    repo = get_object_or_404(Repository, name=name)
    ref = _branch_tip(repo)
    commit = read_commit(repo, ref.commit_oid)
    context = {
        "repo": repo,
        "ref": ref,
        "commit": commit,
        "entries": read_tree_entries(repo, commit.tree),
    }
    return render(request, "mygit/repo_overview.html", context)


def tree_view(request, name, commit_oid):
    repo = get_object_or_404(Repository, name=name)
    commit = read_commit(repo, commit_oid)
    return render(
        request,
        "mygit/tree.html",
        {
            "repo": repo,
            "commit": commit,
            "entries": read_tree_entries(repo, commit.tree),
        },
    )


def blob_view(request, name, commit_oid, path):
    repo = get_object_or_404(Repository, name=name)
    commit = read_commit(repo, commit_oid)
    path = path.rstrip("/")
    file_entry = next(
        (e for e in read_tree_entries(repo, commit.tree) if e.path == path and e.kind == "blob"),
        None,
    )
    if not file_entry:
        raise Http404("File not found")

    blob_obj = get_object_or_404(GitObject, repo=repo, oid=file_entry.oid)
    _, body = load_object(blob_obj)
    content = body.decode(errors="replace")

    return render(
        request,
        "mygit/blob.html",
        {
            "repo": repo,
            "commit": commit,
            "path": path,
            "content": content,
        },
    )


def commit_list(request, name):
    repo = get_object_or_404(Repository, name=name)
    ref = _branch_tip(repo)
    try:
        commits = list(walk(object_reader(repo), ref.commit_oid))
    except MyGitError as exc:
        raise Http404(str(exc))

    return render(request, "mygit/commits.html", {"repo": repo, "ref": ref, "commits": commits})


def commit_detail(request, name, commit_oid):
    repo = get_object_or_404(Repository, name=name)
    commit = read_commit(repo, commit_oid)
    return render(request, "mygit/commit_detail.html", {"repo": repo, "commit": commit})
