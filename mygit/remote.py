import requests

from . import config
from .logger import get_logger
from .objects import split_preimage

logger = get_logger("mygit.remote")


def collect_objects(repo):
    objects_data = []
    for oid in repo.objects.iter_oids():
        raw = repo.objects.read_raw(oid)
        obj_type, _ = split_preimage(raw, oid)
        objects_data.append({
            "oid": oid,
            "type": obj_type,
            "data": raw.hex(),
        })
    return objects_data


def push(repo, repo_name, url=None):
    """Send every object and the current branch tip to the remote server.

    Returns the decoded JSON response, or None when there is no commit yet.
    """
    head_oid = repo.head()
    if not head_oid:
        return None

    head = repo.refs.read_head()
    ref_name = head.value if head.symbolic else f"refs/heads/{config.DEFAULT_BRANCH}"
    payload = {"objects": collect_objects(repo), "head": head_oid, "ref": ref_name}

    url = (url or config.REMOTE_URL).rstrip("/")
    resp = requests.post(f"{url}/{repo_name}/push", json=payload, timeout=config.REMOTE_TIMEOUT)
    resp.raise_for_status()
    logger.info("push completed", repo=repo_name, ref=ref_name, head=head_oid,
                objects=len(payload["objects"]), status=resp.status_code)
    return resp.json()
