import hashlib
import os
import re
import zlib

from .errors import CorruptObject, ObjectNotFound
from .logger import get_logger

logger = get_logger("mygit.objects")

OBJECT_TYPES = ("blob", "tree", "commit")
OID_RE = re.compile(r"^[0-9a-f]{40}$")


def make_preimage(obj_type, data):
    header = f"{obj_type} {len(data)}\0".encode()
    return header + data


def identify(obj_type, data):
    """Content identifier of ``data`` framed as an object of ``obj_type``."""
    return hashlib.sha1(make_preimage(obj_type, data)).hexdigest()


def split_preimage(raw, oid="?"):
    """Split an uncompressed object into ``(type, content)``.

    The header must be ``"<type> <length>"`` with a known type, and the
    declared length must match the payload.
    """
    null_index = raw.find(b"\0")
    if null_index < 0:
        raise CorruptObject(oid, "missing header delimiter")
    try:
        header = raw[:null_index].decode()
        obj_type, size = header.split(" ")
        size = int(size)
    except ValueError:
        raise CorruptObject(oid, f"malformed header {raw[:null_index]!r}")
    if obj_type not in OBJECT_TYPES:
        raise CorruptObject(oid, f"unknown object type {obj_type!r}")
    body = raw[null_index + 1:]
    if len(body) != size:
        raise CorruptObject(oid, f"declared length {size} but found {len(body)}")
    return obj_type, body


class ObjectStore:
    """Write-once, zlib-compressed objects sharded under ``objects/xx/``."""

    def __init__(self, objects_dir):
        self.objects_dir = objects_dir

    def _path(self, oid):
        return os.path.join(self.objects_dir, oid[:2], oid[2:])

    def exists(self, oid):
        return bool(OID_RE.match(oid)) and os.path.isfile(self._path(oid))

    def put(self, obj_type, data):
        full_data = make_preimage(obj_type, data)
        oid = hashlib.sha1(full_data).hexdigest()

        path = self._path(oid)
        if os.path.exists(path):
            logger.debug("object deduplicated", oid=oid, type=obj_type)
            return oid
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "wb") as f:
            f.write(zlib.compress(full_data))
        logger.debug("object written", oid=oid, type=obj_type, size=len(data))
        return oid

    def read_raw(self, oid):
        """Return the decompressed preimage (header and content) of ``oid``."""
        if not OID_RE.match(oid):
            raise ObjectNotFound(oid)
        try:
            with open(self._path(oid), "rb") as f:
                compressed = f.read()
        except FileNotFoundError:
            raise ObjectNotFound(oid)
        try:
            return zlib.decompress(compressed)
        except zlib.error as exc:
            raise CorruptObject(oid, f"decompression failed: {exc}")

    def get(self, oid):
        return split_preimage(self.read_raw(oid), oid)

    def iter_oids(self):
        if not os.path.isdir(self.objects_dir):
            return
        for dir_prefix in sorted(os.listdir(self.objects_dir)):
            dir_path = os.path.join(self.objects_dir, dir_prefix)
            if not os.path.isdir(dir_path):
                continue
            for file_name in sorted(os.listdir(dir_path)):
                oid = dir_prefix + file_name
                if OID_RE.match(oid):
                    yield oid
