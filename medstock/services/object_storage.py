"""
Local-disk object store for item photos.

Uploads go through a short-lived signed URL handed out by the API, the same
shape a cloud bucket's pre-signed PUT URL has, so the frontend uploader does
not care which one is behind it.
"""
import hashlib
import hmac
import logging
from pathlib import Path
import re
import time
import uuid

from medstock.core.config import settings
from medstock.core.exceptions import NotFoundError, ValidationError

logger = logging.getLogger("medstock")


OBJECT_ID_RE = re.compile(r"^[0-9a-f]{32}$")
UPLOAD_PREFIX = "uploads"


class ObjectStorage:
    def __init__(self, root: str, secret: str, expire_seconds: int, clock=time.time):
        self.root = Path(root).resolve()
        self.secret = secret
        self.expire_seconds = expire_seconds
        self.clock = clock

    def _sign(self, object_id: str, expires: int) -> str:
        return hmac.new(
            self.secret.encode(),
            f"{object_id}:{expires}".encode(),
            hashlib.sha256,
        ).hexdigest()

    def create_upload(self) -> tuple[str, str]:
        """Return (upload_url, object_path) for a new object."""
        object_id = uuid.uuid4().hex
        expires = int(self.clock()) + self.expire_seconds
        signature = self._sign(object_id, expires)

        object_path = f"/objects/{UPLOAD_PREFIX}/{object_id}"
        upload_url = f"{object_path}?expires={expires}&signature={signature}"
        return upload_url, object_path

    def verify_upload(self, object_id: str, expires: int, signature: str) -> bool:
        if not OBJECT_ID_RE.match(object_id):
            return False
        if expires < int(self.clock()):
            return False
        return hmac.compare_digest(self._sign(object_id, expires), signature)

    def save(self, object_id: str, data: bytes, content_type: str | None = None) -> str:
        if not OBJECT_ID_RE.match(object_id):
            raise ValidationError("Invalid object id")
        if not data:
            raise ValidationError("Upload is empty")

        directory = self.root / UPLOAD_PREFIX
        directory.mkdir(parents=True, exist_ok=True)

        (directory / object_id).write_bytes(data)
        if content_type:
            (directory / f"{object_id}.content-type").write_text(content_type)

        logger.info(f"Stored object {object_id} ({len(data)} bytes)")
        return f"/objects/{UPLOAD_PREFIX}/{object_id}"

    def resolve(self, object_path: str) -> tuple[Path, str | None]:
        """Map "uploads/<id>" to its file and stored content type."""
        parts = object_path.strip("/").split("/")
        if len(parts) != 2 or parts[0] != UPLOAD_PREFIX or not OBJECT_ID_RE.match(parts[1]):
            raise NotFoundError("Object", object_path)

        path = self.root / UPLOAD_PREFIX / parts[1]
        if not path.is_file():
            raise NotFoundError("Object", object_path)

        type_file = path.with_name(f"{parts[1]}.content-type")
        content_type = type_file.read_text().strip() if type_file.is_file() else None
        return path, content_type


_object_storage: ObjectStorage | None = None


def get_object_storage() -> ObjectStorage:
    global _object_storage
    if _object_storage is None:
        _object_storage = ObjectStorage(
            root=settings.OBJECT_STORAGE_DIR,
            secret=settings.SECRET_KEY,
            expire_seconds=settings.UPLOAD_URL_EXPIRE_SECONDS,
        )
    return _object_storage
