"""스토리지 서비스 — S3 또는 로컬 파일 저장.

Storage Service — Profile images in S3 (served through CloudFront) or on
local disk. AWS 키가 비어있으면 자동으로 로컬 모드로 전환됩니다.
The database stores only the object key; public URLs are derived on read.
"""

import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path

from botocore.exceptions import BotoCoreError, ClientError

from staffhub.config import settings

logger = logging.getLogger(__name__)

# 로컬 업로드 디렉토리 — .env의 LOCAL_UPLOADS_DIR 또는 프로젝트 루트의 uploads/
_PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent.parent
UPLOADS_DIR: Path = Path(settings.LOCAL_UPLOADS_DIR) if settings.LOCAL_UPLOADS_DIR else _PROJECT_ROOT / "uploads"

# 허용 이미지 확장자 — Accepted profile image extensions
IMAGE_CONTENT_TYPES: dict[str, str] = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
}


class StorageService:
    """파일 업로드 서비스 — S3 또는 로컬 모드 자동 선택."""

    def __init__(self) -> None:
        self._client = None

    @property
    def is_local(self) -> bool:
        return not settings.AWS_ACCESS_KEY_ID or not settings.AWS_S3_BUCKET

    @property
    def client(self):
        if self.is_local:
            return None
        if self._client is None:
            import boto3
            from botocore.config import Config as BotoConfig

            self._client = boto3.client(
                "s3",
                region_name=settings.AWS_S3_REGION,
                aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
                aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
                config=BotoConfig(signature_version="s3v4"),
            )
        return self._client

    def _generate_key(self, filename: str, folder: str) -> str:
        ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else "bin"
        date_prefix = datetime.now(timezone.utc).strftime("%Y/%m/%d")
        return f"{folder}/{date_prefix}/{uuid.uuid4().hex}.{ext}"

    def get_public_url(self, key: str | None) -> str | None:
        """객체 키로 공개 URL을 만듭니다.

        Public URL for a stored object: CloudFront when configured, the
        bucket URL otherwise, or the local /uploads path in local mode.
        Absolute URLs stored by older clients are returned unchanged.
        """
        if not key:
            return None
        if key.startswith("http://") or key.startswith("https://"):
            return key
        if settings.CLOUDFRONT_DOMAIN:
            return f"https://{settings.CLOUDFRONT_DOMAIN.rstrip('/')}/{key}"
        if self.is_local:
            return f"/uploads/{key}"
        return f"https://{settings.AWS_S3_BUCKET}.s3.{settings.AWS_S3_REGION}.amazonaws.com/{key}"

    def upload(self, data: bytes, filename: str, content_type: str | None = None, folder: str = "profile-images") -> str:
        """파일을 저장하고 객체 키를 반환합니다.

        Store bytes under a generated key and return the key.
        """
        key = self._generate_key(filename, folder)

        if self.is_local:
            self.save_local(key, data)
            return key

        ext = key.rsplit(".", 1)[-1]
        self.client.put_object(
            Bucket=settings.AWS_S3_BUCKET,
            Key=key,
            Body=data,
            ContentType=content_type or IMAGE_CONTENT_TYPES.get(ext, "application/octet-stream"),
        )
        return key

    def save_local(self, key: str, data: bytes) -> str:
        """로컬 파일 저장. 경로를 반환합니다."""
        path = UPLOADS_DIR / key
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return str(path)

    def delete(self, key: str | None) -> bool:
        """저장된 객체를 삭제합니다. 실패는 로그만 남깁니다.

        Delete a stored object. Failures are logged and reported as False
        so that deleting a user never fails on storage errors.
        """
        if not key or key.startswith("http://") or key.startswith("https://"):
            return False

        if self.is_local:
            path = UPLOADS_DIR / key
            try:
                path.unlink(missing_ok=True)
            except OSError:
                logger.exception("Failed to delete local file %s", key)
                return False
            return True

        try:
            self.client.delete_object(Bucket=settings.AWS_S3_BUCKET, Key=key)
        except (BotoCoreError, ClientError):
            logger.exception("Failed to delete S3 object %s", key)
            return False
        return True


storage_service: StorageService = StorageService()
