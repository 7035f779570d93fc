from __future__ import annotations
import io
from functools import lru_cache
from minio import Minio
from minio.error import S3Error
from urllib3.exceptions import HTTPError as Urllib3HTTPError
import structlog
from showdown.config import settings
from showdown.errors import StorageUnavailable

log = structlog.get_logger()

def _parse_endpoint(ep: str) -> tuple[str, bool]:
    # Return (host:port, secure)
    secure = ep.startswith("https://")
    host = ep.replace("http://", "").replace("https://", "")
    return host, secure

@lru_cache(maxsize=1)
def _client() -> Minio:
    host, secure = _parse_endpoint(settings.s3_endpoint)
    client = Minio(host, access_key=settings.s3_access_key, secret_key=settings.s3_secret_key, secure=secure)
    try:
        if not client.bucket_exists(settings.s3_bucket_uploads):
            client.make_bucket(settings.s3_bucket_uploads)
    except S3Error as e:
        # concurrent workers may race on creation
        if e.code not in ("BucketAlreadyOwnedByYou", "BucketAlreadyExists"):
            raise
    return client

def public_url(key: str) -> str:
    return f"{settings.s3_public_base_url.rstrip('/')}/{key}"

def put_bytes(key: str, data: bytes, content_type: str) -> str:
    """Store an artifact and return its public URL."""
    try:
        _client().put_object(
            settings.s3_bucket_uploads, key, io.BytesIO(data), length=len(data), content_type=content_type
        )
    except (S3Error, Urllib3HTTPError) as e:
        log.error("storage_put_failed", key=key, error=str(e))
        raise StorageUnavailable("Artifact storage unavailable, please retry") from e
    return public_url(key)

def delete_object(key: str) -> None:
    try:
        _client().remove_object(settings.s3_bucket_uploads, key)
    except (S3Error, Urllib3HTTPError) as e:
        log.warning("storage_delete_failed", key=key, error=str(e))
