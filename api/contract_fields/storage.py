import io
import logging

from minio import Minio

from .config import MINIO_ENDPOINT, MINIO_ACCESS_KEY, MINIO_SECRET_KEY, MINIO_BUCKET

logger = logging.getLogger(__name__)

_client = Minio(
    MINIO_ENDPOINT,
    access_key=MINIO_ACCESS_KEY,
    secret_key=MINIO_SECRET_KEY,
    secure=False
)
_bucket_ready = False


def document_key(contract_id: int, document_id: int, filename: str) -> str:
    return f"contracts/{contract_id}/documents/{document_id}-{filename}"


def ensure_bucket():
    global _bucket_ready
    if _bucket_ready:
        return
    if not _client.bucket_exists(MINIO_BUCKET):
        logger.info("creating bucket %s", MINIO_BUCKET)
        _client.make_bucket(MINIO_BUCKET)
    _bucket_ready = True


def put_bytes(key: str, data: bytes, content_type: str = "application/pdf"):
    ensure_bucket()
    _client.put_object(MINIO_BUCKET, key, io.BytesIO(data), length=len(data), content_type=content_type)


def get_bytes(key: str) -> bytes:
    """Whole object at ``key``; raises minio's S3Error when it is missing."""
    resp = _client.get_object(MINIO_BUCKET, key)
    try:
        return resp.read()
    finally:
        resp.close()
        resp.release_conn()
