"""
S3 helpers: client init, presigned PUT/GET URLs and direct uploads.

Credentials come from AWS_ACCESS_KEY_ID / AWS_SECRET_ACCESS_KEY when set,
otherwise from boto3's default chain (environment, profile, instance role).
Presigned URLs grant temporary access until they expire
(PRESIGNED_URL_EXPIRES, one day by default).

boto3 is synchronous; uploads run in a worker thread so the event loop is
not blocked.
"""
from functools import lru_cache
from typing import Optional

import boto3
import botocore.config
from botocore.exceptions import ClientError
from starlette.concurrency import run_in_threadpool

from core.config import settings
from utils.file_utils import content_disposition
from utils.logger import get_logger

logger = get_logger("backend.core.storage")


@lru_cache(maxsize=1)
def get_client():
    """S3 client configured for Signature V4. Created once per process."""
    return boto3.client(
        "s3",
        aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
        aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
        region_name=settings.AWS_REGION,
        config=botocore.config.Config(signature_version="s3v4"),
    )


def generate_presigned_put_url(bucket: str, key: str, content_type: str, s3_client=None) -> str:
    """URL the browser can PUT the object to directly."""
    s3_client = s3_client or get_client()
    return s3_client.generate_presigned_url(
        "put_object",
        Params={"Bucket": bucket, "Key": key, "ContentType": content_type},
        ExpiresIn=settings.PRESIGNED_URL_EXPIRES,
    )


def generate_presigned_get_url(bucket: str, key: str, s3_client=None) -> str:
    s3_client = s3_client or get_client()
    return s3_client.generate_presigned_url(
        "get_object",
        Params={"Bucket": bucket, "Key": key},
        ExpiresIn=settings.PRESIGNED_URL_EXPIRES,
    )


def _put_object(bucket: str, key: str, body: bytes, content_type: Optional[str], s3_client) -> None:
    params = {"Bucket": bucket, "Key": key, "Body": body}
    if content_type:
        params["ContentType"] = content_type
    s3_client.put_object(**params)


async def upload_file_to_s3(
    bucket: str,
    key: str,
    file: bytes,
    content_type: Optional[str] = None,
    s3_client=None,
) -> dict:
    """Upload bytes under key and describe where the object now lives."""
    s3_client = s3_client or get_client()
    try:
        await run_in_threadpool(_put_object, bucket, key, file, content_type, s3_client)
    except ClientError as caught:
        code = caught.response.get("Error", {}).get("Code")
        if code == "EntityTooLarge":
            logger.error(
                f"Error from S3 while uploading object to {bucket}. The object was too large. "
                "To upload objects larger than 5GB, use the multipart upload API."
            )
        else:
            logger.error(f"Error from S3 while uploading object to {bucket}. {code}: {caught}")
        raise

    url = f"https://{bucket}.s3.amazonaws.com/{key}"
    return {
        "url": url,
        "download_url": url,
        "pathname": f"/{key}",
        "content_type": content_type,
        "content_disposition": content_disposition(key),
    }
