"""
Storage adapter over a path-style, S3-compatible endpoint.

Two operations only: `get` opens a read stream on an object and `put`
streams a file-like body into one. Both use the single configured bucket.
The adapter holds nothing but an immutable client and bucket name, so one
instance is shared by every request.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, BinaryIO, Iterator, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from files_gateway.config.settings import Settings
from files_gateway.errors import StorageError
from files_gateway.utils.decorators import log_execution_time

if TYPE_CHECKING:
    from botocore.response import StreamingBody
    from mypy_boto3_s3 import S3Client

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class StoredObject:
    """An open read stream on a stored object plus the metadata recorded at write time."""

    body: "StreamingBody"
    content_type: str
    content_length: int

    def iter_chunks(self, chunk_size: int) -> Iterator[bytes]:
        """Yield the object's bytes as they arrive from the backend."""
        return self.body.iter_chunks(chunk_size=chunk_size)

    def close(self) -> None:
        """Release the backend connection, aborting the read if it is unfinished."""
        self.body.close()


def create_s3_client(settings: Settings) -> "S3Client":
    """
    Build an S3 client with static credentials pointed at the configured endpoint.

    Path-style addressing keeps the bucket in the URL path, which local and
    self-hosted backends expect. Every call gets connect and read deadlines
    and a single attempt: failures are reported, not retried.
    """
    session = boto3.session.Session(
        aws_access_key_id=settings.aws_access_key_id,
        aws_secret_access_key=settings.aws_secret_access_key,
        region_name=settings.aws_region,
    )
    return session.client(
        "s3",
        endpoint_url=settings.aws_endpoint_url,
        config=Config(
            s3={"addressing_style": "path"},
            connect_timeout=settings.storage_connect_timeout,
            read_timeout=settings.storage_read_timeout,
            retries={"total_max_attempts": 1},
        ),
    )


def _to_storage_error(e: Exception, key: str) -> StorageError:
    # the HTTP layer wraps errors raised while reading the request body
    cause = getattr(e, "kwargs", {}).get("error")
    if isinstance(cause, StorageError):
        return cause
    if isinstance(e, ClientError):
        code = e.response.get("Error", {}).get("Code")
    else:
        code = type(e).__name__
    return StorageError(str(e), key=key, code=code)


class S3Storage:
    """Get/put capability over one bucket of an S3-compatible backend."""

    def __init__(self, client: "S3Client", bucket_name: str):
        self.client = client
        self.bucket_name = bucket_name

    @classmethod
    def from_settings(cls, settings: Settings) -> "S3Storage":
        logger.info(
            "Using bucket '%s' at %s (region %s)",
            settings.s3_bucket_name,
            settings.aws_endpoint_url,
            settings.aws_region,
        )
        return cls(client=create_s3_client(settings), bucket_name=settings.s3_bucket_name)

    @log_execution_time(logger_name=__name__)
    def get(self, key: str) -> StoredObject:
        """
        Open a read stream on an object.

        :param key: The object's key. Must be non-empty.
        :return: The unread body with the object's content type and length.
            The caller must `close()` it.
        :raises StorageError: If the backend reports any failure, including
            a missing key.
        """
        if not key:
            raise ValueError("key must not be empty")

        logger.info("Fetching '%s' from bucket '%s'", key, self.bucket_name)
        try:
            response = self.client.get_object(Bucket=self.bucket_name, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise _to_storage_error(e, key) from e

        return StoredObject(
            body=response["Body"],
            content_type=response.get("ContentType") or DEFAULT_CONTENT_TYPE,
            content_length=int(response["ContentLength"]),
        )

    @log_execution_time(logger_name=__name__)
    def put(self, key: str, body: BinaryIO, content_type: str, content_length: Optional[int] = None) -> None:
        """
        Stream a file-like body into an object.

        :param key: The object's key. Must be non-empty.
        :param body: A readable, seekable file-like object. It is read in
            pieces by the transport, never loaded whole.
        :param content_type: The MIME type recorded on the object and
            returned verbatim by every later `get`. Must be non-empty.
        :param content_length: Size of the body in bytes, if already known.
        :raises StorageError: If the backend reports any failure.
        """
        if not key:
            raise ValueError("key must not be empty")
        if not content_type:
            raise ValueError("content_type must not be empty")

        logger.info("Uploading '%s' (%s) to bucket '%s'", key, content_type, self.bucket_name)
        kwargs = {
            "Bucket": self.bucket_name,
            "Key": key,
            "Body": body,
            "ContentType": content_type,
        }
        if content_length is not None:
            kwargs["ContentLength"] = content_length
        try:
            self.client.put_object(**kwargs)
        except (ClientError, BotoCoreError) as e:
            raise _to_storage_error(e, key) from e
