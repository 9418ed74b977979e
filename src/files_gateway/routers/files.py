import logging
import uuid

from fastapi import APIRouter, Depends, Path, Request, status
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import FormData, UploadFile
from starlette.formparsers import MultiPartException, MultiPartParser
from starlette.requests import ClientDisconnect

from files_gateway.adapters.storage import S3Storage
from files_gateway.config.settings import Settings
from files_gateway.dependencies import get_app_settings, get_storage
from files_gateway.errors import RequestMalformedError
from files_gateway.schemas import ErrorResponse, UploadResponse
from files_gateway.streams import CancellableStream, cancel_on_disconnect, relay_object

logger = logging.getLogger(__name__)

router = APIRouter()

UPLOAD_FIELD = "file"

ERROR_RESPONSES = {
    status.HTTP_500_INTERNAL_SERVER_ERROR: {
        "model": ErrorResponse,
        "description": "The storage backend failed, including when the key does not exist.",
    },
}


async def parse_multipart(request: Request, spool_max_size: int) -> FormData:
    """
    Parse a multipart body, spilling each file part to disk past `spool_max_size` bytes.

    The threshold bounds memory per part. It is not a size limit.
    """
    content_type = request.headers.get("content-type", "")
    if not content_type.lower().startswith("multipart/form-data"):
        raise RequestMalformedError("request body must be multipart/form-data")

    parser = MultiPartParser(request.headers, request.stream())
    parser.spool_max_size = spool_max_size
    try:
        return await parser.parse()
    except MultiPartException as e:
        raise RequestMalformedError(f"invalid multipart body: {e}") from e
    except KeyError as e:
        raise RequestMalformedError("invalid multipart body: missing boundary") from e
    except ClientDisconnect as e:
        raise RequestMalformedError("client disconnected before the upload was received") from e


def require_upload(form: FormData) -> UploadFile:
    """Return the first `file` part, which must be a file carrying its own Content-Type."""
    parts = form.getlist(UPLOAD_FIELD)
    if not parts:
        raise RequestMalformedError(f"multipart field '{UPLOAD_FIELD}' is required")

    upload = parts[0]
    if not isinstance(upload, UploadFile):
        raise RequestMalformedError(f"multipart field '{UPLOAD_FIELD}' must be a file")
    if not (upload.content_type or "").strip():
        raise RequestMalformedError(f"multipart field '{UPLOAD_FIELD}' has no Content-Type header")
    return upload


@router.post(
    "/upload",
    response_model=UploadResponse,
    responses={
        status.HTTP_400_BAD_REQUEST: {
            "model": ErrorResponse,
            "description": "Not multipart, no `file` part, or the part has no Content-Type.",
        },
        **ERROR_RESPONSES,
    },
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {
                "multipart/form-data": {
                    "schema": {
                        "type": "object",
                        "required": [UPLOAD_FIELD],
                        "properties": {UPLOAD_FIELD: {"type": "string", "format": "binary"}},
                    }
                }
            },
        }
    },
)
async def upload_file(
    request: Request,
    settings: Settings = Depends(get_app_settings),
    storage: S3Storage = Depends(get_storage),
) -> UploadResponse:
    """
    Store the uploaded `file` part under a newly generated key.

    The part's Content-Type is recorded verbatim on the object. Two uploads of
    the same bytes get two different keys.
    """
    form = await parse_multipart(request, settings.max_multipart_memory)
    try:
        upload = require_upload(form)
        key = str(uuid.uuid4())
        await upload.seek(0)

        async with cancel_on_disconnect(request, settings.disconnect_poll_interval) as cancelled:
            await run_in_threadpool(
                storage.put,
                key,
                CancellableStream(upload.file, cancelled),
                upload.content_type,
                upload.size,
            )
    finally:
        await form.close()

    logger.info("Stored '%s' (%s bytes) as '%s'", upload.filename, upload.size, key)
    return UploadResponse(key=key)


@router.get(
    "/download/{key}",
    responses={
        status.HTTP_200_OK: {
            "description": "The object's bytes with the Content-Type recorded at upload.",
            "content": {"application/octet-stream": {"schema": {"type": "string", "format": "binary"}}},
        },
        **ERROR_RESPONSES,
    },
)
async def download_file(
    key: str = Path(..., description="Key returned by `POST /upload`"),
    settings: Settings = Depends(get_app_settings),
    storage: S3Storage = Depends(get_storage),
) -> StreamingResponse:
    """Stream an object back as it is read from the backend."""
    logger.info("Downloading %s", key)
    stored = await run_in_threadpool(storage.get, key)

    # Content-Type goes in as a raw header so Starlette does not append a charset.
    return StreamingResponse(
        relay_object(stored, settings.download_chunk_size),
        headers={
            "Content-Type": stored.content_type,
            "Content-Length": str(stored.content_length),
        },
        background=BackgroundTask(stored.close),
    )
