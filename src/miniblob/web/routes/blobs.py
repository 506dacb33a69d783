"""Blob routes: PUT, GET and HEAD on /{container}/{blob_path}."""

from email.utils import format_datetime
from typing import Dict, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response, StreamingResponse

from miniblob.auth import CallerIdentity, get_caller
from miniblob.orchestrator import BlobRequestOrchestrator
from miniblob.storage import BlobMetadata, BlobRecord

from ..dependencies import get_orchestrator

CACHE_CONTROL = "public, max-age=3600"
CONTENT_TYPE = "application/octet-stream"

router = APIRouter(tags=["blobs"])


def _content_disposition(filename: str) -> str:
    quoted = quote(filename)
    if quoted != filename:
        return f"attachment; filename*=utf-8''{quoted}"
    return f'attachment; filename="{filename}"'


def _header_value(value: str) -> str:
    # HTTP header values must be latin-1; anything else goes out percent-encoded
    try:
        value.encode("latin-1")
    except UnicodeEncodeError:
        return quote(value, safe="")
    return value


def blob_headers(record: BlobRecord, include_disposition: bool) -> Dict[str, str]:
    headers = {
        "ETag": f'"{record.etag}"',
        "Last-Modified": format_datetime(record.last_modified, usegmt=True),
        "Content-Length": str(record.size),
        "Content-Type": CONTENT_TYPE,
        "Cache-Control": CACHE_CONTROL,
    }
    if include_disposition:
        headers["Content-Disposition"] = _content_disposition(record.file_name)
    headers.update({k: _header_value(v) for k, v in record.metadata.to_headers().items()})
    return headers


def _location(request: Request, container: str, blob_path: str) -> str:
    base = str(request.base_url).rstrip("/")
    return f"{base}/{quote(container)}/{quote(blob_path)}"


@router.put("/{container}/{blob_path:path}")
async def put_blob(
    container: str,
    blob_path: str,
    request: Request,
    comp: Optional[str] = None,
    caller: CallerIdentity = Depends(get_caller),
    orchestrator: BlobRequestOrchestrator = Depends(get_orchestrator),
) -> Response:
    """Upload a blob, or merge its metadata with ``?comp=metadata``."""
    metadata = BlobMetadata.from_headers(request.headers.items())

    if comp is not None and comp.lower() == "metadata":
        await orchestrator.put_metadata(container, blob_path, caller, metadata)
        return Response(status_code=200)

    result = await orchestrator.put(container, blob_path, caller, request.stream(), metadata)
    return Response(
        status_code=201,
        headers={
            "Location": _location(request, container, blob_path),
            "ETag": f'"{result.record.etag}"',
            "Last-Modified": format_datetime(result.record.last_modified, usegmt=True),
        },
    )


@router.get("/{container}/{blob_path:path}")
async def get_blob(
    container: str,
    blob_path: str,
    caller: CallerIdentity = Depends(get_caller),
    orchestrator: BlobRequestOrchestrator = Depends(get_orchestrator),
) -> StreamingResponse:
    record = await orchestrator.get(container, blob_path, caller)
    return StreamingResponse(
        record.iter_content(),
        media_type=CONTENT_TYPE,
        headers=blob_headers(record, include_disposition=True),
    )


@router.head("/{container}/{blob_path:path}")
async def head_blob(
    container: str,
    blob_path: str,
    caller: CallerIdentity = Depends(get_caller),
    orchestrator: BlobRequestOrchestrator = Depends(get_orchestrator),
) -> Response:
    record = await orchestrator.head(container, blob_path, caller)
    return Response(status_code=200, headers=blob_headers(record, include_disposition=False))
