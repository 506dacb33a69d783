"""Admin search over the blob index."""

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from miniblob.auth import CallerIdentity, require_admin
from miniblob.index import SearchIndex

from ..dependencies import get_search_index

router = APIRouter(tags=["search"])


@router.get("/_search")
async def search_blobs(
    q: str = "",
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=50, ge=1, le=500),
    caller: CallerIdentity = Depends(require_admin),
    index: SearchIndex = Depends(get_search_index),
) -> JSONResponse:
    result = await index.search(q, page=page, page_size=page_size)
    return JSONResponse(result.to_dict())
