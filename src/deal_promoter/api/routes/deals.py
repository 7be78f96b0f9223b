"""POST /put/{cid} — fetch, commp and negotiate a storage deal for a CID."""

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from deal_promoter.pipeline.pipeline import DealPipeline

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post("/put/{cid}")
async def put_cid(cid: str, request: Request):
    """Run the deal pipeline for `cid` and return the accepted deal."""
    pipeline: DealPipeline = request.app.state.pipeline

    log = logger.bind(cid=cid)
    log.info("put.received")

    result = await pipeline.process_cid(cid)
    if not result.success:
        return JSONResponse(status_code=500, content=result.to_dict())

    log.info("put.complete", deal_uuid=result.deal.deal_uuid)
    return result.deal.model_dump()
