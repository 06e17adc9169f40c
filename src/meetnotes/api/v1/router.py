"""API router aggregator."""

from fastapi import APIRouter

from meetnotes.api.v1.summaries import router as summaries_router

router = APIRouter(prefix="/api")
router.include_router(summaries_router)
