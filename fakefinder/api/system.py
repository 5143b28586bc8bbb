"""
System / health routes.
"""

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from fakefinder.core.dependencies import coordinator
from fakefinder.integrations import firebase as firebase_module
from fakefinder.integrations import redis_client as redis_module

router = APIRouter(tags=["System"])


@router.get("/health")
async def health():
    return {
        "status": "healthy",
        "history_store": "firestore" if firebase_module.db else "unavailable",
        "model_store": "redis" if redis_module.client else "memory",
        "submissions": len(coordinator.submissions),
    }


@router.get("/robots.txt", response_class=PlainTextResponse)
def robots():
    return "User-agent: *\nDisallow: /"
