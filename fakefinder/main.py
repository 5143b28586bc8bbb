import os
import asyncio
import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv

# Load environment variables at the very beginning
load_dotenv()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

from fakefinder.api import detection, history, models, system
from fakefinder.config import settings
from fakefinder.core.dependencies import coordinator
from fakefinder.integrations import firebase, redis_client
from fakefinder.services import model_store

# Background cleanup task
cleanup_task = None


async def periodic_cleanup():
    """Background task that prunes finished submissions past their TTL."""
    while True:
        try:
            await asyncio.sleep(settings.cleanup_interval_sec)
            coordinator.cleanup_finished()
            logger.debug("[CLEANUP] Periodic cleanup completed")
        except asyncio.CancelledError:
            break
        except Exception as e:
            logger.error(f"[CLEANUP] Error in periodic cleanup: {e}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    global cleanup_task

    try:
        firebase.initialize()
    except Exception as e:
        # History routes answer 503 until Firestore is reachable
        logger.error(f"[STARTUP] Failed to initialize Firebase: {e}")
    redis_client.initialize()
    # No operation of this process can be running yet
    model_store.clear_stale_training_flags()

    if not os.getenv("TESTING"):
        cleanup_task = asyncio.create_task(periodic_cleanup())
        logger.info("[STARTUP] Background submission cleanup started")

    yield

    if cleanup_task:
        cleanup_task.cancel()
        try:
            await cleanup_task
        except asyncio.CancelledError:
            pass
        cleanup_task = None
    logger.info("[SHUTDOWN] Background cleanup task stopped")


app = FastAPI(title="FakeFinder Detection API", lifespan=lifespan)

# ---- CORS ----
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(system.router)
app.include_router(detection.router)
app.include_router(models.router)
app.include_router(history.router)
