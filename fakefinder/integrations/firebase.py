"""
Firebase integration: Firestore backs the per-user search history.

`db` starts as None. `initialize()` runs inside the FastAPI lifespan; when
it fails, history routes answer 503 and detections are simply not recorded.
Consumers read `firebase.db` at call time.
"""

import os
import json
import logging
import firebase_admin
from firebase_admin import credentials, firestore

logger = logging.getLogger(__name__)

db = None  # firestore.Client | None


def _load_credentials():
    """Service account JSON from FIREBASE_SERVICE_ACCOUNT, or None for ADC / emulator."""
    service_account_json = os.getenv("FIREBASE_SERVICE_ACCOUNT")
    if not service_account_json:
        return None
    try:
        return credentials.Certificate(json.loads(service_account_json))
    except Exception as e:
        logger.error(f"[STARTUP] Invalid FIREBASE_SERVICE_ACCOUNT, using default credentials: {e}")
        return None


def initialize() -> None:
    global db

    if not firebase_admin._apps:
        cred = _load_credentials()
        project_id = os.getenv("FIREBASE_PROJECT_ID")
        options = {"projectId": project_id} if project_id else None
        firebase_admin.initialize_app(cred, options)

    db = firestore.client()
    if os.getenv("FIRESTORE_EMULATOR_HOST"):
        logger.info(f"[STARTUP] Firestore emulator at {os.getenv('FIRESTORE_EMULATOR_HOST')}")
    logger.info("[STARTUP] Firebase initialized, search history enabled")
