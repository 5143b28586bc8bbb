"""
Per-user search history, stored in Firestore.

One document per user in the `search_history` collection:
    {"items": [SearchHistoryItem, ...newest first], "updated_at": SERVER_TIMESTAMP}

`record_detection` is called by the progress coordinator once per completed
submission and never raises. The read/delete helpers back the /history
routes and surface a missing database as HTTP 503.

Firebase is accessed at call-time via the integration module so tests and
the FastAPI lifespan can swap the client.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import HTTPException
from firebase_admin import firestore

from fakefinder.config import settings
from fakefinder.integrations import firebase as firebase_module
from fakefinder.schemas.detection import ContentDescriptor, ContentType, DetectionResult
from fakefinder.schemas.history import HistoryEntry, SearchHistoryItem

logger = logging.getLogger(__name__)

COLLECTION = "search_history"


def _get_db():
    db = firebase_module.db
    if not db:
        raise HTTPException(status_code=503, detail="Database service unavailable.")
    return db


def text_snippet(text: str) -> str:
    limit = settings.text_snippet_length
    if len(text) > limit:
        return text[:limit] + "..."
    return text


def build_history_entry(descriptor: ContentDescriptor, result: DetectionResult) -> HistoryEntry:
    if descriptor.content_type == ContentType.TEXT:
        return HistoryEntry(
            type=descriptor.content_type,
            text_snippet=text_snippet(descriptor.text or ""),
            result=result.is_manipulated,
            confidence_score=result.confidence_score,
        )
    return HistoryEntry(
        type=descriptor.content_type,
        filename=descriptor.filename,
        result=result.is_manipulated,
        confidence_score=result.confidence_score,
    )


def _load_items(db, user_id: str) -> List[dict]:
    doc = db.collection(COLLECTION).document(user_id).get()
    if not doc.exists:
        return []
    return list(doc.to_dict().get("items") or [])


def _save_items(db, user_id: str, items: List[dict]) -> None:
    db.collection(COLLECTION).document(user_id).set({
        "items": items,
        "updated_at": firestore.SERVER_TIMESTAMP,
    })


def record_detection(user_id: Optional[str], entry: HistoryEntry) -> bool:
    """
    Prepend one finished detection to the user's history.

    Returns False (and logs) on any failure; a history write never affects
    the verdict already returned to the caller.
    """
    if not user_id:
        logger.debug("[HISTORY] Anonymous submission, nothing recorded")
        return False

    db = firebase_module.db
    if not db:
        logger.warning("[HISTORY] Firestore unavailable, detection not recorded")
        return False

    item = SearchHistoryItem(
        id=uuid.uuid4().hex[:12],
        date=datetime.now(timezone.utc).isoformat(),
        **entry.model_dump(),
    )

    try:
        items = _load_items(db, user_id)
        items.insert(0, item.model_dump(mode="json"))
        _save_items(db, user_id, items[:settings.history_max_items])
        logger.info(f"[HISTORY] Recorded {entry.type.value} detection for {user_id}")
        return True
    except Exception as e:
        logger.error(f"[HISTORY] Failed to record detection for {user_id}: {e}")
        return False


def get_history(user_id: str) -> List[SearchHistoryItem]:
    db = _get_db()
    return [SearchHistoryItem(**item) for item in _load_items(db, user_id)]


def delete_history_item(user_id: str, item_id: str) -> None:
    db = _get_db()
    items = _load_items(db, user_id)
    remaining = [item for item in items if item.get("id") != item_id]
    if len(remaining) == len(items):
        raise HTTPException(status_code=404, detail="History item not found.")
    _save_items(db, user_id, remaining)
    logger.info(f"[HISTORY] Deleted item {item_id} for {user_id}")


def clear_history(user_id: str) -> int:
    """Remove every history item for the user. Returns how many were removed."""
    db = _get_db()
    items = _load_items(db, user_id)
    _save_items(db, user_id, [])
    logger.info(f"[HISTORY] Cleared {len(items)} items for {user_id}")
    return len(items)
