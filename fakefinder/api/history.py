"""
Search history routes, scoped to the caller's X-User-ID.
"""

import asyncio
from typing import List

from fastapi import APIRouter, Header

from fakefinder.core.auth import validate_user_id
from fakefinder.schemas.history import SearchHistoryItem
from fakefinder.services import history_service

router = APIRouter(prefix="/history", tags=["History"])


@router.get("", response_model=List[SearchHistoryItem])
async def list_history(user_id: str = Header(..., alias="X-User-ID")):
    validate_user_id(user_id)
    return await asyncio.to_thread(history_service.get_history, user_id)


@router.delete("/{item_id}")
async def delete_item(item_id: str, user_id: str = Header(..., alias="X-User-ID")):
    validate_user_id(user_id)
    await asyncio.to_thread(history_service.delete_history_item, user_id, item_id)
    return {"deleted": item_id}


@router.delete("")
async def clear(user_id: str = Header(..., alias="X-User-ID")):
    validate_user_id(user_id)
    removed = await asyncio.to_thread(history_service.clear_history, user_id)
    return {"cleared": removed}
