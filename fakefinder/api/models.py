"""
Model management routes.

Reading model state is public. Training, testing, pretrained download and
reset require the X-Admin-Key header (see core/auth.require_admin).
"""

import asyncio
import logging
from typing import Dict

from fastapi import APIRouter, Depends, HTTPException

from fakefinder.core.auth import require_admin
from fakefinder.core.dependencies import score_provider
from fakefinder.schemas.detection import ContentType
from fakefinder.schemas.models import (
    ModelState,
    ModelTestReport,
    ModelTestRequest,
    TrainingReport,
    TrainRequest,
)
from fakefinder.services import model_store
from fakefinder.services.model_store import ModelBusyError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/models", tags=["Models"])


def _busy(content_type: ContentType) -> HTTPException:
    return HTTPException(
        status_code=409,
        detail=f"The {content_type.value} model is busy with another operation."
    )


@router.get("", response_model=Dict[ContentType, ModelState])
async def list_models():
    return await asyncio.to_thread(model_store.get_all_model_states)


@router.get("/{content_type}", response_model=ModelState)
async def get_model(content_type: ContentType):
    return await asyncio.to_thread(model_store.get_model_state, content_type)


@router.get("/{content_type}/datasets")
async def list_datasets(content_type: ContentType):
    return {
        "content_type": content_type,
        "datasets": model_store.get_available_datasets(content_type),
    }


@router.post("/{content_type}/train", response_model=TrainingReport, dependencies=[Depends(require_admin)])
async def train(content_type: ContentType, payload: TrainRequest):
    try:
        return await model_store.train_model(content_type, payload.dataset, payload.epochs, score_provider)
    except ModelBusyError:
        raise _busy(content_type)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/{content_type}/test", response_model=ModelTestReport, dependencies=[Depends(require_admin)])
async def evaluate(content_type: ContentType, payload: ModelTestRequest):
    try:
        return await model_store.test_model(
            content_type, payload.dataset, score_provider, samples=payload.samples
        )
    except ModelBusyError:
        raise _busy(content_type)


@router.post("/{content_type}/download", response_model=ModelState, dependencies=[Depends(require_admin)])
async def download_pretrained(content_type: ContentType):
    try:
        return await model_store.download_pretrained_model(content_type)
    except ModelBusyError:
        raise _busy(content_type)


@router.post("/{content_type}/reset", response_model=ModelState, dependencies=[Depends(require_admin)])
async def reset(content_type: ContentType):
    try:
        return await asyncio.to_thread(model_store.reset_model, content_type)
    except ModelBusyError:
        raise _busy(content_type)
