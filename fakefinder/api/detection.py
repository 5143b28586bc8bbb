"""
Detection routes.

  POST   /detect/{content_type}          run a submission and wait for the verdict
  POST   /submissions/{content_type}     start a submission in the background (202)
  GET    /submissions/{submission_id}    poll status, progress and per-method state
  DELETE /submissions/{submission_id}    cancel a submission
  GET    /catalog/{content_type}         the detection methods for a content type

Media submissions are multipart/form-data with a 'file' field. Text
submissions are JSON: { "text": "..." }. The optional X-User-ID header
scopes rate limiting and the search history record.
"""

import asyncio
import logging
from typing import List, Optional

from fastapi import APIRouter, Header, HTTPException, Request
from pydantic import ValidationError
from starlette.datastructures import UploadFile

from fakefinder.core.auth import get_client_ip, validate_user_id
from fakefinder.core.dependencies import coordinator
from fakefinder.core.file_validator import validate_upload
from fakefinder.core.rate_limiter import check_rate_limit
from fakefinder.detection.catalog import get_catalog
from fakefinder.detection.errors import SubmissionNotFound
from fakefinder.schemas.detection import (
    ContentDescriptor,
    ContentType,
    DetectionMethod,
    DetectionResponse,
    SubmissionView,
    TextSubmission,
)
from fakefinder.services.detection_service import build_media_descriptor, build_text_descriptor
from fakefinder.services.model_store import get_model_state

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Detection"])


async def _read_submission(request: Request, content_type: ContentType) -> ContentDescriptor:
    if content_type == ContentType.TEXT:
        try:
            payload = await request.json()
            body = TextSubmission.model_validate(payload)
        except (ValueError, ValidationError):
            raise HTTPException(status_code=400, detail="Expected a JSON body: { \"text\": \"...\" }")
        return build_text_descriptor(body.text)

    form = await request.form()
    upload = form.get("file")
    if not isinstance(upload, UploadFile):
        raise HTTPException(status_code=400, detail="No file provided")

    content = await upload.read()
    validate_upload(content_type, upload.filename, len(content), content)
    return build_media_descriptor(content_type, upload.filename, content, upload.content_type)


def _check_caller(request: Request, user_id: Optional[str]) -> None:
    if user_id:
        validate_user_id(user_id)
    check_rate_limit(user_id or get_client_ip(request))


@router.post("/detect/{content_type}", response_model=DetectionResponse)
async def detect(
    content_type: ContentType,
    request: Request,
    user_id: Optional[str] = Header(None, alias="X-User-ID"),
):
    """Analyze one upload (or text) and return the verdict once every method has run."""
    _check_caller(request, user_id)
    descriptor = await _read_submission(request, content_type)

    model_state = await asyncio.to_thread(get_model_state, content_type)
    submission = coordinator.create(descriptor, user_id=user_id)

    try:
        result = await coordinator.run(submission, model_state)
    except Exception as e:
        logger.error(f"[DETECT] {submission.id} failed: {e}")
        raise HTTPException(status_code=500, detail="Analysis failed")

    if result is None:
        raise HTTPException(status_code=409, detail="Analysis was cancelled")

    return DetectionResponse(
        submission_id=submission.id,
        content_type=content_type,
        result=result,
        history_recorded=submission.history_recorded,
    )


@router.post("/submissions/{content_type}", response_model=SubmissionView, status_code=202)
async def start_submission(
    content_type: ContentType,
    request: Request,
    user_id: Optional[str] = Header(None, alias="X-User-ID"),
):
    _check_caller(request, user_id)
    descriptor = await _read_submission(request, content_type)

    model_state = await asyncio.to_thread(get_model_state, content_type)
    submission = coordinator.create(descriptor, user_id=user_id)
    coordinator.start(submission, model_state)
    return submission.view()


@router.get("/submissions/{submission_id}", response_model=SubmissionView)
async def get_submission(submission_id: str):
    try:
        return coordinator.get(submission_id).view()
    except SubmissionNotFound:
        raise HTTPException(status_code=404, detail="Submission not found or expired.")


@router.delete("/submissions/{submission_id}", response_model=SubmissionView)
async def cancel_submission(submission_id: str):
    try:
        return coordinator.cancel(submission_id).view()
    except SubmissionNotFound:
        raise HTTPException(status_code=404, detail="Submission not found or expired.")


@router.get("/catalog/{content_type}", response_model=List[DetectionMethod])
async def catalog(content_type: ContentType):
    return get_catalog(content_type)
