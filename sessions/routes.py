"""Fusion session API routes."""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, UploadFile, File, Path, Response

from config import Config
from common.error_messages import ErrorCode, FusionError, get_error_response, format_error_detail
from database.db import db
from image.client import AIService, get_ai_service
from sessions.models import (
    SessionState,
    ReferenceSelectRequest,
    GenerateRequest,
    GenerateResponse
)
from sessions.services import (
    get_session,
    build_session_state,
    set_subject_image,
    remove_subject_image,
    toggle_reference,
    clear_reference,
    submit_generation,
    get_result_image,
    download_url_for
)
from utils.logger import get_logger

logger = get_logger("sessions.routes")
router = APIRouter(prefix="/api/sessions", tags=["sessions"])


def _http_error(e: FusionError) -> HTTPException:
    _, status_code = get_error_response(e.code)
    return HTTPException(status_code=status_code, detail=format_error_detail(e.code, e.detail))


@router.post("", response_model=SessionState, status_code=201)
def create_session(ai: AIService = Depends(get_ai_service)):
    """Start a new session with no subject, no style and no result."""
    session = db.create()
    return build_session_state(session, ai)


@router.get("/{session_id}", response_model=SessionState)
def read_session(session_id: str = Path(...), ai: AIService = Depends(get_ai_service)):
    try:
        return build_session_state(get_session(session_id), ai)
    except FusionError as e:
        raise _http_error(e)


@router.delete("/{session_id}")
def delete_session(session_id: str = Path(...)):
    try:
        db.delete(session_id)
    except KeyError:
        raise _http_error(FusionError(ErrorCode.SESSION_NOT_FOUND))
    return {"deleted": True, "id": session_id}


@router.post("/{session_id}/image", response_model=SessionState)
async def upload_subject_image(
    session_id: str = Path(...),
    file: UploadFile = File(...),
    ai: AIService = Depends(get_ai_service)
):
    """
    Upload the subject photo (multipart/form-data).

    Non-image files are rejected without touching the session.
    """
    # Oversized uploads are refused before the body is read into memory
    if file.size is not None and file.size > Config.MAX_UPLOAD_BYTES:
        raise _http_error(FusionError(ErrorCode.FILE_TOO_LARGE, f"limit is {Config.MAX_UPLOAD_BYTES} bytes"))

    try:
        image_data = await file.read()
    except Exception as e:
        logger.error(f"Failed to read uploaded file: {e}")
        raise HTTPException(status_code=400, detail="Failed to read uploaded file")

    try:
        session = set_subject_image(session_id, image_data, file.content_type, file.filename)
    except FusionError as e:
        raise _http_error(e)
    return build_session_state(session, ai)


@router.delete("/{session_id}/image", response_model=SessionState)
def delete_subject_image(session_id: str = Path(...), ai: AIService = Depends(get_ai_service)):
    try:
        return build_session_state(remove_subject_image(session_id), ai)
    except FusionError as e:
        raise _http_error(e)


@router.post("/{session_id}/reference", response_model=SessionState)
def select_reference(
    req: ReferenceSelectRequest,
    session_id: str = Path(...),
    ai: AIService = Depends(get_ai_service)
):
    """Select a gallery style image; selecting the current one again clears it."""
    try:
        return build_session_state(toggle_reference(session_id, req.url), ai)
    except FusionError as e:
        raise _http_error(e)


@router.delete("/{session_id}/reference", response_model=SessionState)
def delete_reference(session_id: str = Path(...), ai: AIService = Depends(get_ai_service)):
    try:
        return build_session_state(clear_reference(session_id), ai)
    except FusionError as e:
        raise _http_error(e)


@router.post("/{session_id}/generate", response_model=GenerateResponse)
def generate(
    req: Optional[GenerateRequest] = None,
    session_id: str = Path(...),
    ai: AIService = Depends(get_ai_service)
):
    """
    Fuse the subject image with the selected style and/or prompt.

    Accepts:
      { prompt?: "..." }

    Behavior:
      - 400 if there is no subject, or neither a style image nor a prompt
      - 409 while another generation for this session is running
      - 503 if the AI service could not be initialized
      - 502 when the service fails or returns no image (error kept on the session)
    """
    try:
        session = submit_generation(session_id, req.prompt if req else "", ai)
    except FusionError as e:
        raise _http_error(e)

    result = session.result_image
    return GenerateResponse(
        image=result.data_url(),
        mime_type=result.mime_type,
        download_url=download_url_for(session_id),
        session=build_session_state(session, ai)
    )


@router.get(
    "/{session_id}/download",
    response_class=Response,
    responses={200: {"content": {"image/png": {}}, "description": "The generated image."}}
)
def download_result(session_id: str = Path(...)):
    """Download the current result as fused-image.png."""
    try:
        image = get_result_image(session_id)
    except FusionError as e:
        raise _http_error(e)

    return Response(
        content=image.to_bytes(),
        media_type=image.mime_type,
        headers={"Content-Disposition": f'attachment; filename="{Config.DOWNLOAD_FILENAME}"'}
    )
