"""Session services - subject upload, style selection and the generate flow."""
from typing import Optional

from config import Config
from common.error_messages import ErrorCode, FusionError, ERROR_MESSAGES
from common.models import EncodedImage
from database.db import db
from image import references
from image.client import AIService
from image.services import build_generation_request, call_gemini_generate
from sessions.models import FusionSession, SessionState
from utils.logger import get_logger

logger = get_logger("sessions.services")


def get_session(session_id: str) -> FusionSession:
    """Get a session or raise FusionError(SESSION_NOT_FOUND)."""
    session = db.get(session_id)
    if session is None:
        raise FusionError(ErrorCode.SESSION_NOT_FOUND)
    return session


def _update(session_id: str, patch: dict) -> FusionSession:
    try:
        return db.update(session_id, patch)
    except KeyError:
        raise FusionError(ErrorCode.SESSION_NOT_FOUND)


def download_url_for(session_id: str) -> str:
    return f"/api/sessions/{session_id}/download"


def build_session_state(session: FusionSession, ai: AIService) -> SessionState:
    """Derive the client view, including which controls are enabled."""
    has_subject = session.subject_image is not None
    return SessionState(
        id=session.id,
        created_at=session.created_at,
        has_subject_image=has_subject,
        subject_filename=session.subject_filename,
        subject_preview=session.subject_image.data_url() if has_subject else None,
        selected_reference=session.selected_reference,
        busy=session.busy,
        generate_enabled=ai.ready and has_subject and not session.busy,
        prompt_enabled=ai.ready,
        result_available=session.result_image is not None,
        download_url=download_url_for(session.id) if session.result_image is not None else None,
        error=session.error,
        service_error=ai.setup_error_message,
    )


def set_subject_image(session_id: str, raw: bytes, mime_type: Optional[str], filename: Optional[str] = None) -> FusionSession:
    """
    Validate and store an uploaded subject image, replacing any previous one.

    Raises:
        FusionError: INVALID_IMAGE_FILE, EMPTY_FILE, FILE_TOO_LARGE or SESSION_NOT_FOUND
    """
    get_session(session_id)
    if not mime_type or not mime_type.startswith("image/"):
        raise FusionError(ErrorCode.INVALID_IMAGE_FILE)
    if len(raw) == 0:
        raise FusionError(ErrorCode.EMPTY_FILE)
    if len(raw) > Config.MAX_UPLOAD_BYTES:
        raise FusionError(ErrorCode.FILE_TOO_LARGE, f"limit is {Config.MAX_UPLOAD_BYTES} bytes")

    subject = EncodedImage.from_bytes(raw, mime_type)
    session = _update(session_id, {"subject_image": subject, "subject_filename": filename})
    logger.info(f"Session {session_id}: subject image set ({mime_type}, {len(raw)} bytes)")
    return session


def remove_subject_image(session_id: str) -> FusionSession:
    session = _update(session_id, {"subject_image": None, "subject_filename": None})
    logger.info(f"Session {session_id}: subject image removed")
    return session


def toggle_reference(session_id: str, url: str) -> FusionSession:
    """
    Select a gallery image, or clear the selection if it is already selected.

    Raises:
        FusionError: REFERENCE_NOT_FOUND if the URL is not in the gallery
    """
    if not references.is_reference_image(url):
        raise FusionError(ErrorCode.REFERENCE_NOT_FOUND)
    session = get_session(session_id)
    selected = None if session.selected_reference == url else url
    session = _update(session_id, {"selected_reference": selected})
    logger.info(f"Session {session_id}: reference {'selected' if selected else 'cleared'}")
    return session


def clear_reference(session_id: str) -> FusionSession:
    return _update(session_id, {"selected_reference": None})


def validate_submission(session: FusionSession, prompt: str) -> None:
    """Raise FusionError if the session cannot be submitted with this prompt."""
    if session.subject_image is None:
        raise FusionError(ErrorCode.NO_SUBJECT_IMAGE)
    if not session.selected_reference and not (prompt or "").strip():
        raise FusionError(ErrorCode.NO_STYLE_SIGNAL)


def submit_generation(session_id: str, prompt: str, ai: AIService) -> FusionSession:
    """
    Run one generation for a session.

    Checks the service and the inputs before anything is sent, marks the
    session busy for the duration of the call and always clears it again.
    The outcome (result image or error text) is recorded on the session.

    Args:
        session_id: Session to generate for
        prompt: Free-text instruction, may be blank when a reference is selected
        ai: The AI service holder

    Returns:
        The session after a successful generation

    Raises:
        FusionError: for validation, busy, service and empty-result failures
    """
    session = get_session(session_id)

    if not ai.ready:
        raise FusionError(ErrorCode.AI_SERVICE_UNAVAILABLE)

    validate_submission(session, prompt)

    try:
        snapshot = db.begin_generation(session_id)
    except KeyError:
        raise FusionError(ErrorCode.SESSION_NOT_FOUND)
    if snapshot is None:
        raise FusionError(ErrorCode.GENERATION_IN_PROGRESS)

    outcome = {}
    try:
        # The subject may have been removed between the check above and entering busy
        validate_submission(snapshot, prompt)
        try:
            request = build_generation_request(
                snapshot.subject_image,
                prompt=prompt,
                reference_url=snapshot.selected_reference,
                fetch_reference=references.fetch_reference_image,
            )
        except RuntimeError as e:
            raise FusionError(ErrorCode.REFERENCE_FETCH_FAILED, str(e))

        try:
            image = call_gemini_generate(ai.client, request)
        except RuntimeError as e:
            raise FusionError(ErrorCode.GEMINI_API_ERROR, str(e))

        if image is None:
            raise FusionError(ErrorCode.NO_IMAGE_GENERATED)

        outcome = {"result_image": image, "error": None}
        logger.info(f"Session {session_id}: generation succeeded")
    except FusionError as e:
        outcome = {"result_image": None, "error": e.detail or ERROR_MESSAGES[e.code]}
        logger.error(f"Session {session_id}: generation failed [{e.code.value}]: {e}")
        raise
    except Exception as e:
        outcome = {"result_image": None, "error": str(e) or ERROR_MESSAGES[ErrorCode.UNKNOWN_ERROR]}
        logger.error(f"Session {session_id}: unexpected generation error: {e}", exc_info=True)
        raise FusionError(ErrorCode.UNKNOWN_ERROR, str(e) or None)
    finally:
        finished = db.finish_generation(session_id, outcome)

    if finished is None:
        raise FusionError(ErrorCode.SESSION_NOT_FOUND)
    return finished


def get_result_image(session_id: str) -> EncodedImage:
    session = get_session(session_id)
    if session.result_image is None:
        raise FusionError(ErrorCode.NO_RESULT_IMAGE)
    return session.result_image
