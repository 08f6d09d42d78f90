"""Pydantic models for fusion sessions."""
from datetime import datetime, timezone
from typing import Optional, List
from uuid import uuid4

from pydantic import BaseModel, Field

from common.models import EncodedImage


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class FusionSession(BaseModel):
    """Per-user working state: the chosen subject, the chosen style and the last outcome."""
    id: str = Field(default_factory=lambda: str(uuid4()))
    created_at: str = Field(default_factory=_now_iso)
    subject_image: Optional[EncodedImage] = None
    subject_filename: Optional[str] = None
    selected_reference: Optional[str] = Field(None, description="URL of the selected gallery image")
    busy: bool = False
    result_image: Optional[EncodedImage] = None
    error: Optional[str] = None


class SessionState(BaseModel):
    """Session as seen by the client, including derived control state."""
    id: str
    created_at: str
    has_subject_image: bool
    subject_filename: Optional[str] = None
    subject_preview: Optional[str] = Field(None, description="Data URL of the uploaded subject")
    selected_reference: Optional[str] = None
    busy: bool = False
    generate_enabled: bool = Field(False, description="Whether the generate control is active")
    prompt_enabled: bool = Field(True, description="Whether the prompt input is active")
    result_available: bool = False
    download_url: Optional[str] = None
    error: Optional[str] = None
    service_error: Optional[str] = Field(None, description="Set when the AI service could not be initialized")


class ReferenceSelectRequest(BaseModel):
    url: str = Field(..., min_length=1, description="Gallery URL to toggle")


class GenerateRequest(BaseModel):
    prompt: str = Field("", description="Optional free-text instruction")


class GenerateResponse(BaseModel):
    image: str = Field(..., description="Data URL of the generated image")
    mime_type: str
    download_url: str
    session: SessionState


class ReferenceImage(BaseModel):
    url: str
    alt: str = "Reference Style"


class ReferenceListResponse(BaseModel):
    references: List[ReferenceImage]
    count: int
