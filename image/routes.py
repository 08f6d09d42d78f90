"""Reference gallery routes."""
from fastapi import APIRouter

from image.references import REFERENCE_IMAGES, REFERENCE_ALT
from sessions.models import ReferenceImage, ReferenceListResponse

router = APIRouter(tags=["image"])


@router.get("/api/references", response_model=ReferenceListResponse)
def list_references():
    """List the preset style images in gallery order."""
    refs = [ReferenceImage(url=url, alt=REFERENCE_ALT) for url in REFERENCE_IMAGES]
    return ReferenceListResponse(references=refs, count=len(refs))
