"""Generation payload models shared by the session and image modules."""
import base64
import binascii
from typing import List, Optional, Union

from pydantic import BaseModel, Field


class EncodedImage(BaseModel):
    """Image data in the transferable form used in requests: base64 text plus media type."""
    data: str = Field(..., description="Base64-encoded image data")
    mime_type: str = Field(..., description="Image MIME type (e.g., image/png, image/jpeg)")

    @classmethod
    def from_bytes(cls, raw: bytes, mime_type: str) -> "EncodedImage":
        return cls(data=base64.b64encode(raw).decode("ascii"), mime_type=mime_type)

    def to_bytes(self) -> bytes:
        try:
            return base64.b64decode(self.data, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValueError(f"Invalid base64 image data: {e}")

    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"


class TextPart(BaseModel):
    """Plain text instruction part."""
    text: str = Field(..., min_length=1)


Part = Union[EncodedImage, TextPart]


class GenerationRequest(BaseModel):
    """
    Ordered parts sent to the image service for one submission.

    The subject image is always first and the instruction text always last;
    a reference image, when present, sits between them.
    """
    parts: List[Part] = Field(default_factory=list)

    @property
    def text(self) -> Optional[str]:
        texts = [p.text for p in self.parts if isinstance(p, TextPart)]
        return texts[-1] if texts else None

    def describe(self) -> str:
        """Short summary for logs, without image bytes."""
        labels = []
        for p in self.parts:
            if isinstance(p, EncodedImage):
                labels.append(f"image({p.mime_type})")
            else:
                labels.append(f"text({len(p.text)} chars)")
        return ", ".join(labels)
