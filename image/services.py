"""Image fusion services - request assembly and Gemini integration."""
from typing import Any, Callable, List, Optional

from google.genai import types

from config import Config
from common.models import EncodedImage, TextPart, GenerationRequest
from image.references import fetch_reference_image
from utils.logger import get_logger

logger = get_logger("image.services")

RESPONSE_MODALITIES = ["IMAGE", "TEXT"]


def build_generation_request(
    subject: EncodedImage,
    prompt: str = "",
    reference_url: Optional[str] = None,
    fetch_reference: Callable[[str], EncodedImage] = fetch_reference_image,
) -> GenerationRequest:
    """
    Assemble the ordered parts for one submission.

    Order is subject image, reference image (if one is selected), then text.
    When a reference is selected and no prompt was typed, the default style
    instruction is used as the text.

    Args:
        subject: The uploaded subject image
        prompt: Free-text instruction, may be blank
        reference_url: Selected gallery URL, if any
        fetch_reference: Callable turning the URL into an EncodedImage

    Raises:
        ValueError: when there is neither a reference nor a prompt
        RuntimeError: when the reference image cannot be fetched
    """
    prompt_text = (prompt or "").strip()
    parts: List = [subject]

    if reference_url:
        parts.append(fetch_reference(reference_url))
        if not prompt_text:
            prompt_text = Config.DEFAULT_STYLE_PROMPT

    if not prompt_text:
        raise ValueError("a prompt is required when no reference image is selected")

    parts.append(TextPart(text=prompt_text))
    return GenerationRequest(parts=parts)


def to_gemini_parts(request: GenerationRequest) -> List[types.Part]:
    """Convert request parts to Gemini Part objects, decoding base64 to raw bytes."""
    gemini_parts = []
    for part in request.parts:
        if isinstance(part, EncodedImage):
            gemini_parts.append(types.Part(
                inline_data=types.Blob(
                    mime_type=part.mime_type,
                    data=part.to_bytes()
                )
            ))
        else:
            gemini_parts.append(types.Part.from_text(text=part.text))
    return gemini_parts


def extract_first_image(response: Any) -> Optional[EncodedImage]:
    """
    Return the first inline image of the first candidate, or None.

    Later candidates and any further image parts are ignored.
    """
    candidates = getattr(response, "candidates", None)
    if not candidates:
        logger.debug("Response has no candidates")
        return None

    content = getattr(candidates[0], "content", None)
    parts = getattr(content, "parts", None) or []
    for part in parts:
        inline = getattr(part, "inline_data", None)
        if inline and getattr(inline, "data", None):
            data = inline.data
            mime_type = getattr(inline, "mime_type", None) or "image/png"
            if isinstance(data, str):
                return EncodedImage(data=data, mime_type=mime_type)
            return EncodedImage.from_bytes(data, mime_type)
    return None


def call_gemini_generate(client: Any, request: GenerationRequest) -> Optional[EncodedImage]:
    """
    Send one generation request and return the produced image, if any.

    Args:
        client: A google-genai Client
        request: Assembled parts

    Returns:
        The first generated image, or None when the service returned no image

    Raises:
        RuntimeError: on any service or transport failure
    """
    model = Config.GEMINI_MODEL
    contents = [types.Content(role="user", parts=to_gemini_parts(request))]
    config = types.GenerateContentConfig(response_modalities=RESPONSE_MODALITIES)

    logger.info(f"Calling Gemini model {model} with parts: [{request.describe()}]")
    try:
        response = client.models.generate_content(model=model, contents=contents, config=config)
    except Exception as e:
        logger.error(f"Gemini request failed: {e}")
        raise RuntimeError(str(e) or "An unknown error occurred.")

    image = extract_first_image(response)
    if image is None:
        logger.warning("Gemini response contained no image part")
    else:
        logger.info(f"Gemini returned an image ({image.mime_type}, {len(image.data)} base64 chars)")
    return image
