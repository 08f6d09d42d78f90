import base64

import httpx
import pytest
from google.genai import types

from config import Config
from common.models import EncodedImage, TextPart
from image.references import fetch_reference_image, REFERENCE_IMAGES, is_reference_image
from image.services import (
    build_generation_request,
    to_gemini_parts,
    extract_first_image,
    call_gemini_generate
)
from conftest import FakeGenaiClient, image_response, inline_image_part, make_png


SUBJECT = EncodedImage.from_bytes(make_png(), "image/png")
REFERENCE = EncodedImage.from_bytes(b"style", "image/jpeg")


def test_prompt_only_request_is_image_then_text():
    request = build_generation_request(SUBJECT, prompt="  make it a watercolor  ")
    assert len(request.parts) == 2
    assert request.parts[0] == SUBJECT
    assert request.parts[1] == TextPart(text="make it a watercolor")


def test_reference_and_prompt_request_has_three_ordered_parts():
    request = build_generation_request(
        SUBJECT, prompt="golden hour", reference_url=REFERENCE_IMAGES[0],
        fetch_reference=lambda url: REFERENCE
    )
    assert [type(p) for p in request.parts] == [EncodedImage, EncodedImage, TextPart]
    assert request.parts[0] == SUBJECT
    assert request.parts[1] == REFERENCE
    assert request.text == "golden hour"


def test_reference_without_prompt_uses_default_instruction():
    request = build_generation_request(
        SUBJECT, prompt="   ", reference_url=REFERENCE_IMAGES[2],
        fetch_reference=lambda url: REFERENCE
    )
    assert request.text == Config.DEFAULT_STYLE_PROMPT
    assert request.text.strip()


def test_no_reference_and_blank_prompt_is_rejected():
    with pytest.raises(ValueError):
        build_generation_request(SUBJECT, prompt="")


def test_reference_fetch_failure_propagates():
    def failing_fetch(url):
        raise RuntimeError("Failed to fetch reference image: boom")

    with pytest.raises(RuntimeError, match="boom"):
        build_generation_request(SUBJECT, reference_url=REFERENCE_IMAGES[0], fetch_reference=failing_fetch)


def test_gemini_parts_carry_raw_bytes():
    request = build_generation_request(SUBJECT, prompt="pixel art")
    parts = to_gemini_parts(request)
    assert parts[0].inline_data.mime_type == "image/png"
    assert parts[0].inline_data.data == base64.b64decode(SUBJECT.data)
    assert parts[1].text == "pixel art"


def test_extract_uses_first_image_of_first_candidate_only():
    response = types.GenerateContentResponse(candidates=[
        types.Candidate(content=types.Content(role="model", parts=[
            types.Part.from_text(text="caption"),
            inline_image_part(b"first", "image/jpeg"),
            inline_image_part(b"second"),
        ])),
        types.Candidate(content=types.Content(role="model", parts=[inline_image_part(b"other")])),
    ])
    image = extract_first_image(response)
    assert image.mime_type == "image/jpeg"
    assert image.to_bytes() == b"first"


def test_extract_returns_none_without_image_parts():
    assert extract_first_image(image_response(types.Part.from_text(text="sorry"))) is None
    assert extract_first_image(types.GenerateContentResponse(candidates=[])) is None
    assert extract_first_image(types.GenerateContentResponse()) is None


def test_call_requests_image_and_text_modalities():
    client = FakeGenaiClient(response=image_response(inline_image_part(b"out")))
    image = call_gemini_generate(client, build_generation_request(SUBJECT, prompt="clay"))

    assert image.to_bytes() == b"out"
    call = client.calls[0]
    assert call["model"] == Config.GEMINI_MODEL
    assert call["config"].response_modalities == ["IMAGE", "TEXT"]
    assert call["contents"][0].role == "user"


def test_call_wraps_service_errors():
    client = FakeGenaiClient(error=ConnectionError("network down"))
    with pytest.raises(RuntimeError, match="network down"):
        call_gemini_generate(client, build_generation_request(SUBJECT, prompt="clay"))


def test_fetch_reference_image_uses_served_media_type():
    def handler(request):
        return httpx.Response(200, content=b"jpeg-bytes", headers={"content-type": "image/jpeg; charset=binary"})

    with httpx.Client(transport=httpx.MockTransport(handler)) as http_client:
        image = fetch_reference_image(REFERENCE_IMAGES[0], client=http_client)
    assert image.mime_type == "image/jpeg"
    assert image.to_bytes() == b"jpeg-bytes"


def test_fetch_reference_image_guesses_media_type_from_url():
    def handler(request):
        return httpx.Response(200, content=b"png-bytes")

    with httpx.Client(transport=httpx.MockTransport(handler)) as http_client:
        image = fetch_reference_image("https://example.com/style.png", client=http_client)
    assert image.mime_type == "image/png"


def test_fetch_reference_image_reports_http_errors():
    def handler(request):
        return httpx.Response(404)

    with httpx.Client(transport=httpx.MockTransport(handler)) as http_client:
        with pytest.raises(RuntimeError, match="404"):
            fetch_reference_image(REFERENCE_IMAGES[0], client=http_client)


def test_gallery_has_eight_presets():
    assert len(REFERENCE_IMAGES) == 8
    assert is_reference_image(REFERENCE_IMAGES[-1])
    assert not is_reference_image("https://example.com/not-in-gallery.png")


def test_fetch_reference_image_falls_back_to_png():
    def handler(request):
        return httpx.Response(200, content=b"mystery-bytes")

    with httpx.Client(transport=httpx.MockTransport(handler)) as http_client:
        image = fetch_reference_image("https://example.com/styles/latest", client=http_client)
    assert image.mime_type == "image/png"


def test_fetch_reference_image_reports_transport_errors():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with httpx.Client(transport=httpx.MockTransport(handler)) as http_client:
        with pytest.raises(RuntimeError, match="Failed to fetch reference image: refused"):
            fetch_reference_image(REFERENCE_IMAGES[0], client=http_client)
