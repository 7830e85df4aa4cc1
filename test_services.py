"""Tests for payload construction and response extraction."""
import base64

import pytest
from google.genai import types

from conftest import (
    FakeClient,
    GENERATED_B64,
    GENERATED_BYTES,
    PNG_B64,
    PNG_BYTES,
    edit_image_response,
    image_content_response,
    text_only_response,
)
from common.error_messages import ErrorCode, GenerationFailedError, HairstyleError
from hairstyle.models import InputImage
from hairstyle.services import (
    GeminiImageStrategy,
    ImagenEditStrategy,
    build_hairstyle_instruction,
    create_strategy,
    decode_image_data,
    extract_image_data,
    sniff_mime_type,
)

JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 12


def test_instruction_embeds_prompt_and_preservation_clause():
    instruction = build_hairstyle_instruction("platinum bob")
    assert instruction.startswith('Change the hairstyle and color of the person in the input image to: "platinum bob".')
    assert "Preserve the person's face, features, lighting, and clothing exactly as they are." in instruction


def test_instruction_does_not_sanitize_user_text():
    assert 'to: "say "hi"".' in build_hairstyle_instruction('say "hi"')


# ---------- Input decoding ----------

def test_decode_bare_base64_png():
    image = decode_image_data(PNG_B64)
    assert image.data == PNG_BYTES
    assert image.mime_type == "image/png"


def test_decode_data_url_uses_declared_mime_type():
    image = decode_image_data("data:image/JPEG;base64," + base64.b64encode(JPEG_BYTES).decode())
    assert image.data == JPEG_BYTES
    assert image.mime_type == "image/jpeg"


def test_decode_tolerates_line_breaks():
    wrapped = "\n".join(PNG_B64[i:i + 8] for i in range(0, len(PNG_B64), 8))
    assert decode_image_data(wrapped).data == PNG_BYTES


def test_decode_unknown_bytes_default_to_png():
    image = decode_image_data(base64.b64encode(b"plain bytes").decode())
    assert image.mime_type == "image/png"


@pytest.mark.parametrize("bad", ["%%%%", "abc", "data:image/png;base64,", "héllo=="])
def test_decode_rejects_invalid_base64(bad):
    with pytest.raises(HairstyleError) as exc_info:
        decode_image_data(bad)
    assert exc_info.value.code == ErrorCode.INVALID_IMAGE_DATA


def test_sniff_mime_types():
    assert sniff_mime_type(PNG_BYTES) == "image/png"
    assert sniff_mime_type(JPEG_BYTES) == "image/jpeg"
    assert sniff_mime_type(b"RIFF\x00\x00\x00\x00WEBPVP8 ") == "image/webp"
    assert sniff_mime_type(b"GIF89a....") == "image/gif"


# ---------- Response extraction ----------

def test_extract_from_candidate_parts_skips_text():
    response = image_content_response(text="Here is your new look!")
    assert extract_image_data(response) == GENERATED_B64


def test_extract_takes_first_image_across_candidates():
    response = types.GenerateContentResponse(candidates=[
        types.Candidate(content=None, finish_reason="SAFETY"),
        types.Candidate(content=types.Content(role="model", parts=[
            types.Part(inline_data=types.Blob(mime_type="image/png", data=GENERATED_BYTES)),
            types.Part(inline_data=types.Blob(mime_type="image/png", data=b"second")),
        ])),
    ])
    assert extract_image_data(response) == GENERATED_B64


def test_extract_ignores_non_image_inline_data():
    response = types.GenerateContentResponse(candidates=[
        types.Candidate(content=types.Content(role="model", parts=[
            types.Part(inline_data=types.Blob(mime_type="application/json", data=b"{}")),
            types.Part(inline_data=types.Blob(mime_type="image/webp", data=GENERATED_BYTES)),
        ])),
    ])
    assert extract_image_data(response) == GENERATED_B64


def test_extract_text_only_response_fails():
    with pytest.raises(GenerationFailedError):
        extract_image_data(text_only_response())


def test_extract_empty_response_fails():
    with pytest.raises(GenerationFailedError):
        extract_image_data(types.GenerateContentResponse())


def test_extract_blocked_prompt_fails():
    response = types.GenerateContentResponse(
        prompt_feedback=types.GenerateContentResponsePromptFeedback(block_reason="SAFETY")
    )
    with pytest.raises(GenerationFailedError):
        extract_image_data(response)


def test_extract_from_generated_images():
    assert extract_image_data(edit_image_response()) == GENERATED_B64


def test_extract_skips_filtered_generated_images():
    response = types.EditImageResponse(generated_images=[
        types.GeneratedImage(image=None, rai_filtered_reason="Filtered by safety"),
        types.GeneratedImage(image=types.Image(image_bytes=GENERATED_BYTES)),
    ])
    assert extract_image_data(response) == GENERATED_B64


def test_extract_all_filtered_fails():
    response = types.GenerateImagesResponse(generated_images=[
        types.GeneratedImage(image=None, rai_filtered_reason="Filtered by safety"),
    ])
    with pytest.raises(GenerationFailedError):
        extract_image_data(response)


@pytest.mark.parametrize("response", [None, {"candidates": []}, "image"])
def test_extract_unrecognized_response_fails(response):
    with pytest.raises(GenerationFailedError) as exc_info:
        extract_image_data(response)
    assert exc_info.value.code == ErrorCode.IMAGE_GENERATION_FAILED


# ---------- Strategies ----------

def test_gemini_payload_shape():
    strategy = GeminiImageStrategy(FakeClient(), "gemini-test-model")
    payload = strategy.build_payload("make it curly", InputImage(data=PNG_BYTES, mime_type="image/png"))

    assert payload.backend == "gemini"
    assert payload.model == "gemini-test-model"
    content = payload.request["contents"][0]
    assert content.role == "user"
    assert content.parts[0].inline_data.data == PNG_BYTES
    assert content.parts[1].text == "make it curly"
    assert payload.request["config"].response_modalities == ["IMAGE", "TEXT"]


def test_imagen_payload_shape():
    strategy = ImagenEditStrategy(FakeClient(), "imagen-test-model", output_mime_type="image/jpeg", aspect_ratio="3:4")
    payload = strategy.build_payload("make it curly", InputImage(data=PNG_BYTES, mime_type="image/png"))

    assert payload.backend == "imagen"
    assert payload.request["prompt"] == "make it curly"
    reference = payload.request["reference_images"][0]
    assert reference.reference_id == 1
    assert reference.reference_image.image_bytes == PNG_BYTES
    config = payload.request["config"]
    assert config.number_of_images == 1
    assert config.output_mime_type == "image/jpeg"
    assert config.aspect_ratio == "3:4"
    assert config.edit_mode == "EDIT_MODE_DEFAULT"


def test_imagen_generate_calls_edit_image():
    client = FakeClient(response=edit_image_response())
    strategy = ImagenEditStrategy(client, "imagen-test-model")
    result = strategy.generate("make it curly", InputImage(data=PNG_BYTES))

    assert result == GENERATED_B64
    method, kwargs = client.models.calls[0]
    assert method == "edit_image"
    assert kwargs["model"] == "imagen-test-model"


def test_gemini_strategy_accepts_image_array_response():
    # Extraction is shared, so either known shape is understood
    client = FakeClient(response=edit_image_response())
    strategy = GeminiImageStrategy(client, "gemini-test-model")
    assert strategy.generate("x", InputImage(data=PNG_BYTES)) == GENERATED_B64


class _Settings:
    GEMINI_IMAGE_MODEL = "gemini-x"
    IMAGEN_MODEL = "imagen-x"
    OUTPUT_MIME_TYPE = "image/png"
    ASPECT_RATIO = "1:1"


def test_create_strategy_by_name():
    assert isinstance(create_strategy("gemini", FakeClient(), _Settings), GeminiImageStrategy)
    imagen = create_strategy(" Imagen ", FakeClient(), _Settings)
    assert isinstance(imagen, ImagenEditStrategy)
    assert imagen.model == "imagen-x"


def test_create_strategy_unknown_backend():
    with pytest.raises(ValueError):
        create_strategy("dall-e", FakeClient(), _Settings)
