"""Hairstyle generation services - Gemini / Imagen integration."""
import base64
import binascii
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Type, Union

from google import genai
from google.genai import types

from config import Config
from common.error_messages import ErrorCode, HairstyleError, GenerationFailedError
from hairstyle.models import GenerationPayload, InputImage
from utils.logger import get_logger

logger = get_logger("hairstyle.services")

HAIRSTYLE_INSTRUCTION_TEMPLATE = (
    'Change the hairstyle and color of the person in the input image to: "{prompt}". '
    "Preserve the person's face, features, lighting, and clothing exactly as they are. "
    "This is a high-quality, realistic photo manipulation."
)

DEFAULT_MIME_TYPE = "image/png"

_DATA_URL_PREFIX = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,", re.IGNORECASE)


def build_hairstyle_instruction(prompt: str) -> str:
    """Embed the user's style text in the fixed identity-preserving instruction."""
    return HAIRSTYLE_INSTRUCTION_TEMPLATE.format(prompt=prompt)


def sniff_mime_type(data: bytes) -> str:
    """Guess an image MIME type from its magic bytes, defaulting to PNG."""
    if data.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if data.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    if data.startswith((b"GIF87a", b"GIF89a")):
        return "image/gif"
    return DEFAULT_MIME_TYPE


def decode_image_data(image_data: str) -> InputImage:
    """
    Decode the uploaded base64 image.

    Accepts bare base64 or a `data:<mime>;base64,` URL as produced by
    FileReader.readAsDataURL. Only the encoding is checked; the bytes are
    forwarded as-is.

    Raises:
        HairstyleError: INVALID_IMAGE_DATA when the text is not valid base64
    """
    mime_type = None
    match = _DATA_URL_PREFIX.match(image_data)
    if match:
        mime_type = match.group("mime").lower()
        image_data = image_data[match.end():]

    try:
        data = base64.b64decode("".join(image_data.split()), validate=True)
    except (binascii.Error, ValueError) as e:
        raise HairstyleError(ErrorCode.INVALID_IMAGE_DATA, f"base64 decode failed: {e}")

    if not data:
        raise HairstyleError(ErrorCode.INVALID_IMAGE_DATA, "decoded image is empty")

    return InputImage(data=data, mime_type=mime_type or sniff_mime_type(data))


def _to_base64(data: Union[bytes, str]) -> str:
    # The SDK decodes inline payloads to bytes; a str is already base64
    if isinstance(data, str):
        return data
    return base64.b64encode(data).decode("utf-8")


def _extract_from_generated_images(response: Union[types.GenerateImagesResponse, types.EditImageResponse]) -> Optional[str]:
    for idx, generated in enumerate(response.generated_images or []):
        image = generated.image
        if image is not None and image.image_bytes:
            logger.info(f"Found image in generated_images[{idx}] ({image.mime_type or 'unknown type'})")
            return _to_base64(image.image_bytes)
        if generated.rai_filtered_reason:
            logger.warning(f"generated_images[{idx}] filtered: {generated.rai_filtered_reason}")
    return None


def _extract_from_candidates(response: types.GenerateContentResponse) -> Optional[str]:
    for c_idx, candidate in enumerate(response.candidates or []):
        content = candidate.content
        if content is None or not content.parts:
            logger.warning(f"Candidate {c_idx} has no content (finish_reason: {candidate.finish_reason})")
            continue

        for p_idx, part in enumerate(content.parts):
            inline = part.inline_data
            if inline is not None and inline.data and (inline.mime_type or "").startswith("image/"):
                logger.info(f"Found image in candidates[{c_idx}].parts[{p_idx}] ({inline.mime_type})")
                return _to_base64(inline.data)
            if part.text:
                logger.info(f"Candidate {c_idx} text part: {part.text[:200]}")

    feedback = response.prompt_feedback
    if feedback is not None and feedback.block_reason:
        logger.warning(f"Prompt blocked: {feedback.block_reason} {feedback.block_reason_message or ''}".rstrip())
    return None


def extract_image_data(response: Any) -> str:
    """
    Return the first image payload in an upstream response as base64.

    Two shapes are understood:
      - image arrays (GenerateImagesResponse / EditImageResponse):
        generated_images[*].image.image_bytes
      - multimodal candidates (GenerateContentResponse):
        candidates[*].content.parts[*].inline_data with an image/* MIME type

    Raises:
        GenerationFailedError: unknown response type, or no image found
    """
    if isinstance(response, (types.GenerateImagesResponse, types.EditImageResponse)):
        image_data = _extract_from_generated_images(response)
    elif isinstance(response, types.GenerateContentResponse):
        image_data = _extract_from_candidates(response)
    else:
        raise GenerationFailedError(f"Unrecognized upstream response type: {type(response).__name__}")

    if not image_data:
        raise GenerationFailedError("No image part in upstream response")
    return image_data


class GenerationStrategy(ABC):
    """Builds, sends and unpacks the request for one upstream model API."""

    name: str = ""

    def __init__(self, client: genai.Client, model: str):
        self.client = client
        self.model = model

    @abstractmethod
    def build_payload(self, instruction: str, image: InputImage) -> GenerationPayload:
        """Map the instruction and input photo onto this API's request shape."""

    @abstractmethod
    def call(self, payload: GenerationPayload) -> Any:
        """Send the payload and return the raw SDK response."""

    def extract_image(self, response: Any) -> str:
        return extract_image_data(response)

    def generate(self, instruction: str, image: InputImage) -> str:
        """Run the full round trip and return the generated image as base64."""
        payload = self.build_payload(instruction, image)
        logger.info(f"Calling {self.name} model {payload.model} with {len(image.data)} byte {image.mime_type} input")
        response = self.call(payload)
        return self.extract_image(response)


class GeminiImageStrategy(GenerationStrategy):
    """
    Chat-style multimodal generation (generate_content).

    Payload: one user Content holding the photo as inline_data followed by
    the instruction text, with IMAGE and TEXT response modalities.
    """

    name = "gemini"

    def build_payload(self, instruction: str, image: InputImage) -> GenerationPayload:
        contents = [
            types.Content(
                role="user",
                parts=[
                    types.Part(inline_data=types.Blob(mime_type=image.mime_type, data=image.data)),
                    types.Part.from_text(text=instruction),
                ],
            )
        ]
        config = types.GenerateContentConfig(response_modalities=["IMAGE", "TEXT"])
        return GenerationPayload(
            backend=self.name,
            model=self.model,
            request={"contents": contents, "config": config},
        )

    def call(self, payload: GenerationPayload) -> types.GenerateContentResponse:
        return self.client.models.generate_content(model=payload.model, **payload.request)


class ImagenEditStrategy(GenerationStrategy):
    """
    Image-only generation (edit_image) against an Imagen capability model.

    Payload: the instruction as prompt and the photo as a raw reference
    image. edit_image is only served by the Vertex AI client.
    """

    name = "imagen"

    def __init__(
        self,
        client: genai.Client,
        model: str,
        output_mime_type: str = DEFAULT_MIME_TYPE,
        aspect_ratio: Optional[str] = "1:1",
    ):
        super().__init__(client, model)
        self.output_mime_type = output_mime_type
        self.aspect_ratio = aspect_ratio

    def build_payload(self, instruction: str, image: InputImage) -> GenerationPayload:
        reference = types.RawReferenceImage(
            reference_id=1,
            reference_image=types.Image(image_bytes=image.data, mime_type=image.mime_type),
        )
        config = types.EditImageConfig(
            edit_mode="EDIT_MODE_DEFAULT",
            number_of_images=1,
            output_mime_type=self.output_mime_type,
            aspect_ratio=self.aspect_ratio,
        )
        return GenerationPayload(
            backend=self.name,
            model=self.model,
            request={"prompt": instruction, "reference_images": [reference], "config": config},
        )

    def call(self, payload: GenerationPayload) -> types.EditImageResponse:
        return self.client.models.edit_image(model=payload.model, **payload.request)


STRATEGIES: Dict[str, Type[GenerationStrategy]] = {
    GeminiImageStrategy.name: GeminiImageStrategy,
    ImagenEditStrategy.name: ImagenEditStrategy,
}


def create_genai_client(api_key: str, vertexai: bool = False) -> genai.Client:
    """Build the google-genai client bound to the API key."""
    if vertexai:
        logger.info("Using Vertex AI client (express mode API key)")
        return genai.Client(vertexai=True, api_key=api_key)
    return genai.Client(api_key=api_key)


def create_strategy(backend: str, client: genai.Client, config: Type[Config] = Config) -> GenerationStrategy:
    """
    Select the generation strategy for a backend name.

    Raises:
        ValueError: unknown backend
    """
    backend = (backend or "").strip().lower()
    if backend == ImagenEditStrategy.name:
        return ImagenEditStrategy(
            client,
            config.IMAGEN_MODEL,
            output_mime_type=config.OUTPUT_MIME_TYPE,
            aspect_ratio=config.ASPECT_RATIO,
        )
    if backend == GeminiImageStrategy.name:
        return GeminiImageStrategy(client, config.GEMINI_IMAGE_MODEL)
    raise ValueError(f"Unknown generation backend '{backend}', expected one of: {', '.join(STRATEGIES)}")
