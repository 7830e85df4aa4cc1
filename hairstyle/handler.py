"""Try-hairstyle request handler, independent of the hosting HTTP runtime."""
import json
from typing import Optional, Type, Union

from config import Config
from common.error_messages import ErrorCode, HairstyleError, get_error_response, internal_error_response
from hairstyle.models import TransformRequest, TransformResponse
from hairstyle.services import (
    GenerationStrategy,
    build_hairstyle_instruction,
    create_genai_client,
    create_strategy,
    decode_image_data,
)
from utils.logger import get_logger

logger = get_logger("hairstyle.handler")

PREFLIGHT_MESSAGE = "CORS Preflight successful."


def parse_transform_request(body: Union[str, bytes, None]) -> TransformRequest:
    """
    Parse a JSON request body into a TransformRequest.

    Raises:
        json.JSONDecodeError: body is not JSON (reported as an internal error)
        HairstyleError: MISSING_FIELD when image_data or prompt is absent, empty or not a string
    """
    data = json.loads(body if body is not None else "")
    if not isinstance(data, dict):
        raise HairstyleError(ErrorCode.MISSING_FIELD, f"body is a JSON {type(data).__name__}, not an object")

    image_data = data.get("image_data")
    prompt = data.get("prompt")
    if not isinstance(image_data, str) or not image_data.strip():
        raise HairstyleError(ErrorCode.MISSING_FIELD, "image_data missing or empty")
    if not isinstance(prompt, str) or not prompt.strip():
        raise HairstyleError(ErrorCode.MISSING_FIELD, "prompt missing or empty")

    return TransformRequest(image_data=image_data.strip(), prompt=prompt)


class HairstyleTransformHandler:
    """
    Validates a try-hairstyle request, calls the generation strategy and maps
    every outcome to a status code and JSON body.

    The strategy (and the client inside it) is injected so tests can swap in
    a stub. A handler without an API key answers every POST with the
    configuration error and never touches the strategy.
    """

    def __init__(self, api_key: Optional[str], strategy: Optional[GenerationStrategy]):
        if api_key and strategy is None:
            raise ValueError("A generation strategy is required when an API key is configured")
        self.api_key = api_key
        self.strategy = strategy

    def handle(self, method: str, body: Union[str, bytes, None] = None) -> TransformResponse:
        method = (method or "").upper()
        logger.info(f"Received {method} request")

        if method == "OPTIONS":
            return TransformResponse(status_code=200, body={"message": PREFLIGHT_MESSAGE})

        if method != "POST":
            return self._error(ErrorCode.METHOD_NOT_ALLOWED)

        if not self.api_key:
            logger.error("GEMINI_API_KEY environment variable is not set.")
            return self._error(ErrorCode.MISSING_API_KEY)

        logger.info("API key check passed, starting generation")

        try:
            request = parse_transform_request(body)
            image = decode_image_data(request.image_data)
            logger.info(
                f"Image data: {len(request.image_data)} base64 chars, {len(image.data)} bytes ({image.mime_type}); "
                f"prompt: {request.prompt[:50]}..."
            )

            instruction = build_hairstyle_instruction(request.prompt)
            image_data = self.strategy.generate(instruction, image)
        except HairstyleError as e:
            if e.code == ErrorCode.IMAGE_GENERATION_FAILED:
                logger.error(f"AI failed to return an image: {e.detail}")
            else:
                logger.warning(f"Rejected request ({e.code.value}): {e.detail}")
            return self._error(e.code)
        except Exception as e:
            logger.error(f"Internal Server Error: {e}", exc_info=True)
            message, status_code = internal_error_response(e)
            return TransformResponse(status_code=status_code, body={"error": message})

        logger.info(f"Image generated successfully ({len(image_data)} base64 chars)")
        return TransformResponse(status_code=200, body={"image_data": image_data})

    @staticmethod
    def _error(code: ErrorCode) -> TransformResponse:
        message, status_code = get_error_response(code)
        return TransformResponse(status_code=status_code, body={"error": message})


def build_transform_handler(config: Type[Config] = Config) -> HairstyleTransformHandler:
    """Construct the handler, its genai client and strategy from configuration."""
    api_key = config.GEMINI_API_KEY
    if not api_key:
        logger.warning("GEMINI_API_KEY not set; try-hairstyle requests will fail with a configuration error")
        return HairstyleTransformHandler(api_key=None, strategy=None)

    client = create_genai_client(api_key, vertexai=config.GOOGLE_GENAI_USE_VERTEXAI)
    strategy = create_strategy(config.GENERATION_BACKEND, client, config)
    logger.info(f"Try-hairstyle handler ready: backend={strategy.name}, model={strategy.model}")
    return HairstyleTransformHandler(api_key=api_key, strategy=strategy)
