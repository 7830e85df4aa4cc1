"""Hairstyle try-on module."""
from hairstyle.models import TransformRequest, TransformResponse, InputImage, GenerationPayload, CORS_HEADERS
from hairstyle.services import (
    GenerationStrategy,
    GeminiImageStrategy,
    ImagenEditStrategy,
    build_hairstyle_instruction,
    decode_image_data,
    extract_image_data,
    create_strategy
)
from hairstyle.handler import HairstyleTransformHandler, build_transform_handler

__all__ = [
    "TransformRequest",
    "TransformResponse",
    "InputImage",
    "GenerationPayload",
    "CORS_HEADERS",
    "GenerationStrategy",
    "GeminiImageStrategy",
    "ImagenEditStrategy",
    "build_hairstyle_instruction",
    "decode_image_data",
    "extract_image_data",
    "create_strategy",
    "HairstyleTransformHandler",
    "build_transform_handler"
]
