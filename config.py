"""
Configuration module - loads all settings from environment variables.
"""
import os
from dotenv import load_dotenv

# Load environment variables from .env file
try:
    load_dotenv()
except Exception as e:
    print(f"Warning: Failed to load .env file: {e}")
    print("Continuing with environment variables or defaults...")


class Config:
    """Application configuration loaded from environment variables."""

    @staticmethod
    def _get_int(key: str, default: int) -> int:
        """Safely parse integer environment variable."""
        try:
            return int(os.getenv(key, str(default)))
        except (ValueError, TypeError) as e:
            print(f"Warning: Invalid integer for {key}, using default {default}: {e}")
            return default

    @staticmethod
    def _get_bool(key: str, default: bool) -> bool:
        """Safely parse boolean environment variable."""
        value = os.getenv(key)
        if value is None:
            return default
        return value.strip().lower() in ("true", "1", "yes", "on")

    # Gemini API
    GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
    GOOGLE_GENAI_USE_VERTEXAI: bool = _get_bool.__func__("GOOGLE_GENAI_USE_VERTEXAI", False)

    # Generation backend: "gemini" (multimodal generate_content) or "imagen" (edit_image)
    GENERATION_BACKEND: str = os.getenv("GENERATION_BACKEND", "gemini").strip().lower()
    GEMINI_IMAGE_MODEL: str = os.getenv("GEMINI_IMAGE_MODEL", "gemini-2.5-flash-image-preview")
    IMAGEN_MODEL: str = os.getenv("IMAGEN_MODEL", "imagen-3.0-capability-001")
    OUTPUT_MIME_TYPE: str = os.getenv("OUTPUT_MIME_TYPE", "image/png")
    ASPECT_RATIO: str = os.getenv("ASPECT_RATIO", "1:1")

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    LOG_TO_FILE: bool = _get_bool.__func__("LOG_TO_FILE", True)
    LOGS_DIR: str = os.getenv(
        "LOGS_DIR", os.path.join(os.path.dirname(os.path.abspath(__file__)), "logs")
    )

    # Server
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = _get_int.__func__("PORT", 8000)

    @classmethod
    def validate(cls) -> None:
        """Validate required configuration."""
        if not cls.GEMINI_API_KEY:
            raise ValueError("GEMINI_API_KEY environment variable is required")
        if cls.GENERATION_BACKEND not in ("gemini", "imagen"):
            raise ValueError(
                f"GENERATION_BACKEND must be 'gemini' or 'imagen', got '{cls.GENERATION_BACKEND}'"
            )

    @classmethod
    def get_model_name(cls) -> str:
        """Model identifier for the configured backend."""
        if cls.GENERATION_BACKEND == "imagen":
            return cls.IMAGEN_MODEL
        return cls.GEMINI_IMAGE_MODEL
