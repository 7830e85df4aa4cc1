"""Hairstyle try-on Pydantic models."""
from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field


CORS_HEADERS: Dict[str, str] = {
    "Content-Type": "application/json",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


class TransformRequest(BaseModel):
    """Body of a try-hairstyle POST."""
    image_data: str = Field(..., min_length=1, description="Base64-encoded photo, optionally a data: URL")
    prompt: str = Field(..., min_length=1, description="Free-text hairstyle description")


class InputImage(BaseModel):
    """Decoded upload forwarded to the model."""
    data: bytes = Field(..., description="Raw image bytes")
    mime_type: str = Field("image/png", description="Image MIME type (e.g., image/png, image/jpeg)")


class GenerationPayload(BaseModel):
    """Keyword arguments for one upstream SDK call, built by a generation strategy."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    backend: str = Field(..., description="Strategy name (gemini or imagen)")
    model: str = Field(..., description="Upstream model identifier")
    request: Dict[str, Any] = Field(default_factory=dict, description="SDK call arguments besides the model")


class TransformResponse(BaseModel):
    """Status code and JSON body returned to the client."""
    status_code: int
    body: Dict[str, Any]

    @property
    def headers(self) -> Dict[str, str]:
        return dict(CORS_HEADERS)

    @property
    def error(self) -> Optional[str]:
        return self.body.get("error")
