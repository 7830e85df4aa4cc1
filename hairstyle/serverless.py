"""
Serverless entry point for Lambda/Netlify-style HTTP events.

The event carries `httpMethod`, `body` and optionally `isBase64Encoded`;
the return value is `{statusCode, headers, body}` with a JSON string body.
The handler is built once per cold start and reused across invocations.
"""
import base64
import json
from typing import Any, Dict, Optional

from hairstyle.handler import HairstyleTransformHandler, build_transform_handler
from utils.logger import get_logger

logger = get_logger("hairstyle.serverless")

_handler: Optional[HairstyleTransformHandler] = None


def get_handler() -> HairstyleTransformHandler:
    global _handler
    if _handler is None:
        _handler = build_transform_handler()
    return _handler


def handle_event(event: Dict[str, Any], transform_handler: HairstyleTransformHandler) -> Dict[str, Any]:
    """Run one HTTP event through a handler and shape the serverless response."""
    http_context = (event.get("requestContext") or {}).get("http") or {}
    method = event.get("httpMethod") or http_context.get("method", "")
    body = event.get("body")
    if body is not None and event.get("isBase64Encoded"):
        body = base64.b64decode(body)

    result = transform_handler.handle(method, body)
    return {
        "statusCode": result.status_code,
        "headers": result.headers,
        "body": json.dumps(result.body),
    }


def handler(event: Dict[str, Any], context: Any = None) -> Dict[str, Any]:
    """Platform entry point."""
    return handle_event(event, get_handler())
