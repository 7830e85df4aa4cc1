"""Try-hairstyle routes."""
from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from hairstyle.handler import HairstyleTransformHandler
from utils.logger import get_logger

logger = get_logger("hairstyle")
router = APIRouter(tags=["hairstyle"])

# Every method reaches the handler so non-POST requests get the JSON 405 with CORS headers
ROUTE_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"]


def get_transform_handler(request: Request) -> HairstyleTransformHandler:
    """Handler built at application startup."""
    return request.app.state.transform_handler


@router.api_route("/api/try-hairstyle", methods=ROUTE_METHODS)
@router.api_route("/.netlify/functions/try-hairstyle", methods=ROUTE_METHODS, include_in_schema=False)
async def try_hairstyle(
    request: Request,
    handler: HairstyleTransformHandler = Depends(get_transform_handler),
):
    """
    Restyle the hair of the person in a photo.

    Accepts:
      POST { image_data: "<base64>", prompt: "bob cut" }

    Returns:
      { image_data: "<base64 PNG>" } or { error: "..." }
    """
    body = await request.body()
    # The genai SDK call blocks, keep it off the event loop
    result = await run_in_threadpool(handler.handle, request.method, body)
    return JSONResponse(status_code=result.status_code, content=result.body, headers=result.headers)
