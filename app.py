"""
FastAPI application for the hairstyle try-on service.

Features:
- POST /api/try-hairstyle: restyle the hair in a photo with a Google image model
- Gemini (generate_content) or Imagen (edit_image) backend, chosen by configuration
- Fixed CORS headers on every try-hairstyle response
"""
import time
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import Config
from common.error_messages import ErrorCode, get_error_response, internal_error_response
from hairstyle.handler import HairstyleTransformHandler, build_transform_handler
from hairstyle.models import CORS_HEADERS
from hairstyle.routes import router as hairstyle_router
from utils.logger import get_logger

logger = get_logger("main")


def create_app(transform_handler: Optional[HairstyleTransformHandler] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        transform_handler: Handler to serve requests with; built from Config when omitted

    Returns:
        Configured FastAPI instance
    """
    try:
        Config.validate()
        logger.info("Configuration validated successfully")
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        logger.error("Please set required environment variables in .env file")

    app = FastAPI(
        title="Hairstyle Try-On API",
        description="Restyles the hair of the person in an uploaded photo using Google generative image models.",
        version="1.0.0"
    )
    app.state.transform_handler = transform_handler or build_transform_handler()

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Methods the router does not list still get the JSON 405 with CORS headers."""
        if exc.status_code == 405:
            message, status_code = get_error_response(ErrorCode.METHOD_NOT_ALLOWED)
            return JSONResponse(status_code=status_code, content={"error": message}, headers=dict(CORS_HEADERS))
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=exc.headers)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle all unhandled exceptions globally."""
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        message, status_code = internal_error_response(exc)
        return JSONResponse(status_code=status_code, content={"error": message}, headers=dict(CORS_HEADERS))

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log all HTTP requests with timing."""
        start_time = time.time()
        client_host = request.client.host if request.client else "unknown"
        logger.info(f"→ {request.method} {request.url.path} - Client: {client_host}")

        response = await call_next(request)

        process_time = (time.time() - start_time) * 1000
        logger.info(f"← {request.method} {request.url.path} - Status: {response.status_code} - Time: {process_time:.2f}ms")
        return response

    app.include_router(hairstyle_router)
    logger.info("Hairstyle router included")

    @app.on_event("startup")
    async def startup_event():
        """Log startup event."""
        logger.info("=" * 80)
        logger.info("Hairstyle try-on service starting up")
        logger.info(f"Backend: {Config.GENERATION_BACKEND} ({Config.get_model_name()})")
        logger.info(f"Host: {Config.HOST}:{Config.PORT}")
        logger.info("=" * 80)

    @app.get("/healthz")
    def health():
        """Health check endpoint."""
        logger.debug("Health check requested")
        return {"status": "ok"}

    return app


app = create_app()


# Run server directly
if __name__ == "__main__":
    logger.info(f"Starting server on {Config.HOST}:{Config.PORT}")
    uvicorn.run(
        "app:app",
        host=Config.HOST,
        port=Config.PORT,
        reload=True,
        log_level="info"
    )
