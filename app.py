"""
FastAPI application for style fusion with Gemini AI.

Features:
- Upload a subject photo into a session
- Pick a preset style reference image and/or write a prompt
- Generate a fused image with the Gemini image model
- Download the result as fused-image.png
"""
import time

import uvicorn
from fastapi import FastAPI, Request, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import Config
from image.client import ai_service
from image.routes import router as image_router
from sessions.routes import router as sessions_router
from utils.logger import get_logger
from common.error_messages import ErrorCode, get_error_response

# Initialize logger
logger = get_logger("main")

# Validate configuration on startup
try:
    Config.validate()
    logger.info("Configuration validated successfully")
except ValueError as e:
    logger.error(f"Configuration error: {e}")
    logger.error("Please set GEMINI_API_KEY in the environment or .env file")

# Create FastAPI app
app = FastAPI(
    title="Style Fusion API",
    description="Combine an uploaded photo with a preset style image or a prompt using Gemini image generation.",
    version="1.0.0"
)


# CORS middleware - added first so it also covers error responses and OPTIONS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions globally."""
    if isinstance(exc, HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail}
        )

    logger.error(f"Unhandled exception: {exc}", exc_info=True)

    message, status_code = get_error_response(ErrorCode.UNKNOWN_ERROR)
    return JSONResponse(
        status_code=status_code,
        content={"detail": message}
    )


# Request logging middleware. Bodies are not logged: they carry image data.
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all HTTP requests with timing."""
    start_time = time.time()
    client_host = request.client.host if request.client else "unknown"
    logger.info(f"→ {request.method} {request.url.path} - Client: {client_host}")
    try:
        response = await call_next(request)
    except Exception as e:
        process_time = (time.time() - start_time) * 1000
        logger.error(f"← {request.method} {request.url.path} - Error: {e} - Time: {process_time:.2f}ms")
        raise

    process_time = (time.time() - start_time) * 1000
    logger.info(f"← {request.method} {request.url.path} - Status: {response.status_code} - Time: {process_time:.2f}ms")
    return response


# Include routers
app.include_router(image_router)
logger.info("Image router included")

app.include_router(sessions_router)
logger.info("Sessions router included")


@app.on_event("startup")
async def startup_event():
    """Build the Gemini client; a failure leaves generation disabled for this process."""
    logger.info("=" * 80)
    logger.info("Style Fusion API starting up")
    logger.info(f"Host: {Config.HOST}:{Config.PORT}")
    logger.info(f"Model: {Config.GEMINI_MODEL}")
    if ai_service.client is None and ai_service.init_error is None:
        if not ai_service.initialize():
            logger.error("AI service unavailable: generation is disabled until restart")
    logger.info("=" * 80)


@app.on_event("shutdown")
async def shutdown_event():
    """Log shutdown event."""
    logger.info("Style Fusion API shutting down")


@app.get("/healthz")
def health():
    """Health check endpoint."""
    return {"status": "ok", "ai_service_ready": ai_service.ready}


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
