"""Main FastAPI application for the Gemini chat backend."""
import logging
import os

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.db.init import init_db
from app.errors import ChatAppError
from app.middleware.auth import check_jwt_config
from app.middleware.cors import add_cors_middleware
from app.routers import auth_router, chat_router
from app.services.model_client import init_model_client, reset_model_client

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Gemini Chat API",
    description="Chat with a Gemini model, with per-user conversation history",
    version="1.0.0",
)

add_cors_middleware(app)


@app.on_event("startup")
async def startup_event():
    """Check config, connect the database and the model client. Any failure here stops the server."""
    try:
        check_jwt_config()
        init_db()
        init_model_client()
    except Exception as e:
        logger.critical(f"Startup failed: {str(e)}", exc_info=True)
        raise
    logger.info("Application startup complete.")


@app.on_event("shutdown")
async def shutdown_event():
    reset_model_client()


@app.exception_handler(ChatAppError)
async def chat_app_error_handler(request: Request, exc: ChatAppError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: [{exc.code}] {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: [{exc.code}]")
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(loc) for loc in first.get("loc", ()) if loc != "body")
    message = f"{field}: {first.get('msg')}" if field else "Malformed request body"
    return JSONResponse(status_code=400, content={"msg": message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {str(exc)}", exc_info=True)
    return JSONResponse(status_code=500, content={"error": "Server Error"})


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": "1.0.0"}


@app.get("/")
async def root():
    """Root endpoint - API welcome message."""
    return {
        "title": "Gemini Chat API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
    }


app.include_router(auth_router)
app.include_router(chat_router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=int(os.environ.get("PORT", "3001")),
        reload=True,
    )
