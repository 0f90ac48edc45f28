"""
Account Service - FastAPI Backend
Main application entry point with CORS, routing and error mapping
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
import uvicorn
import logging
import os
from dotenv import load_dotenv

# Load environment variables BEFORE importing route modules so services see them
load_dotenv()
from datetime import datetime

from routes.auth_routes import router as auth_router
from services.errors import AuthError

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Account Service",
    description="User registration, login and email OTP password reset",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

cors_origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router, tags=["Auth"])


@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError):
    """Turn workflow failures into the {success, message} shape"""
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


@app.get("/ping")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "service": "account-service"
    }


@app.exception_handler(500)
async def internal_error_handler(request, exc):
    """Custom 500 handler"""
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": "Internal server error"}
    )


# Static frontend goes last so API routes take precedence
frontend_dir = os.getenv("FRONTEND_DIR")
if frontend_dir and os.path.isdir(frontend_dir):
    app.mount("/", StaticFiles(directory=frontend_dir, html=True), name="frontend")
    logger.info(f"Serving frontend from {frontend_dir}")

if __name__ == "__main__":
    port = int(os.getenv("PORT", 8080))

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=port,
        reload=False,
        log_level="info"
    )
