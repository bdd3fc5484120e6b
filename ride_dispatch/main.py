"""
Ride Dispatch Simulator - FastAPI Entry Point
Main application file with CORS, middleware, and route registration
"""

import logging
import time

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import get_settings
from .engine.exceptions import (
    DispatchError,
    NoActiveRideError,
    RideConflictError,
    RideNotFoundError,
)
from .engine.sessions import sessions
from .logging_config import configure_logging
from .routes import auth_routes, dispatch_routes
from .sockets import dispatch_socket

settings = get_settings()

# Configure logging
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

DISPATCH_ERROR_STATUS = {
    RideNotFoundError: status.HTTP_404_NOT_FOUND,
    RideConflictError: status.HTTP_409_CONFLICT,
    NoActiveRideError: status.HTTP_409_CONFLICT,
}

# Initialize FastAPI app
app = FastAPI(
    title="Ride Dispatch Simulator API",
    description="Simulated dispatch feed for the driver app",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all incoming requests with timing"""
    start_time = time.time()
    logger.info(f"Request: {request.method} {request.url.path}")

    response = await call_next(request)

    process_time = time.time() - start_time
    logger.info(f"Completed in {process_time:.2f}s - Status: {response.status_code}")
    return response


@app.exception_handler(DispatchError)
async def dispatch_exception_handler(request: Request, exc: DispatchError):
    """Report engine errors to the client; they are never fatal"""
    status_code = DISPATCH_ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST)
    logger.info(f"Dispatch error on {request.url.path}: {exc.code} - {exc.message}")
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "code": exc.code,
            "message": exc.message,
            "ride_id": exc.ride_id,
        },
    )


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions"""
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "message": "Internal server error",
            "error": str(exc),
        },
    )


@app.on_event("startup")
async def startup_event():
    logger.info(
        "Starting Ride Dispatch Simulator "
        f"(ride interval {settings.min_interval_ms}-{settings.max_interval_ms} ms)"
    )


@app.on_event("shutdown")
async def shutdown_event():
    """Release every driver's dispatch clock"""
    logger.info("Shutting down Ride Dispatch Simulator...")
    sessions.shutdown_all()


@app.get("/")
async def root():
    """API health check"""
    return {
        "success": True,
        "message": "Ride Dispatch Simulator is running",
        "version": "1.0.0",
    }


@app.get("/health")
async def health_check():
    """Detailed health check"""
    return {
        "success": True,
        "status": "healthy",
        "sessions": len(sessions),
    }


# Register route modules
app.include_router(auth_routes.router, prefix="/auth", tags=["Authentication"])
app.include_router(dispatch_routes.router, prefix="/dispatch", tags=["Dispatch"])

# Register WebSocket routes
app.include_router(dispatch_socket.router, prefix="/ws", tags=["WebSocket"])


def run() -> None:
    import uvicorn

    uvicorn.run("ride_dispatch.main:app", host="0.0.0.0", port=8000)


if __name__ == "__main__":
    run()
