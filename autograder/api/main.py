"""
LTI Code Execution API.

Runs student code on a remote execution engine and sends the resulting score
back to the launching platform's gradebook.
"""

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from config import config
from autograder.api.dependencies import build_orchestrator
from autograder.api.routers import execute_router, launch_router
from autograder.db import init_db
from autograder.orchestrator import INTERNAL_ERROR_MESSAGE


tags_metadata = [
    {
        "name": "Execution",
        "description": """
**Code execution with grade passback.**

Code is submitted to the execution engine and polled until a verdict is
available. The verdict is scored (Accepted earns `max_score`, anything else 0)
and, when the launch carries a line item, the score is written to the
platform gradebook exactly once per submission.
        """,
    },
    {
        "name": "Launch",
        "description": "Resolve launch parameters into the context used by the editor.",
    },
    {
        "name": "Health",
        "description": "Service health check endpoints.",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    client = httpx.AsyncClient(timeout=config.http_timeout_seconds)
    app.state.http_client = client
    app.state.orchestrator = build_orchestrator(client)
    logger.info("api_started", judge0_url=config.judge0_url)
    try:
        yield
    finally:
        await client.aclose()
        logger.info("api_stopped")


app = FastAPI(
    title="LTI Code Execution API",
    description="Remote code execution with LTI grade passback",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

app.include_router(execute_router)
app.include_router(launch_router)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.warning("invalid_request_body", path=request.url.path, errors=len(exc.errors()))
    return JSONResponse(
        status_code=400,
        content={"success": False, "error": "validation_error: Invalid request body"},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error("unhandled_api_error", path=request.url.path, error_type=type(exc).__name__, error=str(exc))
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": INTERNAL_ERROR_MESSAGE},
    )


@app.get(
    "/health",
    tags=["Health"],
    summary="Health Check",
    description="Check if the API service is healthy and responding.",
    responses={
        200: {
            "description": "Service is healthy",
            "content": {
                "application/json": {
                    "example": {
                        "status": "healthy",
                        "service": "lti-code-execution-api",
                        "version": "1.0.0"
                    }
                }
            }
        }
    },
)
async def health_check():
    return {
        "status": "healthy",
        "service": "lti-code-execution-api",
        "version": "1.0.0",
    }


@app.get(
    "/",
    tags=["Health"],
    summary="API Root",
    include_in_schema=False,
)
async def root():
    """API root - returns basic info and links to documentation."""
    return {
        "name": "LTI Code Execution API",
        "version": "1.0.0",
        "documentation": {
            "swagger": "/docs",
            "redoc": "/redoc",
            "openapi": "/openapi.json",
        },
        "endpoints": {
            "execute": "/api/execute",
            "languages": "/api/languages",
            "launch": "/lti/launch",
        },
    }
