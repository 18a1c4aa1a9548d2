# offloading/main.py
from __future__ import annotations
import os
from typing import List, Dict, Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from mangum import Mangum

# --- Settings / DB ---
from offloading.core.settings import settings
from offloading.core.db import init_db
from offloading.core.logging import setup_logging

# --- Routers ---
from offloading.routers import (
    analytics,
    delayed_recall,
    diag,
    experiments,
    health,
    participants,
    tasks,
)

setup_logging()

# -----------------------------------------------------------------------------
# FastAPI app
# -----------------------------------------------------------------------------
API_PREFIX = "/v1"
ROOT_PATH = os.getenv("FASTAPI_ROOT_PATH", "")   # e.g. "/prod" behind API Gateway
BUILD_TAG = os.getenv("BUILD_TAG", "dev")

app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    root_path=ROOT_PATH,
)

# -----------------------------------------------------------------------------
# CORS
# -----------------------------------------------------------------------------
ALLOWED_ORIGINS = [
    settings.FRONTEND_URL.rstrip("/"),
    "http://127.0.0.1:3000", "http://localhost:3000",
]
LOCALHOST_REGEX = r"http://(localhost|127\.0\.0\.1):\d+$"

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.ALLOW_ALL_CORS else ALLOWED_ORIGINS,
    allow_origin_regex=".*" if settings.ALLOW_ALL_CORS else LOCALHOST_REGEX,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    max_age=86400,
)

# -----------------------------------------------------------------------------
# JSON UTF-8 middleware
# -----------------------------------------------------------------------------
@app.middleware("http")
async def force_utf8_content_type(request: Request, call_next):
    response = await call_next(request)
    ct = response.headers.get("content-type", "")
    if "application/json" in ct.lower() and "charset=" not in ct.lower():
        response.headers["content-type"] = "application/json; charset=utf-8"
    return response

# -----------------------------------------------------------------------------
# Register routers
# -----------------------------------------------------------------------------
app.include_router(tasks.router,          prefix=API_PREFIX)
app.include_router(participants.router,   prefix=API_PREFIX)
app.include_router(experiments.router,    prefix=API_PREFIX)
app.include_router(delayed_recall.router, prefix=API_PREFIX)
app.include_router(analytics.router,      prefix=API_PREFIX)
app.include_router(diag.router,           prefix=API_PREFIX)
app.include_router(health.router)

# -----------------------------------------------------------------------------
# Health / Debug
# -----------------------------------------------------------------------------
@app.get("/")
def root():
    return {
        "ok": True,
        "service": settings.PROJECT_NAME,
        "prefix": API_PREFIX,
        "docs": "/docs",
        "build": BUILD_TAG,
    }

@app.get("/healthz")
def healthz():
    return {"ok": True}

@app.get(f"{API_PREFIX}/_routes")
def list_routes(request: Request):
    out: List[Dict[str, Any]] = []
    for r in request.app.router.routes:
        path = getattr(r, "path", None)
        if path is None:
            continue
        out.append({"path": path, "methods": sorted(getattr(r, "methods", None) or [])})
    return out

# -----------------------------------------------------------------------------
# Global exception handler
# -----------------------------------------------------------------------------
@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("unhandled error on {} {}", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"ok": False, "error": "internal_error", "detail": str(exc)},
    )

# -----------------------------------------------------------------------------
# Startup
# -----------------------------------------------------------------------------
@app.on_event("startup")
def on_startup():
    init_db()
    logger.info("{} {} started (build {})", settings.PROJECT_NAME, settings.VERSION, BUILD_TAG)

# -----------------------------------------------------------------------------
# Lambda handler
# -----------------------------------------------------------------------------
handler = Mangum(app)
