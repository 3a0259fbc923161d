from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pdf_recolor.core.config import settings
from pdf_recolor.api.endpoints import pdf
import logging
import os
import subprocess
import time

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)

app = FastAPI(
    title=settings.api_title,
    version=settings.api_version,
    description=settings.api_description
)
START_TIME = time.time()

def _git_commit_short() -> str:
    # Prefer env var if provided
    commit = os.getenv("GIT_COMMIT")
    if commit:
        return commit[:7]
    try:
        out = subprocess.run([
            "git", "rev-parse", "--short", "HEAD"
        ], check=True, stdout=subprocess.PIPE, stderr=subprocess.PIPE)
        return out.stdout.decode().strip()
    except (OSError, subprocess.CalledProcessError):
        return "unknown"

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Include routers
app.include_router(pdf.router)


@app.get("/")
async def root():
    return {
        "message": "PDF Recolor API",
        "version": settings.api_version,
        "modes": ["invert", "remap"],
        "endpoints": {
            "recolor": "/api/pdf/recolor",
            "jobs": "/api/pdf/jobs",
            "job_status": "/api/pdf/jobs/{job_id}",
            "job_result": "/api/pdf/jobs/{job_id}/result",
            "job_preview": "/api/pdf/jobs/{job_id}/preview"
        }
    }


@app.get("/healthz")
async def healthz():
    return {
        "status": "ok",
        "uptime_seconds": round(time.time() - START_TIME, 2)
    }


@app.get("/version")
async def version():
    return {
        "name": settings.api_title,
        "version": settings.api_version,
        "git_commit": _git_commit_short(),
    }
