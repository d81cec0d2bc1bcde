"""Health check endpoints."""

from datetime import datetime, timezone

from fastapi import APIRouter

router = APIRouter()


@router.get("/api/health")
async def api_health():
    return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/health")
async def health():
    return {"status": "ok", "service": "fundraising-qa", "version": "0.1.0"}


@router.get("/")
async def root():
    return {"service": "fundraising-qa", "version": "0.1.0"}
