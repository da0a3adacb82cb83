from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends

from kotoba.config import Settings, get_settings

router = APIRouter()


@router.get("/health")
async def health(settings: Settings = Depends(get_settings)) -> Dict[str, Any]:
    backends = {
        "cf": {"configured": settings.workers_ai_configured, "model": settings.cf_model},
        "open": {"configured": settings.openai_configured, "model": settings.openai_model},
    }
    ready = settings.credentials.configured and any(entry["configured"] for entry in backends.values())
    return {
        "status": "healthy" if ready else "degraded",
        "backends": backends,
    }
