"""Root, health and adjustment catalog endpoints."""

import inspect
from typing import List, Tuple

from fastapi import APIRouter

from engine import __version__
from engine.models.results import AdjustmentInfo
from engine.orchestrator import adjustment_catalog

from ..models import ServiceStatus
from ..services import check_openai_available
from ..state import get_state

router = APIRouter()


async def _index_available(state) -> Tuple[bool, str]:
    """Return (available, message) for the configured similarity index."""
    check = getattr(state.index, "is_available", None)
    if check is None:
        return False, "index does not report availability"
    try:
        ok = check()
        if inspect.isawaitable(ok):
            ok = await ok
        return bool(ok), "connected" if ok else "not reachable"
    except Exception as e:
        return False, str(e)


@router.get("/")
def root():
    return {
        "name": "whatnext API",
        "version": __version__,
        "endpoints": {
            "sessions": [
                "/api/sessions/start",
                "/api/sessions/{id}/answer",
                "/api/sessions/{id}/refine",
                "/api/sessions/{id}/adjust",
                "/api/sessions/{id}/moment-feedback",
            ],
            "catalog": ["/api/adjustments"],
            "health": ["/api/health"],
        },
    }


@router.get("/api/health")
async def health():
    state = get_state()
    openai_ok, openai_msg = check_openai_available()
    index_ok, index_msg = await _index_available(state)
    return {
        "status": "healthy",
        "openai": ServiceStatus(available=openai_ok, message=openai_msg).model_dump(),
        "index": {
            "backend": type(state.index).__name__,
            **ServiceStatus(available=index_ok, message=index_msg).model_dump(),
        },
        "session_store": type(state.session_store).__name__,
        "enrichment": state.enrichment is not None,
    }


@router.get("/api/adjustments", response_model=List[AdjustmentInfo])
def adjustments():
    """Quick-adjust presets the client can offer as buttons."""
    return adjustment_catalog()
