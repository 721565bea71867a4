"""
Health check endpoints.
"""
from fastapi import APIRouter, Depends

from livingword.core.logging import get_logger
from livingword.models.responses import ProvidersHealthResponse
from livingword.services.ai.facade import AIService, get_ai_service

logger = get_logger(__name__)
router = APIRouter()


@router.get("")
async def health_check():
    """
    Basic health check endpoint.
    """
    return {
        "status": "ok",
        "message": "API is running"
    }


@router.get("/providers", response_model=ProvidersHealthResponse)
async def providers_health(service: AIService = Depends(get_ai_service)):
    """
    Initialization state of the AI service and every registered provider.

    Reports configuration only; no provider is called. Use POST /ai/test for
    a round-trip check.
    """
    stats = service.registry.statistics()
    settings = service.get_last_configuration()
    initialized = service.is_initialized()
    return ProvidersHealthResponse(
        status="ok" if initialized else "unavailable",
        initialized=initialized,
        initialization_error=service.get_initialization_error(),
        selected_provider_id=service.get_selected_provider_id(),
        configured_provider_ids=sorted(settings.configs) if settings is not None else [],
        statistics=stats,
        providers=service.registry.describe(),
    )
