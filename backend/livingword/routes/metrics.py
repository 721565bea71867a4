"""
Prometheus metrics endpoint.

GET /metrics
Returns Prometheus-formatted metrics for scraping. The provider availability
gauges are refreshed from the registry on every scrape, so providers that
were reconfigured since the last `configure` call are reported correctly.
"""
from fastapi import APIRouter, Depends, Response
from fastapi.responses import PlainTextResponse

from livingword.core.logging import get_logger
from livingword.core.metrics import get_metrics, get_metrics_content_type, update_available_providers
from livingword.services.ai.facade import AIService, get_ai_service

logger = get_logger(__name__)
router = APIRouter()


@router.get("", response_class=PlainTextResponse)
async def metrics(service: AIService = Depends(get_ai_service)):
    """
    Prometheus metrics endpoint.

    No authentication required (standard Prometheus practice).
    """
    stats = service.registry.statistics()
    scripture = stats.available_scripture_providers
    update_available_providers(stats.available_providers - scripture, scripture)

    try:
        metrics_data = get_metrics()
    except Exception as e:
        logger.error(
            "metrics_endpoint_error",
            error=str(e),
            error_type=type(e).__name__,
            exc_info=True,
        )
        return Response(
            content=b"# Error collecting metrics\n",
            media_type=get_metrics_content_type(),
        )
    return Response(content=metrics_data, media_type=get_metrics_content_type())
