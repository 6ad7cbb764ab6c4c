"""FastAPI application exposing the SEO Copilot operations.

Provides HTTP endpoints for:
- POST /api/competitor/analyze - multi-provider competitor analysis
- POST /api/content/analyze - multi-provider content scoring
- POST /api/content/enhance - routed content rewrite
- POST /api/keywords/research - routed keyword research
- POST /api/content/readability, /api/content/originality,
  /api/seo/recommendations - routed single-dimension checks
- GET /api/providers - router, usage and cache status per provider
- POST /api/providers/{name}/enable - operator re-enable
- POST /api/providers/{name}/switch - mark a provider as current
- POST /api/cache/clear - drop cached provider responses
- GET /health, /live, /metrics - health and Prometheus metrics

Every JSON response of the /api routes is an APIResponse envelope.

Usage:
    from seo_copilot.api.server import create_app
    app = create_app(orchestrator)
"""

from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

import structlog
from fastapi import Body, FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse

from seo_copilot import __version__
from seo_copilot.health.checks import HealthStatus
from seo_copilot.models.envelope import APIError, APIResponse, ResponseMetadata
from seo_copilot.models.llm import ProviderName
from seo_copilot.observability.context import correlation_id_context
from seo_copilot.observability.metrics import (
    HTTP_REQUESTS_TOTAL,
    get_metrics_content_type,
    get_metrics_text,
)
from seo_copilot.orchestration.container import Orchestrator
from seo_copilot.utils.exceptions import (
    InvalidRequestError,
    RateLimitExceeded,
    SeoCopilotError,
)

logger = structlog.get_logger()

REQUEST_ID_HEADER = "X-Request-ID"


def status_code_for(error: SeoCopilotError) -> int:
    if isinstance(error, InvalidRequestError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(error, RateLimitExceeded):
        return status.HTTP_429_TOO_MANY_REQUESTS
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _envelope(response: APIResponse[Any], status_code: int = 200) -> JSONResponse:
    return JSONResponse(content=response.to_json_dict(), status_code=status_code)


def _error_response(error: APIError, status_code: int) -> JSONResponse:
    return _envelope(
        APIResponse.fail(error, ResponseMetadata(cached=False)), status_code
    )


def _provider_name(name: str) -> ProviderName:
    try:
        return ProviderName(name.lower())
    except ValueError:
        raise InvalidRequestError(f"Unknown provider: {name}")


def create_app(
    orchestrator: Orchestrator,
    title: str = "SEO Copilot API",
    version: str = __version__,
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        orchestrator: Container holding providers, router and services
        title: API title
        version: API version

    Returns:
        Configured FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):  # pragma: no cover
        logger.info("api_server_starting")
        yield
        await orchestrator.close()
        logger.info("api_server_stopping")

    app = FastAPI(
        title=title,
        version=version,
        description="Multi-provider LLM orchestration for SEO content analysis",
        lifespan=lifespan,
    )
    app.state.orchestrator = orchestrator

    @app.middleware("http")
    async def correlation_middleware(request: Request, call_next: Any) -> Response:
        with correlation_id_context(request.headers.get(REQUEST_ID_HEADER)) as corr_id:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = corr_id
        HTTP_REQUESTS_TOTAL.labels(
            route=request.url.path, status_code=str(response.status_code)
        ).inc()
        return response

    @app.exception_handler(SeoCopilotError)
    async def handle_orchestration_error(
        request: Request, exc: SeoCopilotError
    ) -> JSONResponse:
        logger.warning(
            "request_failed",
            path=request.url.path,
            error_code=exc.code,
            error=exc.message,
        )
        return _error_response(exc.to_api_error(), status_code_for(exc))

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return _error_response(
            APIError(
                code=InvalidRequestError.code,
                message="Request body must be a JSON object",
                retryable=False,
            ),
            status.HTTP_400_BAD_REQUEST,
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("request_unexpected_error", path=request.url.path)
        return _error_response(
            APIError(
                code="INTERNAL_SERVER_ERROR",
                message=str(exc) or "Unknown error occurred",
                retryable=True,
            ),
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    # =========================================================================
    # Inbound operations
    # =========================================================================

    @app.post("/api/competitor/analyze", response_model=None)
    async def analyze_competitors(payload: Dict[str, Any] = Body(...)) -> Response:
        return _envelope(await orchestrator.competitors.analyze(payload))

    @app.post("/api/content/analyze", response_model=None)
    async def analyze_content(payload: Dict[str, Any] = Body(...)) -> Response:
        return _envelope(await orchestrator.content.analyze(payload))

    @app.post("/api/content/enhance", response_model=None)
    async def enhance_content(payload: Dict[str, Any] = Body(...)) -> Response:
        return _envelope(await orchestrator.enhancement.enhance(payload))

    @app.post("/api/keywords/research", response_model=None)
    async def research_keywords(payload: Dict[str, Any] = Body(...)) -> Response:
        return _envelope(await orchestrator.keywords.research(payload))

    @app.post("/api/content/readability", response_model=None)
    async def analyze_readability(payload: Dict[str, Any] = Body(...)) -> Response:
        return _envelope(await orchestrator.focused.readability(payload))

    @app.post("/api/content/originality", response_model=None)
    async def analyze_originality(payload: Dict[str, Any] = Body(...)) -> Response:
        return _envelope(await orchestrator.focused.originality(payload))

    @app.post("/api/seo/recommendations", response_model=None)
    async def seo_recommendations(payload: Dict[str, Any] = Body(...)) -> Response:
        return _envelope(await orchestrator.focused.seo_recommendations(payload))

    # =========================================================================
    # Operator endpoints
    # =========================================================================

    @app.get("/api/providers", response_model=None)
    async def provider_status() -> Dict[str, Any]:
        return {
            "providers": orchestrator.provider_status(),
            "usage": orchestrator.usage.get_summary(),
        }

    @app.post("/api/providers/{name}/enable", response_model=None)
    async def enable_provider(name: str) -> Dict[str, Any]:
        orchestrator.router.enable_provider(_provider_name(name))
        return {"enabled": name.lower(), "providers": orchestrator.router.get_provider_status()}

    @app.post("/api/providers/{name}/switch", response_model=None)
    async def switch_provider(name: str) -> Dict[str, Any]:
        switched = orchestrator.router.switch_to(_provider_name(name))
        return {"switched": switched, "providers": orchestrator.router.get_provider_status()}

    @app.post("/api/cache/clear", response_model=None)
    async def clear_cache(provider: Optional[str] = None) -> Dict[str, Any]:
        target = _provider_name(provider) if provider else None
        orchestrator.clear_cache(target)
        return {"cleared": target.value if target else "all"}

    # =========================================================================
    # Health and metrics
    # =========================================================================

    @app.get(
        "/health",
        response_model=None,
        summary="Provider health check",
        responses={
            200: {"description": "All providers healthy"},
            503: {"description": "One or more providers unavailable"},
        },
    )
    async def health_check() -> Response:
        report = await orchestrator.health.check_all()
        status_code = (
            status.HTTP_200_OK
            if report.status == HealthStatus.HEALTHY
            else status.HTTP_503_SERVICE_UNAVAILABLE
        )
        return JSONResponse(content=report.to_dict(), status_code=status_code)

    @app.get("/live", response_model=None, summary="Liveness probe")
    async def liveness_probe() -> Response:
        is_alive = await orchestrator.health.is_alive()
        return JSONResponse(
            content={"alive": is_alive, "message": "Service is alive"},
            status_code=status.HTTP_200_OK,
        )

    @app.get("/metrics", response_class=PlainTextResponse, summary="Prometheus metrics")
    async def prometheus_metrics() -> Response:
        return Response(content=get_metrics_text(), media_type=get_metrics_content_type())

    @app.get("/", response_model=None)
    async def root() -> Dict[str, Any]:
        return {
            "name": title,
            "version": version,
            "endpoints": {
                "competitors": "/api/competitor/analyze",
                "content": "/api/content/analyze",
                "enhance": "/api/content/enhance",
                "keywords": "/api/keywords/research",
                "readability": "/api/content/readability",
                "originality": "/api/content/originality",
                "recommendations": "/api/seo/recommendations",
                "providers": "/api/providers",
                "health": "/health",
                "metrics": "/metrics",
            },
        }

    return app


def run_server(  # pragma: no cover
    orchestrator: Orchestrator,
    host: str = "127.0.0.1",
    port: int = 8000,
    log_level: str = "info",
) -> None:
    """Run the API server (blocking)."""
    import uvicorn

    app = create_app(orchestrator)
    logger.info("api_server_starting", host=host, port=port)
    uvicorn.run(app, host=host, port=port, log_level=log_level)
