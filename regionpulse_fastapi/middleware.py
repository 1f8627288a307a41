"""ASGI-middleware для экспорта Prometheus-метрик на /metrics."""

from __future__ import annotations

from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, CollectorRegistry, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp


class RegionPulseMiddleware(BaseHTTPMiddleware):
    """Middleware для FastAPI: обслуживает ``/metrics`` endpoint.

    Перед выдачей метрик обновляет статусы групп, если RegionPulse
    доступен в ``app.state.regionpulse``.

    Пример::

        app.add_middleware(RegionPulseMiddleware)
        # или с кастомным registry:
        app.add_middleware(RegionPulseMiddleware, registry=my_registry, metrics_path="/custom")
    """

    def __init__(
        self,
        app: ASGIApp,
        registry: CollectorRegistry | None = None,
        metrics_path: str = "/metrics",
    ) -> None:
        super().__init__(app)
        self._registry = registry if registry is not None else REGISTRY
        self._metrics_path = metrics_path

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        """Перехватывает запросы к метрикам, остальное передаёт дальше."""
        if request.url.path != self._metrics_path:
            return await call_next(request)

        rp = getattr(request.app.state, "regionpulse", None)
        if rp is not None:
            rp.publish_metrics()
        return Response(content=generate_latest(self._registry), media_type=CONTENT_TYPE_LATEST)
