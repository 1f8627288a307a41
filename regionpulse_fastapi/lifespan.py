"""Lifespan-менеджер: запуск и остановка RegionPulse вместе с FastAPI."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI

from regionpulse.api import RegionPulse
from regionpulse.registry import Registry


def regionpulse_lifespan(
    registry: Registry | None = None,
    **kwargs: Any,  # noqa: ANN401
) -> object:
    """Фабрика lifespan для FastAPI.

    Возвращает callable, совместимый с ``FastAPI(lifespan=...)``.
    Первый цикл опроса запускается сразу при старте приложения.
    ``kwargs`` передаются в ``RegionPulse``: ``prober``, ``poll_interval``,
    ``probe_timeout``, ``metrics_registry``, ``log``, ``clock``.
    Без ``registry`` используется ``DEFAULT_REGISTRY``.

    Пример::

        app = FastAPI(lifespan=regionpulse_lifespan(
            registry_from_dict(config),
            prober=HTTPProber(port=8080, path="/healthz"),
            poll_interval=timedelta(seconds=30),
            probe_timeout=timedelta(seconds=3),
            clock=lambda: datetime.now(UTC),
        ))
    """

    @asynccontextmanager
    async def _lifespan(app: FastAPI) -> AsyncIterator[dict[str, Any]]:
        rp = RegionPulse(registry, **kwargs)
        app.state.regionpulse = rp
        await rp.start()
        try:
            yield {"regionpulse": rp}
        finally:
            await rp.stop()

    return _lifespan
