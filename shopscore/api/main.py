"""FastAPI application main module.

This module defines the FastAPI application, wires the recommender session,
the error handler and the request logging middleware, and exposes health,
status and metrics endpoints.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from shopscore.api.logging_config import RequestLoggingMiddleware, setup_logging
from shopscore.api.metrics import metrics_service
from shopscore.api.routes import recommend, train
from shopscore.config import settings
from shopscore.recommender.exceptions import ShopScoreError
from shopscore.recommender.session import RecommenderSession

logger = logging.getLogger(__name__)


def create_app(session: Optional[RecommenderSession] = None) -> FastAPI:
    """Build the application around a recommender session.

    Args:
        session: Session to serve. A session configured from ``settings`` is
            created when None.
    """
    app = FastAPI(
        title="ShopScore API",
        description="Personalized product scoring service",
        version="0.1.0",
    )
    app.state.session = session or RecommenderSession(
        catalog_source=settings.catalog_source,
        config=settings.training_config(),
    )

    app.add_middleware(RequestLoggingMiddleware)
    app.include_router(train.router)
    app.include_router(recommend.router)

    @app.exception_handler(ShopScoreError)
    async def shopscore_error_handler(request: Request, exc: ShopScoreError) -> JSONResponse:
        logger.warning(
            exc.message,
            extra={"stage": exc.stage, "error_type": type(exc).__name__},
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": type(exc).__name__,
                "message": exc.message,
                "stage": exc.stage,
                "details": exc.details,
            },
        )

    @app.get("/ping")
    def ping() -> Dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok"}

    @app.get("/status")
    def status(request: Request) -> Dict[str, Any]:
        """Report whether a model is trained and what it was trained on."""
        return request.app.state.session.status()

    @app.get("/metrics")
    def metrics() -> Dict[str, Any]:
        return metrics_service.get_metrics()

    return app


setup_logging(settings.log_level)
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "shopscore.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
