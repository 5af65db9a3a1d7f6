"""
Base service class for catalog services.
"""

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from typing import Dict, Optional
import time
import os

from shared.config import ServiceConfig, get_config
from shared.logging import configure_logging, get_logger, set_request_id
from shared.metrics import get_metrics_collector
from shared.errors import CacheServiceException

REQUEST_ID_HEADER = "x-request-id"


def error_response(exc: CacheServiceException) -> JSONResponse:
    """Render a service exception with its status and an ``x-error`` header."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(),
        headers={"x-error": exc.message},
    )


def route_template(request: Request) -> str:
    """Matched route path (``/{org}/{site}/cache``), so metric labels stay bounded."""
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


class BaseService:
    """FastAPI scaffolding shared by the catalog services."""

    def __init__(self, service_name: str, port: int, config: Optional[ServiceConfig] = None):
        self.service_name = service_name
        self.config = config or get_config(service_name, port)
        self.logger = get_logger(service_name)
        self.metrics = get_metrics_collector(service_name)
        self._start_time = time.time()

        configure_logging(service_name, self.config.log_level)

        local = self.config.env == "local"
        self.app = FastAPI(
            title=f"{service_name.title()} Service",
            description=f"Catalog API - {service_name.title()} Service",
            version="1.0.0",
            docs_url="/docs" if local else None,
            redoc_url=None,
        )
        self._setup_middleware()
        self._setup_routes()
        self._setup_exception_handlers()

    def _setup_middleware(self):
        """Correlate, time and count every request."""

        @self.app.middleware("http")
        async def correlate_and_time(request: Request, call_next):
            request_id = set_request_id(request.headers.get(REQUEST_ID_HEADER))
            start_time = time.time()

            response = await call_next(request)

            duration = time.time() - start_time
            endpoint = route_template(request)
            self.metrics.record_http_request(
                method=request.method,
                endpoint=endpoint,
                status_code=response.status_code,
                duration=duration
            )
            self.logger.info(
                "HTTP request",
                method=request.method,
                path=request.url.path,
                endpoint=endpoint,
                status_code=response.status_code,
                duration_ms=round(duration * 1000, 2)
            )

            response.headers[REQUEST_ID_HEADER] = request_id
            return response

    def _setup_routes(self):
        """Health and Prometheus routes."""

        @self.app.get("/health")
        async def health_check():
            dependencies = await self._check_dependencies()
            self.metrics.record_health_check("ok")
            return {
                "service": self.service_name,
                "status": "ok",
                "env": self.config.env,
                "uptime_seconds": round(time.time() - self._start_time, 3),
                "dependencies": dependencies,
                "commit": os.getenv("GIT_COMMIT", "unknown")
            }

        @self.app.get("/metrics")
        async def metrics_endpoint():
            return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    def _setup_exception_handlers(self):
        """Render every failure as the standard error body with ``x-error``."""

        @self.app.exception_handler(CacheServiceException)
        async def service_exception_handler(request: Request, exc: CacheServiceException):
            log = self.logger.warning if exc.status_code < 500 else self.logger.error
            log("Service error", code=exc.code, message=exc.message, details=exc.details)
            self.metrics.record_error(exc.code)
            return error_response(exc)

        @self.app.exception_handler(Exception)
        async def unhandled_exception_handler(request: Request, exc: Exception):
            self.logger.error("Unhandled exception", error=str(exc), exc_info=True)
            self.metrics.record_error("INTERNAL_ERROR")
            return error_response(CacheServiceException("INTERNAL_ERROR", "Internal server error"))

    async def _check_dependencies(self) -> Dict[str, str]:
        """Override to report the state of outbound dependencies."""
        return {}

    def run(self):
        """Serve the app with uvicorn."""
        import uvicorn
        uvicorn.run(
            self.app,
            host=self.config.host,
            port=self.config.port,
            log_level=self.config.log_level.lower()
        )
