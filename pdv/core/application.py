"""
Application builder.
Separa middlewares, rotas, ciclo de vida e tratamento de erros do PDV.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Dict, Type

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pdv.core.config import settings
from pdv.core.logging import api_logger, app_logger, init_app_logging
from pdv.domain.errors import (
    CatalogValidationError,
    CheckoutInProgressError,
    CheckoutSaveError,
    EmptyCartError,
    InvalidCouponError,
    InvalidPaymentMethodError,
    InvalidStatusTransition,
    MissingPaymentMethodError,
    OrderFinalizedError,
    PDVError,
    SizeSelectionRequired,
    UnknownSizeError,
)
from pdv.infra.cloudinary_client import CloudinaryError
from pdv.infra.db import health_check
from pdv.infra.migrations import backfill_category_ids
from pdv.routers import (
    categories,
    checkout,
    combos,
    health,
    menu,
    orders,
    products,
)
from pdv.services.dependencies import get_catalog_view, get_document_store


ERROR_STATUS: Dict[Type[PDVError], int] = {
    CatalogValidationError: 422,
    EmptyCartError: 422,
    InvalidCouponError: 422,
    InvalidPaymentMethodError: 422,
    MissingPaymentMethodError: 422,
    SizeSelectionRequired: 422,
    UnknownSizeError: 422,
    InvalidStatusTransition: 409,
    OrderFinalizedError: 409,
    CheckoutInProgressError: 409,
    CheckoutSaveError: 502,
}


def status_for(exc: PDVError) -> int:
    for klass in type(exc).__mro__:
        if klass in ERROR_STATUS:
            return ERROR_STATUS[klass]
    return 400


class ApplicationBuilder:
    """Builder for FastAPI application with separated concerns."""

    def __init__(self):
        self.app = FastAPI(
            title=settings.APP_NAME,
            version="1.0.0",
            description="PDV e cardápio digital da MilkShakeMix",
            docs_url="/docs",
            redoc_url="/redoc",
        )
        self._middlewares_added = False
        self._routes_added = False
        self._startup_handlers_added = False

    def add_cors_middleware(self) -> ApplicationBuilder:
        """Add CORS middleware configuration."""
        if self._middlewares_added:
            raise RuntimeError("Middlewares already added")

        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.CORS_ORIGINS_LIST or ["http://localhost:3000", "http://localhost:5173"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
        app_logger.info("CORS middleware added")
        return self

    def add_security_middleware(self) -> ApplicationBuilder:
        """Add security-related headers."""
        if self._middlewares_added:
            raise RuntimeError("Middlewares already added")

        @self.app.middleware("http")
        async def add_security_headers(request: Request, call_next):
            response = await call_next(request)
            response.headers["X-Content-Type-Options"] = "nosniff"
            response.headers["X-Frame-Options"] = "DENY"
            return response

        app_logger.info("Security middleware added")
        return self

    def add_request_logging_middleware(self) -> ApplicationBuilder:
        """Add request logging middleware."""
        if self._middlewares_added:
            raise RuntimeError("Middlewares already added")

        @self.app.middleware("http")
        async def log_requests(request: Request, call_next):
            response = await call_next(request)
            api_logger.info(
                "Request handled",
                method=request.method,
                path=request.url.path,
                status=response.status_code,
            )
            return response

        app_logger.info("Request logging middleware added")
        return self

    def finalize_middlewares(self) -> ApplicationBuilder:
        """Mark middlewares as finalized."""
        self._middlewares_added = True
        return self

    def add_routes(self) -> ApplicationBuilder:
        """Add all API routes."""
        if self._routes_added:
            raise RuntimeError("Routes already added")

        self.app.include_router(health.router)

        # Administração do catálogo
        self.app.include_router(categories.router)
        self.app.include_router(products.router)
        self.app.include_router(combos.router)

        # Cliente, caixa e gestão de pedidos
        self.app.include_router(menu.router)
        self.app.include_router(checkout.router)
        self.app.include_router(orders.router)

        app_logger.info("All routes added")
        self._routes_added = True
        return self

    def add_startup_handlers(self) -> ApplicationBuilder:
        """Add startup and shutdown handlers."""
        if self._startup_handlers_added:
            raise RuntimeError("Startup handlers already added")

        @asynccontextmanager
        async def lifespan(app: FastAPI):
            app_logger.info("Starting application...")
            try:
                health_check()
                app_logger.info("Database connection validated")
            except Exception as exc:
                app_logger.error("Database connection failed", exc=exc)
                raise

            backfill_category_ids(get_document_store())
            view = get_catalog_view()

            app_logger.info("Application started successfully")
            yield

            app_logger.info("Shutting down application...")
            view.close()
            get_catalog_view.cache_clear()

        self.app.router.lifespan_context = lifespan
        self._startup_handlers_added = True
        app_logger.info("Startup handlers added")
        return self

    def add_exception_handlers(self) -> ApplicationBuilder:
        """Add global exception handlers."""

        @self.app.exception_handler(PDVError)
        async def business_error_handler(request: Request, exc: PDVError):
            content = {"detail": exc.message}
            if isinstance(exc, SizeSelectionRequired):
                content["sizes"] = exc.sizes
            return JSONResponse(status_code=status_for(exc), content=content)

        @self.app.exception_handler(LookupError)
        async def not_found_error_handler(request: Request, exc: LookupError):
            detail = exc.args[0] if exc.args else "Not found"
            return JSONResponse(status_code=404, content={"detail": detail})

        @self.app.exception_handler(CloudinaryError)
        async def image_host_error_handler(request: Request, exc: CloudinaryError):
            app_logger.error("Image host failed", exc=exc, status=exc.status_code)
            return JSONResponse(
                status_code=502,
                content={"detail": exc.message, "upstream_status": exc.status_code},
            )

        @self.app.exception_handler(500)
        async def internal_error_handler(request: Request, exc: Exception):
            app_logger.error("Internal error", exc=exc)
            return JSONResponse(
                status_code=500,
                content={"detail": "Internal server error"},
            )

        app_logger.info("Exception handlers added")
        return self

    def build(self) -> FastAPI:
        """Build and return the configured FastAPI application."""
        if not self._middlewares_added:
            raise RuntimeError("Middlewares not finalized")
        if not self._routes_added:
            raise RuntimeError("Routes not added")
        if not self._startup_handlers_added:
            raise RuntimeError("Startup handlers not added")

        app_logger.info("FastAPI application built successfully")
        return self.app


def create_application() -> FastAPI:
    """Create and configure the FastAPI application using the builder pattern."""
    init_app_logging()

    builder = (
        ApplicationBuilder()
        .add_cors_middleware()
        .add_security_middleware()
        .add_request_logging_middleware()
        .finalize_middlewares()
        .add_routes()
        .add_startup_handlers()
        .add_exception_handlers()
    )

    return builder.build()
