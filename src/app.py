"""Furnishop storefront FastAPI application.

Serves the cart, checkout, payment callback, order and admin routes of the
ordering domain. Every request runs inside the domain's context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ordering.api.errors import register_storefront_exception_handlers
from ordering.api.routes import (
    admin_router,
    cart_router,
    checkout_router,
    order_router,
    payment_router,
    tracking_router,
)
from ordering.domain import ordering
from ordering.services import StorefrontServices, build_services
from ordering.utils.logging import configure_logging


def create_app(services: StorefrontServices | None = None) -> FastAPI:
    """Build the app around an initialized domain. Tests pass services wired with fakes."""
    app = FastAPI(
        title="Furnishop Storefront API",
        description="Cart, checkout and order lifecycle",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        """Push the ordering domain context for each request."""
        with ordering.domain_context():
            return await call_next(request)

    with ordering.domain_context():
        app.state.services = services or build_services()

    register_storefront_exception_handlers(app)
    for router in (cart_router, checkout_router, payment_router, order_router, tracking_router, admin_router):
        app.include_router(router)

    @app.get("/health")
    async def health():
        return JSONResponse(content={"status": "ok", "domain": ordering.name})

    return app


# Initialized at module level so uvicorn workers share one registry.
configure_logging()
ordering.init()
app = create_app()
