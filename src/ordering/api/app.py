"""FastAPI application factory for the ordering API."""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from ordering.api.errors import register_error_handlers
from ordering.api.routes import order_router, product_router
from ordering.domain import ordering


def create_app() -> FastAPI:
    """Build the API. The ordering domain must already be initialized."""
    app = FastAPI(
        title="Storefront Ordering API",
        description="Order lifecycle, ledger sync and favorites for the storefront",
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
        """Run each request inside the ordering domain context."""
        with ordering.domain_context():
            return await call_next(request)

    app.include_router(order_router)
    app.include_router(product_router)
    register_error_handlers(app)

    @app.get("/health")
    async def health():
        return {"status": "ok", "domains": {"ordering": {"name": ordering.name}}}

    return app
