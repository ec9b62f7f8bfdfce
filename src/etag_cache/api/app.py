"""Example product catalogue served through the response cache.

GET routes are cached per resource; PUT clears the affected entries.
"""

from typing import Any

from fastapi import FastAPI, HTTPException, status
from pydantic import ValidationError
from starlette.middleware import Middleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from etag_cache.api.dependencies import CacheDep, lifespan
from etag_cache.config import settings
from etag_cache.dto import (
    CacheConfigResponse,
    CacheInvalidateRequest,
    CacheInvalidateResponse,
    ProductUpdateRequest,
)
from etag_cache.handlers import CacheMiddleware, ClearCacheMiddleware
from etag_cache.services import ResponseCache

SEED_PRODUCTS: dict[int, dict[str, Any]] = {
    1: {"id": 1, "name": "Foo", "price": 100.0},
    2: {"id": 2, "name": "Bar", "price": 250.0},
}


def product_tag_prefix(request: Request) -> str:
    return f"product-{request.path_params['product_id']}"


def product_tag_patterns(request: Request) -> list[str]:
    return [f"{product_tag_prefix(request)}*", "/products*"]


async def list_products(request: Request) -> JSONResponse:
    catalogue = request.app.state.catalogue
    return JSONResponse(list(catalogue.values()))


async def get_product(request: Request) -> JSONResponse:
    product = request.app.state.catalogue.get(request.path_params["product_id"])
    if product is None:
        return JSONResponse({"detail": "Product not found"}, status_code=status.HTTP_404_NOT_FOUND)
    return JSONResponse(product)


async def update_product(request: Request) -> JSONResponse:
    product_id = request.path_params["product_id"]
    catalogue = request.app.state.catalogue
    if product_id not in catalogue:
        return JSONResponse({"detail": "Product not found"}, status_code=status.HTTP_404_NOT_FOUND)

    try:
        payload = ProductUpdateRequest.model_validate_json(await request.body())
    except ValidationError as e:
        return JSONResponse(
            {"detail": e.errors(include_url=False)},
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        )

    catalogue[product_id] = {"id": product_id, **payload.model_dump()}
    return JSONResponse(catalogue[product_id])


def create_app(response_cache: ResponseCache | None = None) -> FastAPI:
    """Build the example application.

    Args:
        response_cache: Cache to use. If None, the lifespan builds one from settings.

    Returns:
        The FastAPI application
    """
    routes = [
        Route("/products", list_products, middleware=[Middleware(CacheMiddleware)]),
        Route(
            "/products/{product_id:int}",
            get_product,
            middleware=[Middleware(CacheMiddleware, tag_prefix=product_tag_prefix)],
        ),
        Route(
            "/products/{product_id:int}",
            update_product,
            methods=["PUT"],
            middleware=[Middleware(ClearCacheMiddleware, tag_pattern=product_tag_patterns)],
        ),
    ]

    app = FastAPI(
        title="ETag Cache Example API",
        description="Product catalogue served through an ETag response cache",
        version="0.1.0",
        lifespan=lifespan,
        routes=routes,
    )
    app.state.catalogue = {product_id: dict(product) for product_id, product in SEED_PRODUCTS.items()}
    if response_cache is not None:
        app.state.response_cache = response_cache

    @app.get("/")
    async def root() -> dict[str, Any]:
        """Root endpoint with API information."""
        return {
            "name": "ETag Cache Example API",
            "version": "0.1.0",
            "endpoints": {
                "products": "/products",
                "cache_config": "/cache/config",
                "cache_invalidate": "/cache/invalidate",
                "docs": "/docs",
            },
        }

    @app.get("/cache/config", response_model=CacheConfigResponse)
    async def get_cache_config(cache: CacheDep) -> CacheConfigResponse:
        """Get the effective cache configuration."""
        return CacheConfigResponse(
            key_prefix=cache.key_prefix,
            ttl_seconds=cache.ttl,
            request_header_name=cache.request_header_name,
            response_header_name=cache.response_header_name,
            backend=type(cache.backend).__name__,
        )

    @app.post("/cache/invalidate", response_model=CacheInvalidateResponse)
    async def invalidate_cache(request: CacheInvalidateRequest, cache: CacheDep) -> CacheInvalidateResponse:
        """
        Invalidate every cached response matching the given patterns.

        Args:
            request: Pattern fragments, relative to the key prefix.

        Returns:
            Number of entries removed and the resolved key patterns.
        """
        patterns = cache.key_patterns(request.patterns)
        try:
            count = await cache.invalidate(patterns)
        except Exception as e:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Cache invalidation failed: {e}",
            ) from e

        return CacheInvalidateResponse(deleted_count=count, patterns=patterns)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "etag_cache.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
