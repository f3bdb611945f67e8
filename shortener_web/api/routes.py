"""API routes implementation."""

from typing import List, Optional

from fastapi import APIRouter, Request, Response, status
from datetime import datetime, timezone

from .schemas import (
    CreateURLRequest,
    ShortURLResponse,
    PagedURLResponse,
    URLStatsResponse,
    DeleteResponse,
    HealthResponse,
    ErrorResponse,
)
from shortener.exceptions import invalid_input
from shortener.models import ShortURLResult
from shortener.common.url_builder import short_url_for_request
from shortener.common.validators import is_valid_search

router = APIRouter()

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid request"},
    404: {"model": ErrorResponse, "description": "Short code not found"},
}


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


def _to_response(request: Request, result: ShortURLResult) -> ShortURLResponse:
    """Build API response, adding the complete short URL."""
    config = request.app.state.config
    short_url = short_url_for_request(
        result.short_code,
        headers=request.headers,
        fallback_base_url=config.base_url,
        fallback_prefix=config.path_prefix,
        request_scheme=request.url.scheme,
        request_host=request.headers.get("host"),
    )
    return ShortURLResponse(
        short_code=result.short_code,
        long_url=result.long_url,
        click_count=result.click_count,
        long_url_click_count=result.long_url_click_count,
        created_at=result.created_at,
        short_url=short_url,
    )


@router.get(
    "/urls",
    response_model=List[ShortURLResponse],
    summary="List all short URLs",
)
async def list_urls(request: Request):
    """List every short URL with click statistics."""
    service = request.app.state.service
    return [_to_response(request, result) for result in service.list_all_urls()]


@router.get(
    "/urls/paged",
    response_model=PagedURLResponse,
    responses={400: ERROR_RESPONSES[400]},
    summary="List short URLs page by page",
    description="Newest first. Limit is clamped to [1, max page size]; search filters on the long URL.",
)
async def list_urls_paged(
    request: Request,
    offset: int = 0,
    limit: Optional[int] = None,
    search: Optional[str] = None,
):
    """List a page of short URLs."""
    service = request.app.state.service
    config = request.app.state.config

    is_valid, error = is_valid_search(search, max_length=config.max_search_length)
    if not is_valid:
        raise invalid_input(error)

    offset = max(offset, 0)
    limit = _clamp(limit if limit is not None else config.default_page_size, 1, config.max_page_size)

    page = service.list_paged_urls(offset=offset, limit=limit, search=search)
    return PagedURLResponse(
        items=[_to_response(request, result) for result in page.items],
        total_count=page.total_count,
    )


@router.get(
    "/urls/recent",
    response_model=List[ShortURLResponse],
    summary="List recent short URLs",
)
async def list_recent_urls(request: Request, count: Optional[int] = None):
    """List the most recently created short URLs."""
    service = request.app.state.service
    config = request.app.state.config

    count = _clamp(count if count is not None else config.default_recent_count, 1, config.max_page_size)
    return [_to_response(request, result) for result in service.list_recent_urls(count)]


@router.post(
    "/urls",
    response_model=ShortURLResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: ERROR_RESPONSES[400],
        409: {"model": ErrorResponse, "description": "Short code already exists"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
    },
    summary="Create short URL",
    description="Create a shortened URL. Optionally provide a custom short code.",
)
async def create_url(request: Request, response: Response, body: CreateURLRequest):
    """Create a shortened URL."""
    service = request.app.state.service

    result = service.create_short_url(
        long_url=body.long_url,
        custom_code=body.custom_code,
    )

    response.headers["Location"] = str(request.url_for("resolve_url", short_code=result.short_code))
    return _to_response(request, result)


@router.get(
    "/urls/{short_code}",
    response_model=ShortURLResponse,
    responses=ERROR_RESPONSES,
    summary="Resolve short URL",
    description="Resolve a short code to its details. Counts as a click.",
)
async def resolve_url(request: Request, short_code: str):
    """Resolve a short code."""
    service = request.app.state.service
    return _to_response(request, service.resolve(short_code))


@router.delete(
    "/urls/{short_code}",
    response_model=DeleteResponse,
    responses=ERROR_RESPONSES,
    summary="Delete short URL",
)
async def delete_url(request: Request, short_code: str):
    """Delete a short URL."""
    service = request.app.state.service
    service.delete_short_url(short_code)
    return DeleteResponse(message=f"Short code '{short_code}' deleted")


@router.get(
    "/urls/{short_code}/stats",
    response_model=URLStatsResponse,
    responses=ERROR_RESPONSES,
    summary="Get click statistics",
    description="Click count and creation time. Does not count as a click.",
)
async def get_url_stats(request: Request, short_code: str):
    """Get statistics for a short code."""
    service = request.app.state.service
    stats = service.get_stats(short_code)
    return URLStatsResponse(
        short_code=stats.short_code,
        click_count=stats.click_count,
        created_at=stats.created_at,
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check if the service is healthy.",
)
async def health_check(request: Request):
    """Health check endpoint for load balancers and monitoring."""
    service = request.app.state.service
    hub = request.app.state.hub

    health = service.health_check()

    return HealthResponse(
        status="healthy" if health["overall"] else "unhealthy",
        store="healthy" if health["store"] else "unhealthy",
        total_urls=health["total_urls"],
        listeners=hub.listener_count if hub else 0,
        timestamp=datetime.now(timezone.utc),
    )
