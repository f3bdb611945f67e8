"""Pydantic schemas for API requests and responses."""

from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


class CreateURLRequest(BaseModel):
    """Request to shorten a URL."""

    long_url: str = Field(..., description="The URL to shorten (http or https)")
    custom_code: Optional[str] = Field(None, description="Optional custom short code (5-20 letters and digits)")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "long_url": "https://example.com/very/long/path/to/resource",
                    "custom_code": None
                },
                {
                    "long_url": "https://github.com/user/repo",
                    "custom_code": "myrepo"
                }
            ]
        }
    }


class ShortURLResponse(BaseModel):
    """A short URL with its click statistics."""

    short_code: str = Field(..., description="The short code")
    long_url: str = Field(..., description="The canonical destination URL")
    click_count: int = Field(..., description="Clicks on this short code")
    long_url_click_count: int = Field(..., description="Clicks across all short codes for this destination")
    created_at: datetime = Field(..., description="Creation timestamp")
    short_url: Optional[str] = Field(None, description="The complete short URL")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "short_code": "aBc1234",
                    "long_url": "https://example.com/very/long/path",
                    "click_count": 3,
                    "long_url_click_count": 5,
                    "created_at": "2024-01-01T12:00:00Z",
                    "short_url": "https://short.link/aBc1234"
                }
            ]
        }
    }


class PagedURLResponse(BaseModel):
    """A page of short URLs."""

    items: List[ShortURLResponse]
    total_count: int = Field(..., description="Matches across all pages")


class URLStatsResponse(BaseModel):
    """Click statistics for a short code."""

    short_code: str
    click_count: int
    created_at: datetime


class DeleteResponse(BaseModel):
    """Confirmation of a deletion."""

    message: str


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Overall status")
    store: str = Field(..., description="Store status")
    total_urls: int = Field(..., description="Short URLs currently stored")
    listeners: int = Field(..., description="Connected event listeners")
    timestamp: datetime = Field(..., description="Check timestamp")


class ErrorResponse(BaseModel):
    """Error response."""

    error: str = Field(..., description="Error message")
    detail: Optional[str] = Field(None, description="Detailed error information")
