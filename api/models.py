"""
API models and schemas for the FastAPI application.
"""

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

# Storage integer ranges: ids are 64-bit, page counts 32-bit.
INT64_MIN = -2**63
INT64_MAX = 2**63 - 1
INT32_MIN = -2**31
INT32_MAX = 2**31 - 1


class BookRequest(BaseModel):
    """Book payload accepted by create and update.

    Every field is optional at the schema level; create applies its own
    title/author checks and update applies none.
    """
    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "title": "Rajesh assignment",
                "author": "Rajesh",
                "numberOfPages": 1,
                "publishedDate": "2021-06-01"
            }
        }
    )

    id: Optional[int] = Field(None, ge=INT64_MIN, le=INT64_MAX, description="Ignored; the store assigns ids")
    title: Optional[str] = Field(None, description="Book title")
    author: Optional[str] = Field(None, description="Book author")
    number_of_pages: Optional[int] = Field(
        None, ge=INT32_MIN, le=INT32_MAX, alias="numberOfPages", description="Number of pages"
    )
    published_date: Optional[date] = Field(None, alias="publishedDate", description="Publication date")


class BookResponse(BaseModel):
    """Book response model for API."""
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: int = Field(..., description="Unique book identifier")
    title: Optional[str] = Field(None, description="Book title")
    author: Optional[str] = Field(None, description="Book author")
    number_of_pages: Optional[int] = Field(None, alias="numberOfPages", description="Number of pages")
    published_date: Optional[date] = Field(None, alias="publishedDate", description="Publication date")


class ErrorResponse(BaseModel):
    """Error response model."""
    message: str = Field(..., description="Error message")
    details: Optional[List[str]] = Field(None, description="Per-field validation problems")
    detail: Optional[str] = Field(None, description="Additional error details")


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(..., description="Service status")
    timestamp: datetime = Field(..., description="Current timestamp")
    version: str = Field(..., description="API version")
    database_status: str = Field(..., description="Database connection status")
