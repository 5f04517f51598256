"""
FastAPI main application for the Book record service.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Annotated, AsyncIterator, List, Optional

from fastapi import APIRouter, Depends, FastAPI, Path, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.exceptions import HTTPException

from api.config import APIConfig, config as default_config
from api.database import BookStore, DatabaseManager
from api.errors import BookError, Ok, classify
from api.models import INT64_MAX, INT64_MIN, BookRequest, BookResponse, ErrorResponse, HealthResponse
from api.service import BookService
from utilities.logger import get_logger, setup_logging

# Setup logging
logger = get_logger(__name__)

MSG_INVALID = "Invalid Request"

BookId = Annotated[int, Path(ge=INT64_MIN, le=INT64_MAX, description="Book identifier")]


def error_response(error: BookError) -> JSONResponse:
    """Render a service error outcome as a JSON response."""
    status_code, body = classify(error)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(exclude_none=True)
    )


async def get_session(request: Request) -> AsyncIterator[AsyncSession]:
    """Yield a database session for the current request."""
    db_manager: DatabaseManager = request.app.state.db_manager
    async with db_manager.session() as session:
        yield session


async def get_book_service(session: AsyncSession = Depends(get_session)) -> BookService:
    """Build a book service bound to the request session."""
    return BookService(BookStore(session))


router = APIRouter(prefix="/book", tags=["Books"])


@router.get(
    "",
    response_model=List[BookResponse],
    summary="Retrieves books",
    responses={200: {"description": "Books found"}}
)
async def get_all_books(service: BookService = Depends(get_book_service)):
    """Retrieve all books from the database."""
    result = await service.list()
    return result.value


@router.get(
    "/{book_id}",
    response_model=BookResponse,
    summary="Retrieves a book by its ID",
    responses={
        200: {"description": "Book found"},
        404: {"model": ErrorResponse, "description": "Book not found"}
    }
)
async def fetch_book_by_id(book_id: BookId, service: BookService = Depends(get_book_service)):
    """
    Retrieve a book based on its ID.

    - **book_id**: Book identifier
    """
    result = await service.get_by_id(book_id)
    if not isinstance(result, Ok):
        return error_response(result)
    return result.value


@router.post(
    "",
    response_model=BookResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Creates a new book record",
    responses={
        201: {"description": "Book created"},
        400: {"model": ErrorResponse, "description": "Title or author missing"},
        409: {"model": ErrorResponse, "description": "Book with this title already exists"}
    }
)
async def create_book(book: BookRequest, service: BookService = Depends(get_book_service)):
    """
    Add a book to the database.

    Title and author are required and titles must be unique.
    """
    result = await service.create(book)
    if not isinstance(result, Ok):
        return error_response(result)
    return result.value


@router.put(
    "/{book_id}",
    response_model=BookResponse,
    summary="Update a book based on its ID",
    responses={200: {"description": "Book updated, or created when the ID is unknown"}}
)
async def update_book(
    book_id: BookId,
    book: BookRequest,
    service: BookService = Depends(get_book_service)
):
    """
    Update the book details.

    Creates a new book when no book has this ID.
    """
    result = await service.update(book_id, book)
    return result.value


@router.delete(
    "/{book_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete a book based on its ID",
    responses={
        204: {"description": "Book deleted"},
        404: {"model": ErrorResponse, "description": "Book not found"}
    }
)
async def delete_book(book_id: BookId, service: BookService = Depends(get_book_service)):
    """Delete the book with this ID."""
    result = await service.remove(book_id)
    if not isinstance(result, Ok):
        return error_response(result)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


def create_app(app_config: Optional[APIConfig] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        app_config: Settings to use; defaults to the environment-driven config

    Returns:
        Configured FastAPI application
    """
    app_config = app_config or default_config

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        setup_logging(
            log_level=app_config.log_level,
            log_format=app_config.log_format,
            log_file=app_config.log_file,
            debug=app_config.debug
        )
        logger.info("Starting Book API", version=app_config.api_version)

        db_manager = DatabaseManager(app_config.database_url, echo=app_config.database_echo)
        try:
            await db_manager.create_tables()
            logger.info("Database connection established")
        except Exception as e:
            logger.error("Failed to connect to database", error=str(e))
            await db_manager.disconnect()
            raise
        app.state.db_manager = db_manager

        yield

        logger.info("Shutting down Book API")
        await db_manager.disconnect()

    app = FastAPI(
        title=app_config.api_title,
        description=app_config.api_description,
        version=app_config.api_version,
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_config.cors_origins,
        allow_credentials=app_config.cors_allow_credentials,
        allow_methods=app_config.cors_allow_methods,
        allow_headers=app_config.cors_allow_headers,
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle malformed request bodies and path parameters."""
        details = [
            f"{'.'.join(str(loc) for loc in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        ]
        logger.warning("Invalid request", path=request.url.path, details=details)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=ErrorResponse(message=MSG_INVALID, details=details).model_dump(exclude_none=True)
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        """Handle HTTP exceptions."""
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(message=str(exc.detail)).model_dump(exclude_none=True),
            headers=exc.headers
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle general exceptions."""
        logger.error("Unhandled exception", error=str(exc), path=request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(
                message="Internal server error",
                detail=str(exc) if app_config.debug else None
            ).model_dump(exclude_none=True)
        )

    # Health check endpoint
    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check(request: Request):
        """Health check endpoint."""
        health_info = await request.app.state.db_manager.health_check()
        db_status = health_info.get("status", "unknown")

        return HealthResponse(
            status="healthy" if db_status == "healthy" else "degraded",
            timestamp=datetime.now(timezone.utc),
            version=app_config.api_version,
            database_status=db_status
        )

    app.include_router(router, prefix=app_config.api_prefix)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "api.main:app",
        host=default_config.host,
        port=default_config.port,
        reload=default_config.debug,
        log_level="info"
    )
