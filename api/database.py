"""
Relational storage for book records.
Handles the async engine, session lifecycle, and CRUD operations for books.
"""

from contextlib import asynccontextmanager
from datetime import date
from typing import AsyncIterator, Dict, List, Optional

from sqlalchemy import Date, Integer, String, func, select, text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from utilities.logger import get_logger

logger = get_logger(__name__)


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""
    pass


class BookRecord(Base):
    """A stored book row.

    Title and author are nullable: updates write whatever the caller sends.
    """

    __tablename__ = "books"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, index=True)
    author: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    number_of_pages: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    published_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    def __repr__(self) -> str:
        return f"BookRecord(id={self.id!r}, title={self.title!r}, author={self.author!r})"


class BookStore:
    """
    Record store for books bound to a single session.
    Every write commits immediately.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_all(self) -> List[BookRecord]:
        """Return every stored book, in no particular order."""
        result = await self.session.execute(select(BookRecord))
        return list(result.scalars().all())

    async def find_by_id(self, book_id: int) -> Optional[BookRecord]:
        """Return the book with this id, or None."""
        return await self.session.get(BookRecord, book_id)

    async def find_by_title(self, title: str) -> Optional[BookRecord]:
        """Return the first book whose title matches exactly, or None."""
        result = await self.session.execute(
            select(BookRecord).where(BookRecord.title == title).limit(1)
        )
        return result.scalars().first()

    async def save(self, book: BookRecord) -> BookRecord:
        """
        Insert the book if it has no id yet, otherwise replace the stored row.

        Args:
            book: Record to persist

        Returns:
            The persisted record with its assigned id
        """
        if book.id is not None:
            book = await self.session.merge(book)
        else:
            self.session.add(book)
        await self.session.commit()
        await self.session.refresh(book)
        logger.debug("Saved book", book_id=book.id, title=book.title)
        return book

    async def delete(self, book: BookRecord) -> None:
        """Delete a stored book."""
        await self.session.delete(book)
        await self.session.commit()
        logger.debug("Deleted book", book_id=book.id)

    async def count(self) -> int:
        """Return the number of stored books."""
        result = await self.session.execute(select(func.count()).select_from(BookRecord))
        return result.scalar_one()


class DatabaseManager:
    """
    Async database manager.
    Owns the engine and session factory for the lifetime of the application.
    """

    def __init__(self, database_url: str, echo: bool = False):
        """
        Initialize the database manager.

        Args:
            database_url: SQLAlchemy async connection URL
            echo: Log every SQL statement
        """
        self.database_url = database_url
        self.engine = create_async_engine(database_url, echo=echo, pool_pre_ping=True)
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def create_tables(self) -> None:
        """Create all tables that do not exist yet."""
        async with self.engine.begin() as connection:
            await connection.run_sync(Base.metadata.create_all)
        logger.info("Database tables ready", tables=list(Base.metadata.tables))

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Provide a session that rolls back on error and always closes."""
        session = self._session_factory()
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def health_check(self) -> Dict:
        """
        Perform database health check.

        Returns:
            Dictionary with health status
        """
        try:
            async with self.session() as session:
                await session.execute(text("SELECT 1"))
                books_count = await BookStore(session).count()

            return {
                "status": "healthy",
                "books_table": "accessible",
                "books_count": books_count
            }
        except Exception as e:
            logger.error("Database health check failed", error=str(e))
            return {
                "status": "unhealthy",
                "error": str(e)
            }

    async def disconnect(self) -> None:
        """Dispose of the engine and its connection pool."""
        await self.engine.dispose()
        logger.info("Disconnected from database")
