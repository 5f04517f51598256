"""
Book service: validation and upsert rules on top of a record store.
"""

from datetime import date
from typing import List, Optional, Protocol, Union

from api.database import BookRecord
from api.errors import AlreadyExists, InvalidInput, NotFound, Ok
from api.models import BookRequest
from utilities.logger import get_logger

logger = get_logger(__name__)


class RecordStore(Protocol):
    """Persistence operations the service depends on."""

    async def find_all(self) -> List[BookRecord]: ...
    async def find_by_id(self, book_id: int) -> Optional[BookRecord]: ...
    async def find_by_title(self, title: str) -> Optional[BookRecord]: ...
    async def save(self, book: BookRecord) -> BookRecord: ...
    async def delete(self, book: BookRecord) -> None: ...


def _new_record(book: BookRequest) -> BookRecord:
    # The supplied id is dropped so the store always assigns one.
    return BookRecord(
        title=book.title,
        author=book.author,
        number_of_pages=book.number_of_pages,
        published_date=book.published_date,
    )


class BookService:
    """Book operations returning tagged results instead of raising."""

    def __init__(self, store: RecordStore):
        self.store = store

    async def list(self) -> Ok[List[BookRecord]]:
        """Return all books."""
        return Ok(value=await self.store.find_all())

    async def get_by_id(self, book_id: int) -> Union[Ok[BookRecord], NotFound]:
        """Return the book with this id."""
        book = await self.store.find_by_id(book_id)
        if book is None:
            logger.warning("Book not found", book_id=book_id)
            return NotFound(kind="Book", field="id", value=book_id)
        return Ok(value=book)

    async def create(self, book: BookRequest) -> Union[Ok[BookRecord], InvalidInput, AlreadyExists]:
        """
        Create a book after validating it and checking its title is unused.

        Args:
            book: Incoming book payload

        Returns:
            Ok with the stored book, InvalidInput when title or author is
            missing or empty, AlreadyExists when the title is taken
        """
        if not book.title or not book.author:
            logger.warning("Rejected invalid book", title=book.title, author=book.author)
            return InvalidInput(message="Adding Book input is not valid")

        if await self.store.find_by_title(book.title) is not None:
            logger.warning("Book title already exists", title=book.title)
            return AlreadyExists(message=f"Book with title {book.title} already exists")

        created = await self.store.save(_new_record(book))
        logger.info("Book created", book_id=created.id, title=created.title)
        return Ok(value=created)

    async def update(self, book_id: int, book: BookRequest) -> Ok[BookRecord]:
        """
        Overwrite an existing book, or store the payload as a new book when
        ``book_id`` is unknown. Fields are not validated here.
        """
        existing = await self.store.find_by_id(book_id)
        if existing is None:
            created = await self.store.save(_new_record(book))
            logger.info("Book created on update", requested_id=book_id, book_id=created.id)
            return Ok(value=created)

        existing.title = book.title
        existing.author = book.author
        existing.number_of_pages = book.number_of_pages
        existing.published_date = date.today()
        updated = await self.store.save(existing)
        logger.info("Book updated", book_id=updated.id)
        return Ok(value=updated)

    async def remove(self, book_id: int) -> Union[Ok[None], NotFound]:
        """Delete the book with this id."""
        book = await self.store.find_by_id(book_id)
        if book is None:
            logger.warning("Book not found for delete", book_id=book_id)
            return NotFound(kind="Book id", field="for delete", value=book_id)

        await self.store.delete(book)
        logger.info("Book deleted", book_id=book_id)
        return Ok(value=None)
