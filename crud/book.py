# crud/book.py: statements take the session explicitly and never commit; the
# flows at the bottom group them into one transaction each
import logging
from typing import List, Optional

from sqlalchemy import select, update, delete
from sqlalchemy.ext.asyncio import AsyncSession

from database import atomic
from models import Book, Isbn
from schemas import BookBase, BookRecord
from services.covers import PLACEHOLDER_COVER, cover_url

logger = logging.getLogger(__name__)

def _with_isbn():
    return select(
        Book.id, Book.title, Book.author, Book.publish_date,
        Book.cover_url, Book.notes, Isbn.isbn,
    )

async def find_by_isbn(db: AsyncSession, isbn: str) -> Optional[BookRecord]:
    stmt = (
        _with_isbn()
        .join(Isbn, Isbn.book_id == Book.id)
        .where(Isbn.isbn == isbn)
        .order_by(Book.id)
        .limit(1)
    )
    row = (await db.execute(stmt)).first()
    return BookRecord.model_validate(row) if row else None

async def get_book(db: AsyncSession, book_id: int) -> Optional[BookRecord]:
    stmt = _with_isbn().outerjoin(Isbn, Isbn.book_id == Book.id).where(Book.id == book_id)
    row = (await db.execute(stmt)).first()
    return BookRecord.model_validate(row) if row else None

async def list_books(db: AsyncSession) -> List[BookRecord]:
    stmt = _with_isbn().outerjoin(Isbn, Isbn.book_id == Book.id).order_by(Book.title.asc(), Book.id)
    result = await db.execute(stmt)
    return [BookRecord.model_validate(row) for row in result.all()]

async def insert_book(db: AsyncSession, book_data: BookBase) -> int:
    new_book = Book(**book_data.model_dump())
    db.add(new_book)
    await db.flush()
    return new_book.id

async def link_isbn(db: AsyncSession, isbn: str, book_id: int):
    db.add(Isbn(isbn=isbn, book_id=book_id))
    await db.flush()

async def update_isbn(db: AsyncSession, book_id: int, isbn: str) -> bool:
    """Overwrite the book's ISBN. Returns False if it had none to overwrite."""
    result = await db.execute(update(Isbn).where(Isbn.book_id == book_id).values(isbn=isbn))
    return result.rowcount > 0

async def delete_isbn(db: AsyncSession, book_id: int):
    await db.execute(delete(Isbn).where(Isbn.book_id == book_id))

async def update_cover_url(db: AsyncSession, book_id: int, url: str):
    await db.execute(update(Book).where(Book.id == book_id).values(cover_url=url))

async def update_book(db: AsyncSession, book_id: int, book_data: BookBase) -> bool:
    result = await db.execute(
        update(Book)
        .where(Book.id == book_id)
        .values(**book_data.model_dump())
    )
    return result.rowcount > 0

async def delete_book(db: AsyncSession, book_id: int):
    await delete_isbn(db, book_id)
    await db.execute(delete(Book).where(Book.id == book_id))

async def create_book(db: AsyncSession, book_data: BookBase, isbn: Optional[str] = None) -> int:
    """Insert a book and, if given, its ISBN in one transaction."""
    async with atomic(db):
        book_id = await insert_book(db, book_data)
        if isbn:
            await link_isbn(db, isbn, book_id)
    logger.info("Inserted book with ID: %s", book_id)
    return book_id

async def save_book(db: AsyncSession, book_id: int, book_data: BookBase, isbn: str) -> bool:
    """Apply an edit form. Returns False if the book does not exist.

    A non-blank ISBN is stored (updated or inserted) and the cover is
    recomputed from it; a blank ISBN drops the ISBN row and resets the
    cover to the placeholder.
    """
    async with atomic(db):
        if not await update_book(db, book_id, book_data):
            return False
        if isbn:
            if not await update_isbn(db, book_id, isbn):
                await link_isbn(db, isbn, book_id)
            new_cover = cover_url(isbn)
            if book_data.cover_url and book_data.cover_url != new_cover:
                logger.info("Book %s: cover %r replaced by ISBN cover", book_id, book_data.cover_url)
            await update_cover_url(db, book_id, new_cover)
        else:
            await delete_isbn(db, book_id)
            await update_cover_url(db, book_id, PLACEHOLDER_COVER)
    return True

async def remove_book(db: AsyncSession, book_id: int):
    async with atomic(db):
        await delete_book(db, book_id)
