# main.py: ISBN lookup and personal book list
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional
from urllib.parse import quote

from fastapi import FastAPI, Form, Request, Depends, HTTPException
from fastapi.responses import HTMLResponse, PlainTextResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from config import configure_logging, settings
from database import init_db, get_db
from crud.book import find_by_isbn, get_book, list_books, create_book, save_book, remove_book
from schemas import BookCreate, BookForm
from services.covers import PLACEHOLDER_COVER, cover_url, display_cover_url
from services.openlibrary import CatalogError, OpenLibraryCatalog, get_catalog

configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent

@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    logger.info("Server running on port %s", settings.port)
    yield

app = FastAPI(title="BookList", lifespan=lifespan)
app.mount("/static", StaticFiles(directory=BASE_DIR / "static"), name="static")
templates = Jinja2Templates(directory=BASE_DIR / "templates")
templates.env.filters["cover"] = display_cover_url

# ─────────────────────── RESPONSES ───────────────────────
def render(request: Request, view: str, data: Optional[dict] = None) -> HTMLResponse:
    return templates.TemplateResponse(request, f"{view}.html", data or {})

def redirect(path: str) -> RedirectResponse:
    return RedirectResponse(path, status_code=303)

def error(status: int = 500, message: str = "Something went wrong") -> PlainTextResponse:
    return PlainTextResponse(message, status_code=status)

def book_form(
    title: str = Form(""),
    author: str = Form(""),
    publish_date: str = Form(""),
    cover_url: str = Form(""),
    notes: str = Form(""),
    isbn: str = Form(""),
) -> BookForm:
    return BookForm(
        title=title, author=author, publish_date=publish_date,
        cover_url=cover_url, notes=notes, isbn=isbn,
    )

# ─────────────────────── ROUTES ───────────────────────
@app.get("/", response_class=HTMLResponse)
async def index(request: Request):
    return render(request, "index")

@app.get("/lookup")
async def lookup(isbn: str = ""):
    isbn = isbn.strip()
    return redirect(f"/book/{quote(isbn, safe='')}" if isbn else "/")

@app.get("/book/{isbn}", response_class=HTMLResponse)
async def show_isbn(
    isbn: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    catalog: OpenLibraryCatalog = Depends(get_catalog),
):
    isbn = isbn.strip()
    try:
        stored = await find_by_isbn(db, isbn)
        if stored:
            return render(request, "index", {
                "isbn": isbn,
                "title": stored.title,
                "author": stored.author,
                "publish_date": stored.publish_date,
                "cover_url": stored.cover_url,
            })

        metadata = await catalog.fetch(isbn)
        cover = cover_url(isbn)
        await create_book(db, BookCreate(
            title=metadata.title,
            author=metadata.author_name,
            publish_date=metadata.publish_date,
            cover_url=cover,
        ), isbn=isbn)
    except CatalogError as e:
        logger.error("Lookup of ISBN %s failed: %s", isbn, e)
        return error(500, "Error fetching book details")
    except SQLAlchemyError:
        logger.exception("Storing ISBN %s failed", isbn)
        return error(500, "Error fetching book details")

    return render(request, "index", {
        "isbn": isbn,
        "title": metadata.title,
        "author": metadata.author_name,
        "publish_date": metadata.publish_date,
        "cover_url": cover,
    })

@app.get("/books", response_class=HTMLResponse)
async def books(request: Request, db: AsyncSession = Depends(get_db)):
    try:
        all_books = await list_books(db)
    except SQLAlchemyError:
        logger.exception("Listing books failed")
        return error(500, "Error loading books")
    return render(request, "books", {"books": all_books})

@app.get("/books/new", response_class=HTMLResponse)
async def new_book_form(request: Request):
    return render(request, "new", {"book": BookForm()})

@app.post("/books")
async def add_book(form: BookForm = Depends(book_form), db: AsyncSession = Depends(get_db)):
    try:
        await create_book(db, form.to_book(form.cover_url or PLACEHOLDER_COVER), isbn=form.isbn or None)
    except SQLAlchemyError:
        logger.exception("Adding book %r failed", form.title)
        return error(500, "Error adding book")
    return redirect("/books")

@app.get("/books/{book_id}/edit", response_class=HTMLResponse)
async def edit_form(book_id: int, request: Request, db: AsyncSession = Depends(get_db)):
    try:
        book = await get_book(db, book_id)
    except SQLAlchemyError:
        logger.exception("Loading book %s failed", book_id)
        return error(500, "Error loading book")
    if not book:
        raise HTTPException(404, "Book not found")
    return render(request, "edit", {"book": book})

@app.post("/books/{book_id}/edit")
async def update_book_route(
    book_id: int,
    form: BookForm = Depends(book_form),
    db: AsyncSession = Depends(get_db),
):
    try:
        found = await save_book(db, book_id, form.to_book(), form.isbn)
    except SQLAlchemyError:
        logger.exception("Updating book %s failed", book_id)
        return error(500, "Error updating book")
    if not found:
        raise HTTPException(404, "Book not found")
    return redirect("/books")

@app.post("/books/{book_id}/delete")
async def delete_book_route(book_id: int, db: AsyncSession = Depends(get_db)):
    try:
        await remove_book(db, book_id)
    except SQLAlchemyError:
        logger.exception("Deleting book %s failed", book_id)
        return error(500, "Error deleting book")
    return redirect("/books")

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)
