from pydantic import BaseModel, field_validator
from typing import Optional

class BookBase(BaseModel):
    title: str
    author: str
    publish_date: Optional[str] = None
    cover_url: Optional[str] = None
    notes: Optional[str] = None

class BookCreate(BookBase):
    pass

class BookUpdate(BookBase):
    pass

class BookRecord(BookBase):
    """A stored book joined with its ISBN row, if any."""
    id: int
    isbn: Optional[str] = None

    class Config:
        from_attributes = True

class BookMetadata(BaseModel):
    title: str
    author_name: str
    publish_date: Optional[str] = None

class BookForm(BaseModel):
    """Form fields posted by the create and edit views, trimmed."""
    title: str = ""
    author: str = ""
    publish_date: str = ""
    cover_url: str = ""
    notes: str = ""
    isbn: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def strip(cls, value):
        return value.strip() if isinstance(value, str) else ""

    def to_book(self, cover_url: Optional[str] = None) -> BookUpdate:
        return BookUpdate(
            title=self.title,
            author=self.author,
            publish_date=self.publish_date or None,
            cover_url=cover_url if cover_url is not None else (self.cover_url or None),
            notes=self.notes or None,
        )
