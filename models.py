# models.py
from sqlalchemy import Column, ForeignKey, Integer, String, Text
from database import Base

class Book(Base):
    __tablename__ = "books"
    id = Column(Integer, primary_key=True)
    title = Column(String, nullable=False, index=True)
    author = Column(String, nullable=False)
    publish_date = Column(String, nullable=True)
    cover_url = Column(String, nullable=True)
    notes = Column(Text, nullable=True)

class Isbn(Base):
    __tablename__ = "isbns"
    # one ISBN per book; the same ISBN may still appear on several books
    book_id = Column(Integer, ForeignKey("books.id"), primary_key=True)
    isbn = Column(String, nullable=False, index=True)
