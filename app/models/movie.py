from sqlalchemy import Column, Integer, String, Text
from app.db.base import Base

class Movie(Base):
    """Catalog entry. Owned by the catalog import; never written by the voting core."""
    __tablename__ = "movies"

    id = Column(Integer, primary_key=True)
    title = Column(String(255), nullable=False)
    poster_url = Column(Text)
    year = Column(Integer)
    genre = Column(String(255))
