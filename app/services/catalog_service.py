from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import List, Optional
from app.models.movie import Movie

class CatalogService:
    """Read-only access to the movie catalog."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_movie(self, movie_id: int) -> Optional[Movie]:
        return await self.session.get(Movie, movie_id)

    async def list_movies(self) -> List[Movie]:
        stmt = select(Movie).order_by(Movie.title, Movie.id)
        result = await self.session.execute(stmt)
        return result.scalars().all()
