import pytest
from app.services.catalog_service import CatalogService
from app.models.movie import Movie
from factories import make_result, make_movie


@pytest.mark.asyncio
async def test_get_movie(mock_session):
    movie = make_movie(7)
    mock_session.get.return_value = movie
    service = CatalogService(mock_session)

    assert await service.get_movie(7) is movie
    mock_session.get.assert_awaited_once_with(Movie, 7)


@pytest.mark.asyncio
async def test_list_movies(mock_session):
    movies = [make_movie(2, title="Alien"), make_movie(1, title="Heat")]
    mock_session.execute.return_value = make_result(scalars=movies)
    service = CatalogService(mock_session)

    assert await service.list_movies() == movies
