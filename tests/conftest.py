import os

# Settings require DB credentials at import time; tests never connect.
os.environ.setdefault("POSTGRES_USER", "test")
os.environ.setdefault("POSTGRES_PASSWORD", "test")

import itertools
import pytest
from unittest.mock import AsyncMock, MagicMock
from factories import NOW, make_result


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def mock_session():
    session = AsyncMock()

    # Setup execute result
    session.execute.side_effect = None
    session.execute.return_value = make_result()

    # Configure session.get to return None by default
    session.get.return_value = None

    # Record added objects; flush hands out primary keys like the database would
    session.added = []
    ids = itertools.count(100)

    def _add(obj):
        session.added.append(obj)

    async def _flush(*args, **kwargs):
        for obj in session.added:
            if getattr(obj, "id", None) is None:
                obj.id = next(ids)

    session.add = MagicMock(side_effect=_add)
    session.flush = AsyncMock(side_effect=_flush)
    session.connection = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.refresh = AsyncMock()

    return session
