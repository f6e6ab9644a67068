import pytest
from sqlalchemy.exc import IntegrityError
from app.services.vote_service import VoteService
from app.models.vote import Vote
from app.core.exceptions import (
    InvalidInputError,
    UnauthorizedError,
    NotFoundError,
    ConflictError,
    InternalError,
)
from app.services.query_service import SessionQueryService
from factories import make_result, make_voting_session, make_movie, serialization_failure


def _like_flow(participant_count, liker_names, already_voted=None):
    return [
        make_result(scalar_one_or_none=make_voting_session()),
        make_result(scalar_one_or_none=already_voted),
        make_result(scalar=participant_count),
        make_result(scalars=liker_names),
    ]


@pytest.mark.asyncio
async def test_first_like_records_vote_without_match(mock_session, clock):
    mock_session.execute.side_effect = _like_flow(2, ["Alice"])
    mock_session.get.return_value = make_movie(7)
    service = VoteService(mock_session, clock=clock)

    result = await service.register_vote(1, 10, 7, "like")

    assert result.match is None
    (vote,) = mock_session.added
    assert isinstance(vote, Vote)
    assert (vote.session_id, vote.participant_id, vote.movie_id, vote.vote) == (1, 10, 7, "like")
    mock_session.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_second_like_returns_match(mock_session, clock):
    mock_session.execute.side_effect = _like_flow(2, ["Bob", "Alice"])
    mock_session.get.return_value = make_movie(7, title="Inception")
    service = VoteService(mock_session, clock=clock)

    result = await service.register_vote(1, 11, 7, "like")

    assert result.match is not None
    assert result.match.movie_id == 7
    assert result.match.title == "Inception"
    assert result.match.like_count == 2
    assert result.match.users_who_liked == ["Alice", "Bob"]
    mock_session.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_solo_session_never_matches(mock_session, clock):
    mock_session.execute.side_effect = _like_flow(1, ["Alice", "Alice"])
    mock_session.get.return_value = make_movie(7)
    service = VoteService(mock_session, clock=clock)

    result = await service.register_vote(1, 10, 7, "like")

    assert result.match is None
    # Guard short-circuits before the likers are read
    assert mock_session.execute.await_count == 3


@pytest.mark.asyncio
async def test_dislike_skips_match_evaluation(mock_session, clock):
    mock_session.execute.side_effect = _like_flow(2, ["Alice", "Bob"])
    mock_session.get.return_value = make_movie(7)
    service = VoteService(mock_session, clock=clock)

    result = await service.register_vote(1, 10, 7, "dislike")

    assert result.match is None
    assert mock_session.added[0].vote == "dislike"
    assert mock_session.execute.await_count == 2


@pytest.mark.asyncio
async def test_duplicate_vote_is_a_conflict(mock_session, clock):
    mock_session.execute.side_effect = _like_flow(2, ["Alice"], already_voted=55)
    mock_session.get.return_value = make_movie(7)
    service = VoteService(mock_session, clock=clock)

    with pytest.raises(ConflictError):
        await service.register_vote(1, 10, 7, "like")

    assert mock_session.added == []
    mock_session.rollback.assert_awaited_once()
    mock_session.commit.assert_not_called()


@pytest.mark.asyncio
async def test_concurrent_duplicate_caught_by_unique_constraint(mock_session, clock):
    mock_session.execute.side_effect = _like_flow(2, ["Alice"])
    mock_session.get.return_value = make_movie(7)
    mock_session.flush.side_effect = IntegrityError(
        "INSERT INTO votes",
        {},
        Exception('duplicate key value violates unique constraint "uq_vote_session_participant_movie"'),
    )
    service = VoteService(mock_session, clock=clock)

    with pytest.raises(ConflictError):
        await service.register_vote(1, 10, 7, "like")

    mock_session.rollback.assert_awaited_once()
    mock_session.commit.assert_not_called()


@pytest.mark.asyncio
async def test_duplicate_losing_serialization_race_is_a_conflict(mock_session, clock):
    mock_session.execute.side_effect = [
        make_result(scalar_one_or_none=make_voting_session()),
        make_result(scalar_one_or_none=None),
        # Rerun sees the vote the other transaction committed
        make_result(scalar_one_or_none=make_voting_session()),
        make_result(scalar_one_or_none=55),
    ]
    mock_session.get.return_value = make_movie(7)
    mock_session.flush.side_effect = serialization_failure()
    service = VoteService(mock_session, clock=clock)

    with pytest.raises(ConflictError):
        await service.register_vote(1, 10, 7, "like")

    assert mock_session.connection.await_count == 2
    assert mock_session.rollback.await_count == 2
    mock_session.commit.assert_not_called()


@pytest.mark.asyncio
async def test_serialization_failure_at_commit_reruns_the_vote(mock_session, clock):
    mock_session.execute.side_effect = [
        make_result(scalar_one_or_none=make_voting_session()),
        make_result(scalar_one_or_none=None),
        make_result(scalar_one_or_none=make_voting_session()),
        make_result(scalar_one_or_none=55),
    ]
    mock_session.get.return_value = make_movie(7)
    mock_session.commit.side_effect = serialization_failure("COMMIT")
    service = VoteService(mock_session, clock=clock)

    with pytest.raises(ConflictError):
        await service.register_vote(1, 10, 7, "dislike")

    mock_session.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_vote_succeeds_after_unrelated_serialization_conflict(mock_session, clock):
    mock_session.execute.side_effect = [
        make_result(scalar_one_or_none=make_voting_session()),
        make_result(scalar_one_or_none=None),
    ] + _like_flow(2, ["Bob", "Alice"])
    mock_session.get.return_value = make_movie(7, title="Inception")
    mock_session.flush.side_effect = [serialization_failure(), None]
    service = VoteService(mock_session, clock=clock)

    result = await service.register_vote(1, 11, 7, "like")

    assert result.match is not None
    assert result.match.users_who_liked == ["Alice", "Bob"]
    mock_session.rollback.assert_awaited_once()
    mock_session.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_persistent_serialization_conflict_is_internal(mock_session, clock):
    mock_session.execute.side_effect = [
        make_result(scalar_one_or_none=make_voting_session()),
        make_result(scalar_one_or_none=None),
    ] * 3
    mock_session.get.return_value = make_movie(7)
    mock_session.flush.side_effect = serialization_failure()
    service = VoteService(mock_session, clock=clock)

    with pytest.raises(InternalError) as exc_info:
        await service.register_vote(1, 10, 7, "like")

    assert not isinstance(exc_info.value, ConflictError)
    assert mock_session.connection.await_count == 3
    mock_session.commit.assert_not_called()


@pytest.mark.asyncio
async def test_rejected_duplicate_leaves_tally_unchanged(mock_session, clock):
    mock_session.get.return_value = make_movie(7)
    service = VoteService(mock_session, clock=clock)

    mock_session.execute.side_effect = _like_flow(2, ["Alice"])
    await service.register_vote(1, 10, 7, "like")

    mock_session.execute.side_effect = _like_flow(2, ["Alice"], already_voted=100)
    with pytest.raises(ConflictError):
        await service.register_vote(1, 10, 7, "like")

    recorded = [obj for obj in mock_session.added if isinstance(obj, Vote)]
    assert len(recorded) == 1
    likes = sum(1 for v in recorded if v.movie_id == 7 and v.vote == "like")
    dislikes = sum(1 for v in recorded if v.movie_id == 7 and v.vote == "dislike")

    # Another member still sees a single like on the movie
    mock_session.execute.side_effect = [
        make_result(scalar_one_or_none=make_voting_session()),
        make_result(rows=[(make_movie(7), likes, dislikes)]),
    ]
    (movie,) = await SessionQueryService(mock_session, clock=clock).list_unvoted_movies(1, 11)
    assert movie.stats.likes == 1
    assert movie.stats.dislikes == 0



@pytest.mark.asyncio
async def test_other_integrity_errors_are_internal(mock_session, clock):
    mock_session.execute.side_effect = _like_flow(2, ["Alice"])
    mock_session.get.return_value = make_movie(7)
    mock_session.flush.side_effect = IntegrityError(
        "INSERT INTO votes", {}, Exception('insert violates foreign key constraint "votes_movie_id_fkey"')
    )
    service = VoteService(mock_session, clock=clock)

    with pytest.raises(InternalError):
        await service.register_vote(1, 10, 7, "like")

    mock_session.rollback.assert_awaited_once()


@pytest.mark.asyncio
async def test_non_member_is_unauthorized_before_movie_lookup(mock_session, clock):
    mock_session.execute.side_effect = [make_result(scalar_one_or_none=None)]
    service = VoteService(mock_session, clock=clock)

    with pytest.raises(UnauthorizedError):
        await service.register_vote(1, 99, 7, "like")

    mock_session.get.assert_not_called()
    mock_session.add.assert_not_called()


@pytest.mark.asyncio
async def test_unknown_movie_is_not_found(mock_session, clock):
    mock_session.execute.side_effect = [make_result(scalar_one_or_none=make_voting_session())]
    mock_session.get.return_value = None
    service = VoteService(mock_session, clock=clock)

    with pytest.raises(NotFoundError):
        await service.register_vote(1, 10, 12345, "like")

    mock_session.add.assert_not_called()


@pytest.mark.asyncio
async def test_invalid_vote_kind_rejected_before_any_io(mock_session, clock):
    service = VoteService(mock_session, clock=clock)

    with pytest.raises(InvalidInputError):
        await service.register_vote(1, 10, 7, "superlike")

    mock_session.connection.assert_not_called()
    mock_session.execute.assert_not_called()
