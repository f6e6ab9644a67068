from .movie import Movie
from .participant import Participant
from .voting_session import VotingSession, SessionStatus
from .membership import SessionMembership
from .vote import Vote, VoteKind
