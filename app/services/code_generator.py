"""
Human-shareable session codes.

Candidates are drawn from ``[A-Z0-9]``. Allocation asks an injected
existence check whether a candidate is already held by a live session and
draws again on collision. After ``CODE_ATTEMPTS_PER_LENGTH`` consecutive
collisions at one length the code is widened by a character, so a crowded
code space degrades into longer codes instead of an endless loop.
"""
import logging
import random
from typing import Awaitable, Callable, Optional
from app.core.exceptions import InternalError
from app.config.constants import (
    SESSION_CODE_ALPHABET,
    SESSION_CODE_LENGTH,
    CODE_ATTEMPTS_PER_LENGTH,
    MAX_SESSION_CODE_LENGTH,
)

logger = logging.getLogger(__name__)

_system_random = random.SystemRandom()

CodeExists = Callable[[str], Awaitable[bool]]


def generate_candidate_code(length: int = SESSION_CODE_LENGTH, rng: Optional[random.Random] = None) -> str:
    rng = rng or _system_random
    return "".join(rng.choice(SESSION_CODE_ALPHABET) for _ in range(length))


async def allocate_session_code(
    code_exists: CodeExists,
    rng: Optional[random.Random] = None,
    base_length: int = SESSION_CODE_LENGTH,
    max_length: int = MAX_SESSION_CODE_LENGTH,
    attempts_per_length: int = CODE_ATTEMPTS_PER_LENGTH,
) -> str:
    """
    Return a code that ``code_exists`` reports as free.

    Every attempt is an independent existence check; nothing is held
    between attempts.
    """
    for length in range(base_length, max_length + 1):
        for _ in range(attempts_per_length):
            candidate = generate_candidate_code(length, rng)
            if not await code_exists(candidate):
                return candidate
            logger.info(f"Session code collision on {candidate}, retrying")
        if length < max_length:
            logger.warning(
                f"{attempts_per_length} consecutive code collisions at length {length}, widening to {length + 1}"
            )

    logger.error("Session code space exhausted up to length %s", max_length)
    raise InternalError("Could not allocate a session code")
