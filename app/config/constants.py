"""
Application Constants

This module contains all magic strings and numbers used throughout the application.
Centralizing constants makes the codebase more maintainable and easier to update.
"""

# ============================================================================
# Session Code Constants
# ============================================================================

SESSION_CODE_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
SESSION_CODE_LENGTH = 6

# Candidates tried per code length before widening by one character
CODE_ATTEMPTS_PER_LENGTH = 8
MAX_SESSION_CODE_LENGTH = 8

# ============================================================================
# Matching Constants
# ============================================================================

# Fixed threshold, independent of how many people are in the session
MIN_LIKES_FOR_MATCH = 2

# Sessions with fewer members never produce a match
MIN_PARTICIPANTS_FOR_MATCH = 2

# ============================================================================
# Validation Constants
# ============================================================================

# Participant field lengths (should match database schema)
MAX_DISPLAY_NAME_LENGTH = 100
MAX_SESSION_CODE_FIELD_LENGTH = 12

# ============================================================================
# Write Transaction Constants
# ============================================================================

# Create, join and vote always run at this level
WRITE_ISOLATION_LEVEL = "SERIALIZABLE"

# Serialization failures are retried this many times in total before giving up
WRITE_CONFLICT_ATTEMPTS = 3

# SQLSTATEs PostgreSQL reports for serialization failure and deadlock
SERIALIZATION_FAILURE_SQLSTATES = ("40001", "40P01")

# ============================================================================
# Client Polling Constants (in seconds)
# ============================================================================

# Clients refresh roster and matches at this interval
POLL_INTERVAL_SECONDS = 5

# ============================================================================
# Error Messages
# ============================================================================

INVALID_SESSION_MESSAGE = "Invalid or expired session"
INVALID_SESSION_CODE_MESSAGE = "Invalid or expired session code"
NOT_A_MEMBER_MESSAGE = "Participant is not authorized for this session"
MOVIE_NOT_FOUND_MESSAGE = "Movie not found"
ALREADY_VOTED_MESSAGE = "Already voted on this movie"
INTERNAL_ERROR_MESSAGE = "Internal server error"
