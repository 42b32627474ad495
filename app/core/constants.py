"""Application constants."""

# Template expansion: sets created per template item when none is stored
DEFAULT_SETS_TARGET = 3

# Set ledger: attempts at allocating a set_order before giving up on a collision
SET_ORDER_MAX_ATTEMPTS = 3

# Shown when a set's exercise was deleted or not joined
UNKNOWN_EXERCISE_NAME = "Unknown exercise"
