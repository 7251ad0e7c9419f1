# backend/errors.py


class ValidationError(ValueError):
    """User input was rejected; the session is left unchanged."""


class TransitionError(ValueError):
    """The requested transition is not valid from the current drill state."""
