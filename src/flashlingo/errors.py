class FlashlingoError(Exception):
    """Base class for errors raised by the trainer core."""


class LoadError(FlashlingoError):
    """The vocabulary catalog could not be fetched or parsed."""


class PersistenceError(FlashlingoError):
    """Review state could not be read from or written to storage."""
