__all__ = ['InvalidArgumentError', 'UnsupportedOperationError']


class InvalidArgumentError(ValueError):
    """Raised when a public entry point receives an argument it cannot accept."""
    pass


class UnsupportedOperationError(RuntimeError):
    """Raised when an operation cannot be carried out on otherwise valid objects."""
    pass
