"""Exceptions raised inside learnpath."""


class LearnpathError(Exception):
    """Base class for learnpath errors."""


class StorageError(LearnpathError):
    """A storage backend could not complete a read, write or delete."""
