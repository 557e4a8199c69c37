"""Defines the API for loading a user's collection of notes.

The most important class is :class:`Provider`.
"""

from typing import List

from memogrid.models import Note


class ProviderError(Exception):
    """Raised when a :class:`Provider` is unable to load notes."""
    def __init__(self, message: str, source: str, cause: BaseException = None):
        super().__init__(message)
        self.message = message
        self.source = source
        self.cause = cause

    def __str__(self):
        if self.cause:
            return f'{self.message}: {self.source} ({self.cause})'
        return f'{self.message}: {self.source}'


class Provider:
    """Base class for providers, which are responsible for fetching a user's notes.

    Providers only read. Creating, editing, and deleting notes belongs to whatever service owns the data.
    """
    def fetch_notes(self) -> List[Note]:
        """Returns all the notes, in no particular order.

        Tags are normalized to lists of strings (see :func:`memogrid.tags.normalize_tags`), so callers never
        need to deal with tags stored as text.

        Raises :exc:`ProviderError` if the notes cannot be loaded. Retrying is up to the caller.
        """
        raise NotImplementedError()

    def close(self) -> None:
        """Release any resources associated with the provider. Should be called when you're done with an instance."""
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
