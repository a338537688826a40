"""
Exceptions raised by the services.

Both are ValueError subclasses: callers that only care about "the request
broke a rule" can keep catching ValueError, the API maps them by type.
"""


class RecordNotFoundError(ValueError):
    """An article, tag or link with the given key does not exist."""


class RecordExistsError(ValueError):
    """A tag name or an (article_id, tag_id) pair is already taken."""
