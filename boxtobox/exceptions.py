"""Error taxonomy for the Box to Box backend.

UpstreamQueryError is raised by the Wikidata client and degraded to empty
results by the matching/board layers. Only the HTTP layer turns it into a 500.
"""

from typing import Optional


class BoxToBoxError(Exception):
    """Base class for application errors."""

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details or message


class UpstreamQueryError(BoxToBoxError):
    """External query (SPARQL or search API) failed or timed out."""


class MissingParameterError(BoxToBoxError):
    """A required request parameter is missing or malformed."""


class DatabaseUnavailableError(BoxToBoxError):
    """Local player database file is missing or corrupt."""
