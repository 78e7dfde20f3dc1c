"""Error types raised by perfectscrabble.

Every failure that crosses a module boundary is one of these. Raw
``pymongo`` and ``requests`` exceptions are wrapped at the store and
HTTP client seams so callers only ever catch ``ScrabbleError``.
"""


class ScrabbleError(Exception):
    """Base error. ``kind`` is a short machine-readable tag."""

    kind = "error"

    def __init__(self, details: str = ""):
        self.details = details
        super().__init__(details or self.kind)


class Unauthenticated(ScrabbleError):
    """No credential, or a credential that failed verification."""

    kind = "unauthenticated"


class ValidationError(ScrabbleError):
    """A malformed record, request or placement."""

    kind = "validation"


class PlacementError(ValidationError):
    """A word placement that does not fit the board."""

    kind = "placement"


class TurnOrderError(ValidationError):
    """A turn played out of sequence, or past the end of the game."""

    kind = "turn_order"


class NetworkFailure(ScrabbleError):
    """Transport error or non-2xx response from the write endpoint."""

    kind = "network"

    def __init__(self, details: str = "", status_code: int | None = None):
        self.status_code = status_code
        super().__init__(details)


class ExternalServiceError(ScrabbleError):
    """The document store or the turn scorer failed."""

    kind = "external_service"


class ExportError(ScrabbleError):
    """Writing the JSON export failed."""

    kind = "export"
