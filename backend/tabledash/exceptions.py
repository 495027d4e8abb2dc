class ParseError(ValueError):
    """Upload could not be turned into a table (malformed, empty, unsupported)."""


class ConnectionConfigError(ValueError):
    """Connection parameters are missing or unusable."""


class QueryError(ValueError):
    """A database query request could not be executed."""
