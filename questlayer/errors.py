"""Exception types raised by the ingestion pipeline."""


class IngestError(RuntimeError):
    """Processing of a single URL failed; sibling URLs are unaffected."""


class FetchFailedError(IngestError):
    """Every fetch strategy was exhausted without usable content."""


class PersistenceError(IngestError):
    """The persistence backend rejected a read or write."""


class ConfigurationError(RuntimeError):
    """The service is missing configuration required to process any URL."""
