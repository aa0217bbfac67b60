"""Exception types shared across the pipeline."""


class ReplicatorError(Exception):
    """Base class for pipeline errors."""


class ConfigError(ReplicatorError):
    """Missing or malformed configuration. Fatal for the run."""


class CrawlError(ReplicatorError):
    """The target could not be crawled at all. Fatal for the run."""


class TransportError(ReplicatorError):
    """The generation service failed for one request (timeout, API error, empty reply)."""
