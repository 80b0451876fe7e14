"""
Error taxonomy for the deal pipeline.

Each collaborator adapter translates its library's errors into one of these
at the adapter boundary. The coordinator contains them at the smallest scope:
hotel < destination < cycle.
"""


class DealWatchError(Exception):
    """Base class for all pipeline errors"""


class StorageUnavailable(DealWatchError):
    """Price history backend could not be reached. Fatal to one hotel."""


class FetchFailure(DealWatchError):
    """Scrape collaborator failed for a destination. Fatal to that destination."""


class PublishFailure(DealWatchError):
    """Bus publish failed or timed out. Logged, never fatal."""


class DispatchFailure(DealWatchError):
    """Email collaborator rejected or dropped a match. Logged, never fatal."""


class CollaboratorError(DealWatchError):
    """Backend lookup (watchlists, preferences) failed."""


class ConfigurationError(DealWatchError):
    """Missing collaborator handle or setting detected at startup."""
