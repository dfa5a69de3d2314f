from __future__ import annotations


class JobFeedError(Exception):
    """Base class for errors raised by the feed sync."""


class ConfigurationError(JobFeedError):
    """A source is enabled but its required settings are missing."""


class FeedError(JobFeedError):
    """A feed body was too large or could not be parsed."""


class StoreUnavailableError(JobFeedError):
    """No Firestore client could be created for the run."""
