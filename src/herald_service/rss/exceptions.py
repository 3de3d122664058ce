"""Custom exceptions for RSS ingestion."""


class FeedError(Exception):
    """Base exception for feed errors."""

    pass


class FeedFetchError(FeedError):
    """Feed could not be downloaded (network failure or HTTP error)."""

    pass


class FeedParseError(FeedError):
    """Downloaded document is not a usable RSS/Atom feed."""

    pass
