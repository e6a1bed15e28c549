"""
Error types shared across the extraction and analysis pipelines.

Most of these never leave the package: stores raise them, and the pipeline
catches them per source and carries on with whatever the other sources found.
"""


class RateMyFitError(Exception):
    """Base class for package errors."""


class SourceUnavailableError(RateMyFitError):
    """A reference-data query (whitelist, catalog, taxonomy, wardrobe) failed."""

    def __init__(self, source: str, message: str):
        self.source = source
        super().__init__(f"{source}: {message}")


class MalformedResponseError(RateMyFitError):
    """Model output could not be parsed into the expected shape."""
