"""
Module: core.errors

Purpose:
    Error taxonomy for the viewer. Only IndexLoadError is allowed to halt
    the pipeline; every other error is absorbed by the component that
    raised it (see the docstrings below for who absorbs what).

Used By:
    - loading.index: IndexLoadError
    - loading.byte_loader: RecordLoadError
    - search.content_store: absorbs RecordLoadError
    - ratings.store: RatingReadError, RatingSubmitError
    - gui.main_window: surfaces IndexLoadError and RatingSubmitError
"""


class ViewerError(Exception):
    """Base class for all viewer errors."""
    pass


class IndexLoadError(ViewerError):
    """The record index could not be read, parsed, or was empty. Fatal."""
    pass


class RecordLoadError(ViewerError):
    """
    A single record's content could not be fetched or decoded.

    Absorbed by the ContentStore: the record is marked FAILED with an
    empty body and stays eligible for metadata matches.
    """

    def __init__(self, uri: str, reason: str):
        super().__init__(f"{reason}: {uri}")
        self.uri = uri
        self.reason = reason


class RatingReadError(ViewerError):
    """Ratings could not be read. Absorbed as an empty rating map."""
    pass


class RatingSubmitError(ViewerError):
    """A score submission failed. Surfaced to the user; no local update."""
    pass
